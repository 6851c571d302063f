from typing import Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from toolloop.tools.schema import SchemaError, generate_schema, make_spec
from toolloop.tools.builtin_tools.grep_tool import CodeSearchInput


class SampleInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="A name.")
    count: int = Field(3, description="How many.")
    ratio: Optional[float] = Field(None, description="Optional ratio.")
    loud: bool = Field(False, description="Shout?")


def test_schema_lists_fields_in_order_with_types_and_descriptions():
    schema = generate_schema(SampleInput)
    assert schema["type"] == "object"
    assert list(schema["properties"]) == ["name", "count", "ratio", "loud"]
    assert schema["properties"]["name"] == {"type": "string", "description": "A name."}
    assert schema["properties"]["count"] == {"type": "integer", "description": "How many.", "default": 3}
    assert schema["properties"]["ratio"] == {"type": "number", "description": "Optional ratio."}
    assert schema["properties"]["loud"]["type"] == "boolean"
    assert schema["required"] == ["name"]
    assert schema["additionalProperties"] is False


def test_schema_is_deterministic():
    assert generate_schema(SampleInput) == generate_schema(SampleInput)


def test_valid_instance_decodes_to_equivalent_record():
    schema = generate_schema(CodeSearchInput)
    assert schema["required"] == ["pattern"]
    params = CodeSearchInput.model_validate({"pattern": "TODO", "file_type": "py"})
    assert params.model_dump() == {"pattern": "TODO", "path": None, "file_type": "py", "case_sensitive": False}
    from_json = CodeSearchInput.model_validate_json('{"pattern": "TODO", "file_type": "py"}')
    assert from_json == params


def test_nested_types_are_rejected():
    class Nested(BaseModel):
        model_config = ConfigDict(extra="forbid")

        items: list[str] = Field(description="Not a primitive.")

    with pytest.raises(SchemaError, match="unsupported field type"):
        generate_schema(Nested)


def test_missing_description_is_rejected():
    class Bare(BaseModel):
        model_config = ConfigDict(extra="forbid")

        path: str

    with pytest.raises(SchemaError, match="missing description"):
        make_spec("bare", "no docs", Bare)


def test_non_model_shape_is_rejected():
    with pytest.raises(SchemaError):
        generate_schema(dict)


def test_models_that_ignore_unknown_keys_are_rejected():
    class Lenient(BaseModel):
        path: str = Field(description="A path.")

    with pytest.raises(SchemaError, match="extra"):
        generate_schema(Lenient)
