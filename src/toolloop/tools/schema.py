from __future__ import annotations

import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

from .base import ToolSpec

_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}


class SchemaError(TypeError):
    """A tool input shape that cannot be described to the model."""


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(get_args(annotation)) == 2:
            return args[0]
    return annotation


def generate_schema(model: Any) -> dict[str, Any]:
    """Derive the JSON schema sent to the model from a pydantic input model.

    Only flat records of str/int/float/bool (optionally Optional) are accepted.
    Every field must carry a description, and the model must reject unknown
    keys (extra="forbid") so validation matches additionalProperties: false.
    Property order follows the field declaration order, so the output is
    stable across runs.
    """
    if not isinstance(model, type) or not issubclass(model, BaseModel):
        raise SchemaError(f"Tool input shape must be a pydantic model, got {model!r}")
    if model.model_config.get("extra") != "forbid":
        # the schema advertises additionalProperties: false
        raise SchemaError(f"{model.__name__} must set model_config = ConfigDict(extra=\"forbid\")")

    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, info in model.model_fields.items():
        inner = _unwrap_optional(info.annotation)
        json_type = _JSON_TYPES.get(inner)
        if json_type is None:
            raise SchemaError(f"{model.__name__}.{name}: unsupported field type {info.annotation!r}")
        if not info.description:
            raise SchemaError(f"{model.__name__}.{name}: missing description")

        prop: dict[str, Any] = {"type": json_type, "description": info.description}
        if not info.is_required() and info.default_factory is None and info.default is not None:
            prop["default"] = info.default
        properties[name] = prop
        if info.is_required():
            required.append(name)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


def make_spec(name: str, description: str, input_model: type[BaseModel]) -> ToolSpec:
    return ToolSpec(
        name=name,
        description=description,
        input_model=input_model,
        parameters=generate_schema(input_model),
    )
