from toolloop.events.store import EventStore, MemoryEventSink


def test_event_store_round_trips_jsonl(tmp_path):
    store = EventStore.open("s1", directory=tmp_path)
    store.append("tool.call", {"tool": "bash"})
    store.append("tool.result", {"tool": "bash", "is_error": False})
    with store.path.open("a", encoding="utf-8") as f:
        f.write('{"ts": 1, "type": "partial"')

    evs = list(store.iter_events())
    assert [e.type for e in evs] == ["tool.call", "tool.result"]
    assert evs[1].data == {"tool": "bash", "is_error": False}


def test_memory_sink_filters_by_type():
    sink = MemoryEventSink()
    sink.append("a", {})
    sink.append("b", {"x": 1})
    assert [e.data for e in sink.of_type("b")] == [{"x": 1}]
