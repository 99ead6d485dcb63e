import pytest

from kubebot.events import Event
from kubebot.filterengine import (
    FilterEngine,
    FilterNotFoundError,
    RegisteredFilter,
    with_all_filters,
)


class _Recorder:
    def __init__(self, name, calls, fail=False):
        self._name = name
        self._calls = calls
        self._fail = fail

    def run(self, event):
        self._calls.append(self._name)
        event.messages = event.messages + [self._name]
        if self._fail:
            raise ValueError("broken")

    def name(self):
        return self._name

    def describe(self):
        return f"records {self._name}"


def test_registered_filters_sorted_by_name():
    calls = []
    engine = FilterEngine()
    engine.register(
        RegisteredFilter(_Recorder("b", calls), True),
        RegisteredFilter(_Recorder("a", calls), False),
    )
    assert [f.name for f in engine.registered_filters()] == ["a", "b"]


def test_run_applies_only_enabled_in_order():
    calls = []
    engine = FilterEngine()
    engine.register(
        RegisteredFilter(_Recorder("c", calls), True),
        RegisteredFilter(_Recorder("a", calls), True),
        RegisteredFilter(_Recorder("b", calls), False),
    )
    result = engine.run(Event())
    assert calls == ["a", "c"]
    assert result.messages == ["a", "c"]


def test_run_does_not_modify_input_event():
    calls = []
    engine = FilterEngine()
    engine.register(RegisteredFilter(_Recorder("a", calls), True))
    original = Event()
    engine.run(original)
    assert original.messages == []


def test_run_continues_after_failing_filter():
    calls = []
    engine = FilterEngine()
    engine.register(
        RegisteredFilter(_Recorder("a", calls, fail=True), True),
        RegisteredFilter(_Recorder("b", calls), True),
    )
    result = engine.run(Event())
    assert calls == ["a", "b"]
    assert result.messages == ["a", "b"]


def test_set_filter_toggles():
    calls = []
    engine = FilterEngine()
    engine.register(RegisteredFilter(_Recorder("a", calls), False))
    engine.set_filter("a", True)
    assert engine.registered_filters()[0].enabled is True
    engine.run(Event())
    assert calls == ["a"]


def test_set_filter_unknown_raises():
    engine = FilterEngine()
    with pytest.raises(FilterNotFoundError, match="couldn't find filter with name"):
        engine.set_filter("missing", True)


def test_register_replaces_same_name():
    calls = []
    engine = FilterEngine()
    engine.register(RegisteredFilter(_Recorder("a", calls), False))
    engine.register(RegisteredFilter(_Recorder("a", calls), True))
    filters = engine.registered_filters()
    assert len(filters) == 1
    assert filters[0].enabled is True


def test_with_all_filters_registers_both():
    engine = with_all_filters(None, False, True)
    filters = engine.registered_filters()
    assert [(f.name, f.enabled) for f in filters] == [
        ("NodeEventsChecker", True),
        ("ObjectAnnotationChecker", False),
    ]


def test_with_all_filters_runs_node_checker():
    engine = with_all_filters(None, False, True)
    result = engine.run(Event(kind="Node", reason="Unknown"))
    assert result.skip is True


def test_with_all_filters_annotation_checker_uses_getter():
    engine = with_all_filters(
        lambda obj: {"annotations": {"botkube.io/channel": "alerts"}}, True, False
    )
    result = engine.run(Event(kind="Pod"))
    assert result.channel == "alerts"