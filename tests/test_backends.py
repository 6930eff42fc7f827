"""
LeveledBackend thresholds, FormattingBackend rendering, MultiBackend fan-out.
"""
from __future__ import annotations

import itertools

import pytest

from conftest import CollectingSink, FailingBackend, RecordingBackend, make_record
from logpipe.backends.formatting import FormattingBackend
from logpipe.backends.leveled import LeveledBackend
from logpipe.backends.multi import MultiBackend
from logpipe.core.severity import Severity
from logpipe.errors import ConfigurationError, DispatchError, FatalStorageError
from logpipe.formatting.formatter import Formatter


def test_default_threshold_is_debug() -> None:
    leveled = LeveledBackend(RecordingBackend())
    assert leveled.get_level("anything") is Severity.DEBUG
    assert all(leveled.accepts(sev, "anything") for sev in Severity)


def test_accepts_matches_effective_threshold_for_all_pairs() -> None:
    leveled = LeveledBackend(RecordingBackend())
    leveled.set_level(Severity.WARNING)
    leveled.set_level("DEBUG", "db")
    leveled.set_level("ERROR", "db.pool")
    expected = {
        "": Severity.WARNING,
        "web": Severity.WARNING,
        "db": Severity.DEBUG,
        "db.query": Severity.DEBUG,
        "db.pool": Severity.ERROR,
        "db.pool.conn": Severity.ERROR,
        "dbx": Severity.WARNING,
    }
    for (module, threshold), sev in itertools.product(expected.items(), Severity):
        assert leveled.get_level(module) is threshold
        assert leveled.accepts(sev, module) == (sev >= threshold), (module, sev)


def test_log_forwards_only_accepted_records() -> None:
    inner = RecordingBackend()
    leveled = LeveledBackend(inner, "INFO")
    leveled.log(make_record(Severity.DEBUG))
    leveled.log(make_record(Severity.INFO))
    leveled.log(make_record(Severity.CRITICAL))
    assert [r.severity for r in inner.records] == [Severity.INFO, Severity.CRITICAL]


def test_threshold_change_applies_immediately() -> None:
    inner = RecordingBackend()
    leveled = LeveledBackend(inner, "ERROR")
    leveled.log(make_record(Severity.INFO))
    leveled.set_level("INFO")
    leveled.log(make_record(Severity.INFO))
    assert len(inner.records) == 1


def test_set_levels_replaces_map() -> None:
    leveled = LeveledBackend(RecordingBackend(), "ERROR")
    leveled.set_level("DEBUG", "db")
    leveled.set_levels({"web": "NOTICE"})
    assert dict(leveled.levels) == {"web": Severity.NOTICE, "": Severity.DEBUG}
    assert leveled.get_level("db") is Severity.DEBUG


def test_invalid_level_is_configuration_error() -> None:
    leveled = LeveledBackend(RecordingBackend())
    with pytest.raises(ConfigurationError):
        leveled.set_level("LOUD", "db")
    with pytest.raises(ConfigurationError):
        LeveledBackend(RecordingBackend(), "nope")


def test_formatting_backend_writes_rendered_bytes(sink: CollectingSink) -> None:
    backend = FormattingBackend(sink, Formatter("[%{level:.4s}] %{module}: %{message}"))
    backend.log(make_record(Severity.INFO, "x", "info"))
    assert sink.writes == [b"[INFO] x: info\n"]
    assert backend.is_enabled_for(Severity.DEBUG, "x")
    backend.close()
    assert sink.closed


def test_formatting_backend_uses_sink_color() -> None:
    sink = CollectingSink(color=True)
    FormattingBackend(sink, Formatter("%{color}%{message}%{color:reset}")).log(make_record(Severity.INFO))
    assert sink.writes[0].startswith(b"\033[")


def test_leveled_needs_caller_follows_formatter(sink: CollectingSink) -> None:
    assert not LeveledBackend(FormattingBackend(sink, Formatter("%{message}"))).needs_caller
    assert LeveledBackend(FormattingBackend(sink, Formatter("%{shortfile}"))).needs_caller


def test_fanout_continues_past_failing_backend() -> None:
    failing = FailingBackend(OSError("disk hiccup"))
    good = RecordingBackend()
    multi = MultiBackend([failing, good])
    records = [make_record(template=f"r{i}") for i in range(5)]
    for rec in records:
        with pytest.raises(DispatchError) as exc_info:
            multi.log(rec)
        assert [type(e) for e in exc_info.value.errors] == [OSError]
    assert good.records == records


def test_fanout_collects_every_error_in_order() -> None:
    multi = MultiBackend([FailingBackend(OSError("a")), RecordingBackend(), FailingBackend(ValueError("b"))])
    with pytest.raises(DispatchError) as exc_info:
        multi.log(make_record())
    assert [str(e) for e in exc_info.value.errors] == ["a", "b"]


def test_fanout_raises_fatal_after_delivering_to_others() -> None:
    fatal = FatalStorageError("disk full", path="/x")
    good = RecordingBackend()
    multi = MultiBackend([FailingBackend(OSError("minor")), FailingBackend(fatal), good])
    with pytest.raises(FatalStorageError) as exc_info:
        multi.log(make_record())
    assert exc_info.value is fatal
    assert len(good.records) == 1


def test_multi_enabled_and_close() -> None:
    a = LeveledBackend(RecordingBackend(), "ERROR")
    b = LeveledBackend(RecordingBackend(), "WARNING")
    multi = MultiBackend([a, b])
    assert multi.is_enabled_for(Severity.WARNING, "m")
    assert not multi.is_enabled_for(Severity.NOTICE, "m")
    assert not MultiBackend().is_enabled_for(Severity.CRITICAL, "m")
    multi.close()
    assert a.backend.closed and b.backend.closed
