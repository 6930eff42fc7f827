"""
Formatter: verbs, options, colors, redaction and template validation.
"""
from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

from conftest import CollectingSink
from logpipe.backends.formatting import FormattingBackend
from logpipe.core.record import CallSite, Record, Sensitive
from logpipe.core.severity import Severity
from logpipe.dispatcher import Dispatcher
from logpipe.errors import ConfigurationError, TemplateError
from logpipe.formatting.formatter import DEFAULT_TEMPLATE, GLOG_TEMPLATE, Formatter
from logpipe.logger import Logger

FIXED_TIME = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone.utc)
CALLER = CallSite(
    filename="/src/app/handlers.py", lineno=42, function="handle", qualname="Handler.handle", package="app.handlers"
)


def _record(**kw) -> Record:
    base = dict(severity=Severity.INFO, module="x", template="info", time=FIXED_TIME, id=7, pid=1234, caller=CALLER)
    base.update(kw)
    return Record(**base)


class Password:
    def __init__(self, value: str):
        self.value = value

    def __str__(self) -> str:
        return self.value

    def redacted(self) -> str:
        return "REDACTED"


def test_render_every_verb() -> None:
    f = Formatter(
        "[%{level:.4s}] [%{time:%Y-%m-%d %H:%M:%S}] [%{shortfile}] %{longfile} %{shortfunc} %{longfunc} "
        "%{longpkg} %{shortpkg} %{pid} %{id:03d} %{module} %{program} %{message}",
        program="prog",
    )
    out = f.render(_record()).decode()
    assert out.startswith("[INFO] [2024-03-05 14:07:09] [handlers.py:42] /src/app/handlers.py:42 ")
    assert " handle Handler.handle app.handlers handlers 1234 007 x prog info\n" in out
    assert out.endswith("\n") and out.count("\n") == 1


def test_level_truncation_and_default_time() -> None:
    out = Formatter("%{level:.1s}|%{level:.4s}|%{time}").render(_record(severity=Severity.WARNING)).decode()
    assert out == f"W|WARN|{FIXED_TIME.isoformat()}\n"


def test_glog_template() -> None:
    out = Formatter(GLOG_TEMPLATE).render(_record(template="hello {}", args=("world",))).decode()
    assert out == "I0305 14:07:09.123456 1234 handlers.py:42] hello world\n"


def test_default_template_is_message_only() -> None:
    assert Formatter(DEFAULT_TEMPLATE).render(_record()) == b"info\n"


def test_missing_caller_renders_placeholder() -> None:
    out = Formatter("%{shortfile} %{shortfunc}").render(_record(caller=None)).decode()
    assert out == "??? ???\n"


def test_needs_caller() -> None:
    assert not Formatter("%{level} %{message}").needs_caller
    assert Formatter("%{shortfile} %{message}").needs_caller
    assert Formatter("%{longfunc}").needs_caller


def test_color_verbs_are_noops_without_color() -> None:
    f = Formatter("%{color}[%{level}]%{color:reset} %{message}")
    assert f.render(_record()) == b"[INFO] info\n"
    colored = f.render(_record(severity=Severity.ERROR), color=True).decode()
    assert colored == "\033[31m[ERROR]\033[0m info\n"
    bold = Formatter("%{color:bold}x").render(_record(severity=Severity.CRITICAL), color=True)
    assert bold.startswith(b"\033[1;35m")


def test_redaction_never_emits_raw_value() -> None:
    rec = _record(severity=Severity.DEBUG, template="debug {}", args=(Password("secret"),))
    redacting = Formatter("%{message}", redact=True).render(rec)
    assert b"REDACTED" in redacting
    assert b"secret" not in redacting
    assert Formatter("%{message}").render(rec) == b"debug secret\n"


def test_sensitive_message_itself_is_redacted(dispatcher: Dispatcher, sink: CollectingSink) -> None:
    dispatcher.set_backends(FormattingBackend(sink, Formatter("%{message}", redact=True)))
    log = Logger("x", dispatcher=dispatcher)
    log.info(Sensitive("secret"))
    log.info(Password("hunter2"))
    assert sink.text == "******\nREDACTED\n"
    plain = _record(template=Sensitive("secret"))
    assert Formatter("%{message}").render(plain) == b"secret\n"


def test_fixed_inputs_render_expected_substrings() -> None:
    out = Formatter("[%{level:.4s}] [%{time:%H:%M:%S}] %{pid} %{message}").render(
        Record(severity=Severity.INFO, module="x", template="info")
    )
    assert b"[INFO" in out
    assert b"info" in out
    assert str(os.getpid()).encode() in out


@pytest.mark.parametrize(
    "template",
    ["%{bogus}", "%{level} %{nope:3}", "%{color:green}", "%{pid:.4q}", "%{id:s}"],
)
def test_bad_templates_fail_at_construction(template: str) -> None:
    with pytest.raises(TemplateError) as exc_info:
        Formatter(template)
    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.template == template


def test_literal_text_and_unicode() -> None:
    out = Formatter("→ %% %{message} ✓").render(_record(template="héllo"))
    assert out == "→ %% héllo ✓\n".encode("utf-8")
