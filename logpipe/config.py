# logpipe/config.py
"""
Pipeline configuration: dataclass defaults + LOGPIPE_* environment overrides,
and the convenience constructors that turn a config into backends.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from logpipe.backends.base import Backend
from logpipe.backends.formatting import FormattingBackend
from logpipe.backends.leveled import LeveledBackend
from logpipe.core.severity import Severity
from logpipe.dispatcher import Dispatcher, get_dispatcher
from logpipe.errors import ConfigurationError
from logpipe.formatting.formatter import GLOG_LEGEND, GLOG_TEMPLATE, Formatter
from logpipe.io.naming import default_log_dirs
from logpipe.io.rotating_file import BUFFER_SIZE, FLUSH_INTERVAL, MAX_SIZE, RotatingFileSink
from logpipe.io.stream_sink import StreamSink

ENV_PREFIX = "LOGPIPE_"


def _coerce_bool(name: str, s: str) -> bool:
    value = s.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"{name}: expected a boolean, got {s!r}")


def _coerce_int(name: str, s: str) -> int:
    try:
        value = int(s.strip())
    except ValueError:
        raise ConfigurationError(f"{name}: expected an integer, got {s!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name}: must be positive, got {value}")
    return value


def _coerce_float(name: str, s: str) -> float:
    try:
        value = float(s.strip())
    except ValueError:
        raise ConfigurationError(f"{name}: expected a number, got {s!r}") from None
    if value < 0:
        raise ConfigurationError(f"{name}: must not be negative, got {value}")
    return value


def parse_module_levels(spec: str) -> Dict[str, Severity]:
    """Parse ``"db=WARNING,net.http=DEBUG"`` into a threshold map."""
    levels: Dict[str, Severity] = {}
    for item in spec.split(","):
        item = item.strip()
        if not item:
            continue
        module, sep, level = item.partition("=")
        if not sep:
            raise ConfigurationError(f"Invalid module level {item!r}, expected module=LEVEL")
        levels[module.strip()] = Severity.parse(level)
    return levels


@dataclass(frozen=True)
class PipelineConfig:
    """Everything needed to build the standard file (+ stderr) pipeline."""

    log_dirs: Tuple[str, ...] = field(default_factory=default_log_dirs)
    program: Optional[str] = None
    template: str = GLOG_TEMPLATE
    level: Severity = Severity.INFO
    module_levels: Mapping[str, Severity] = field(default_factory=dict)
    max_size: int = MAX_SIZE
    buffer_size: int = BUFFER_SIZE
    flush_interval: float = FLUSH_INTERVAL
    redact: bool = True
    stderr: bool = False


def load_config(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> PipelineConfig:
    """Build a config from defaults, then ``LOGPIPE_*`` variables, then overrides.

    Raises:
        ConfigurationError: on any unparsable value.
    """
    env = os.environ if env is None else env
    values: Dict[str, Any] = {}

    def get(key: str) -> Optional[str]:
        return env.get(ENV_PREFIX + key)

    if get("LOG_DIR"):
        values["log_dirs"] = tuple(d for d in get("LOG_DIR").split(os.pathsep) if d)
    if get("PROGRAM"):
        values["program"] = get("PROGRAM")
    if get("FORMAT"):
        values["template"] = get("FORMAT")
    if get("LEVEL"):
        values["level"] = Severity.parse(get("LEVEL"))
    if get("MODULE_LEVELS"):
        values["module_levels"] = parse_module_levels(get("MODULE_LEVELS"))
    if get("MAX_SIZE"):
        values["max_size"] = _coerce_int("LOGPIPE_MAX_SIZE", get("MAX_SIZE"))
    if get("BUFFER_SIZE"):
        values["buffer_size"] = _coerce_int("LOGPIPE_BUFFER_SIZE", get("BUFFER_SIZE"))
    if get("FLUSH_INTERVAL"):
        values["flush_interval"] = _coerce_float("LOGPIPE_FLUSH_INTERVAL", get("FLUSH_INTERVAL"))
    if get("REDACT") is not None:
        values["redact"] = _coerce_bool("LOGPIPE_REDACT", get("REDACT"))
    if get("STDERR") is not None:
        values["stderr"] = _coerce_bool("LOGPIPE_STDERR", get("STDERR"))

    values.update({k: v for k, v in overrides.items() if v is not None})
    if "level" in values:
        values["level"] = Severity.parse(values["level"])
    if "log_dirs" in values:
        dirs = values["log_dirs"]
        values["log_dirs"] = (os.fspath(dirs),) if isinstance(dirs, (str, os.PathLike)) else tuple(map(os.fspath, dirs))
    return replace(PipelineConfig(), **values)


def build_backends(config: PipelineConfig) -> List[Backend]:
    """Create the leveled file backend, plus a stderr mirror if enabled.

    The file sink is opened here and lives until the backend is closed.
    """
    formatter = Formatter(config.template, redact=config.redact, program=config.program)
    legend = GLOG_LEGEND if config.template == GLOG_TEMPLATE else config.template
    sink = RotatingFileSink(
        config.log_dirs,
        program=config.program,
        max_size=config.max_size,
        buffer_size=config.buffer_size,
        flush_interval=config.flush_interval,
        legend=legend,
    )
    backends: List[Backend] = [_leveled(FormattingBackend(sink, formatter), config)]
    if config.stderr:
        backends.append(_leveled(FormattingBackend(StreamSink(sys.stderr), formatter), config))
    return backends


def _leveled(backend: Backend, config: PipelineConfig) -> LeveledBackend:
    leveled = LeveledBackend(backend, config.level)
    for module, level in config.module_levels.items():
        leveled.set_level(level, module)
    return leveled


def configure(config: Optional[PipelineConfig] = None, dispatcher: Optional[Dispatcher] = None) -> Dispatcher:
    """Build backends from ``config`` and install them on ``dispatcher``."""
    config = config or load_config()
    dispatcher = dispatcher or get_dispatcher()
    dispatcher.set_backends(*build_backends(config))
    return dispatcher
