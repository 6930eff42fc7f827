# logpipe/io/naming.py
"""
Log file naming, creation and header block.
"""

from __future__ import annotations

import getpass
import os
import platform
import socket
import sys
import tempfile
from datetime import datetime
from typing import BinaryIO, Optional, Sequence, Tuple

from loguru import logger

HEADER_LINES = 4


def _short_hostname() -> str:
    try:
        host = socket.gethostname()
    except OSError:
        host = ""
    return host.split(".", 1)[0] or "unknownhost"


def _user_name() -> str:
    try:
        user = getpass.getuser()
    except Exception:  # getuser raises OSError/KeyError depending on platform
        user = ""
    # Domain accounts on Windows look like DOMAIN\user.
    return user.replace(os.sep, "_").replace("\\", "_") or "unknownuser"


def program_name() -> str:
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "python"


HOST = _short_hostname()
USER = _user_name()


def default_log_dirs() -> Tuple[str, ...]:
    return (tempfile.gettempdir(),)


def log_name(program: str, tag: str, now: datetime, pid: Optional[int] = None) -> Tuple[str, str]:
    """Return ``(file name, symlink name)`` for a log file created at ``now``."""
    pid = os.getpid() if pid is None else pid
    name = f"{program}.{HOST}.{USER}.log.{tag}.{now:%Y%m%d-%H%M%S}.{pid}"
    return name, f"{program}.{tag}"


def create_log_file(
    log_dirs: Sequence[str], program: str, tag: str, now: datetime, *, symlink: bool = True
) -> Tuple[str, BinaryIO]:
    """Create a new log file in the first usable directory.

    Directories are created if missing. An existing file is never reused:
    repeated rotations within the same second get a ``.N`` suffix.

    Raises:
        OSError: if no directory accepted the file.
    """
    if not log_dirs:
        raise OSError("log: no log dirs")
    name, link = log_name(program, tag, now)
    last_error: Optional[OSError] = None
    for log_dir in log_dirs:
        try:
            os.makedirs(log_dir, exist_ok=True)
            path, fh = _open_unique(os.path.join(log_dir, name))
        except OSError as e:
            logger.debug("Cannot create log file in {dir}: {error}", dir=log_dir, error=e)
            last_error = e
            continue
        if symlink:
            _update_symlink(os.path.join(log_dir, link), os.path.basename(path))
        return path, fh
    raise OSError(f"log: cannot create log: {last_error}") from last_error


def _open_unique(path: str) -> Tuple[str, BinaryIO]:
    candidate, n = path, 0
    while True:
        try:
            return candidate, open(candidate, "xb", buffering=0)
        except FileExistsError:
            n += 1
            candidate = f"{path}.{n}"


def _update_symlink(link_path: str, target: str) -> None:
    # Best effort: platforms without symlinks just skip this.
    try:
        os.remove(link_path)
    except OSError:
        pass
    try:
        os.symlink(target, link_path)
    except (OSError, NotImplementedError) as e:
        logger.debug("Cannot update symlink {link}: {error}", link=link_path, error=e)


def build_header(now: datetime, legend: str) -> bytes:
    """Plain-text block written at the top of every log file."""
    lines = [
        f"Log file created at: {now:%Y/%m/%d %H:%M:%S}",
        f"Running on machine: {HOST}",
        f"Binary: Built with {platform.python_implementation()} {platform.python_version()} "
        f"for {sys.platform}/{platform.machine() or 'unknown'}",
        f"Log line format: {legend}",
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")
