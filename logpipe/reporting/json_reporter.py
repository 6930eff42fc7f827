"""
JSON reporting utilities (optional).
"""

from __future__ import annotations

import json
from typing import Any, Dict

from logpipe.observability import to_dict


def to_json_dict(report) -> Dict[str, Any]:
    """Convert a LogFileReport to a JSON-serializable dict."""
    data = to_dict(report)
    data["ok"] = report.ok
    return data


def write_json(report, path: str) -> None:
    """Write report to a file as pretty JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_json_dict(report), f, indent=2)
