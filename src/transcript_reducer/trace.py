from __future__ import annotations

import sys
from typing import Any, TextIO


TRACE_ALLOWLIST = {
    "event",
    "token_count",
    "threshold",
    "message_count",
    "removed_count",
}

TRACE_DENYLIST = {
    "content",
    "transcript",
    "prompt",
    "summary",
    "messages",
    "error",
}

_trace_writer: TextIO = sys.stdout


def _is_sensitive_field(field_name: str) -> bool:
    normalized = field_name.lower()
    return normalized in TRACE_DENYLIST or "api_key" in normalized


def set_trace_writer(writer: TextIO) -> TextIO:
    global _trace_writer
    previous = _trace_writer
    _trace_writer = writer
    return previous


def _resolve_trace_writer() -> TextIO:
    global _trace_writer
    if getattr(_trace_writer, "closed", False):
        _trace_writer = sys.stdout
    return _trace_writer


def trace(component: str, outcome: str | None = None, **fields: Any) -> None:
    global _trace_writer
    for key in fields:
        if _is_sensitive_field(key):
            raise ValueError(f"{key} is not emittable")

    safe_fields = {
        key: value
        for key, value in fields.items()
        if key in TRACE_ALLOWLIST
    }
    details = " ".join(f"{key}={value}" for key, value in safe_fields.items())

    line = f"[{component}]"
    if details:
        line += f" {details}"
    if outcome:
        line += f" -> {outcome}"

    writer = _resolve_trace_writer()
    try:
        writer.write(line + "\n")
        writer.flush()
    except ValueError:
        _trace_writer = sys.stdout
        _trace_writer.write(line + "\n")
        _trace_writer.flush()
