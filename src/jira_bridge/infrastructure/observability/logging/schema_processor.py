"""Structlog processor that nests flat event keys into the bridge's log schema.

All field extraction uses dict.pop(key, default) to avoid KeyError.
"""

from __future__ import annotations

import os
from typing import Any


def _build_root_fields(event_dict: dict[str, Any]) -> dict[str, Any]:
    """Extract root-level fields: timestamp, level, service, environment, IDs."""
    return {
        "timestamp": event_dict.pop("timestamp", None),
        "level": event_dict.pop("level", "info"),
        "service": os.environ.get("SERVICE_NAME", "jira-bridge"),
        "environment": os.environ.get("APP_ENV", "local"),
        "trace_id": event_dict.pop("trace_id", None),
        "span_id": event_dict.pop("span_id", None),
        "message": event_dict.pop("event", ""),
    }


def _safe_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _build_processing(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    status = event_dict.pop("processing_status", None)
    if status is None:
        return None
    return {
        "status": status,
        "duration_ms": _safe_float(event_dict.pop("processing_duration_ms", None)),
        "attempt": event_dict.pop("processing_attempt", None),
    }


def _build_error(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    """Extract error block. Returns None if no error_type present."""
    error_type = event_dict.pop("error_type", None)
    if error_type is None:
        return None
    return {
        "type": error_type,
        "code": event_dict.pop("error_code", None),
        "details": event_dict.pop("error_details", None),
        "retryable": event_dict.pop("error_retryable", False),
    }


def _build_context(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    component = event_dict.pop("context_component", None)
    tool = event_dict.pop("tool", None)
    if component is None and tool is None:
        return None
    return {"component": component, "tool": tool}


def _build_metadata(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    source = event_dict.pop("source_system", None)
    tags = event_dict.pop("tags", None)
    if source is None and tags is None:
        return None
    return {"source_system": source, "tags": tags}


def _inject_otel_ids(event_dict: dict[str, Any]) -> None:
    """Overwrite trace_id and span_id from the current OTel span if recording."""
    from opentelemetry import trace

    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")


def bridge_schema_processor(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    _inject_otel_ids(event_dict)
    result = _build_root_fields(event_dict)

    for key, block in (
        ("processing", _build_processing(event_dict)),
        ("error", _build_error(event_dict)),
        ("context", _build_context(event_dict)),
        ("metadata", _build_metadata(event_dict)),
    ):
        if block is not None:
            result[key] = block

    if event_dict:
        result["extra"] = dict(event_dict)

    return result
