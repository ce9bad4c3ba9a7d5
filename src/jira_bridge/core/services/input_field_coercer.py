"""Reshape loosely-typed client ``fields`` input into the tracker's payload shape.

Coercion only rewrites values: the output always has exactly the keys of
the (decoded) input.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from jira_bridge.core.services.adf_primitives import AdfPrimitives

logger = structlog.get_logger()

NAMED_LIST_FIELDS = frozenset({"components", "fixVersions"})


def decode_fields(raw: Any) -> Mapping[str, Any] | None:
    """Unwrap JSON-encoded (possibly repeatedly) input down to a mapping.

    Returns None when the input is malformed.
    """
    value = raw
    while isinstance(value, str):
        logger.warning(
            "Received fields as JSON string instead of object, parsing automatically",
            source_system="InputFieldCoercer",
        )
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            logger.error(
                "Failed to parse fields string as JSON",
                error_type="MalformedInput",
                error_details=str(exc),
                source_system="InputFieldCoercer",
            )
            return None
    if not isinstance(value, Mapping):
        logger.error(
            "Fields is neither an object nor a string",
            error_type="MalformedInput",
            error_details=type(value).__name__,
            source_system="InputFieldCoercer",
        )
        return None
    return value


def _coerce_priority(value: str) -> str:
    tokens = value.split()
    return tokens[-1] if tokens else value


def _coerce_named_list(values: list[Any]) -> list[Any]:
    if not values or isinstance(values[0], Mapping):
        return values
    return [{"name": item} for item in values if isinstance(item, str)]


def coerce_field(field_id: str, value: Any) -> Any:
    if field_id == "description" and isinstance(value, str):
        return AdfPrimitives.text_to_doc(value)
    if field_id == "priority" and isinstance(value, str):
        return _coerce_priority(value)
    if field_id in NAMED_LIST_FIELDS and isinstance(value, list):
        return _coerce_named_list(value)
    return value


def coerce_fields(raw: Any) -> dict[str, Any]:
    """Return the payload ``fields`` map; malformed input yields an empty map."""
    decoded = decode_fields(raw)
    if decoded is None:
        return {}
    return {field_id: coerce_field(field_id, value) for field_id, value in decoded.items()}
