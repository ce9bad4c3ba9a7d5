from collections.abc import Mapping
from typing import Any, Protocol


class FlaggedDetector(Protocol):
    def __call__(self, raw_fields: Mapping[str, Any], names: Mapping[str, str]) -> bool: ...


class FlaggedByNameDetector:
    """Flagged when the field named ``field_name`` holds a non-empty list.

    Instances configure the flag as a custom field whose id differs per site,
    so the field is located by its resolved display name.
    """

    def __init__(self, field_name: str = "flagged") -> None:
        self._field_name = field_name.casefold()

    def __call__(self, raw_fields: Mapping[str, Any], names: Mapping[str, str]) -> bool:
        for field_id, name in names.items():
            if name.casefold() == self._field_name:
                value = raw_fields.get(field_id)
                return isinstance(value, list) and len(value) > 0
        return False
