from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Page:
    """One page of a listing call. ``total`` is None when the endpoint does not report it."""

    items: list[Any] = field(default_factory=list)
    total: int | None = None
