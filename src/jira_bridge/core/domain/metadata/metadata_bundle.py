from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MetadataBundle:
    """Edit and creation metadata fetched for one issue within one request.

    A failed fetch leaves the document as ``None`` and records the error, so
    each consumer can decide whether that failure is fatal for it.
    """

    edit_meta: dict[str, Any] | None = None
    create_meta: dict[str, Any] | None = None
    edit_meta_error: BaseException | None = None
    create_meta_error: BaseException | None = None
