from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from jira_bridge.core.exceptions.bridge_error import BridgeError

_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(eq=False)
class UpstreamApiError(BridgeError):
    """Non-2xx answer from the tracker API, carried verbatim for diagnostics."""

    status_code: int
    response: Any = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        return self.status_code in _RETRYABLE_STATUSES

    def __str__(self) -> str:
        return f"Jira API error (status {self.status_code}): {self.response}"


@dataclass(eq=False)
class TransportError(BridgeError):
    """Connection-level failure talking to the tracker (timeouts, DNS, resets)."""

    message: str
    retryable: bool = True

    def __str__(self) -> str:
        return self.message
