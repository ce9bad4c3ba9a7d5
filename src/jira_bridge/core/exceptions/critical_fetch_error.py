from __future__ import annotations

from dataclasses import dataclass

from jira_bridge.core.exceptions.bridge_error import BridgeError


@dataclass(eq=False)
class CriticalFetchError(BridgeError):
    """A fetch the request cannot proceed without has failed.

    ``cause`` keeps the original transport error untouched so callers can
    still inspect status codes and response bodies.
    """

    operation: str
    subject: str
    cause: BaseException

    def __str__(self) -> str:
        return f"{self.operation} failed for {self.subject}: {self.cause}"
