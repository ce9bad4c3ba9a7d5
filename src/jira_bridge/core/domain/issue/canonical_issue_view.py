from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from jira_bridge.core.domain.issue.issue_field import IssueField


@dataclass(frozen=True)
class CanonicalIssueView:
    """Cleaned, name-resolved view of one issue as handed to tool callers."""

    key: str
    url: str
    summary: str | None = None
    flagged: bool = False
    fields: dict[str, IssueField] = field(default_factory=dict)

    @property
    def field_ids(self) -> frozenset[str]:
        return frozenset(self.fields)

    def restricted_to(self, keys: Iterable[str]) -> CanonicalIssueView:
        """Return a copy keeping only the given field-ids that are already present."""
        wanted = set(keys)
        kept = {fid: f for fid, f in self.fields.items() if fid in wanted}
        return replace(self, fields=kept)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "url": self.url,
            "summary": self.summary,
            "flagged": self.flagged,
            "fields": {fid: f.to_dict() for fid, f in self.fields.items()},
        }
