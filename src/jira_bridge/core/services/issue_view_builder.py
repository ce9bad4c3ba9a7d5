"""Turn one raw issue document into a :class:`CanonicalIssueView`."""

from __future__ import annotations

from typing import Any

import structlog

from jira_bridge.core.domain.issue import CanonicalIssueView, IssueField
from jira_bridge.core.services.adf_primitives import AdfPrimitives
from jira_bridge.core.services.adf_text_extractor import AdfTextExtractor
from jira_bridge.core.services.field_name_resolver import FieldNameResolver, FieldNameSources
from jira_bridge.core.services.field_sanitizer import sanitize_value
from jira_bridge.core.services.flagged_detector import FlaggedByNameDetector, FlaggedDetector

logger = structlog.get_logger()

# Null still carries meaning here ("no parent", "unassigned").
NULL_MEANINGFUL_FIELDS = frozenset(
    {"parent", "sprint", "epic", "subtasks", "issuelinks", "attachment", "assignee", "reporter"}
)
COMMENT_FIELDS = frozenset({"comment", "comments"})
DESCRIPTION_FIELD = "description"


def drop_null_fields(raw_fields: dict[str, Any]) -> dict[str, Any]:
    return {
        k: v for k, v in raw_fields.items() if v is not None or k in NULL_MEANINGFUL_FIELDS
    }


class IssueViewBuilder:
    def __init__(
        self,
        extractor: AdfTextExtractor | None = None,
        flagged_detector: FlaggedDetector | None = None,
    ) -> None:
        self._extractor = extractor or AdfTextExtractor()
        self._flagged_detector = flagged_detector or FlaggedByNameDetector()

    def build(
        self,
        raw_issue: dict[str, Any],
        url: str,
        sources: FieldNameSources,
    ) -> CanonicalIssueView:
        raw_fields = raw_issue.get("fields")
        fields = self.clean_fields(raw_fields if isinstance(raw_fields, dict) else {})

        resolver = FieldNameResolver(sources)
        names = resolver.resolve_all(fields)
        view_fields = {
            field_id: IssueField(name=names[field_id], value=sanitize_value(value))
            for field_id, value in fields.items()
        }
        summary = fields.get("summary")

        view = CanonicalIssueView(
            key=str(raw_issue.get("key") or ""),
            url=url,
            summary=summary if isinstance(summary, str) else None,
            flagged=self._flagged_detector(fields, names),
            fields=view_fields,
        )
        logger.debug("Issue view built", issue_key=view.key, field_count=len(view_fields))
        return view

    def clean_fields(self, raw_fields: dict[str, Any]) -> dict[str, Any]:
        """Apply the null, comment and rich-text filtering steps, then flatten the description."""
        fields = drop_null_fields(raw_fields)
        fields = {
            k: v
            for k, v in fields.items()
            if k not in COMMENT_FIELDS
            and (k == DESCRIPTION_FIELD or not AdfPrimitives.is_document(v))
        }
        description = fields.get(DESCRIPTION_FIELD)
        if isinstance(description, dict) and description.get("type") == "doc":
            fields[DESCRIPTION_FIELD] = self._extractor.to_plain_text(description)
        return fields
