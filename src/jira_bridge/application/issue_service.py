"""Use-case layer: the operations the tool surface exposes.

Composes the core services over a ``TrackerPort``. Degraded optional fetches
are counted here so the core never imports the metrics registry.
"""

from __future__ import annotations

from typing import Any

import structlog

from jira_bridge.core.domain.issue import CanonicalIssueView
from jira_bridge.core.domain.metadata import FieldDefinition, MetadataBundle
from jira_bridge.core.exceptions import BridgeError, CriticalFetchError
from jira_bridge.core.ports import TrackerPort
from jira_bridge.core.services import (
    AdfPrimitives,
    AdfTextExtractor,
    BoardFieldKeySelector,
    FieldNameSources,
    FlaggedByNameDetector,
    IssueViewBuilder,
    coerce_fields,
    collect_paged,
    drop_null_fields,
    normalize_whitespace,
    sanitize_value,
)
from jira_bridge.core.services.metadata_documents import (
    createmeta_issue_types,
    field_definitions_from_createmeta,
    issue_project_and_type,
)
from jira_bridge.core.services.metadata_fetcher import fetch_metadata_bundle
from jira_bridge.core.services.paginated_collector import PageFetcher
from jira_bridge.infrastructure.config.jira_settings import JiraSettings
from jira_bridge.infrastructure.observability.metrics_service import record_degraded_fetch

logger = structlog.get_logger()

BOARD_PAGE_SIZE = 50
MAX_BOARDS = 1000
DEFAULT_SEARCH_FIELDS = "summary,status,assignee,priority,issuetype,updated"
DEFAULT_COMMENT_ORDER = "-created"
DEFAULT_USER_SEARCH_LIMIT = 50
PROJECT_PAGE_SIZE = 100
MAX_PROJECTS = 1000
PROJECT_EXPAND = "description,lead,projectCategory"


class IssueService:
    def __init__(self, tracker: TrackerPort, settings: JiraSettings) -> None:
        self._tracker = tracker
        self._settings = settings
        self._extractor = AdfTextExtractor(max_depth=settings.document_max_depth)
        self._view_builder = IssueViewBuilder(
            extractor=self._extractor,
            flagged_detector=FlaggedByNameDetector(settings.flagged_field_name),
        )
        self._board_selector = BoardFieldKeySelector(
            tracker,
            sample_size=settings.board_sample_size,
            page_cap=settings.page_size_cap,
            on_degraded=record_degraded_fetch,
        )

    # ── Issue view ──

    async def build_issue_view(
        self, issue_key: str, board_id: int | None = None
    ) -> CanonicalIssueView:
        """Fetch and normalize one issue, restricted to the board's fields when given."""
        try:
            raw_issue = await self._tracker.get_raw_issue(issue_key)
        except BridgeError as exc:
            raise CriticalFetchError(
                operation="get_issue", subject=f"issue {issue_key}", cause=exc
            ) from exc

        project_key, issue_type = issue_project_and_type(raw_issue.get("fields"))
        metadata = await fetch_metadata_bundle(self._tracker, issue_key, project_key, issue_type)
        # With a board, the selector classifies both metadata failures for the shared bundle.
        if board_id is None:
            if metadata.edit_meta_error is not None:
                self._degraded("edit_metadata_names", metadata.edit_meta_error)
            if metadata.create_meta_error is not None:
                self._degraded("creation_metadata_names", metadata.create_meta_error)

        sources = FieldNameSources.from_documents(
            raw_issue=raw_issue,
            create_meta=metadata.create_meta,
            edit_meta=metadata.edit_meta,
            project_key=project_key,
            issue_type=issue_type,
        )
        view = self._view_builder.build(raw_issue, self._tracker.browse_url(issue_key), sources)
        if board_id is None:
            return view

        keys = await self.compute_board_field_keys(view, board_id, metadata)
        return view.restricted_to(keys)

    async def compute_board_field_keys(
        self,
        issue_view: CanonicalIssueView,
        board_id: int,
        metadata: MetadataBundle | None = None,
    ) -> frozenset[str]:
        return await self._board_selector.compute(issue_view, board_id, metadata)

    # ── Input coercion ──

    def coerce_create_fields(self, raw: Any) -> dict[str, Any]:
        return coerce_fields(raw)

    def coerce_update_fields(self, raw: Any) -> tuple[dict[str, Any], list[str]]:
        fields = coerce_fields(raw)
        return fields, list(fields)

    async def collect_paged(self, fetch_page: PageFetcher, limit: int) -> list[Any]:
        return await collect_paged(fetch_page, limit, self._settings.page_size_cap)

    # ── Writes ──

    async def create_issue(self, raw_fields: Any) -> dict[str, Any]:
        fields = self.coerce_create_fields(raw_fields)
        created = await self._tracker.create_issue({"fields": fields})
        issue_key = str(created.get("key") or "")
        logger.info("Issue created", issue_key=issue_key, field_count=len(fields))
        return {
            "issue_key": issue_key,
            "url": self._tracker.browse_url(issue_key),
            "actions": ["created"],
            "warnings": [],
        }

    async def update_issue(self, issue_key: str, raw_fields: Any) -> dict[str, Any]:
        fields, updated = self.coerce_update_fields(raw_fields)
        warnings: list[str] = []
        if fields:
            await self._tracker.update_issue(issue_key, {"fields": fields})
            logger.info("Issue updated", issue_key=issue_key, updated_fields=updated)
        else:
            warnings.append("No fields to update; nothing was sent")
            logger.warning("Update skipped, no usable fields", issue_key=issue_key)
        return {
            "issue_key": issue_key,
            "url": self._tracker.browse_url(issue_key),
            "updated_fields": updated,
            "warnings": warnings,
        }

    # ── Search and listings ──

    async def search_issues(
        self,
        jql: str,
        fields: str = DEFAULT_SEARCH_FIELDS,
        limit: int = 50,
        start_at: int = 0,
    ) -> list[dict[str, Any]]:
        issues = await self.collect_paged(
            lambda offset, size: self._tracker.search(jql, fields, size, start_at + offset),
            limit,
        )
        results = []
        for issue in issues:
            if not isinstance(issue, dict):
                continue
            key = str(issue.get("key") or "")
            raw_fields = issue.get("fields")
            cleaned = drop_null_fields(raw_fields if isinstance(raw_fields, dict) else {})
            results.append(
                {
                    "key": key,
                    "url": self._tracker.browse_url(key),
                    "fields": {k: sanitize_value(v) for k, v in cleaned.items()},
                }
            )
        logger.info("Search completed", result_count=len(results), limit=limit)
        return results

    async def list_boards(self, project_key: str | None = None) -> list[dict[str, Any]]:
        params = {"projectKeyOrId": project_key} if project_key else {}
        boards = await collect_paged(
            lambda offset, size: self._tracker.list_resource("board", size, offset, **params),
            MAX_BOARDS,
            BOARD_PAGE_SIZE,
        )
        return [
            {"id": b.get("id"), "name": b.get("name"), "type": b.get("type")}
            for b in boards
            if isinstance(b, dict)
        ]

    async def list_fields(self, project_key: str, issue_type: str) -> list[FieldDefinition]:
        create_meta = await self._tracker.get_creation_metadata(project_key, issue_type)
        return field_definitions_from_createmeta(create_meta, project_key, issue_type)

    # ── Comments ──

    async def get_comments(
        self, issue_key: str, limit: int | None = None, order_by: str = DEFAULT_COMMENT_ORDER
    ) -> dict[str, Any]:
        data = await self._tracker.get_comments(issue_key, limit=limit, order_by=order_by)
        comments = []
        for comment in data.get("comments") or []:
            if not isinstance(comment, dict):
                continue
            author = comment.get("author")
            author_name = author.get("displayName") if isinstance(author, dict) else None
            comments.append(
                {
                    "id": comment.get("id"),
                    "author": author_name or "Unknown",
                    "body": self._comment_text(comment.get("body")),
                    "created": comment.get("created"),
                    "updated": comment.get("updated"),
                }
            )
        total = data.get("total")
        return {
            "issue_key": issue_key,
            "total": total if isinstance(total, int) else len(comments),
            "comments": comments,
        }

    async def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        created = await self._tracker.add_comment(issue_key, AdfPrimitives.text_to_doc(body))
        logger.info("Comment added", issue_key=issue_key)
        return {"issue_key": issue_key, "id": created.get("id")}

    async def update_comment(self, issue_key: str, comment_id: str, body: str) -> dict[str, Any]:
        updated = await self._tracker.update_comment(
            issue_key, comment_id, AdfPrimitives.text_to_doc(body)
        )
        logger.info("Comment updated", issue_key=issue_key, comment_id=comment_id)
        return {"issue_key": issue_key, "comment_id": comment_id, "updated": updated.get("updated")}

    async def delete_comment(self, issue_key: str, comment_id: str) -> dict[str, Any]:
        await self._tracker.delete_comment(issue_key, comment_id)
        logger.info("Comment deleted", issue_key=issue_key, comment_id=comment_id)
        return {"issue_key": issue_key, "comment_id": comment_id, "deleted": True}

    # ── Labels, watchers and assignment ──

    async def add_label(self, issue_key: str, label: str) -> dict[str, Any]:
        await self._tracker.add_label(issue_key, label)
        logger.info("Label added", issue_key=issue_key, label=label)
        return {"issue_key": issue_key, "label": label, "action": "added"}

    async def remove_label(self, issue_key: str, label: str) -> dict[str, Any]:
        await self._tracker.remove_label(issue_key, label)
        logger.info("Label removed", issue_key=issue_key, label=label)
        return {"issue_key": issue_key, "label": label, "action": "removed"}

    async def get_watchers(self, issue_key: str) -> dict[str, Any]:
        data = await self._tracker.get_watchers(issue_key)
        watchers = [
            {
                "account_id": w.get("accountId"),
                "display_name": w.get("displayName"),
                "active": bool(w.get("active", False)),
            }
            for w in data.get("watchers") or []
            if isinstance(w, dict)
        ]
        watch_count = data.get("watchCount")
        return {
            "issue_key": issue_key,
            "is_watching": bool(data.get("isWatching", False)),
            "watch_count": watch_count if isinstance(watch_count, int) else len(watchers),
            "watchers": watchers,
        }

    async def add_watcher(self, issue_key: str, account_id: str) -> dict[str, Any]:
        await self._tracker.add_watcher(issue_key, account_id)
        logger.info("Watcher added", issue_key=issue_key)
        return {"issue_key": issue_key, "account_id": account_id, "action": "added"}

    async def remove_watcher(self, issue_key: str, account_id: str) -> dict[str, Any]:
        await self._tracker.remove_watcher(issue_key, account_id)
        logger.info("Watcher removed", issue_key=issue_key)
        return {"issue_key": issue_key, "account_id": account_id, "action": "removed"}

    async def assign_issue(self, issue_key: str, account_id: str | None) -> dict[str, Any]:
        """Assign the issue to ``account_id``, or unassign it when that is ``None``."""
        await self._tracker.assign_issue(issue_key, account_id)
        status = "assigned" if account_id else "unassigned"
        logger.info("Issue assignment changed", issue_key=issue_key, status=status)
        return {
            "issue_key": issue_key,
            "account_id": account_id,
            "status": status,
            "url": self._tracker.browse_url(issue_key),
        }

    # ── Issue links ──

    async def link_issues(
        self, inward_issue_key: str, outward_issue_key: str, link_type: str
    ) -> dict[str, Any]:
        await self._tracker.link_issues(inward_issue_key, outward_issue_key, link_type)
        logger.info(
            "Issues linked",
            inward_issue_key=inward_issue_key,
            outward_issue_key=outward_issue_key,
            link_type=link_type,
        )
        return {
            "link_type": link_type,
            "inward_issue_key": inward_issue_key,
            "outward_issue_key": outward_issue_key,
        }

    async def delete_issue_link(self, link_id: str) -> dict[str, Any]:
        await self._tracker.delete_issue_link(link_id)
        logger.info("Issue link deleted", link_id=link_id)
        return {"link_id": link_id, "deleted": True}

    async def list_link_types(self) -> list[dict[str, Any]]:
        data = await self._tracker.list_link_types()
        return [
            {key: lt.get(key) or "" for key in ("id", "name", "inward", "outward")}
            for lt in data.get("issueLinkTypes") or []
            if isinstance(lt, dict)
        ]

    # ── Projects, people and metadata ──

    async def list_projects(self, summary_only: bool = False) -> list[dict[str, Any]]:
        expand = None if summary_only else PROJECT_EXPAND
        projects = await collect_paged(
            lambda offset, size: self._tracker.list_projects(size, offset, expand),
            MAX_PROJECTS,
            PROJECT_PAGE_SIZE,
        )
        if summary_only:
            return [
                {"key": p.get("key"), "name": p.get("name")}
                for p in projects
                if isinstance(p, dict)
            ]
        return [_project_details(p) for p in projects if isinstance(p, dict)]

    async def list_issue_types(self, project_key: str | None = None) -> list[dict[str, Any]]:
        """Issue types of one project (from creation metadata), or all of them."""
        if project_key:
            create_meta = await self._tracker.get_creation_metadata(project_key)
            raw_types = createmeta_issue_types(create_meta, project_key)
        else:
            raw_types = await self._tracker.list_issue_types()
        return [
            {
                "id": it.get("id") or "",
                "name": it.get("name") or "",
                "description": it.get("description"),
                "subtask": bool(it.get("subtask", False)),
            }
            for it in raw_types
        ]

    async def get_field_details(
        self, project_key: str, issue_type: str, field_ids: list[str]
    ) -> dict[str, dict[str, Any]]:
        requested = {field_id.lower() for field_id in field_ids}
        create_meta = await self._tracker.get_creation_metadata(project_key, issue_type)
        details: dict[str, dict[str, Any]] = {}
        for definition in field_definitions_from_createmeta(create_meta, project_key, issue_type):
            if definition.id.lower() not in requested:
                continue
            detail: dict[str, Any] = {
                "name": definition.name,
                "type": definition.schema.get("type") or "unknown",
                "required": definition.required,
            }
            if definition.allowed_values:
                detail["allowed_values"] = sanitize_value(definition.allowed_values)
            schema_rest = {k: v for k, v in definition.schema.items() if k != "type"}
            if schema_rest:
                detail["schema"] = schema_rest
            details[definition.id] = detail
        return details

    async def search_users(
        self, query: str, limit: int = DEFAULT_USER_SEARCH_LIMIT
    ) -> list[dict[str, Any]]:
        users = await self._tracker.search_users(query, limit)
        return [
            _user_summary(user)
            for user in users
            if user.get("accountId") and user.get("displayName")
        ]

    async def get_user_info(self) -> dict[str, Any]:
        return _user_summary(await self._tracker.get_myself())

    # ── Transitions ──

    async def get_transitions(self, issue_key: str) -> list[dict[str, Any]]:
        data = await self._tracker.get_transitions(issue_key)
        transitions = []
        for transition in data.get("transitions") or []:
            if not isinstance(transition, dict):
                continue
            target = transition.get("to")
            transitions.append(
                {
                    "id": transition.get("id"),
                    "name": transition.get("name"),
                    "to_status": target.get("name") if isinstance(target, dict) else None,
                }
            )
        return transitions

    async def transition_issue(
        self,
        issue_key: str,
        transition_id: str,
        comment: str | None = None,
        raw_fields: Any = None,
    ) -> dict[str, Any]:
        fields = coerce_fields(raw_fields) if raw_fields is not None else None
        await self._tracker.transition_issue(
            issue_key,
            transition_id,
            fields=fields or None,
            comment=AdfPrimitives.text_to_doc(comment) if comment else None,
        )
        logger.info("Issue transitioned", issue_key=issue_key, transition_id=transition_id)
        return {
            "issue_key": issue_key,
            "transition_id": transition_id,
            "url": self._tracker.browse_url(issue_key),
        }

    def _comment_text(self, body: Any) -> str:
        if isinstance(body, str):
            return normalize_whitespace(body)
        return self._extractor.to_plain_text(body)

    def _degraded(self, source: str, exc: BaseException) -> None:
        logger.warning(
            "Metadata unavailable for name resolution, falling back",
            processing_status="DEGRADED",
            error_type=type(exc).__name__,
            error_details=str(exc),
            source_system=source,
        )
        record_degraded_fetch(source, exc)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _user_summary(user: dict[str, Any]) -> dict[str, Any]:
    return _drop_none(
        {
            "account_id": user.get("accountId"),
            "display_name": user.get("displayName"),
            "active": user.get("active"),
            "account_type": user.get("accountType"),
            "email_address": user.get("emailAddress"),
            "time_zone": user.get("timeZone"),
            "avatar_urls": user.get("avatarUrls"),
        }
    )


def _project_details(project: dict[str, Any]) -> dict[str, Any]:
    lead = project.get("lead")
    category = project.get("projectCategory")
    return _drop_none(
        {
            "id": project.get("id"),
            "key": project.get("key"),
            "name": project.get("name"),
            "project_type_key": project.get("projectTypeKey"),
            "simplified": project.get("simplified"),
            "style": project.get("style"),
            "description": project.get("description") or None,
            "url": project.get("url"),
            "lead": _drop_none(
                {"account_id": lead.get("accountId"), "display_name": lead.get("displayName")}
            )
            if isinstance(lead, dict)
            else None,
            "project_category": _drop_none(
                {
                    "id": category.get("id"),
                    "name": category.get("name"),
                    "description": category.get("description"),
                }
            )
            if isinstance(category, dict)
            else None,
        }
    )
