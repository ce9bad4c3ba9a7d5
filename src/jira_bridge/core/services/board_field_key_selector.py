"""Work out which fields matter for an issue as seen from one board.

The key set is the union of: fields observed non-null on a sample of the
board's issues, the issue's edit and creation metadata, the board's
estimation field, and a fixed core set. It is always intersected with the
fields the issue actually has; nothing is ever synthesized.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from jira_bridge.core.domain.issue import CanonicalIssueView
from jira_bridge.core.domain.metadata import MetadataBundle
from jira_bridge.core.exceptions import BridgeError, CriticalFetchError
from jira_bridge.core.ports import TrackerPort
from jira_bridge.core.services.metadata_documents import createmeta_field_ids, editmeta_field_ids
from jira_bridge.core.services.metadata_fetcher import fetch_metadata_bundle
from jira_bridge.core.services.paginated_collector import SERVER_MAX_PAGE_SIZE, collect_paged

logger = structlog.get_logger()

CORE_BOARD_FIELDS = frozenset(
    {
        "summary",
        "issuetype",
        "project",
        "status",
        "assignee",
        "labels",
        "components",
        "parent",
        "priority",
    }
)
DEFAULT_SAMPLE_SIZE = 100

DegradedHook = Callable[[str, BaseException], None]


def observed_field_ids(sampled_fields: Iterable[dict[str, Any]]) -> set[str]:
    """Field-ids holding a non-null value in at least one sampled field bag."""
    seen: set[str] = set()
    for fields in sampled_fields:
        seen.update(k for k, v in fields.items() if v is not None)
    return seen


def estimation_field_id(board_config: dict[str, Any]) -> str | None:
    estimation = board_config.get("estimation")
    if not isinstance(estimation, dict):
        return None
    field = estimation.get("field")
    if not isinstance(field, dict):
        return None
    field_id = field.get("fieldId")
    return field_id if isinstance(field_id, str) and field_id else None


def select_board_field_keys(
    present_field_ids: Iterable[str],
    board_config: dict[str, Any],
    sampled_fields: Iterable[dict[str, Any]],
    edit_meta: dict[str, Any] | None,
    create_meta: dict[str, Any] | None,
) -> frozenset[str]:
    keys = observed_field_ids(sampled_fields)
    keys |= editmeta_field_ids(edit_meta)
    keys |= createmeta_field_ids(create_meta)
    estimation = estimation_field_id(board_config)
    if estimation:
        keys.add(estimation)
    keys |= CORE_BOARD_FIELDS
    return frozenset(keys.intersection(present_field_ids))


def _field_ref(view: CanonicalIssueView, field_id: str, attr: str) -> str | None:
    field = view.fields.get(field_id)
    if field is None or not isinstance(field.value, dict):
        return None
    value = field.value.get(attr)
    return value if isinstance(value, str) else None


def _fields_of(issues: list[Any]) -> list[dict[str, Any]]:
    return [
        issue["fields"]
        for issue in issues
        if isinstance(issue, dict) and isinstance(issue.get("fields"), dict)
    ]


class BoardFieldKeySelector:
    def __init__(
        self,
        tracker: TrackerPort,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        page_cap: int = SERVER_MAX_PAGE_SIZE,
        on_degraded: DegradedHook | None = None,
    ) -> None:
        self._tracker = tracker
        self._sample_size = sample_size
        self._page_cap = page_cap
        self._on_degraded = on_degraded

    async def compute(
        self,
        view: CanonicalIssueView,
        board_id: int,
        metadata: MetadataBundle | None = None,
    ) -> frozenset[str]:
        if metadata is None:
            # Both fetches run to completion before a board failure propagates.
            board_result, metadata_result = await asyncio.gather(
                self._fetch_board_configuration(board_id),
                fetch_metadata_bundle(
                    self._tracker,
                    view.key,
                    _field_ref(view, "project", "key"),
                    _field_ref(view, "issuetype", "name"),
                ),
                return_exceptions=True,
            )
            if isinstance(board_result, BaseException):
                raise board_result
            if isinstance(metadata_result, BaseException):
                raise metadata_result
            board_config, metadata = board_result, metadata_result
        else:
            board_config = await self._fetch_board_configuration(board_id)

        if metadata.edit_meta_error is not None:
            raise CriticalFetchError(
                operation="get_edit_metadata",
                subject=f"issue {view.key}",
                cause=metadata.edit_meta_error,
            ) from metadata.edit_meta_error
        if metadata.create_meta_error is not None:
            self._degraded("creation_metadata", metadata.create_meta_error)

        sampled = await self._sample_board_fields(board_id, board_config)
        keys = select_board_field_keys(
            view.field_ids, board_config, sampled, metadata.edit_meta, metadata.create_meta
        )
        logger.info(
            "Board field keys computed",
            issue_key=view.key,
            board_id=board_id,
            sampled_issues=len(sampled),
            key_count=len(keys),
        )
        return keys

    async def _fetch_board_configuration(self, board_id: int) -> dict[str, Any]:
        try:
            return await self._tracker.get_board_configuration(board_id)
        except BridgeError as exc:
            raise CriticalFetchError(
                operation="get_board_configuration", subject=f"board {board_id}", cause=exc
            ) from exc

    async def _sample_board_fields(
        self, board_id: int, board_config: dict[str, Any]
    ) -> list[dict[str, Any]]:
        sampled: list[dict[str, Any]] = []
        jql = await self._filter_query(board_config)
        if jql:
            try:
                issues = await collect_paged(
                    lambda offset, size: self._tracker.search(jql, "*all", size, offset),
                    self._sample_size,
                    self._page_cap,
                )
                sampled = _fields_of(issues)
            except BridgeError as exc:
                self._degraded("filter_sample", exc)

        if not sampled:
            try:
                issues = await collect_paged(
                    lambda offset, size: self._tracker.list_resource(
                        f"board/{board_id}/issue", size, offset, fields="*all"
                    ),
                    self._sample_size,
                    self._page_cap,
                )
                sampled = _fields_of(issues)
            except BridgeError as exc:
                self._degraded("board_sample", exc)
        return sampled

    async def _filter_query(self, board_config: dict[str, Any]) -> str | None:
        board_filter = board_config.get("filter")
        filter_id = board_filter.get("id") if isinstance(board_filter, dict) else None
        if filter_id is None:
            return None
        try:
            definition = await self._tracker.get_filter(filter_id)
        except BridgeError as exc:
            self._degraded("board_filter", exc)
            return None
        jql = definition.get("jql")
        return jql if isinstance(jql, str) and jql.strip() else None

    def _degraded(self, source: str, exc: BaseException) -> None:
        logger.warning(
            "Optional fetch failed, continuing without it",
            processing_status="DEGRADED",
            error_type=type(exc).__name__,
            error_details=str(exc),
            source_system=source,
        )
        if self._on_degraded is not None:
            self._on_degraded(source, exc)
