from __future__ import annotations

import asyncio
from typing import Any

from jira_bridge.core.domain.metadata import MetadataBundle
from jira_bridge.core.exceptions import BridgeError
from jira_bridge.core.ports import TrackerPort


def _split_result(result: Any) -> tuple[dict[str, Any] | None, BaseException | None]:
    if isinstance(result, BridgeError):
        return None, result
    if isinstance(result, BaseException):
        raise result
    return (result if isinstance(result, dict) else {}), None


async def fetch_metadata_bundle(
    tracker: TrackerPort,
    issue_key: str,
    project_key: str | None,
    issue_type: str | None,
) -> MetadataBundle:
    """Fetch edit and creation metadata concurrently, keeping tracker failures as values."""
    edit_result, create_result = await asyncio.gather(
        tracker.get_edit_metadata(issue_key),
        tracker.get_creation_metadata(project_key, issue_type),
        return_exceptions=True,
    )
    edit_meta, edit_error = _split_result(edit_result)
    create_meta, create_error = _split_result(create_result)
    return MetadataBundle(
        edit_meta=edit_meta,
        create_meta=create_meta,
        edit_meta_error=edit_error,
        create_meta_error=create_error,
    )
