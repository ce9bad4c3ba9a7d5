"""Async Jira REST client implementing the tracker port over httpx.

Every call is wrapped in an OTel span, counted in Prometheus, and retried by
the tenacity ``RetryPolicy`` when the failure is retryable (429, 5xx,
connection errors). Non-2xx answers surface as ``UpstreamApiError`` with the
parsed body; connection failures as ``TransportError``.
"""

from __future__ import annotations

import base64
from typing import Any

import httpx
import structlog

from jira_bridge.core.domain.paging import Page
from jira_bridge.core.exceptions import TransportError, UpstreamApiError
from jira_bridge.core.ports.tracker_port import TrackerPort
from jira_bridge.infrastructure.common.retry import RetryPolicy
from jira_bridge.infrastructure.config.jira_settings import JiraAuthMode, JiraSettings
from jira_bridge.infrastructure.observability.metrics_service import JIRA_API_CALLS_TOTAL
from jira_bridge.infrastructure.observability.tracing_setup import get_tracer

logger = structlog.get_logger()

_PROVIDER = "Jira"


class JiraRestClient(TrackerPort):
    """Thin async transport over the Jira Cloud REST v3 and Agile v1 APIs."""

    def __init__(
        self,
        settings: JiraSettings,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        settings.validate_credentials()
        self._settings = settings
        self._base_url = settings.base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)
        self._retry = retry_policy or RetryPolicy(max_attempts=settings.max_attempts)

    async def __aenter__(self) -> JiraRestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def browse_url(self, issue_key: str) -> str:
        return f"{self._base_url}/browse/{issue_key}"

    # ── Reads ──

    async def get_raw_issue(self, issue_key: str) -> dict[str, Any]:
        return await self._request(
            "get_issue",
            "GET",
            f"/rest/api/3/issue/{issue_key}",
            params={"fields": "*all", "expand": "names,schema"},
        )

    async def get_edit_metadata(self, issue_key: str) -> dict[str, Any]:
        return await self._request("get_editmeta", "GET", f"/rest/api/3/issue/{issue_key}/editmeta")

    async def get_creation_metadata(
        self, project_key: str | None = None, issue_type: str | None = None
    ) -> dict[str, Any]:
        params = {"expand": "projects.issuetypes.fields"}
        if project_key:
            params["projectKeys"] = project_key
        if issue_type:
            params["issuetypeNames"] = issue_type
        return await self._request(
            "get_createmeta", "GET", "/rest/api/3/issue/createmeta", params=params
        )

    async def get_board_configuration(self, board_id: int) -> dict[str, Any]:
        return await self._request(
            "get_board_configuration", "GET", f"/rest/agile/1.0/board/{board_id}/configuration"
        )

    async def get_filter(self, filter_id: int | str) -> dict[str, Any]:
        return await self._request("get_filter", "GET", f"/rest/api/3/filter/{filter_id}")

    async def search(self, jql: str, fields: str, limit: int, offset: int) -> Page:
        data = await self._request(
            "search",
            "GET",
            "/rest/api/3/search/jql",
            params={"jql": jql, "fields": fields, "startAt": offset, "maxResults": limit},
        )
        return Page(items=list(data.get("issues") or []), total=_total(data))

    async def list_resource(self, resource: str, limit: int, offset: int, **params: Any) -> Page:
        """List an Agile collection such as ``board`` or ``board/{id}/issue``."""
        query = {**params, "startAt": offset, "maxResults": limit}
        data = await self._request(
            "list_" + resource.rsplit("/", 1)[-1],
            "GET",
            f"/rest/agile/1.0/{resource.strip('/')}",
            params=query,
        )
        items = data.get("values")
        if items is None:
            items = data.get("issues")
        return Page(items=list(items or []), total=_total(data))

    async def get_comments(
        self, issue_key: str, limit: int | None = None, order_by: str = "-created"
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"orderBy": order_by}
        if limit is not None:
            params["maxResults"] = limit
        return await self._request(
            "get_comments", "GET", f"/rest/api/3/issue/{issue_key}/comment", params=params
        )

    async def get_transitions(self, issue_key: str) -> dict[str, Any]:
        return await self._request(
            "get_transitions", "GET", f"/rest/api/3/issue/{issue_key}/transitions"
        )

    async def get_watchers(self, issue_key: str) -> dict[str, Any]:
        return await self._request("get_watchers", "GET", f"/rest/api/3/issue/{issue_key}/watchers")

    async def list_link_types(self) -> dict[str, Any]:
        return await self._request("list_link_types", "GET", "/rest/api/3/issueLinkType")

    async def list_projects(self, limit: int, offset: int, expand: str | None = None) -> Page:
        params: dict[str, Any] = {"startAt": offset, "maxResults": limit}
        if expand:
            params["expand"] = expand
        data = await self._request(
            "list_projects", "GET", "/rest/api/3/project/search", params=params
        )
        return Page(items=list(data.get("values") or []), total=_total(data))

    async def list_issue_types(self) -> list[dict[str, Any]]:
        data = await self._request("list_issue_types", "GET", "/rest/api/3/issuetype")
        return _as_list(data)

    async def search_users(self, query: str, limit: int) -> list[dict[str, Any]]:
        data = await self._request(
            "search_users",
            "GET",
            "/rest/api/3/user/search",
            params={"query": query, "maxResults": limit},
        )
        return _as_list(data)

    async def get_myself(self) -> dict[str, Any]:
        return await self._request("get_myself", "GET", "/rest/api/3/myself")

    # ── Writes ──

    async def create_issue(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("create_issue", "POST", "/rest/api/3/issue", json=payload)

    async def update_issue(self, issue_key: str, payload: dict[str, Any]) -> None:
        await self._request("update_issue", "PUT", f"/rest/api/3/issue/{issue_key}", json=payload)

    async def add_comment(self, issue_key: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "add_comment", "POST", f"/rest/api/3/issue/{issue_key}/comment", json={"body": body}
        )

    async def transition_issue(
        self,
        issue_key: str,
        transition_id: str,
        fields: dict[str, Any] | None = None,
        comment: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if fields:
            payload["fields"] = fields
        if comment is not None:
            payload["update"] = {"comment": [{"add": {"body": comment}}]}
        await self._request(
            "transition_issue", "POST", f"/rest/api/3/issue/{issue_key}/transitions", json=payload
        )

    async def assign_issue(self, issue_key: str, account_id: str | None) -> None:
        await self._request(
            "assign_issue",
            "PUT",
            f"/rest/api/3/issue/{issue_key}/assignee",
            json={"accountId": account_id},
        )

    async def add_label(self, issue_key: str, label: str) -> None:
        await self._edit_labels("add_label", issue_key, "add", label)

    async def remove_label(self, issue_key: str, label: str) -> None:
        await self._edit_labels("remove_label", issue_key, "remove", label)

    async def add_watcher(self, issue_key: str, account_id: str) -> None:
        # The endpoint takes the bare account id as a JSON string body.
        await self._request(
            "add_watcher", "POST", f"/rest/api/3/issue/{issue_key}/watchers", json=account_id
        )

    async def remove_watcher(self, issue_key: str, account_id: str) -> None:
        await self._request(
            "remove_watcher",
            "DELETE",
            f"/rest/api/3/issue/{issue_key}/watchers",
            params={"accountId": account_id},
        )

    async def link_issues(
        self, inward_issue_key: str, outward_issue_key: str, link_type: str
    ) -> None:
        payload = {
            "type": {"name": link_type},
            "inwardIssue": {"key": inward_issue_key},
            "outwardIssue": {"key": outward_issue_key},
        }
        await self._request("link_issues", "POST", "/rest/api/3/issueLink", json=payload)

    async def delete_issue_link(self, link_id: str) -> None:
        await self._request("delete_issue_link", "DELETE", f"/rest/api/3/issueLink/{link_id}")

    async def update_comment(
        self, issue_key: str, comment_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "update_comment",
            "PUT",
            f"/rest/api/3/issue/{issue_key}/comment/{comment_id}",
            json={"body": body},
        )

    async def delete_comment(self, issue_key: str, comment_id: str) -> None:
        await self._request(
            "delete_comment", "DELETE", f"/rest/api/3/issue/{issue_key}/comment/{comment_id}"
        )

    async def _edit_labels(self, operation: str, issue_key: str, verb: str, label: str) -> None:
        payload = {"update": {"labels": [{verb: label}]}}
        await self._request(operation, "PUT", f"/rest/api/3/issue/{issue_key}", json=payload)

    # ── Transport internals ──

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        token = self._settings.token.get_secret_value() if self._settings.token else ""
        if self._settings.auth_mode == JiraAuthMode.BEARER:
            headers["Authorization"] = f"Bearer {token}"
        else:
            creds = f"{self._settings.username}:{token}"
            encoded = base64.b64encode(creds.encode("utf-8")).decode("utf-8")
            headers["Authorization"] = f"Basic {encoded}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        tracer = get_tracer()
        with tracer.start_as_current_span("jira.request") as span:
            span.set_attribute("jira.operation", operation)
            span.set_attribute("http.method", method)
            try:
                result = await self._retry.run(lambda: self._send(method, path, params, json))
            except (UpstreamApiError, TransportError) as exc:
                span.set_attribute("error", True)
                JIRA_API_CALLS_TOTAL.labels(operation=operation, outcome="error").inc()
                logger.error(
                    "Jira request failed",
                    processing_status="ERROR",
                    error_type=type(exc).__name__,
                    error_code=getattr(exc, "status_code", None),
                    error_details=str(exc),
                    error_retryable=exc.retryable,
                    source_system=_PROVIDER,
                    operation=operation,
                )
                raise
            JIRA_API_CALLS_TOTAL.labels(operation=operation, outcome="success").inc()
            return result

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json: Any,
    ) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method, url, params=params, json=json, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            raise TransportError(message=f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

        raise UpstreamApiError(status_code=response.status_code, response=_error_body(response))


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"raw_error": response.text}


def _total(data: dict[str, Any]) -> int | None:
    total = data.get("total")
    return total if isinstance(total, int) else None


def _as_list(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]
