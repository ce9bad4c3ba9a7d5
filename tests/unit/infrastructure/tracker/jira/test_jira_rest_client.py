"""Unit tests: JiraRestClient over a respx-mocked httpx transport."""

import base64
import json
from typing import Any

import httpx
import pytest
import respx
from httpx import Response

from jira_bridge.core.exceptions import ConfigurationError, TransportError, UpstreamApiError
from jira_bridge.infrastructure.common.retry import RetryPolicy
from jira_bridge.infrastructure.config.jira_settings import JiraSettings
from jira_bridge.infrastructure.tracker.jira import JiraRestClient

BASE = "https://jira.example.com"


def _make_settings(**overrides: Any) -> JiraSettings:
    defaults: dict[str, Any] = {
        "JIRA_BASE_URL": BASE,
        "JIRA_USERNAME": "bot@example.com",
        "JIRA_TOKEN": "atlassian-token-123",
        "JIRA_MAX_ATTEMPTS": 1,
    }
    defaults.update(overrides)
    return JiraSettings(_env_file=None, **defaults)


def _client(settings: JiraSettings | None = None, attempts: int = 1) -> JiraRestClient:
    return JiraRestClient(
        settings or _make_settings(),
        retry_policy=RetryPolicy(max_attempts=attempts, initial_wait=0, max_wait=0),
    )


def _body(route: respx.Route) -> Any:
    return json.loads(route.calls.last.request.content)


# ══════════════════════════════════════════════════════════════════════
# Construction and auth
# ══════════════════════════════════════════════════════════════════════


class TestConstruction:
    def test_missing_credentials_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            JiraRestClient(_make_settings(JIRA_TOKEN=""))

    def test_browse_url(self) -> None:
        assert _client().browse_url("PROJ-1") == f"{BASE}/browse/PROJ-1"

    @respx.mock
    async def test_basic_auth_header(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/transitions").mock(
            return_value=Response(200, json={"transitions": []})
        )
        async with _client() as client:
            await client.get_transitions("PROJ-1")

        expected = base64.b64encode(b"bot@example.com:atlassian-token-123").decode()
        assert route.calls.last.request.headers["Authorization"] == f"Basic {expected}"

    @respx.mock
    async def test_bearer_auth_header(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/transitions").mock(
            return_value=Response(200, json={"transitions": []})
        )
        async with _client(_make_settings(JIRA_AUTH_MODE="bearer")) as client:
            await client.get_transitions("PROJ-1")

        assert route.calls.last.request.headers["Authorization"] == "Bearer atlassian-token-123"


# ══════════════════════════════════════════════════════════════════════
# Reads
# ══════════════════════════════════════════════════════════════════════


class TestReads:
    @respx.mock
    async def test_get_raw_issue_requests_all_fields_and_names(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1").mock(
            return_value=Response(200, json={"key": "PROJ-1", "fields": {}})
        )
        async with _client() as client:
            raw = await client.get_raw_issue("PROJ-1")

        assert raw["key"] == "PROJ-1"
        params = route.calls.last.request.url.params
        assert params["fields"] == "*all"
        assert params["expand"] == "names,schema"

    @respx.mock
    async def test_creation_metadata_scoped(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/createmeta").mock(
            return_value=Response(200, json={"projects": []})
        )
        async with _client() as client:
            await client.get_creation_metadata("PROJ", "Story")

        params = route.calls.last.request.url.params
        assert params["projectKeys"] == "PROJ"
        assert params["issuetypeNames"] == "Story"
        assert params["expand"] == "projects.issuetypes.fields"

    @respx.mock
    async def test_search_returns_page_with_total(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/search/jql").mock(
            return_value=Response(200, json={"issues": [{"key": "PROJ-1"}], "total": 230})
        )
        async with _client() as client:
            page = await client.search("project = PROJ", "*all", 100, 200)

        assert page.items == [{"key": "PROJ-1"}]
        assert page.total == 230
        params = route.calls.last.request.url.params
        assert params["startAt"] == "200"
        assert params["maxResults"] == "100"
        assert params["jql"] == "project = PROJ"

    @respx.mock
    async def test_search_without_total(self) -> None:
        respx.get(f"{BASE}/rest/api/3/search/jql").mock(
            return_value=Response(200, json={"issues": [], "isLast": True})
        )
        async with _client() as client:
            page = await client.search("project = PROJ", "summary", 50, 0)
        assert page.total is None

    @respx.mock
    async def test_list_boards_reads_values(self) -> None:
        route = respx.get(f"{BASE}/rest/agile/1.0/board").mock(
            return_value=Response(200, json={"values": [{"id": 7}], "total": 1})
        )
        async with _client() as client:
            page = await client.list_resource("board", 50, 0, projectKeyOrId="PROJ")

        assert page.items == [{"id": 7}]
        assert route.calls.last.request.url.params["projectKeyOrId"] == "PROJ"

    @respx.mock
    async def test_list_board_issues_reads_issues(self) -> None:
        respx.get(f"{BASE}/rest/agile/1.0/board/7/issue").mock(
            return_value=Response(200, json={"issues": [{"key": "PROJ-1"}], "total": 1})
        )
        async with _client() as client:
            page = await client.list_resource("board/7/issue", 100, 0, fields="*all")
        assert page.items == [{"key": "PROJ-1"}]

    @respx.mock
    async def test_comments_newest_first(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/comment").mock(
            return_value=Response(200, json={"comments": [], "total": 0})
        )
        async with _client() as client:
            await client.get_comments("PROJ-1", limit=5)

        params = route.calls.last.request.url.params
        assert params["orderBy"] == "-created"
        assert params["maxResults"] == "5"


# ══════════════════════════════════════════════════════════════════════
# Writes
# ══════════════════════════════════════════════════════════════════════


class TestWrites:
    @respx.mock
    async def test_create_issue_posts_payload(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issue").mock(
            return_value=Response(201, json={"id": "10001", "key": "PROJ-9"})
        )
        async with _client() as client:
            created = await client.create_issue({"fields": {"summary": "x"}})

        assert created["key"] == "PROJ-9"
        assert _body(route) == {"fields": {"summary": "x"}}

    @respx.mock
    async def test_update_issue_accepts_no_content(self) -> None:
        route = respx.put(f"{BASE}/rest/api/3/issue/PROJ-1").mock(return_value=Response(204))
        async with _client() as client:
            assert await client.update_issue("PROJ-1", {"fields": {"summary": "y"}}) is None
        assert route.called

    @respx.mock
    async def test_add_comment_wraps_body(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issue/PROJ-1/comment").mock(
            return_value=Response(201, json={"id": "c1"})
        )
        doc = {"type": "doc", "version": 1, "content": []}
        async with _client() as client:
            await client.add_comment("PROJ-1", doc)
        assert _body(route) == {"body": doc}

    @respx.mock
    async def test_transition_with_comment(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issue/PROJ-1/transitions").mock(
            return_value=Response(204)
        )
        doc = {"type": "doc", "version": 1, "content": []}
        async with _client() as client:
            await client.transition_issue("PROJ-1", "31", fields={"resolution": {"name": "Done"}}, comment=doc)

        assert _body(route) == {
            "transition": {"id": "31"},
            "fields": {"resolution": {"name": "Done"}},
            "update": {"comment": [{"add": {"body": doc}}]},
        }

    @respx.mock
    async def test_transition_without_extras(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issue/PROJ-1/transitions").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            await client.transition_issue("PROJ-1", "31")
        assert _body(route) == {"transition": {"id": "31"}}


# ══════════════════════════════════════════════════════════════════════
# People, labels, watchers, links and comment edits
# ══════════════════════════════════════════════════════════════════════


class TestCollaboration:
    @respx.mock
    async def test_comments_oldest_first(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/comment").mock(
            return_value=Response(200, json={"comments": [], "total": 0})
        )
        async with _client() as client:
            await client.get_comments("PROJ-1", order_by="created")

        params = route.calls.last.request.url.params
        assert params["orderBy"] == "created"
        assert "maxResults" not in params

    @respx.mock
    async def test_assign_issue_puts_account_id(self) -> None:
        route = respx.put(f"{BASE}/rest/api/3/issue/PROJ-1/assignee").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            await client.assign_issue("PROJ-1", "acc-1")
        assert _body(route) == {"accountId": "acc-1"}

    @respx.mock
    async def test_unassign_sends_null_account_id(self) -> None:
        route = respx.put(f"{BASE}/rest/api/3/issue/PROJ-1/assignee").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            await client.assign_issue("PROJ-1", None)
        assert _body(route) == {"accountId": None}

    @respx.mock
    async def test_labels_use_update_verbs(self) -> None:
        route = respx.put(f"{BASE}/rest/api/3/issue/PROJ-1").mock(return_value=Response(204))
        async with _client() as client:
            await client.add_label("PROJ-1", "backend")
            assert _body(route) == {"update": {"labels": [{"add": "backend"}]}}
            await client.remove_label("PROJ-1", "backend")
            assert _body(route) == {"update": {"labels": [{"remove": "backend"}]}}

    @respx.mock
    async def test_add_watcher_posts_bare_account_id(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issue/PROJ-1/watchers").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            await client.add_watcher("PROJ-1", "acc-1")
        assert _body(route) == "acc-1"

    @respx.mock
    async def test_remove_watcher_passes_account_id_as_query(self) -> None:
        route = respx.delete(f"{BASE}/rest/api/3/issue/PROJ-1/watchers").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            await client.remove_watcher("PROJ-1", "acc-1")
        assert route.calls.last.request.url.params["accountId"] == "acc-1"

    @respx.mock
    async def test_get_watchers(self) -> None:
        respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/watchers").mock(
            return_value=Response(200, json={"watchCount": 1, "watchers": [{"accountId": "a"}]})
        )
        async with _client() as client:
            data = await client.get_watchers("PROJ-1")
        assert data["watchCount"] == 1

    @respx.mock
    async def test_link_issues_payload(self) -> None:
        route = respx.post(f"{BASE}/rest/api/3/issueLink").mock(return_value=Response(201))
        async with _client() as client:
            await client.link_issues("PROJ-1", "PROJ-2", "Blocks")
        assert _body(route) == {
            "type": {"name": "Blocks"},
            "inwardIssue": {"key": "PROJ-1"},
            "outwardIssue": {"key": "PROJ-2"},
        }

    @respx.mock
    async def test_delete_issue_link(self) -> None:
        route = respx.delete(f"{BASE}/rest/api/3/issueLink/10050").mock(return_value=Response(204))
        async with _client() as client:
            await client.delete_issue_link("10050")
        assert route.called

    @respx.mock
    async def test_list_link_types(self) -> None:
        respx.get(f"{BASE}/rest/api/3/issueLinkType").mock(
            return_value=Response(200, json={"issueLinkTypes": [{"id": "1", "name": "Blocks"}]})
        )
        async with _client() as client:
            data = await client.list_link_types()
        assert data["issueLinkTypes"][0]["name"] == "Blocks"

    @respx.mock
    async def test_update_comment_wraps_body(self) -> None:
        route = respx.put(f"{BASE}/rest/api/3/issue/PROJ-1/comment/c1").mock(
            return_value=Response(200, json={"id": "c1", "updated": "2024-02-01"})
        )
        doc = {"type": "doc", "version": 1, "content": []}
        async with _client() as client:
            updated = await client.update_comment("PROJ-1", "c1", doc)
        assert _body(route) == {"body": doc}
        assert updated["updated"] == "2024-02-01"

    @respx.mock
    async def test_delete_comment(self) -> None:
        route = respx.delete(f"{BASE}/rest/api/3/issue/PROJ-1/comment/c1").mock(
            return_value=Response(204)
        )
        async with _client() as client:
            assert await client.delete_comment("PROJ-1", "c1") is None
        assert route.called

    @respx.mock
    async def test_list_projects_pages_with_expand(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/project/search").mock(
            return_value=Response(200, json={"values": [{"key": "PROJ"}], "total": 101})
        )
        async with _client() as client:
            page = await client.list_projects(100, 100, "description,lead")

        assert page.items == [{"key": "PROJ"}]
        assert page.total == 101
        params = route.calls.last.request.url.params
        assert params["startAt"] == "100"
        assert params["maxResults"] == "100"
        assert params["expand"] == "description,lead"

    @respx.mock
    async def test_list_issue_types_reads_array(self) -> None:
        respx.get(f"{BASE}/rest/api/3/issuetype").mock(
            return_value=Response(200, json=[{"id": "1", "name": "Bug"}, "junk"])
        )
        async with _client() as client:
            assert await client.list_issue_types() == [{"id": "1", "name": "Bug"}]

    @respx.mock
    async def test_search_users_query(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/user/search").mock(
            return_value=Response(200, json=[{"accountId": "a", "displayName": "Ada"}])
        )
        async with _client() as client:
            users = await client.search_users("ada", 10)

        assert users == [{"accountId": "a", "displayName": "Ada"}]
        params = route.calls.last.request.url.params
        assert params["query"] == "ada"
        assert params["maxResults"] == "10"

    @respx.mock
    async def test_get_myself(self) -> None:
        respx.get(f"{BASE}/rest/api/3/myself").mock(
            return_value=Response(200, json={"accountId": "me"})
        )
        async with _client() as client:
            assert await client.get_myself() == {"accountId": "me"}


# ══════════════════════════════════════════════════════════════════════
# Error translation
# ══════════════════════════════════════════════════════════════════════


class TestErrors:
    @respx.mock
    async def test_non_2xx_becomes_upstream_error_with_body(self) -> None:
        respx.get(f"{BASE}/rest/api/3/issue/PROJ-404").mock(
            return_value=Response(404, json={"errorMessages": ["Issue does not exist"]})
        )
        async with _client() as client:
            with pytest.raises(UpstreamApiError) as exc_info:
                await client.get_raw_issue("PROJ-404")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response == {"errorMessages": ["Issue does not exist"]}
        assert not exc_info.value.retryable

    @respx.mock
    async def test_non_json_error_body_kept_as_raw_text(self) -> None:
        respx.get(f"{BASE}/rest/api/3/filter/100").mock(
            return_value=Response(502, text="Bad gateway")
        )
        async with _client() as client:
            with pytest.raises(UpstreamApiError) as exc_info:
                await client.get_filter(100)

        assert exc_info.value.response == {"raw_error": "Bad gateway"}
        assert exc_info.value.retryable

    @respx.mock
    async def test_connection_failure_becomes_transport_error(self) -> None:
        respx.get(f"{BASE}/rest/agile/1.0/board/7/configuration").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        async with _client() as client:
            with pytest.raises(TransportError) as exc_info:
                await client.get_board_configuration(7)
        assert "connection refused" in str(exc_info.value)

    @respx.mock
    async def test_retryable_status_is_retried(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/editmeta").mock(
            side_effect=[Response(503, json={}), Response(200, json={"fields": {}})]
        )
        async with _client(attempts=3) as client:
            assert await client.get_edit_metadata("PROJ-1") == {"fields": {}}
        assert route.call_count == 2

    @respx.mock
    async def test_client_errors_are_not_retried(self) -> None:
        route = respx.get(f"{BASE}/rest/api/3/issue/PROJ-1/editmeta").mock(
            return_value=Response(403, json={"errorMessages": ["Forbidden"]})
        )
        async with _client(attempts=3) as client:
            with pytest.raises(UpstreamApiError):
                await client.get_edit_metadata("PROJ-1")
        assert route.call_count == 1
