"""jira-bridge: MCP server exposing normalized Jira issue tools.

Every tool opens its own RequestContext, so concurrent calls never share a
connection pool or any intermediate state. Bridge errors are turned into
``ToolError`` messages carrying the Jira error text and remediation hints.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from jira_bridge.application.request_context import RequestContext, open_request_context
from jira_bridge.core.exceptions import BridgeError, CriticalFetchError, UpstreamApiError
from jira_bridge.infrastructure.tracker.jira.error_suggestions import (
    board_suggestions,
    comment_suggestions,
    create_suggestions,
    format_upstream_error,
    issue_suggestions,
    jql_suggestions,
    transition_suggestions,
    update_suggestions,
)

logger = structlog.get_logger()

mcp = FastMCP("jira-bridge")

SuggestionFn = Callable[[int], list[str]]


# ── Error translation ────────────────────────────────────────


def _critical_message(exc: CriticalFetchError, suggest: SuggestionFn | None) -> str:
    if not isinstance(exc.cause, UpstreamApiError):
        return str(exc)
    if exc.operation == "get_board_configuration":
        board_id = exc.subject.removeprefix("board ")
        suggestions = board_suggestions(board_id, exc.cause.status_code)
    else:
        suggestions = suggest(exc.cause.status_code) if suggest else None
    return f"{exc.operation} failed for {exc.subject}\n" + format_upstream_error(
        exc.cause, suggestions
    )


@asynccontextmanager
async def _tool_call(tool: str, suggest: SuggestionFn | None = None) -> AsyncIterator[RequestContext]:
    """Open a RequestContext for one tool call and translate bridge errors into ToolError."""
    logger.info("Tool invoked", tool=tool)
    try:
        async with open_request_context() as ctx:
            yield ctx
    except CriticalFetchError as exc:
        logger.error(
            "Tool failed on critical fetch",
            tool=tool,
            processing_status="ERROR",
            error_type=type(exc.cause).__name__,
            error_details=str(exc),
        )
        raise ToolError(_critical_message(exc, suggest)) from exc
    except UpstreamApiError as exc:
        logger.error(
            "Tool failed on Jira API error",
            tool=tool,
            processing_status="ERROR",
            error_type=type(exc).__name__,
            error_code=exc.status_code,
            error_details=str(exc),
        )
        suggestions = suggest(exc.status_code) if suggest else None
        raise ToolError(format_upstream_error(exc, suggestions)) from exc
    except BridgeError as exc:
        logger.error(
            "Tool failed",
            tool=tool,
            processing_status="ERROR",
            error_type=type(exc).__name__,
            error_details=str(exc),
        )
        raise ToolError(str(exc)) from exc


def _fmt(data: Any) -> str:
    """Format a tool result as readable JSON."""
    return json.dumps(data, indent=2, default=str)


# ── Read tools ───────────────────────────────────────────────


@mcp.tool()
async def get_issue(issue_key: str, board_id: int | None = None) -> str:
    """Get one issue with cleaned fields and resolved field names.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        board_id: Optional board id; restricts the fields to those relevant on that board
    """
    async with _tool_call("get_issue", lambda s: issue_suggestions(issue_key, s)) as ctx:
        view = await ctx.issues.build_issue_view(issue_key, board_id)
    return _fmt(view.to_dict())


@mcp.tool()
async def search_issues(
    jql: str,
    fields: str = "summary,status,assignee,priority,issuetype,updated",
    limit: int = 50,
    start_at: int = 0,
) -> str:
    """Search issues with JQL.

    Args:
        jql: JQL query, e.g. project = PROJ AND status = "In Progress"
        fields: Comma-separated field ids to return
        limit: Maximum number of issues to return
        start_at: Offset of the first result
    """
    async with _tool_call("search_issues", lambda s: jql_suggestions(jql, s)) as ctx:
        results = await ctx.issues.search_issues(jql, fields, limit, start_at)
    return _fmt({"results": results})


@mcp.tool()
async def get_comments(
    issue_key: str, limit: int | None = None, order_by: str = "-created"
) -> str:
    """Get an issue's comments as plain text, newest first by default.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        limit: Optional maximum number of comments
        order_by: Sort order: "created" (oldest first) or "-created" (newest first)
    """
    async with _tool_call("get_comments", lambda s: comment_suggestions(issue_key, s)) as ctx:
        data = await ctx.issues.get_comments(issue_key, limit, order_by)
    return _fmt(data)


@mcp.tool()
async def get_transitions(issue_key: str) -> str:
    """List the workflow transitions currently available for an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
    """
    async with _tool_call("get_transitions", lambda s: transition_suggestions(issue_key, s)) as ctx:
        transitions = await ctx.issues.get_transitions(issue_key)
    return _fmt({"issue_key": issue_key, "transitions": transitions})


@mcp.tool()
async def list_boards(project_key: str | None = None) -> str:
    """List agile boards, optionally only those of one project.

    Args:
        project_key: Optional project key or id
    """
    async with _tool_call("list_boards") as ctx:
        boards = await ctx.issues.list_boards(project_key)
    return _fmt({"boards": boards})


@mcp.tool()
async def list_fields(project_key: str, issue_type: str) -> str:
    """List the fields available when creating an issue of a type in a project.

    Args:
        project_key: Project key, e.g. PROJ
        issue_type: Issue type name, e.g. Story
    """
    async with _tool_call(
        "list_fields", lambda s: create_suggestions(project_key, issue_type, s)
    ) as ctx:
        definitions = await ctx.issues.list_fields(project_key, issue_type)
    return _fmt({"fields": [d.to_dict() for d in definitions]})


@mcp.tool()
async def get_watchers(issue_key: str) -> str:
    """List the users watching an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
    """
    async with _tool_call("get_watchers", lambda s: issue_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.get_watchers(issue_key)
    return _fmt(result)


@mcp.tool()
async def list_link_types() -> str:
    """List the issue link types available for link_issues."""
    async with _tool_call("list_link_types") as ctx:
        link_types = await ctx.issues.list_link_types()
    return _fmt({"link_types": link_types, "count": len(link_types)})


@mcp.tool()
async def list_projects(summary_only: bool = False) -> str:
    """List every project visible to the configured account.

    Args:
        summary_only: Return only key and name for each project
    """
    async with _tool_call("list_projects") as ctx:
        projects = await ctx.issues.list_projects(summary_only)
    return _fmt({"projects": projects, "total_count": len(projects)})


@mcp.tool()
async def list_issue_types(project_key: str | None = None) -> str:
    """List issue types, optionally only those usable in one project.

    Args:
        project_key: Optional project key, e.g. PROJ
    """
    async with _tool_call("list_issue_types") as ctx:
        issue_types = await ctx.issues.list_issue_types(project_key)
    return _fmt({"issue_types": issue_types})


@mcp.tool()
async def get_field_details(project_key: str, issue_type: str, field_ids: list[str]) -> str:
    """Describe selected create-screen fields: type, required flag and allowed values.

    Args:
        project_key: Project key, e.g. PROJ
        issue_type: Issue type name, e.g. Story
        field_ids: Field ids to describe, e.g. ["priority", "customfield_10016"]
    """
    async with _tool_call(
        "get_field_details", lambda s: create_suggestions(project_key, issue_type, s)
    ) as ctx:
        details = await ctx.issues.get_field_details(project_key, issue_type, field_ids)
    return _fmt({"fields": details})


@mcp.tool()
async def search_users(query: str, limit: int = 50) -> str:
    """Find users by name or email, e.g. to get an account id for assign_issue.

    Args:
        query: Text matched against display name and email
        limit: Maximum number of users to return
    """
    async with _tool_call("search_users") as ctx:
        users = await ctx.issues.search_users(query, limit)
    return _fmt({"users": users})


@mcp.tool()
async def get_user_info() -> str:
    """Get the account the bridge is authenticated as."""
    async with _tool_call("get_user_info") as ctx:
        info = await ctx.issues.get_user_info()
    return _fmt(info)



# ── Write tools ──────────────────────────────────────────────


@mcp.tool()
async def create_issue(fields: dict[str, Any] | str) -> str:
    """Create an issue.

    Args:
        fields: Field map (or its JSON string), e.g. {"project": {"key": "PROJ"},
            "issuetype": {"name": "Task"}, "summary": "...", "components": ["api"]}
    """
    project_key, issue_type = _create_context(fields)
    async with _tool_call(
        "create_issue", lambda s: create_suggestions(project_key, issue_type, s)
    ) as ctx:
        result = await ctx.issues.create_issue(fields)
    return _fmt(result)


@mcp.tool()
async def update_issue(issue_key: str, fields: dict[str, Any] | str) -> str:
    """Update fields of an existing issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        fields: Field map (or its JSON string) with the values to set
    """
    async with _tool_call("update_issue", lambda s: update_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.update_issue(issue_key, fields)
    return _fmt(result)


@mcp.tool()
async def add_comment(issue_key: str, body: str) -> str:
    """Add a plain-text comment to an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        body: Comment text
    """
    async with _tool_call("add_comment", lambda s: comment_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.add_comment(issue_key, body)
    return _fmt(result)


@mcp.tool()
async def transition_issue(issue_key: str, transition_id: str, comment: str | None = None) -> str:
    """Move an issue through a workflow transition.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        transition_id: Transition id from get_transitions
        comment: Optional comment added with the transition
    """
    async with _tool_call(
        "transition_issue", lambda s: transition_suggestions(issue_key, s)
    ) as ctx:
        result = await ctx.issues.transition_issue(issue_key, transition_id, comment)
    return _fmt(result)


@mcp.tool()
async def update_comment(issue_key: str, comment_id: str, body: str) -> str:
    """Replace the text of an existing comment.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        comment_id: Comment id from get_comments
        body: New comment text
    """
    async with _tool_call("update_comment", lambda s: comment_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.update_comment(issue_key, comment_id, body)
    return _fmt(result)


@mcp.tool()
async def delete_comment(issue_key: str, comment_id: str) -> str:
    """Delete a comment from an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        comment_id: Comment id from get_comments
    """
    async with _tool_call("delete_comment", lambda s: comment_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.delete_comment(issue_key, comment_id)
    return _fmt(result)


@mcp.tool()
async def assign_issue(issue_key: str, account_id: str | None = None) -> str:
    """Assign an issue to a user, or unassign it.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        account_id: Account id from search_users; omit to unassign
    """
    async with _tool_call("assign_issue", lambda s: update_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.assign_issue(issue_key, account_id)
    return _fmt(result)


@mcp.tool()
async def add_label(issue_key: str, label: str) -> str:
    """Add one label to an issue, keeping its other labels.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        label: Label to add
    """
    async with _tool_call("add_label", lambda s: update_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.add_label(issue_key, label)
    return _fmt(result)


@mcp.tool()
async def remove_label(issue_key: str, label: str) -> str:
    """Remove one label from an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        label: Label to remove
    """
    async with _tool_call("remove_label", lambda s: update_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.remove_label(issue_key, label)
    return _fmt(result)


@mcp.tool()
async def add_watcher(issue_key: str, account_id: str) -> str:
    """Add a user as a watcher of an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        account_id: Account id from search_users
    """
    async with _tool_call("add_watcher", lambda s: issue_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.add_watcher(issue_key, account_id)
    return _fmt(result)


@mcp.tool()
async def remove_watcher(issue_key: str, account_id: str) -> str:
    """Stop a user from watching an issue.

    Args:
        issue_key: Issue key, e.g. PROJ-123
        account_id: Account id of the watcher
    """
    async with _tool_call("remove_watcher", lambda s: issue_suggestions(issue_key, s)) as ctx:
        result = await ctx.issues.remove_watcher(issue_key, account_id)
    return _fmt(result)


@mcp.tool()
async def link_issues(inward_issue_key: str, outward_issue_key: str, link_type: str) -> str:
    """Link two issues.

    Args:
        inward_issue_key: Issue on the inward side, e.g. PROJ-1 ("is blocked by")
        outward_issue_key: Issue on the outward side, e.g. PROJ-2 ("blocks")
        link_type: Link type name from list_link_types, e.g. Blocks
    """
    async with _tool_call("link_issues") as ctx:
        result = await ctx.issues.link_issues(inward_issue_key, outward_issue_key, link_type)
    return _fmt(result)


@mcp.tool()
async def delete_issue_link(link_id: str) -> str:
    """Delete an issue link.

    Args:
        link_id: Link id, as found in the issue's issuelinks field
    """
    async with _tool_call("delete_issue_link") as ctx:
        result = await ctx.issues.delete_issue_link(link_id)
    return _fmt(result)



def _create_context(fields: Any) -> tuple[str | None, str | None]:
    """Project key and issue-type name from raw create input, for error hints only."""
    if isinstance(fields, str):
        try:
            fields = json.loads(fields)
        except json.JSONDecodeError:
            return None, None
    if not isinstance(fields, dict):
        return None, None
    project = fields.get("project")
    issuetype = fields.get("issuetype")
    project_key = project.get("key") if isinstance(project, dict) else None
    type_name = issuetype.get("name") if isinstance(issuetype, dict) else None
    return project_key, type_name
