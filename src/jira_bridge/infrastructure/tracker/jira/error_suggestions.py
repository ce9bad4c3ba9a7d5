"""Human-readable upstream error messages with per-operation remediation hints."""

from __future__ import annotations

from typing import Any

from jira_bridge.core.exceptions import UpstreamApiError


def extract_error_message(response: Any) -> str:
    """Pull the most useful message out of a Jira error body.

    Order: ``errorMessages`` list, ``errors`` map, ``message``, ``raw_error``,
    then the body itself.
    """
    if not isinstance(response, dict):
        return str(response)

    error_messages = response.get("errorMessages")
    if isinstance(error_messages, list):
        texts = [m for m in error_messages if isinstance(m, str)]
        if texts:
            return "; ".join(texts)

    errors = response.get("errors")
    if isinstance(errors, dict):
        texts = [f"{field}: {msg}" for field, msg in errors.items() if isinstance(msg, str)]
        if texts:
            return "; ".join(texts)

    for key in ("message", "raw_error"):
        value = response.get(key)
        if isinstance(value, str) and value:
            return value
    return str(response)


def jql_suggestions(jql: str, status_code: int) -> list[str]:
    if status_code == 400:
        suggestions = ["Check your JQL syntax for common errors"]
        if "=" in jql and "'" not in jql and '"' not in jql:
            suggestions.append("String values with spaces or special characters must be quoted")
        if "  " in jql:
            suggestions.append("Remove double spaces in JQL")
        suggestions.append("Try a simpler query like: project = PROJ")
        return suggestions
    if status_code == 401:
        return [
            "Check your authentication credentials",
            "Ensure your API token is valid and has proper permissions",
        ]
    if status_code == 403:
        return [
            "You don't have permission to search in this project",
            "Check if the project exists and you have browse permissions",
        ]
    if status_code == 429:
        return [
            "Rate limit exceeded. Try again in a few seconds",
            "Consider using a more specific query to reduce results",
        ]
    if status_code >= 500:
        return ["Jira server error. Try again later", "Consider using a simpler query"]
    return ["Check your JQL syntax and permissions", "Try verifying project keys and field names"]


def create_suggestions(
    project_key: str | None, issue_type: str | None, status_code: int
) -> list[str]:
    if status_code == 400:
        suggestions = ["Check if all required fields are provided"]
        if project_key:
            suggestions.append(f"Verify project key '{project_key}' exists")
        if issue_type:
            suggestions.append(f"Verify issue type '{issue_type}' exists in project")
        suggestions.append("Check field values match expected formats")
        return suggestions
    if status_code == 403:
        return [
            "You don't have permission to create issues in this project",
            "Ensure you have the 'Create Issues' permission",
        ]
    if status_code == 404:
        return [
            "Project or issue type not found",
            "Verify the project key and issue type are correct",
        ]
    return ["Check your input and permissions", "Try with minimal required fields first"]


def update_suggestions(issue_key: str, status_code: int) -> list[str]:
    if status_code == 400:
        return ["Check field values and formats", "Verify the issue is not in a locked status"]
    if status_code == 403:
        return [
            "You don't have permission to edit this issue",
            "Ensure you have the 'Edit Issues' permission",
            "Check if the issue is in a transition that allows editing",
        ]
    if status_code == 404:
        return [f"Issue '{issue_key}' not found", "Verify the issue key is correct"]
    return [
        "Check your field values and permissions",
        "Ensure the issue is not in a read-only state",
    ]


def issue_suggestions(issue_key: str, status_code: int) -> list[str]:
    if status_code == 401:
        return ["Check your authentication credentials"]
    if status_code == 403:
        return [f"You don't have permission to browse issue '{issue_key}'"]
    if status_code == 404:
        return [f"Issue '{issue_key}' not found", "Verify the issue key is correct"]
    return ["Check the issue key and your permissions"]


def board_suggestions(board_id: int | str, status_code: int) -> list[str]:
    if status_code == 404:
        return [f"Board {board_id} not found", "Use list_boards to see available boards"]
    if status_code == 403:
        return [f"You don't have permission to view board {board_id}"]
    return ["Check the board id and your permissions"]


def transition_suggestions(issue_key: str, status_code: int) -> list[str]:
    if status_code == 400:
        return [
            "Check if the transition requires additional fields",
            "Verify the transition ID is correct",
        ]
    if status_code == 403:
        return [
            "You don't have permission to transition this issue",
            "Check if you have the 'Transition Issues' permission",
        ]
    if status_code == 404:
        return [
            f"Issue '{issue_key}' or transition not found",
            "Use get_transitions to see available transitions",
        ]
    return ["Check your transition ID and permissions"]


def comment_suggestions(issue_key: str, status_code: int) -> list[str]:
    if status_code == 400:
        return ["Check if comment body is valid"]
    if status_code == 403:
        return [
            "You don't have permission to comment on this issue",
            "Check if you have the 'Add Comments' permission",
        ]
    if status_code == 404:
        return [
            f"Issue '{issue_key}' or comment not found",
            "Verify the issue key and comment ID are correct",
        ]
    return ["Check your permissions for this issue"]


def format_upstream_error(error: UpstreamApiError, suggestions: list[str] | None = None) -> str:
    message = f"Jira API Error ({error.status_code}): {extract_error_message(error.response)}"
    if not suggestions:
        return message
    bullets = "\n".join(f"  - {s}" for s in suggestions)
    return f"{message}\n\nSuggestions:\n{bullets}"
