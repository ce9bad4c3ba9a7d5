"""Pure readers over the tracker's metadata documents.

Every reader tolerates a missing or oddly shaped document and returns an
empty result instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from jira_bridge.core.domain.metadata import FieldDefinition


def _iter_createmeta_fields(
    meta: Any, project_key: str | None = None, issue_type: str | None = None
) -> Iterator[tuple[str, dict[str, Any]]]:
    if not isinstance(meta, dict):
        return
    for project in meta.get("projects") or []:
        if not isinstance(project, dict):
            continue
        if project_key is not None and project.get("key") != project_key:
            continue
        for it in project.get("issuetypes") or []:
            if not isinstance(it, dict):
                continue
            if issue_type is not None and it.get("name") != issue_type:
                continue
            fields = it.get("fields")
            if isinstance(fields, dict):
                for field_id, definition in fields.items():
                    yield field_id, definition if isinstance(definition, dict) else {}


def field_definitions_from_createmeta(
    meta: Any, project_key: str | None = None, issue_type: str | None = None
) -> list[FieldDefinition]:
    definitions = []
    for field_id, definition in _iter_createmeta_fields(meta, project_key, issue_type):
        name = definition.get("name")
        schema = definition.get("schema")
        allowed = definition.get("allowedValues")
        definitions.append(
            FieldDefinition(
                id=field_id,
                name=name if isinstance(name, str) else field_id,
                required=bool(definition.get("required", False)),
                schema=schema if isinstance(schema, dict) else {},
                allowed_values=allowed if isinstance(allowed, list) else [],
            )
        )
    return definitions


def createmeta_issue_types(meta: Any, project_key: str) -> list[dict[str, Any]]:
    """The raw issue-type entries the creation metadata lists for one project."""
    if not isinstance(meta, dict):
        return []
    issue_types: list[dict[str, Any]] = []
    for project in meta.get("projects") or []:
        if not isinstance(project, dict) or project.get("key") != project_key:
            continue
        issue_types.extend(it for it in project.get("issuetypes") or [] if isinstance(it, dict))
    return issue_types


def createmeta_field_ids(meta: Any) -> set[str]:
    return {field_id for field_id, _ in _iter_createmeta_fields(meta)}


def createmeta_names(
    meta: Any, project_key: str | None = None, issue_type: str | None = None
) -> dict[str, str]:
    names: dict[str, str] = {}
    for field_id, definition in _iter_createmeta_fields(meta, project_key, issue_type):
        name = definition.get("name")
        if isinstance(name, str) and name and field_id not in names:
            names[field_id] = name
    return names


def editmeta_field_ids(meta: Any) -> set[str]:
    if not isinstance(meta, dict) or not isinstance(meta.get("fields"), dict):
        return set()
    return set(meta["fields"])


def editmeta_names(meta: Any) -> dict[str, str]:
    if not isinstance(meta, dict) or not isinstance(meta.get("fields"), dict):
        return {}
    return {
        field_id: definition["name"]
        for field_id, definition in meta["fields"].items()
        if isinstance(definition, dict) and isinstance(definition.get("name"), str) and definition["name"]
    }


def expanded_names(raw_issue: Any) -> dict[str, str]:
    """The id -> name map returned when the issue was fetched with ``expand=names``."""
    if not isinstance(raw_issue, dict) or not isinstance(raw_issue.get("names"), dict):
        return {}
    return {k: v for k, v in raw_issue["names"].items() if isinstance(v, str) and v}


def schema_names(raw_issue: Any) -> dict[str, str]:
    if not isinstance(raw_issue, dict) or not isinstance(raw_issue.get("schema"), dict):
        return {}
    names = {}
    for field_id, schema in raw_issue["schema"].items():
        if isinstance(schema, dict) and isinstance(schema.get("name"), str) and schema["name"]:
            names[field_id] = schema["name"]
    return names


def issue_project_and_type(raw_fields: Any) -> tuple[str | None, str | None]:
    """Project key and issue-type name of a raw field bag, when present."""
    if not isinstance(raw_fields, dict):
        return None, None
    project = raw_fields.get("project")
    issuetype = raw_fields.get("issuetype")
    project_key = project.get("key") if isinstance(project, dict) else None
    type_name = issuetype.get("name") if isinstance(issuetype, dict) else None
    return (
        project_key if isinstance(project_key, str) else None,
        type_name if isinstance(type_name, str) else None,
    )
