"""Resolve field-ids to display names across independently fetched metadata.

Each metadata document is reduced to an id -> name map tagged with its
:class:`MetadataSource`; resolution walks ``NAME_PRECEDENCE`` and falls back
to the id itself, so every field always gets a name.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from jira_bridge.core.domain.metadata import NAME_PRECEDENCE, MetadataSource
from jira_bridge.core.services.metadata_documents import (
    createmeta_names,
    editmeta_names,
    expanded_names,
    schema_names,
)


@dataclass(frozen=True)
class ResolvedName:
    name: str
    source: MetadataSource | None  # None: identity fallback


@dataclass(frozen=True)
class FieldNameSources:
    by_source: Mapping[MetadataSource, Mapping[str, str]] = field(default_factory=dict)

    @classmethod
    def from_documents(
        cls,
        raw_issue: dict[str, Any] | None = None,
        create_meta: dict[str, Any] | None = None,
        edit_meta: dict[str, Any] | None = None,
        project_key: str | None = None,
        issue_type: str | None = None,
    ) -> FieldNameSources:
        return cls(
            by_source={
                MetadataSource.NAMES_EXPAND: expanded_names(raw_issue),
                MetadataSource.CREATE_META: createmeta_names(create_meta, project_key, issue_type),
                MetadataSource.EDIT_META: editmeta_names(edit_meta),
                MetadataSource.FIELD_SCHEMA: schema_names(raw_issue),
            }
        )

    def lookup(self, source: MetadataSource, field_id: str) -> str | None:
        return self.by_source.get(source, {}).get(field_id)


class FieldNameResolver:
    def __init__(
        self,
        sources: FieldNameSources,
        precedence: tuple[MetadataSource, ...] = NAME_PRECEDENCE,
    ) -> None:
        self._sources = sources
        self._precedence = precedence

    def resolve(self, field_id: str) -> ResolvedName:
        for source in self._precedence:
            name = self._sources.lookup(source, field_id)
            if name:
                return ResolvedName(name=name, source=source)
        return ResolvedName(name=field_id, source=None)

    def resolve_all(self, field_ids: Iterable[str]) -> dict[str, str]:
        return {field_id: self.resolve(field_id).name for field_id in field_ids}
