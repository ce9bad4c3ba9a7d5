from jira_bridge.core.domain.metadata.field_definition import FieldDefinition
from jira_bridge.core.domain.metadata.metadata_bundle import MetadataBundle
from jira_bridge.core.domain.metadata.metadata_source import NAME_PRECEDENCE, MetadataSource

__all__ = ["FieldDefinition", "MetadataBundle", "MetadataSource", "NAME_PRECEDENCE"]
