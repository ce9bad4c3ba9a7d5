from jira_bridge.infrastructure.observability.logging.schema_processor import (
    bridge_schema_processor,
)

__all__ = ["bridge_schema_processor"]
