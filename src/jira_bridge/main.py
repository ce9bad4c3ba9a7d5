from jira_bridge.infrastructure.entrypoints.mcp.server import mcp
from jira_bridge.infrastructure.observability.logger_factory_service import configure_logging
from jira_bridge.infrastructure.observability.tracing_setup import configure_tracing


def run() -> None:
    """Console entry point: serve the MCP tools over stdio."""
    configure_logging()
    configure_tracing()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run()
