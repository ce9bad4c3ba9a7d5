from jira_bridge.infrastructure.entrypoints.mcp.server import mcp

__all__ = ["mcp"]
