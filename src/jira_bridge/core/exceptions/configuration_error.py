from __future__ import annotations

from jira_bridge.core.exceptions.bridge_error import BridgeError


class ConfigurationError(BridgeError):
    """Raised when configuration is invalid or incomplete."""
