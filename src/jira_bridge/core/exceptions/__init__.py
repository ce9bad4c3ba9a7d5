from jira_bridge.core.exceptions.bridge_error import BridgeError
from jira_bridge.core.exceptions.configuration_error import ConfigurationError
from jira_bridge.core.exceptions.critical_fetch_error import CriticalFetchError
from jira_bridge.core.exceptions.upstream_api_error import TransportError, UpstreamApiError

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "CriticalFetchError",
    "TransportError",
    "UpstreamApiError",
]
