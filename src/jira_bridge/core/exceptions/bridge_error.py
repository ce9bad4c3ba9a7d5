class BridgeError(Exception):
    """Base class for every error raised by jira-bridge."""
