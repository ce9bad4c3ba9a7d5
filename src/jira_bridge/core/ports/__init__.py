from jira_bridge.core.ports.tracker_port import TrackerPort

__all__ = ["TrackerPort"]
