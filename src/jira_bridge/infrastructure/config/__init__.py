from jira_bridge.infrastructure.config.jira_settings import JiraAuthMode, JiraSettings

__all__ = ["JiraAuthMode", "JiraSettings"]
