from jira_bridge.infrastructure.tracker.jira.jira_rest_client import JiraRestClient

__all__ = ["JiraRestClient"]
