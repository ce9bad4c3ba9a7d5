from jira_bridge.infrastructure.common.retry.retry_policy import RetryPolicy

__all__ = ["RetryPolicy"]
