from jira_bridge.core.domain.issue.canonical_issue_view import CanonicalIssueView
from jira_bridge.core.domain.issue.issue_field import IssueField

__all__ = ["CanonicalIssueView", "IssueField"]
