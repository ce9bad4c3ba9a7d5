from jira_bridge.core.domain.paging.page import Page
from jira_bridge.core.domain.paging.page_cursor import PageCursor

__all__ = ["Page", "PageCursor"]
