from abc import ABC, abstractmethod
from typing import Any

from jira_bridge.core.domain.paging import Page


class TrackerPort(ABC):
    """Capabilities the bridge needs from the project-tracking service."""

    @abstractmethod
    def browse_url(self, issue_key: str) -> str:
        pass

    # ── Reads ──

    @abstractmethod
    async def get_raw_issue(self, issue_key: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_edit_metadata(self, issue_key: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_creation_metadata(
        self, project_key: str | None = None, issue_type: str | None = None
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_board_configuration(self, board_id: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_filter(self, filter_id: int | str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def search(self, jql: str, fields: str, limit: int, offset: int) -> Page:
        pass

    @abstractmethod
    async def list_resource(self, resource: str, limit: int, offset: int, **params: Any) -> Page:
        pass

    @abstractmethod
    async def get_comments(
        self, issue_key: str, limit: int | None = None, order_by: str = "-created"
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_transitions(self, issue_key: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_watchers(self, issue_key: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def list_link_types(self) -> dict[str, Any]:
        pass

    @abstractmethod
    async def list_projects(self, limit: int, offset: int, expand: str | None = None) -> Page:
        pass

    @abstractmethod
    async def list_issue_types(self) -> list[dict[str, Any]]:
        """Every issue type visible to the caller, across projects."""

    @abstractmethod
    async def search_users(self, query: str, limit: int) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def get_myself(self) -> dict[str, Any]:
        pass

    # ── Writes ──

    @abstractmethod
    async def create_issue(self, payload: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def update_issue(self, issue_key: str, payload: dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def add_comment(self, issue_key: str, body: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    async def transition_issue(
        self,
        issue_key: str,
        transition_id: str,
        fields: dict[str, Any] | None = None,
        comment: dict[str, Any] | None = None,
    ) -> None:
        pass

    @abstractmethod
    async def assign_issue(self, issue_key: str, account_id: str | None) -> None:
        """Assign the issue; ``None`` unassigns it."""

    @abstractmethod
    async def add_label(self, issue_key: str, label: str) -> None:
        pass

    @abstractmethod
    async def remove_label(self, issue_key: str, label: str) -> None:
        pass

    @abstractmethod
    async def add_watcher(self, issue_key: str, account_id: str) -> None:
        pass

    @abstractmethod
    async def remove_watcher(self, issue_key: str, account_id: str) -> None:
        pass

    @abstractmethod
    async def link_issues(
        self, inward_issue_key: str, outward_issue_key: str, link_type: str
    ) -> None:
        pass

    @abstractmethod
    async def delete_issue_link(self, link_id: str) -> None:
        pass

    @abstractmethod
    async def update_comment(
        self, issue_key: str, comment_id: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def delete_comment(self, issue_key: str, comment_id: str) -> None:
        pass
