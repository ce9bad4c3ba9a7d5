"""Per-call wiring of settings, transport and services.

A fresh context (and HTTP connection pool) is opened for every tool call and
closed when the call ends; nothing is shared between concurrent requests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from jira_bridge.application.issue_service import IssueService
from jira_bridge.core.ports import TrackerPort
from jira_bridge.infrastructure.config.jira_settings import JiraSettings
from jira_bridge.infrastructure.tracker.jira import JiraRestClient


@dataclass(frozen=True)
class RequestContext:
    settings: JiraSettings
    tracker: TrackerPort
    issues: IssueService


@asynccontextmanager
async def open_request_context(settings: JiraSettings | None = None) -> AsyncIterator[RequestContext]:
    """Yield a RequestContext backed by a new JiraRestClient, closing it on exit."""
    settings = settings or JiraSettings()
    async with JiraRestClient(settings) as client:
        yield RequestContext(
            settings=settings,
            tracker=client,
            issues=IssueService(client, settings),
        )
