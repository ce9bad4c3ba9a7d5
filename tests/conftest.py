from typing import Any
from unittest.mock import AsyncMock

import pytest

from jira_bridge.core.ports import TrackerPort
from jira_bridge.infrastructure.config.jira_settings import JiraSettings

BASE_URL = "https://jira.example.com"


def make_settings(**overrides: Any) -> JiraSettings:
    defaults: dict[str, Any] = {
        "JIRA_BASE_URL": BASE_URL,
        "JIRA_USERNAME": "bot@example.com",
        "JIRA_TOKEN": "atlassian-token-123",
    }
    defaults.update(overrides)
    return JiraSettings(_env_file=None, **defaults)


@pytest.fixture
def settings() -> JiraSettings:
    return make_settings()


@pytest.fixture
def tracker() -> AsyncMock:
    """TrackerPort double: async methods are AsyncMocks, browse_url is synchronous."""
    mock = AsyncMock(spec=TrackerPort)
    mock.browse_url.side_effect = lambda key: f"{BASE_URL}/browse/{key}"
    return mock
