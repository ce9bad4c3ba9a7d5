"""Unit tests: JiraSettings defaults, normalization and credential validation."""

from typing import Any

import pytest

from jira_bridge.core.exceptions import ConfigurationError
from jira_bridge.infrastructure.config.jira_settings import JiraAuthMode, JiraSettings


def _make_settings(**overrides: Any) -> JiraSettings:
    defaults: dict[str, Any] = {
        "JIRA_BASE_URL": "https://jira.example.com",
        "JIRA_USERNAME": "bot@example.com",
        "JIRA_TOKEN": "atlassian-token-123",
    }
    defaults.update(overrides)
    return JiraSettings(_env_file=None, **defaults)


class TestDefaults:
    def test_defaults(self) -> None:
        settings = _make_settings()
        assert settings.auth_mode == JiraAuthMode.BASIC
        assert settings.timeout_seconds == 30.0
        assert settings.max_attempts == 3
        assert settings.page_size_cap == 100
        assert settings.board_sample_size == 100
        assert settings.document_max_depth == 64
        assert settings.flagged_field_name == "flagged"

    def test_trailing_slash_stripped(self) -> None:
        assert _make_settings(JIRA_BASE_URL="https://jira.example.com/").base_url == (
            "https://jira.example.com"
        )

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JIRA_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("JIRA_AUTH_MODE", "bearer")
        monkeypatch.setenv("BOARD_SAMPLE_SIZE", "25")

        settings = JiraSettings(_env_file=None)

        assert settings.base_url == "https://env.example.com"
        assert settings.auth_mode == JiraAuthMode.BEARER
        assert settings.board_sample_size == 25

    def test_token_is_secret(self) -> None:
        assert "atlassian-token-123" not in repr(_make_settings())


class TestValidateCredentials:
    def test_complete_basic_configuration_passes(self) -> None:
        _make_settings().validate_credentials()

    def test_bearer_does_not_need_username(self) -> None:
        _make_settings(JIRA_AUTH_MODE="bearer", JIRA_USERNAME="").validate_credentials()

    def test_lists_every_missing_setting(self) -> None:
        settings = _make_settings(JIRA_BASE_URL="", JIRA_USERNAME="", JIRA_TOKEN="")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_credentials()

        message = str(exc_info.value)
        assert "JIRA_BASE_URL" in message
        assert "JIRA_TOKEN" in message
        assert "JIRA_USERNAME" in message
