from enum import StrEnum

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jira_bridge.core.exceptions import ConfigurationError


class JiraAuthMode(StrEnum):
    BASIC = "basic"
    BEARER = "bearer"


class JiraSettings(BaseSettings):
    """Settings for the Jira REST connection and field-normalization behaviour."""

    # ── Connection ──
    base_url: str = Field(default="", alias="JIRA_BASE_URL")
    username: str = Field(default="", alias="JIRA_USERNAME")
    token: SecretStr | None = Field(default=None, alias="JIRA_TOKEN")
    auth_mode: JiraAuthMode = Field(default=JiraAuthMode.BASIC, alias="JIRA_AUTH_MODE")
    timeout_seconds: float = Field(default=30.0, alias="JIRA_TIMEOUT_SECONDS")
    max_attempts: int = Field(default=3, ge=1, alias="JIRA_MAX_ATTEMPTS")

    # ── Paging and board sampling ──
    page_size_cap: int = Field(default=100, ge=1, alias="JIRA_PAGE_SIZE_CAP")
    board_sample_size: int = Field(default=100, ge=0, alias="BOARD_SAMPLE_SIZE")

    # ── Normalization ──
    document_max_depth: int = Field(default=64, ge=1, alias="DOCUMENT_MAX_DEPTH")
    flagged_field_name: str = Field(default="flagged", alias="FLAGGED_FIELD_NAME")

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def validate_credentials(self) -> None:
        """Raise ConfigurationError unless a base URL and credentials are configured."""
        missing = []
        if not self.base_url:
            missing.append("JIRA_BASE_URL")
        if self.token is None or not self.token.get_secret_value():
            missing.append("JIRA_TOKEN")
        if self.auth_mode == JiraAuthMode.BASIC and not self.username:
            missing.append("JIRA_USERNAME")
        if missing:
            raise ConfigurationError(
                f"Jira configuration missing: {', '.join(missing)}; configure Jira credentials"
            )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)
