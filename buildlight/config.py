"""Runtime configuration — env-driven, ``.env``-aware.

Centralized settings using pydantic-settings.  The two credentials keep
the provider's conventional names; buildlight-specific knobs use the
``BUILDLIGHT_*`` prefix.

Examples
--------
Via environment::

    export GITLAB_API_PRIVATE_TOKEN=glpat-...
    export GITLAB_PROJECT_ID=1234567
    export BUILDLIGHT_BRANCH=main
    export DEBUG=1

Or via ``.env`` file in the working directory::

    GITLAB_API_PRIVATE_TOKEN=glpat-...
    GITLAB_PROJECT_ID=mygroup/myproject
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERVAL_SECONDS = 120


class MonitorSettings(BaseSettings):
    """Watchdog settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Provider credentials (required)
    gitlab_api_private_token: SecretStr
    gitlab_project_id: str

    # Verbose logging; any non-empty value turns it on
    debug: bool = False

    # Provider
    branch: str = Field("develop", validation_alias="BUILDLIGHT_BRANCH")
    gitlab_api_url: str = Field(
        "https://gitlab.com/api/v4", validation_alias="BUILDLIGHT_GITLAB_API_URL"
    )
    request_timeout: float = Field(10.0, validation_alias="BUILDLIGHT_REQUEST_TIMEOUT")

    # Board serial port; None autodetects
    board_port: str | None = Field(None, validation_alias="BUILDLIGHT_BOARD_PORT")

    @field_validator("debug", mode="before")
    @classmethod
    def debug_is_a_presence_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            return bool(value.strip())
        return value
