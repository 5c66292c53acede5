"""Configuration management for the DevOps MCP server."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AZURE_DEVOPS_HOST = "https://dev.azure.com"


class DevOpsSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    organization: str | None = Field(default=None, validation_alias="MCP_DEVOPS_ORGANIZATION")
    project: str | None = Field(default=None, validation_alias="MCP_DEVOPS_PROJECT")
    team: str | None = Field(default=None, validation_alias="MCP_DEVOPS_TEAM")
    pat: str | None = Field(default=None, validation_alias="MCP_DEVOPS_PAT")
    api_version: str = Field(default="7.1", validation_alias="MCP_DEVOPS_API_VERSION")
    log_level: str = Field(default="INFO", validation_alias="DEVOPS_LOG_LEVEL")
    release_timeout: float = Field(default=60.0, validation_alias="MCP_DEVOPS_RELEASE_TIMEOUT")
    fetch_concurrency: int = Field(default=5, validation_alias="MCP_DEVOPS_FETCH_CONCURRENCY")
    max_work_items: int = Field(default=200, validation_alias="MCP_DEVOPS_MAX_WORK_ITEMS")
    request_timeout: float = Field(default=30.0, validation_alias="MCP_DEVOPS_REQUEST_TIMEOUT")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "DEVOPS_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("organization", "project", "team", "pat", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("release_timeout", "request_timeout")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be greater than zero seconds")
        return value

    @field_validator("fetch_concurrency", "max_work_items")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("MCP_DEVOPS_FETCH_CONCURRENCY and MCP_DEVOPS_MAX_WORK_ITEMS must be >= 1")
        return value

    @property
    def is_configured(self) -> bool:
        """Whether enough is set to talk to Azure DevOps."""

        return bool(self.pat and self.organization and self.project)

    @property
    def org_base_url(self) -> str:
        return f"{AZURE_DEVOPS_HOST}/{self.organization}"

    @property
    def base_url(self) -> str:
        return f"{self.org_base_url}/{self.project}"


@lru_cache(maxsize=1)
def get_settings() -> DevOpsSettings:
    """Return cached settings instance."""

    return DevOpsSettings()


__all__ = ["AZURE_DEVOPS_HOST", "DevOpsSettings", "get_settings"]
