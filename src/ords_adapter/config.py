"""Configuration for the ORDS MCP Adapter."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Set

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_parse_none_str="None",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="ords-bns")

    openapi_url: str = Field(default="http://localhost:8080/ords/hr/open-api-catalog/")
    base_url: str = Field(default="http://localhost:8080/ords/hr")
    token_url: str = Field(default="http://localhost:8080/ords/hr/oauth/token")
    client_id: Optional[str] = Field(default=None)
    client_secret: Optional[str] = Field(default=None)
    working_schema: str = Field(default="api")

    adapter_transport: str = Field(default="stdio")
    adapter_host: str = Field(default="0.0.0.0")
    adapter_port: int = Field(default=8000)

    adapter_http_timeout_seconds: Optional[float] = Field(default=30)
    adapter_token_margin_seconds: int = Field(default=300)

    adapter_operation_allowlist: Optional[str] = Field(default=None)
    adapter_catalog_exclude: Optional[str] = Field(default=None)

    adapter_log_level: str = Field(default="INFO")

    def require_credentials(self) -> None:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Client ID or Client Secret not configured")

    def operation_allowlist(self) -> Set[str]:
        return _split_csv(self.adapter_operation_allowlist)

    def catalog_exclude(self) -> Set[str]:
        return _split_csv(self.adapter_catalog_exclude)


def _split_csv(value: Optional[str]) -> Set[str]:
    if not value:
        return set()
    return {item.strip() for item in value.split(",") if item.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
