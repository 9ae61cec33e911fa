"""Environment-driven settings for the exam portal."""

from __future__ import annotations

import secrets

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from exam_portal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT


class PortalSettings(BaseSettings):
    """Values read from ``EXAM_PORTAL_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(env_prefix="EXAM_PORTAL_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///exam_portal.db"
    admin_username: str = ""
    admin_password: str = ""
    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
