"""Configuration for the TickTick server.

Credentials come from the environment (optionally via a .env file).
Only the access token or the username/password pair are used to talk to
the API; the OAuth client settings are for the one-time token helper.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

API_BASE_URL = "https://api.ticktick.com/open/v1"

ENV_VARS = {
    "access_token": "TICKTICK_ACCESS_TOKEN",
    "username": "TICKTICK_USERNAME",
    "password": "TICKTICK_PASSWORD",
    "refresh_token": "TICKTICK_REFRESH_TOKEN",
    "client_id": "TICKTICK_CLIENT_ID",
    "client_secret": "TICKTICK_CLIENT_SECRET",
}


class TickTickConfig(BaseModel):
    """Credentials and endpoints for one server process."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    access_token: Optional[str] = Field(default=None, description="Pre-issued OAuth bearer token")
    username: Optional[str] = Field(default=None, description="TickTick account email")
    password: Optional[str] = Field(default=None, description="TickTick account password")
    refresh_token: Optional[str] = Field(default=None, description="OAuth refresh token (helper only)")
    client_id: Optional[str] = Field(default=None, description="OAuth client ID (helper only)")
    client_secret: Optional[str] = Field(default=None, description="OAuth client secret (helper only)")
    api_base_url: str = Field(default=API_BASE_URL, description="Open API base URL")

    @field_validator(*ENV_VARS.keys())
    @classmethod
    def blank_is_missing(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_env(cls) -> "TickTickConfig":
        """Build a config from TICKTICK_* environment variables."""
        load_dotenv()
        values = {field: os.getenv(var) for field, var in ENV_VARS.items()}
        base_url = os.getenv("TICKTICK_API_BASE_URL")
        if base_url:
            values["api_base_url"] = base_url
        return cls(**values)

    @property
    def has_token(self) -> bool:
        return self.access_token is not None

    @property
    def has_password(self) -> bool:
        return self.username is not None and self.password is not None
