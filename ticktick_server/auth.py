"""Credential resolution and session management.

A session starts with no credential. The first API call resolves one:
either the pre-issued OAuth token is adopted as-is, or a username/password
sign-on is performed once. The resulting bearer token is cached for the
life of the process and is never refreshed automatically.
"""

from __future__ import annotations

import json
import logging
import uuid
from enum import Enum

import httpx

from ticktick_server.config import TickTickConfig
from ticktick_server.errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

SIGNON_URL = "https://ticktick.com/api/v2/user/signon"


class AuthMode(str, Enum):
    """How the session obtains its bearer token."""
    TOKEN = "token"
    PASSWORD = "password"


def resolve_auth_mode(config: TickTickConfig) -> AuthMode:
    """Pick the authentication mode for a config. No I/O.

    A configured access token always wins over username/password.
    """
    if config.has_token:
        return AuthMode.TOKEN
    if config.has_password:
        return AuthMode.PASSWORD
    raise ConfigurationError(
        "Either TICKTICK_ACCESS_TOKEN or TICKTICK_USERNAME/TICKTICK_PASSWORD "
        "must be set. Set them in your .env file or environment."
    )


class TickTickSession:
    """Owns the bearer credential for one shared httpx client.

    Usage:
        session = TickTickSession(config, http)
        await session.ensure_authenticated()   # before every API call
    """

    def __init__(
        self,
        config: TickTickConfig,
        http: httpx.AsyncClient,
        signon_url: str = SIGNON_URL,
    ) -> None:
        self._config = config
        self._http = http
        self._signon_url = signon_url
        self._token: str | None = None
        self._device_id = uuid.uuid4().hex[:24]

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def token(self) -> str | None:
        return self._token

    async def ensure_authenticated(self) -> None:
        """Resolve and cache a credential if none is cached yet."""
        if self._token is not None:
            return
        mode = resolve_auth_mode(self._config)
        if mode is AuthMode.TOKEN:
            self._adopt(self._config.access_token)
            logger.info("Using configured TickTick access token")
        else:
            token = await self.sign_on()
            self._adopt(token)
            logger.info("Signed in to TickTick as %s", self._config.username)

    async def sign_on(self) -> str:
        """Exchange username/password for a session token."""
        device_info = {
            "platform": "web",
            "os": "macOS 10.15",
            "device": "Chrome 120",
            "name": "",
            "version": 6430,
            "id": self._device_id,
            "channel": "website",
            "campaign": "",
        }
        try:
            response = await self._http.post(
                self._signon_url,
                params={"wc": "true", "remember": "true"},
                json={
                    "username": self._config.username,
                    "password": self._config.password,
                },
                headers={
                    "User-Agent": "Mozilla/5.0",
                    "X-Device": json.dumps(device_info),
                },
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(None, None, str(e) or type(e).__name__) from e

        token = None
        if response.status_code < 400:
            try:
                data = response.json()
            except ValueError:
                data = None
            if isinstance(data, dict):
                token = data.get("token")

        if not token:
            detail = response.text or "No token received"
            raise AuthenticationError(response.status_code, response.reason_phrase, detail)
        return token

    def _adopt(self, token: str) -> None:
        # Last writer wins if two first calls race; both tokens are valid.
        self._token = token
        self._http.headers["Authorization"] = f"Bearer {token}"
