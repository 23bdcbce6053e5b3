"""OAuth2 client-credentials token management."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Callable, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError

from .errors import AuthError, TransportError
from .models import CachedCredential, TokenResponse


logger = logging.getLogger(__name__)

DEFAULT_MARGIN_SECONDS = 300


class TokenManager:
    """Owns one cached bearer token and refreshes it before it expires.

    A token is reused while ``now < expires_at - margin_seconds``. Callers
    that find the cache stale at the same time share a single in-flight
    refresh instead of each hitting the token endpoint.
    """

    def __init__(
        self,
        token_url: str,
        client_id: Optional[str],
        client_secret: Optional[str],
        margin_seconds: float = DEFAULT_MARGIN_SECONDS,
        timeout_seconds: Optional[float] = 30,
        clock: Callable[[], float] = time.time,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.margin_seconds = margin_seconds
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.transport = transport
        self._credential: Optional[CachedCredential] = None
        self._pending: Optional[asyncio.Future[str]] = None

    @property
    def credential(self) -> Optional[CachedCredential]:
        return self._credential

    async def get_token(self) -> str:
        credential = self._credential
        if credential and credential.is_valid(self.clock(), self.margin_seconds):
            return credential.token

        if self._pending is None:
            pending = asyncio.ensure_future(self._fetch_token())
            pending.add_done_callback(self._clear_pending)
            self._pending = pending
        return await asyncio.shield(self._pending)

    def attach_auth(self, headers: Optional[Mapping[str, str]], token: str) -> Dict[str, str]:
        merged = {
            key: value for key, value in (headers or {}).items() if key.lower() != "authorization"
        }
        merged["Authorization"] = f"Bearer {token}"
        return merged

    def _clear_pending(self, future: "asyncio.Future[str]") -> None:
        if self._pending is future:
            self._pending = None

    async def _fetch_token(self) -> str:
        if not self.client_id or not self.client_secret:
            raise AuthError("Client ID or Client Secret not configured")

        credentials = base64.b64encode(
            f"{self.client_id}:{self.client_secret}".encode("utf-8")
        ).decode("ascii")
        headers = {
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        logger.debug("Requesting access token from %s", self.token_url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(
                    self.token_url, headers=headers, content="grant_type=client_credentials"
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Token request to {self.token_url} failed: {exc}") from exc

        if response.status_code != 200:
            raise AuthError(
                f"Failed to fetch access token: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            token_data = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthError(f"Invalid token response: {exc}", status_code=response.status_code) from exc

        self._credential = CachedCredential(
            token=token_data.access_token,
            expires_at=self.clock() + token_data.expires_in,
        )
        logger.info("Fetched access token (expires in %ss)", token_data.expires_in)
        return token_data.access_token
