"""Execution layer for synthesized REST operations."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .auth import TokenManager
from .errors import TransportError
from .models import OperationResult, ToolInput

logger = logging.getLogger(__name__)


BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class OperationExecutor:
    """Runs one (path, method) pair against the remote service."""

    def __init__(
        self,
        path: str,
        method: str,
        base_url: str,
        token_manager: TokenManager,
        timeout_seconds: Optional[float] = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.path = path
        self.method = method.upper()
        self.base_url = base_url
        self.token_manager = token_manager
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def execute(self, tool_input: ToolInput) -> OperationResult:
        headers: Dict[str, str] = dict(tool_input.headers or {})
        url = self.base_url + render_path(self.path, tool_input.params or {})

        content: Optional[str] = None
        if self.method in BODY_METHODS and tool_input.body is not None:
            content = json.dumps(tool_input.body)
            if not any(key.lower() == "content-type" for key in headers):
                headers["Content-Type"] = "application/json"

        query_string = build_query(tool_input.query or {})
        if query_string:
            url = f"{url}?{query_string}"

        token = await self.token_manager.get_token()
        headers = self.token_manager.attach_auth(headers, token)

        logger.debug("%s %s", self.method, url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.request(self.method, url, headers=headers, content=content)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            # ValueError covers headers that cannot be encoded
            raise TransportError(f"{self.method} {url} failed: {exc}") from exc

        return OperationResult(status_code=response.status_code, body=response.text)


def render_path(path: str, params: Mapping[str, Any]) -> str:
    """Substitute ``{key}`` placeholders; unmatched placeholders are kept as-is."""
    rendered = path
    for key, value in params.items():
        rendered = rendered.replace(f"{{{key}}}", _to_str(value), 1)
    return rendered


def build_query(query: Mapping[str, Any]) -> str:
    pairs = [(key, _to_str(value)) for key, value in query.items() if value is not None]
    return str(httpx.QueryParams(pairs))


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
