"""Logging helpers with redaction of tool arguments."""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Dict, Mapping

REDACTED = "***REDACTED***"

_SENSITIVE_KEYS = re.compile(r"(token|secret|api[_-]?key|password|credential)", re.IGNORECASE)
_SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key"}
)


def configure_logging(level: str) -> None:
    # stdout carries the MCP stdio protocol
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def redact_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        name: REDACTED
        if name.lower() in _SENSITIVE_HEADERS or _SENSITIVE_KEYS.search(name)
        else value
        for name, value in headers.items()
    }


def redact_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Mask secrets in tool arguments before they are logged.

    The ``headers`` argument is matched by header name; ``body``, ``params``
    and ``query`` are walked recursively and matched by key.
    """
    redacted: Dict[str, Any] = {}
    for key, value in payload.items():
        if key == "headers" and isinstance(value, Mapping):
            redacted[key] = redact_headers(value)
        elif _SENSITIVE_KEYS.search(str(key)):
            redacted[key] = REDACTED
        else:
            redacted[key] = _redact_value(value)
    return redacted


def _redact_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: REDACTED if _SENSITIVE_KEYS.search(str(key)) else _redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact_value(item) for item in value]
    return value
