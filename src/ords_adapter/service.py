"""Per-call tool execution boundary."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

from .errors import AdapterError
from .logging import redact_payload
from .models import OperationResult, ToolInput
from .tool_registry import OperationRegistry

logger = logging.getLogger(__name__)


class AdapterService:
    """
    Runs registered operations on behalf of the MCP host.

    Every call ends in either ``{"status_code", "body"}`` or ``{"error"}``;
    auth and transport failures never escape to the session.
    """

    def __init__(self, registry: OperationRegistry) -> None:
        self.registry = registry

    async def execute_tool(self, operation_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute one registered operation.

        Args:
            operation_id: Registry key of the operation
            payload: Raw tool arguments (headers, body, params, query)

        Returns:
            Status code and body (parsed as JSON when possible), or an error
        """
        operation = self.registry.get(operation_id)
        if operation is None:
            return self._format_error(f"Unknown operation: {operation_id}")

        logger.info("Executing tool=%s payload=%s", operation_id, redact_payload(payload))

        try:
            tool_input = ToolInput.model_validate(payload)
        except ValidationError as exc:
            return self._format_error(f"Invalid input for {operation_id}: {exc}")

        try:
            result = await operation(tool_input)
        except AdapterError as exc:
            logger.error("Error executing tool %s: %s", operation_id, exc)
            return self._format_error(str(exc) or "Unknown error")

        return self._format_result(result)

    def _format_result(self, result: OperationResult) -> Dict[str, Any]:
        try:
            body: Any = json.loads(result.body)
        except ValueError:
            body = result.body
        return {"status_code": result.status_code, "body": body}

    def _format_error(self, message: str) -> Dict[str, Any]:
        return {"error": message}
