"""Operation registry synthesized from the discovery catalog."""

from __future__ import annotations

import logging
import re
from typing import Dict, ItemsView, List, Optional, Set

import httpx

from .auth import TokenManager
from .errors import AdapterError
from .executors import OperationExecutor
from .models import OperationMetadata, RegisteredOperation
from .openapi import CatalogLoader, merge_paths


logger = logging.getLogger(__name__)

_EDGE_SLASHES = re.compile(r"^/|/$")


class OperationRegistry:
    def __init__(
        self,
        loader: CatalogLoader,
        token_manager: TokenManager,
        base_url: str,
        schema: str,
        operation_allowlist: Optional[Set[str]] = None,
        timeout_seconds: Optional[float] = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.loader = loader
        self.token_manager = token_manager
        self.base_url = base_url
        self.schema = schema
        self.operation_allowlist = operation_allowlist or set()
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self._operations: Dict[str, RegisteredOperation] = {}

    async def synthesize(self) -> None:
        """Rebuild the registry from the catalog.

        Discovery failures are logged, not raised: the registry is left empty
        or partially populated and the process keeps running.
        """
        logger.info("Starting to initialize tools...")
        self._operations = {}
        try:
            specs = await self.loader.fetch_item_specs()
            paths = merge_paths(specs)

            for path, methods in paths.items():
                for method, metadata in methods.items():
                    self._register(path, method, metadata)
        except AdapterError as exc:
            logger.error("Failed to initialize tools: %s", exc)
            return
        except Exception:
            logger.exception("Failed to initialize tools")
            return

        logger.info("Registered tools: %s", ", ".join(self.operation_ids()))

    def get(self, operation_id: str) -> Optional[RegisteredOperation]:
        return self._operations.get(operation_id)

    def items(self) -> ItemsView[str, RegisteredOperation]:
        return self._operations.items()

    def operation_ids(self) -> List[str]:
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, operation_id: object) -> bool:
        return operation_id in self._operations

    def _register(self, path: str, method: str, metadata: OperationMetadata) -> None:
        operation_id = build_operation_id(method, self.schema, path)
        if self.operation_allowlist and operation_id not in self.operation_allowlist:
            return
        if operation_id in self._operations:
            logger.warning("Operation id %s registered twice; keeping %s %s", operation_id, method, path)

        executor = OperationExecutor(
            path=path,
            method=method,
            base_url=self.base_url,
            token_manager=self.token_manager,
            timeout_seconds=self.timeout_seconds,
            transport=self.transport,
        )
        self._operations[operation_id] = RegisteredOperation(
            operation_id=operation_id,
            method=method,
            path=path,
            description=build_description(method, path, metadata),
            executor=executor,
        )


def build_operation_id(method: str, schema: str, path: str) -> str:
    slug = _EDGE_SLASHES.sub("", path).replace("/", "_").replace("{", "").replace("}", "")
    return f"{method}_{schema}_{slug}"


def build_description(method: str, path: str, metadata: OperationMetadata) -> str:
    return (
        metadata.description
        or metadata.summary
        or f"Performs a {method.upper()} request to {path}"
    )
