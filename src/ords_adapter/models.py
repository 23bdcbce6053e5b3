"""Typed models for discovery documents, tokens and operation calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .executors import OperationExecutor


HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


class CatalogLink(BaseModel):
    model_config = ConfigDict(extra="allow")

    rel: Optional[str] = None
    href: Optional[str] = None
    mediaType: Optional[str] = None


class CatalogItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    links: List[CatalogLink] = Field(default_factory=list)


class Catalog(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: List[CatalogItem] = Field(default_factory=list)


class OperationMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    summary: Optional[str] = None
    description: Optional[str] = None
    operationId: Optional[str] = None


PathTable = Dict[str, Dict[str, OperationMetadata]]


class ItemSpecification(BaseModel):
    """OpenAPI document published for a single catalog item.

    Only ``paths`` is traversed. Keys of a path item that are not HTTP
    methods (``parameters``, ``servers``, ...) are dropped before validation.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathTable = Field(default_factory=dict)

    @field_validator("paths", mode="before")
    @classmethod
    def _keep_http_methods(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        filtered: Dict[str, Any] = {}
        for path, path_item in value.items():
            if isinstance(path_item, dict):
                path_item = {
                    method: operation
                    for method, operation in path_item.items()
                    if str(method).lower() in HTTP_METHODS
                }
            filtered[path] = path_item
        return filtered


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    expires_in: int
    token_type: Optional[str] = None


class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    headers: Optional[Dict[str, str]] = Field(None, description="Extra request headers")
    body: Any = Field(None, description="JSON request body for POST, PUT and PATCH")
    params: Optional[Dict[str, Union[str, int, float]]] = Field(
        None, description="Values substituted into {placeholders} of the path"
    )
    query: Optional[Dict[str, Union[str, int, float, bool, None]]] = Field(
        None, description="Query string parameters"
    )


@dataclass(frozen=True)
class OperationResult:
    status_code: int
    body: str


@dataclass(frozen=True)
class CachedCredential:
    token: str
    expires_at: float

    def is_valid(self, now: float, margin_seconds: float) -> bool:
        return now < self.expires_at - margin_seconds


@dataclass(frozen=True)
class RegisteredOperation:
    operation_id: str
    method: str
    path: str
    description: str
    executor: "OperationExecutor"

    async def __call__(self, tool_input: ToolInput) -> OperationResult:
        return await self.executor.execute(tool_input)
