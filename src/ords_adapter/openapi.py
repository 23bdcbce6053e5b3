"""Catalog discovery: fetches the open-api-catalog and its item specs."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

import httpx
from pydantic import BaseModel, ValidationError

from .errors import CatalogParseError, DiscoveryFetchError
from .models import Catalog, CatalogItem, ItemSpecification, PathTable


logger = logging.getLogger(__name__)


class CatalogLoader:
    def __init__(
        self,
        catalog_url: str,
        exclude: Optional[Set[str]] = None,
        timeout_seconds: Optional[float] = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.catalog_url = catalog_url
        self.exclude = exclude or set()
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def fetch_catalog(self) -> Catalog:
        async with self._client() as client:
            response = await self._get(client, self.catalog_url, "catalog")
        if response.status_code != 200:
            raise DiscoveryFetchError(
                f"Failed to fetch OpenAPI catalog: {response.status_code}",
                status_code=response.status_code,
            )
        return self._parse(Catalog, response, "catalog")

    async def fetch_item_specs(self) -> List[ItemSpecification]:
        catalog = await self.fetch_catalog()
        specs: List[ItemSpecification] = []

        async with self._client() as client:
            for item in catalog.items:
                if item.name in self.exclude:
                    logger.info("Skipping excluded catalog item: %s", item.name)
                    continue
                specs.append(await self._fetch_item_spec(client, item))

        return specs

    def item_url(self, item: CatalogItem) -> str:
        return f"{self.catalog_url}{item.name}/"

    async def _fetch_item_spec(
        self, client: httpx.AsyncClient, item: CatalogItem
    ) -> ItemSpecification:
        url = self.item_url(item)
        logger.info("Fetching OpenAPI spec from: %s", url)
        response = await self._get(client, url, item.name)
        logger.info("Response status code: %s", response.status_code)
        if response.status_code != 200:
            raise DiscoveryFetchError(
                f"Failed to fetch OpenAPI spec for {item.name}: {response.status_code}",
                status_code=response.status_code,
            )
        return self._parse(ItemSpecification, response, item.name)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport)

    async def _get(self, client: httpx.AsyncClient, url: str, label: str) -> httpx.Response:
        try:
            return await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise DiscoveryFetchError(f"Failed to fetch OpenAPI spec for {label}: {exc}") from exc

    def _parse(self, model: type[BaseModel], response: httpx.Response, label: str):  # type: ignore[no-untyped-def]
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise CatalogParseError(f"Malformed OpenAPI document for {label}: {exc}") from exc


def merge_paths(specs: Iterable[ItemSpecification]) -> PathTable:
    """Union every spec's paths; later specs win on a (path, method) collision."""
    merged: PathTable = {}
    for spec in specs:
        for path, methods in spec.paths.items():
            merged[path] = {**merged.get(path, {}), **methods}
    return merged
