"""Shared fixtures: fake clock and an in-process ORDS double."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from ords_adapter.auth import TokenManager


CATALOG_URL = "https://ords.example.com/ords/hr/open-api-catalog/"
BASE_URL = "https://api.example.com"
TOKEN_URL = "https://ords.example.com/ords/hr/oauth/token"


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeOrds:
    """Routes requests by URL and records every request it sees."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.token_counter = 0
        self.token_expires_in = 600

    def json_route(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status_code, json=payload)

    def route(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = handler

    def token_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url) == TOKEN_URL]

    def api_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(BASE_URL)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == TOKEN_URL and url not in self.routes:
            self.token_counter += 1
            return httpx.Response(
                200,
                json={
                    "access_token": f"token-{self.token_counter}",
                    "token_type": "bearer",
                    "expires_in": self.token_expires_in,
                },
            )
        if url in self.routes:
            return self.routes[url](request)
        if url.startswith(BASE_URL):
            return httpx.Response(
                200,
                json={"method": request.method, "url": url},
            )
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def catalog_payload(*names: str) -> Dict[str, Any]:
    return {
        "items": [
            {
                "name": name,
                "links": [
                    {
                        "rel": "canonical",
                        "href": f"{CATALOG_URL}{name}/",
                        "mediaType": "application/openapi+json",
                    }
                ],
            }
            for name in names
        ]
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ords() -> FakeOrds:
    return FakeOrds()


@pytest.fixture
def token_manager(ords: FakeOrds, clock: FakeClock) -> TokenManager:
    return TokenManager(
        token_url=TOKEN_URL,
        client_id="client",
        client_secret="secret",
        clock=clock,
        transport=ords.transport,
    )


def request_json(request: httpx.Request) -> Optional[Any]:
    if not request.content:
        return None
    return json.loads(request.content)
