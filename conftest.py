# conftest.py
import asyncio
from typing import AsyncGenerator, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.main import app
from resolver.domain.entities.context import ExecutionContext, StrategyConfig
from resolver.domain.entities.result import StrategyOutcome
from resolver.routers.download import get_strategy_chain
from resolver.services.strategy_chain import StrategyChain


# ---- Fakes ------------------------------------------------------------------

class CountingStrategy:
    """Stub strategy returning a fixed outcome and recording every call."""

    def __init__(self, name: str, outcome: Optional[StrategyOutcome] = None, delay: float = 0.0, exc: Exception = None):
        self.name = name
        self.outcome = outcome or StrategyOutcome.not_found()
        self.delay = delay
        self.exc = exc
        self.calls: List[tuple] = []
        self.cancelled = False

    async def attempt(self, reference: str, identifier: str, context: ExecutionContext) -> StrategyOutcome:
        self.calls.append((reference, identifier))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.exc is not None:
            raise self.exc
        return self.outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def make_strategy() -> Callable[..., CountingStrategy]:
    return CountingStrategy


class RecordingTransport:
    """
    Builds an httpx.MockTransport from a url-substring -> handler map and keeps
    every request it saw.
    """

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for fragment, handler in self.routes.items():
            if fragment in str(request.url):
                return handler(request)
        return httpx.Response(404, text="not found")


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def make_config() -> Callable[..., StrategyConfig]:
    def _make(transport: RecordingTransport, endpoint: str = "https://www.instagram.com/p/{shortcode}/", **kwargs):
        kwargs.setdefault("headers", {"User-Agent": "Mozilla/5.0 test", "Accept": "*/*"})
        kwargs.setdefault("media_domains", ("cdninstagram.com", "fbcdn.net"))
        return StrategyConfig(endpoint=endpoint, transport=transport.transport, **kwargs)

    return _make


# ---- HTTP client -------------------------------------------------------------

@pytest.fixture
def override_chain():
    """Install a StrategyChain built from the given strategies for the router."""

    def _install(*strategies, timeout_seconds: float = 1.0) -> StrategyChain:
        chain = StrategyChain(list(strategies), timeout_seconds=timeout_seconds, grace_seconds=0.1)
        app.dependency_overrides[get_strategy_chain] = lambda: chain
        return chain

    yield _install
    app.dependency_overrides.pop(get_strategy_chain, None)


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
