from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from resolver.domain.entities.context import ExecutionContext, StrategyConfig
from resolver.domain.entities.result import StrategyOutcome

logger = logging.getLogger(__name__)


class MalformedPayload(ValueError):
    pass


class HttpStrategy(ABC):
    """
    Shared execution contract for HTTP-backed strategies.

    Subclasses implement `extract`; this class owns the client lifecycle, the
    deadline and the conversion of faults into failed outcomes.
    """

    name: str = "http"

    def __init__(self, config: StrategyConfig):
        self.config = config

    async def attempt(
        self, reference: str, identifier: str, context: ExecutionContext
    ) -> StrategyOutcome:
        remaining = context.remaining()
        if remaining <= 0:
            return StrategyOutcome.failed("timeout")
        try:
            url = await asyncio.wait_for(self._run(reference, identifier, remaining), remaining)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.debug("%s: timed out after %.1fs", self.name, context.timeout_seconds)
            return StrategyOutcome.failed("timeout")
        except httpx.HTTPStatusError as e:
            logger.debug("%s: upstream answered %s", self.name, e.response.status_code)
            return StrategyOutcome.failed(f"http status {e.response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("%s: network error %r", self.name, e)
            return StrategyOutcome.failed(f"network error: {e.__class__.__name__}")
        except (ValueError, KeyError, TypeError, IndexError, AttributeError, RecursionError) as e:
            logger.debug("%s: could not parse response: %s", self.name, e)
            return StrategyOutcome.failed(f"malformed payload: {e}")

        if not url:
            return StrategyOutcome.not_found()
        return StrategyOutcome.found(url)

    async def _run(self, reference: str, identifier: str, timeout: float) -> Optional[str]:
        # one client per attempt; closed on every exit path, cancellation included
        async with httpx.AsyncClient(
            headers=dict(self.config.headers),
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=self.config.transport,
        ) as client:
            return await self.extract(client, reference, identifier)

    @abstractmethod
    async def extract(
        self, client: httpx.AsyncClient, reference: str, identifier: str
    ) -> Optional[str]:
        """Retrieve and return a candidate asset url, or None when nothing is there."""

    # ---------- Helpers ----------

    async def get(self, client: httpx.AsyncClient, url: str, **kwargs: Any) -> httpx.Response:
        r = await client.get(url, **kwargs)
        r.raise_for_status()
        return r

    @staticmethod
    def decode_json(r: httpx.Response) -> Any:
        try:
            return r.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayload(f"expected JSON from {r.request.url.host}") from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
