from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import httpx


@dataclass(frozen=True)
class ExecutionContext:
    """Deadline for a single strategy attempt, measured on the event-loop clock."""

    timeout_seconds: float
    started_at: float

    @classmethod
    def start(cls, timeout_seconds: float) -> "ExecutionContext":
        return cls(timeout_seconds=timeout_seconds, started_at=asyncio.get_running_loop().time())

    def remaining(self) -> float:
        elapsed = asyncio.get_running_loop().time() - self.started_at
        return max(0.0, self.timeout_seconds - elapsed)


@dataclass(frozen=True)
class StrategyConfig:
    """
    Immutable per-strategy configuration handed over at construction.

    `transport` lets tests plug an httpx.MockTransport in place of the network.
    """

    endpoint: str
    headers: Mapping[str, str] = field(default_factory=dict)
    media_domains: Tuple[str, ...] = ()
    transport: Optional[httpx.AsyncBaseTransport] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "media_domains", tuple(self.media_domains))


def browser_headers(user_agent: str, accept_language: str, accept: str = "*/*") -> dict:
    return {
        "User-Agent": user_agent,
        "Accept": accept,
        "Accept-Language": accept_language,
    }
