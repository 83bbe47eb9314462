import logging
from typing import Callable, Dict, List, Optional

import httpx

from app.core.config import Settings
from resolver.adapters.outbound.strategies import (
    DirectFetchStrategy,
    RelayStrategy,
    ScrapeStrategy,
    StructuredQueryStrategy,
)
from resolver.domain.entities.context import StrategyConfig, browser_headers
from resolver.domain.errors import ChainConfigurationError
from resolver.ports.outbound.strategy_port import ExtractionStrategyPort
from resolver.services.strategy_chain import StrategyChain

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[Settings, Optional[httpx.AsyncBaseTransport]], Optional[ExtractionStrategyPort]]


def _domains(settings: Settings):
    return tuple(d.lower() for d in settings.media_domains if d)


def _scrape(settings: Settings, transport=None) -> ScrapeStrategy:
    headers = browser_headers(
        settings.user_agent,
        settings.accept_language,
        accept="text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    )
    return ScrapeStrategy(
        StrategyConfig(
            endpoint=f"{settings.target_base_url}/reel/{{shortcode}}/",
            headers=headers,
            media_domains=_domains(settings),
            transport=transport,
        )
    )


def _structured_query(settings: Settings, transport=None) -> StructuredQueryStrategy:
    headers = browser_headers(settings.user_agent, settings.accept_language)
    headers.update({"X-IG-App-ID": settings.ig_app_id, "X-Requested-With": "XMLHttpRequest"})
    return StructuredQueryStrategy(
        StrategyConfig(
            endpoint=f"{settings.target_base_url}/graphql/query/",
            headers=headers,
            media_domains=_domains(settings),
            transport=transport,
        ),
        query_hash=settings.graphql_query_hash,
    )


def _direct_fetch(settings: Settings, transport=None) -> DirectFetchStrategy:
    headers = browser_headers(settings.user_agent, settings.accept_language)
    headers["X-IG-App-ID"] = settings.ig_app_id
    return DirectFetchStrategy(
        StrategyConfig(
            endpoint=f"{settings.target_base_url}/p/{{shortcode}}/?__a=1&__d=dis",
            headers=headers,
            media_domains=_domains(settings),
            transport=transport,
        )
    )


def _relay(settings: Settings, transport=None) -> Optional[RelayStrategy]:
    if not settings.relay_api_key:
        return None
    headers = browser_headers(settings.user_agent, settings.accept_language, accept="application/json")
    headers.update({"X-RapidAPI-Key": settings.relay_api_key, "X-RapidAPI-Host": settings.relay_host})
    return RelayStrategy(
        StrategyConfig(
            endpoint=settings.relay_endpoint,
            headers=headers,
            media_domains=_domains(settings),
            transport=transport,
        )
    )


class StrategyRegistry:
    """Maps configured strategy names to factories and builds the chain in that order."""

    def __init__(self, factories: Optional[Dict[str, StrategyFactory]] = None):
        self._factories: Dict[str, StrategyFactory] = factories or {
            "structured_query": _structured_query,
            "scrape": _scrape,
            "direct_fetch": _direct_fetch,
            "relay": _relay,
        }

    def names(self) -> List[str]:
        return list(self._factories)

    def build(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[ExtractionStrategyPort]:
        strategies: List[ExtractionStrategyPort] = []
        for name in settings.strategy_order:
            factory = self._factories.get(name)
            if factory is None:
                raise ChainConfigurationError(f"unknown strategy {name!r}; known: {', '.join(self._factories)}")
            strategy = factory(settings, transport)
            if strategy is None:
                logger.info("strategy %s disabled (missing configuration)", name)
                continue
            strategies.append(strategy)
        return strategies

    def build_chain(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> StrategyChain:
        return StrategyChain(
            self.build(settings, transport),
            timeout_seconds=settings.strategy_timeout_seconds,
            grace_seconds=settings.strategy_grace_seconds,
        )
