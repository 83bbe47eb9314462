import asyncio
import logging
from typing import List, Sequence

from resolver.domain.entities.context import ExecutionContext
from resolver.domain.entities.result import (
    Attempt,
    Exhausted,
    OutcomeKind,
    ResolutionResult,
    Resolved,
    StrategyOutcome,
)
from resolver.domain.errors import ChainConfigurationError
from resolver.domain.reference import parse_reference
from resolver.ports.outbound.strategy_port import ExtractionStrategyPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_GRACE_SECONDS = 1.0


class StrategyChain:
    """
    Runs extraction strategies one after another, in declared order, until one
    finds the asset.

      - the reference is parsed up front; ParseError escapes before any network call
      - every attempt gets its own deadline and is isolated from the others
      - the first found outcome wins; later strategies are never consulted
      - if nothing is found, every attempt is returned for diagnostics
    """

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategyPort],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ):
        if not strategies:
            raise ChainConfigurationError("strategy chain needs at least one strategy")
        if timeout_seconds <= 0:
            raise ChainConfigurationError("strategy timeout must be positive")
        self._strategies = tuple(strategies)
        self.timeout_seconds = timeout_seconds
        self.grace_seconds = max(0.0, grace_seconds)

    @property
    def strategies(self) -> Sequence[ExtractionStrategyPort]:
        return self._strategies

    async def resolve(self, reference: str) -> ResolutionResult:
        identifier = parse_reference(reference)

        attempts: List[Attempt] = []
        for position, strategy in enumerate(self._strategies, start=1):
            logger.debug("[%s] trying %s (%d/%d)", identifier, strategy.name, position, len(self._strategies))
            outcome = await self._attempt(strategy, reference, identifier)
            attempts.append(Attempt(strategy=strategy.name, position=position, outcome=outcome))

            if outcome.is_found:
                logger.info("[%s] resolved by %s", identifier, strategy.name)
                return Resolved(asset_url=outcome.asset_url, strategy=strategy.name)

            logger.info(
                "[%s] %s gave no result (%s)",
                identifier,
                strategy.name,
                outcome.reason or outcome.kind.value,
            )

        exhausted = Exhausted(attempts=attempts)
        logger.warning("[%s] all strategies exhausted: %s", identifier, "; ".join(exhausted.reasons()))
        return exhausted

    async def _attempt(self, strategy: ExtractionStrategyPort, reference: str, identifier: str) -> StrategyOutcome:
        context = ExecutionContext.start(self.timeout_seconds)
        try:
            # hard bound in case a strategy ignores its own deadline
            outcome = await asyncio.wait_for(
                strategy.attempt(reference, identifier, context),
                self.timeout_seconds + self.grace_seconds,
            )
        except asyncio.TimeoutError:
            return StrategyOutcome.failed("timeout")
        except Exception as e:
            logger.exception("strategy %s raised instead of reporting a failure", strategy.name)
            return StrategyOutcome.failed(f"unexpected error: {e.__class__.__name__}")

        if not isinstance(outcome, StrategyOutcome):
            return StrategyOutcome.failed("unexpected error: invalid outcome")
        if outcome.kind is OutcomeKind.found and not outcome.is_found:
            return StrategyOutcome.not_found()
        return outcome
