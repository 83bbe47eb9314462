from typing import Protocol

from resolver.domain.entities.context import ExecutionContext
from resolver.domain.entities.result import StrategyOutcome


class ExtractionStrategyPort(Protocol):
    """
    One retrieval + extraction technique against a reference.

    Implementations are shared across concurrent resolutions and must not keep
    per-call state. `attempt` reports faults as a failed outcome instead of raising;
    only cancellation propagates.
    """

    name: str

    async def attempt(
        self, reference: str, identifier: str, context: ExecutionContext
    ) -> StrategyOutcome: ...
