from .context import ExecutionContext, StrategyConfig
from .result import Attempt, Exhausted, OutcomeKind, ResolutionResult, Resolved, StrategyOutcome

__all__ = [
    "ExecutionContext",
    "StrategyConfig",
    "Attempt",
    "Exhausted",
    "OutcomeKind",
    "ResolutionResult",
    "Resolved",
    "StrategyOutcome",
]
