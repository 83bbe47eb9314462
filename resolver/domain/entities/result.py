from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class OutcomeKind(str, Enum):
    found = "found"
    not_found = "not_found"
    failed = "failed"


class StrategyOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    asset_url: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, asset_url: Optional[str]) -> "StrategyOutcome":
        # a blank url is not a result
        if not asset_url or not asset_url.strip():
            return cls.not_found()
        return cls(kind=OutcomeKind.found, asset_url=asset_url.strip())

    @classmethod
    def not_found(cls) -> "StrategyOutcome":
        return cls(kind=OutcomeKind.not_found)

    @classmethod
    def failed(cls, reason: str) -> "StrategyOutcome":
        return cls(kind=OutcomeKind.failed, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.kind is OutcomeKind.found and bool(self.asset_url and self.asset_url.strip())


class Attempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: str
    position: int  # 1-based place in the chain
    outcome: StrategyOutcome


class Resolved(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["resolved"] = "resolved"
    asset_url: str
    strategy: str


class Exhausted(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["exhausted"] = "exhausted"
    attempts: List[Attempt]

    def reasons(self) -> List[str]:
        out = []
        for a in self.attempts:
            detail = a.outcome.reason or a.outcome.kind.value
            out.append(f"{a.strategy}: {detail}")
        return out


ResolutionResult = Union[Resolved, Exhausted]
