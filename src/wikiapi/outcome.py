from __future__ import annotations

from dataclasses import dataclass
import enum

from .transport import ApiResponse


class OutcomeKind(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    API_ERROR = "api_error"
    TRANSIENT_FAILURE = "transient_failure"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of one dispatched action.

    Unclassified exceptions are never wrapped in an ``Outcome``; they propagate
    out of ``WikiApi.dispatch`` unchanged.
    """

    kind: OutcomeKind
    response: ApiResponse | None = None
    error: Exception | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def degraded(self) -> bool:
        return self.kind is OutcomeKind.TRANSIENT_FAILURE

    @property
    def value(self) -> ApiResponse | None:
        return self.response if self.kind is OutcomeKind.OK else None
