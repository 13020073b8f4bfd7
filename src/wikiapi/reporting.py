from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def report(
        self,
        message: str,
        *,
        level: int,
        error: BaseException | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None: ...


class LoggingReporter:
    """Record failures on a standard library logger.

    The structured context is attached to the record as ``wikiapi_context`` so
    handlers can forward it to an error tracker.
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def report(
        self,
        message: str,
        *,
        level: int,
        error: BaseException | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self._logger.log(
            level,
            message,
            exc_info=error,
            extra={"wikiapi_context": dict(context or {})},
        )


def safe_report(
    reporter: Reporter,
    message: str,
    *,
    level: int,
    error: BaseException | None = None,
    context: Mapping[str, Any] | None = None,
) -> None:
    try:
        reporter.report(message, level=level, error=error, context=context)
    except Exception as exc:
        logger.error(
            "Reporter failed reporter_type=%s error=%s",
            type(reporter).__name__,
            exc,
        )
