from __future__ import annotations

import logging

from ._urls import Wiki, endpoint_from_env
from .client import (
    DEFAULT_RETRY_POLICY,
    TALK_PREFIX,
    RetryPolicy,
    WikiApi,
)
from .errors import (
    ApiError,
    ConnectionFailedError,
    HttpError,
    MissingEndpointError,
    RequestTimeoutError,
    ResponseDecodeError,
    TransientError,
    WikiApiError,
)
from .httpx_transport import HttpxTransport
from .models import PageRecord, Revision, UserRecord, decode_pages, decode_users
from .outcome import Outcome, OutcomeKind
from .ratings import extract_rating
from .reporting import LoggingReporter, Reporter
from .transport import ApiResponse, Transport, UrllibTransport

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ApiError",
    "ApiResponse",
    "ConnectionFailedError",
    "DEFAULT_RETRY_POLICY",
    "HttpError",
    "HttpxTransport",
    "LoggingReporter",
    "MissingEndpointError",
    "Outcome",
    "OutcomeKind",
    "PageRecord",
    "Reporter",
    "RequestTimeoutError",
    "ResponseDecodeError",
    "RetryPolicy",
    "Revision",
    "TALK_PREFIX",
    "Transport",
    "TransientError",
    "UrllibTransport",
    "UserRecord",
    "Wiki",
    "WikiApi",
    "WikiApiError",
    "decode_pages",
    "decode_users",
    "endpoint_from_env",
    "extract_rating",
]
