from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Callable, Iterable, Mapping

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)
from tenacity.wait import wait_base

from ._urls import EndpointResolver, resolve_api_url, resolve_user_agent
from .errors import ApiError, MissingEndpointError, TransientError
from .models import PageRecord, decode_pages, decode_users
from .outcome import Outcome, OutcomeKind
from .ratings import RatingExtractor, extract_rating
from .reporting import LoggingReporter, Reporter, safe_report
from .transport import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ApiResponse,
    Transport,
    UrllibTransport,
)

TALK_PREFIX = "Talk:"

TransportFactory = Callable[[str], Transport]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How many times a transient failure is attempted, and how long to wait.

    ``attempts`` counts the first try. The default waits zero seconds between
    attempts; a positive ``backoff`` grows by ``backoff_factor`` per retry.
    """

    attempts: int = 3
    backoff: float = 0.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.backoff < 0:
            raise ValueError("backoff must not be negative")

    def wait(self) -> wait_base:
        if self.backoff == 0:
            return wait_none()
        return wait_exponential(
            multiplier=self.backoff,
            exp_base=self.backoff_factor,
        )


DEFAULT_RETRY_POLICY = RetryPolicy()


def _sleep(seconds: float) -> None:
    if seconds:
        time.sleep(seconds)


def _configure_verbose_logging(*, enabled: bool) -> None:
    if not enabled:
        return

    package_logger = logging.getLogger("wikiapi")
    package_logger.setLevel(logging.DEBUG)

    has_non_null_handler = any(
        not isinstance(handler, logging.NullHandler)
        for handler in package_logger.handlers
    )
    if has_non_null_handler:
        return

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )
    package_logger.addHandler(handler)
    package_logger.propagate = False


def _as_title_list(titles: str | Iterable[str]) -> list[str]:
    if isinstance(titles, str):
        return [titles]
    return list(titles)


class WikiApi:
    """Query a MediaWiki wiki's action API.

    Every network call goes through :meth:`dispatch`, which builds a fresh
    transport for the call, retries transient failures and reports the ones it
    gives up on. Higher-level methods return ``None`` (or ``False``/``[]``)
    when no data could be obtained.
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        endpoint_resolver: EndpointResolver | None = None,
        transport_factory: TransportFactory | None = None,
        retry_policy: RetryPolicy | None = None,
        reporter: Reporter | None = None,
        rating_extractor: RatingExtractor | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        verbose: bool = False,
    ) -> None:
        _configure_verbose_logging(enabled=verbose)

        if api_url is None and endpoint_resolver is not None:
            api_url = endpoint_resolver()
        if api_url is None:
            raise MissingEndpointError()

        self.api_url = resolve_api_url(api_url)
        self.user_agent = resolve_user_agent(
            user_agent,
            default_user_agent=DEFAULT_USER_AGENT,
        )
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout
        self.transport_factory = transport_factory or self._default_transport
        self.retry_policy = retry_policy or DEFAULT_RETRY_POLICY
        self.reporter = reporter or LoggingReporter()
        self.rating_extractor = rating_extractor or extract_rating

    def _default_transport(self, api_url: str) -> Transport:
        return UrllibTransport(
            api_url,
            timeout=self.timeout,
            user_agent=self.user_agent,
        )

    ################
    # Entry points #
    ################

    def query(self, parameters: Mapping[str, Any]) -> ApiResponse | None:
        """Run an arbitrary ``action=query`` request."""
        return self.dispatch("query", parameters).value

    def get_page_content(self, title: str) -> str | None:
        response = self.dispatch("get_wikitext", title).value
        if response is None or response.status_code != 200:
            return None
        return response.body

    def get_user_id(self, username: str) -> int | None:
        response = self.query({"list": "users", "ususers": username})
        if response is None:
            return None
        users = decode_users(response.data)
        if not users:
            return None
        return users[0].user_id

    def is_redirect(self, title: str) -> bool:
        data = self.get_page_info([title])
        if data is None:
            return False
        pages = decode_pages(data)
        return bool(pages) and pages[0].redirect

    def get_page_info(self, titles: str | Iterable[str]) -> Any:
        response = self.query({"prop": "info", "titles": _as_title_list(titles)})
        if response is None or response.status_code != 200:
            return None
        return response.data

    def get_article_rating(
        self, titles: str | Iterable[str]
    ) -> list[dict[str, str | None]]:
        """Return ``[{article_title: rating}, ...]`` read from the talk pages.

        Titles are looked up on their ``Talk:`` pages in one batch. The result
        has one entry per page the wiki returned, in the wiki's order, with
        spaces in titles replaced by underscores.
        """
        ordered = sorted(_as_title_list(titles), key=str.lower)
        talk_titles = [TALK_PREFIX + title for title in ordered]

        raw = self.get_raw_page_content(talk_titles)
        if raw is None:
            return []

        # Missing pages come back before existing ones, so match by title.
        ratings: list[dict[str, str | None]] = []
        for talk_page in raw.values():
            title = str(talk_page["title"]).removeprefix(TALK_PREFIX)
            ratings.append(
                {title.replace(" ", "_"): self.parse_article_rating(talk_page)}
            )
        return ratings

    ###################
    # Parsing methods #
    ###################

    def parse_article_rating(self, raw_talk: Mapping[str, Any] | None) -> str | None:
        if raw_talk is None:
            return None
        record = PageRecord.from_payload(str(raw_talk.get("pageid", "")), raw_talk)
        if record.missing:
            return None
        wikitext = record.content
        if wikitext is None:
            return None
        return self.rating_extractor(wikitext)

    #####################
    # Other API methods #
    #####################

    def get_raw_page_content(
        self, titles: str | Iterable[str]
    ) -> Mapping[str, Any] | None:
        """Fetch current wikitext for one or more pages.

        Returns the response's ``pages`` mapping (page id to page record), or
        ``None`` when the request failed or returned no pages section.
        """
        response = self.query(
            {
                "titles": _as_title_list(titles),
                "prop": "revisions",
                "rvprop": "content",
            }
        )
        if response is None:
            return None
        data = response.data
        if not isinstance(data, Mapping):
            return None
        return data.get("pages")

    ############
    # Dispatch #
    ############

    def dispatch(self, action: str, parameters: Mapping[str, Any] | str) -> Outcome:
        """Run one action, retrying transient failures.

        API errors are reported and not retried. Transient errors are retried
        until the retry policy's attempts run out, then reported at warning
        level. Any other exception propagates unchanged.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_policy.attempts),
            wait=self.retry_policy.wait(),
            retry=retry_if_exception_type(TransientError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            sleep=_sleep,
            reraise=True,
        )
        attempts = 0
        try:
            for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    transport = self.transport_factory(self.api_url)
                    response = self._invoke(transport, action, parameters)
        except ApiError as exc:
            self._handle_api_error(exc, action, parameters)
            return Outcome(OutcomeKind.API_ERROR, error=exc, attempts=attempts)
        except TransientError as exc:
            safe_report(
                self.reporter,
                f"Giving up on {action} after {attempts} attempts: {exc}",
                level=logging.WARNING,
                error=exc,
                context=self._error_context(action, parameters),
            )
            return Outcome(
                OutcomeKind.TRANSIENT_FAILURE, error=exc, attempts=attempts
            )

        if action == "get_wikitext" and response.status_code == 404:
            return Outcome(OutcomeKind.NOT_FOUND, response=response, attempts=attempts)
        return Outcome(OutcomeKind.OK, response=response, attempts=attempts)

    def _invoke(
        self,
        transport: Transport,
        action: str,
        parameters: Mapping[str, Any] | str,
    ) -> ApiResponse:
        if action == "get_wikitext":
            return transport.get_wikitext(str(parameters))
        if isinstance(parameters, str):
            raise TypeError(f"{action} expects a parameter mapping")
        if action == "query":
            return transport.query(parameters)
        return transport.action(action, parameters)

    def _error_context(
        self, action: str, parameters: Mapping[str, Any] | str
    ) -> dict[str, Any]:
        query = parameters if isinstance(parameters, str) else dict(parameters)
        return {"action": action, "query": query, "api_url": self.api_url}

    def _handle_api_error(
        self,
        exc: ApiError,
        action: str,
        parameters: Mapping[str, Any] | str,
    ) -> None:
        safe_report(
            self.reporter,
            f"Caught API error on {action}: {exc}",
            level=logging.WARNING,
            error=exc,
            context=self._error_context(action, parameters),
        )
