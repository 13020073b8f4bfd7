from __future__ import annotations

from dataclasses import dataclass, field
from email.message import Message
import http.client
import json
import logging
from typing import Any, Iterator, Mapping, Protocol
import urllib.error
import urllib.request
from urllib.parse import urlencode

from ._urls import index_url_for, resolve_api_url, resolve_user_agent
from .errors import (
    ApiError,
    ConnectionFailedError,
    HttpError,
    RequestTimeoutError,
    ResponseDecodeError,
)

DEFAULT_USER_AGENT = "wikiapi-py/0.1"
DEFAULT_TIMEOUT = 10.0
DEFAULT_ACCEPT = "application/json;q=0.9,text/plain;q=0.8,*/*;q=0.5"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiResponse:
    status_code: int
    data: Any
    body: Any
    warnings: dict[str, Any] = field(default_factory=dict)


class Transport(Protocol):
    def action(self, name: str, parameters: Mapping[str, Any]) -> ApiResponse: ...

    def query(self, parameters: Mapping[str, Any]) -> ApiResponse: ...

    def get_wikitext(self, title: str) -> ApiResponse: ...


def _flatten(key: str, value: Any) -> Iterator[tuple[str, str]]:
    if value is None or value is False:
        return
    if value is True:
        yield key, ""
    elif isinstance(value, Mapping):
        for child_key, child_value in value.items():
            yield from _flatten(f"{key}[{child_key}]", child_value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        yield key, "|".join(str(item) for item in value)
    else:
        yield key, str(value)


def encode_parameters(parameters: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Encode a query mapping into MediaWiki form fields.

    Lists become ``|``-joined values, ``True`` becomes an empty flag, ``False``
    and ``None`` are dropped, and nested mappings are flattened to
    ``parent[child]`` keys.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in parameters.items():
        pairs.extend(_flatten(str(key), value))
    return pairs


def decode_action_response(action: str, status_code: int, text: str) -> ApiResponse:
    try:
        body = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseDecodeError(
            f"Unable to decode {action} response JSON: {exc}"
        ) from exc

    if not isinstance(body, dict):
        raise ResponseDecodeError(f"Expected a JSON object for {action} response")

    error = body.get("error")
    if error:
        if isinstance(error, Mapping):
            raise ApiError(str(error.get("code", "unknown")), error.get("info"))
        raise ApiError("unknown", str(error))

    warnings = body.get("warnings") or {}
    if warnings:
        logger.warning("API warnings action=%s warnings=%s", action, warnings)

    return ApiResponse(
        status_code=status_code,
        data=body.get(action),
        body=body,
        warnings=dict(warnings),
    )


def _decode_payload(payload: bytes, response_headers: Message) -> str:
    charset = response_headers.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset)
    except LookupError:
        return payload.decode("utf-8", errors="replace")
    except UnicodeDecodeError:
        return payload.decode(charset, errors="replace")


class UrllibTransport:
    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
    ) -> None:
        self.api_url = resolve_api_url(api_url)
        self.timeout = timeout
        self.user_agent = resolve_user_agent(
            user_agent,
            default_user_agent=DEFAULT_USER_AGENT,
        )

    def _open(self, request: urllib.request.Request) -> tuple[int, str]:
        url = request.full_url
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
                status_code = response.getcode()
                logger.debug(
                    "Fetched url=%s status_code=%s bytes=%s",
                    url,
                    status_code,
                    len(body),
                )
                return status_code, _decode_payload(body, response.headers)
        except urllib.error.HTTPError as exc:
            body = exc.read()
            logger.debug(
                "HTTPError from urllib url=%s status_code=%s bytes=%s",
                url,
                exc.code,
                len(body),
            )
            return exc.code, _decode_payload(body, exc.headers)
        except TimeoutError as exc:
            raise RequestTimeoutError(f"Timed out requesting {url}: {exc}") from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise RequestTimeoutError(
                    f"Timed out requesting {url}: {exc.reason}"
                ) from exc
            raise ConnectionFailedError(
                f"Network error requesting {url}: {exc}"
            ) from exc
        except ConnectionError as exc:
            raise ConnectionFailedError(
                f"Connection lost requesting {url}: {exc}"
            ) from exc
        except http.client.HTTPException as exc:
            raise ConnectionFailedError(
                f"Malformed HTTP response from {url}: {exc!r}"
            ) from exc

    def action(self, name: str, parameters: Mapping[str, Any]) -> ApiResponse:
        fields = [("action", name), ("format", "json"), *encode_parameters(parameters)]
        request = urllib.request.Request(
            self.api_url,
            data=urlencode(fields).encode("utf-8"),
            headers={
                "Accept": DEFAULT_ACCEPT,
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self.user_agent,
            },
            method="POST",
        )
        logger.debug("Calling action=%s api_url=%s", name, self.api_url)
        status_code, text = self._open(request)
        if status_code != 200:
            raise HttpError(status_code, self.api_url)
        return decode_action_response(name, status_code, text)

    def query(self, parameters: Mapping[str, Any]) -> ApiResponse:
        return self.action("query", parameters)

    def get_wikitext(self, title: str) -> ApiResponse:
        query = urlencode({"action": "raw", "title": title})
        url = f"{index_url_for(self.api_url)}?{query}"
        request = urllib.request.Request(
            url,
            headers={"Accept": DEFAULT_ACCEPT, "User-Agent": self.user_agent},
        )
        status_code, text = self._open(request)
        return ApiResponse(status_code=status_code, data=None, body=text)
