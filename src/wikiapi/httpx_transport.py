from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from ._urls import index_url_for, resolve_api_url, resolve_user_agent
from .errors import ConnectionFailedError, HttpError, RequestTimeoutError
from .transport import (
    DEFAULT_ACCEPT,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ApiResponse,
    decode_action_response,
    encode_parameters,
)

if TYPE_CHECKING:
    import httpx
else:
    httpx = None

logger = logging.getLogger(__name__)


class HttpxTransport:
    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        client: "httpx.Client" | None = None,
    ) -> None:
        if httpx is None:
            try:
                import httpx as imported_httpx
            except ImportError as exc:
                raise ImportError(
                    "httpx is not installed. "
                    "Install with: pip install 'wikiapi-py[http]'",
                ) from exc
            globals()["httpx"] = imported_httpx

        self.api_url = resolve_api_url(api_url)
        self.timeout = timeout
        self.user_agent = resolve_user_agent(
            user_agent,
            default_user_agent=DEFAULT_USER_AGENT,
        )
        self._client = client

    def _request(self, method: str, url: str, **kwargs: Any) -> "httpx.Response":
        headers = {"Accept": DEFAULT_ACCEPT, "User-Agent": self.user_agent}
        try:
            if self._client is not None:
                return self._client.request(
                    method,
                    url,
                    headers=headers,
                    timeout=self.timeout,
                    follow_redirects=True,
                    **kwargs,
                )
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                return client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(f"Timed out requesting {url}: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionFailedError(
                f"Network error requesting {url}: {exc}"
            ) from exc

    def action(self, name: str, parameters: Mapping[str, Any]) -> ApiResponse:
        fields = [("action", name), ("format", "json"), *encode_parameters(parameters)]
        logger.debug("Calling action=%s api_url=%s via httpx", name, self.api_url)
        response = self._request("POST", self.api_url, data=dict(fields))
        if response.status_code != 200:
            raise HttpError(response.status_code, self.api_url)
        return decode_action_response(name, response.status_code, response.text)

    def query(self, parameters: Mapping[str, Any]) -> ApiResponse:
        return self.action("query", parameters)

    def get_wikitext(self, title: str) -> ApiResponse:
        response = self._request(
            "GET",
            index_url_for(self.api_url),
            params={"action": "raw", "title": title},
        )
        return ApiResponse(
            status_code=response.status_code,
            data=None,
            body=response.text,
        )
