from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Callable, Mapping
from urllib.parse import urlparse

EndpointResolver = Callable[[], "str | None"]

DEFAULT_ENDPOINT_ENV_VAR = "WIKIAPI_URL"


def resolve_api_url(api_url: str) -> str:
    normalized = api_url.strip().rstrip("/")
    if not normalized:
        raise ValueError("api_url must not be empty")
    return normalized


def resolve_user_agent(user_agent: str | None, *, default_user_agent: str) -> str:
    return user_agent or default_user_agent


def index_url_for(api_url: str) -> str:
    parsed = urlparse(api_url)
    path = parsed.path
    if path.endswith("api.php"):
        path = path[: -len("api.php")] + "index.php"
    else:
        path = path.rstrip("/") + "/index.php"
    return f"{parsed.scheme}://{parsed.netloc}{path}"


@dataclass(frozen=True, slots=True)
class Wiki:
    """A Wikimedia project wiki, e.g. ``Wiki("en", "wikipedia")``."""

    language: str | None = "en"
    project: str = "wikipedia"

    @property
    def host(self) -> str:
        if self.project == "wikidata" or not self.language:
            return f"www.{self.project}.org"
        return f"{self.language}.{self.project}.org"

    @property
    def api_url(self) -> str:
        return f"https://{self.host}/w/api.php"

    def resolver(self) -> EndpointResolver:
        return lambda: self.api_url


def endpoint_from_env(
    var: str = DEFAULT_ENDPOINT_ENV_VAR,
    *,
    environ: Mapping[str, str] | None = None,
) -> EndpointResolver:
    """Build a resolver that reads the endpoint from an environment variable."""
    source = os.environ if environ is None else environ

    def _resolve() -> str | None:
        value = source.get(var, "").strip()
        return value or None

    return _resolve
