from __future__ import annotations

import logging

import pytest

from wikiapi import MissingEndpointError, Wiki, WikiApi, endpoint_from_env
from wikiapi._urls import index_url_for


def test_wiki_builds_api_urls() -> None:
    assert Wiki().api_url == "https://en.wikipedia.org/w/api.php"
    assert Wiki("es", "wiktionary").api_url == "https://es.wiktionary.org/w/api.php"
    assert Wiki(None, "wikidata").api_url == "https://www.wikidata.org/w/api.php"


def test_index_url_for_api_endpoints() -> None:
    assert index_url_for("https://en.wikipedia.org/w/api.php") == (
        "https://en.wikipedia.org/w/index.php"
    )
    assert index_url_for("http://localhost:8080/wiki") == (
        "http://localhost:8080/wiki/index.php"
    )


def test_client_requires_an_endpoint() -> None:
    with pytest.raises(MissingEndpointError):
        WikiApi()
    with pytest.raises(ValueError):
        WikiApi(endpoint_resolver=lambda: None)
    with pytest.raises(ValueError):
        WikiApi("   ")


def test_client_uses_endpoint_resolver() -> None:
    wiki = WikiApi(endpoint_resolver=Wiki("fr").resolver())

    assert wiki.api_url == "https://fr.wikipedia.org/w/api.php"


def test_explicit_endpoint_wins_over_resolver() -> None:
    def resolver() -> str:
        raise AssertionError("resolver should not be called")

    wiki = WikiApi("https://en.wikipedia.org/w/api.php/", endpoint_resolver=resolver)

    assert wiki.api_url == "https://en.wikipedia.org/w/api.php"


def test_endpoint_from_env() -> None:
    resolver = endpoint_from_env(environ={"WIKIAPI_URL": " https://x.org/w/api.php "})
    empty = endpoint_from_env(environ={"WIKIAPI_URL": ""})
    custom = endpoint_from_env(
        "DASHBOARD_WIKI",
        environ={"DASHBOARD_WIKI": "https://y.org/api.php"},
    )

    assert resolver() == "https://x.org/w/api.php"
    assert empty() is None
    assert custom() == "https://y.org/api.php"


def test_default_transport_uses_client_settings() -> None:
    wiki = WikiApi(
        "https://en.wikipedia.org/w/api.php",
        user_agent="dashboard/1.0",
        timeout=3.5,
    )

    transport = wiki.transport_factory(wiki.api_url)

    assert transport.api_url == "https://en.wikipedia.org/w/api.php"
    assert transport.user_agent == "dashboard/1.0"
    assert transport.timeout == 3.5


def test_wiki_api_verbose_enables_debug_logging() -> None:
    package_logger = logging.getLogger("wikiapi")
    original_level = package_logger.level
    original_handlers = list(package_logger.handlers)
    original_propagate = package_logger.propagate

    try:
        package_logger.handlers = []
        package_logger.setLevel(logging.NOTSET)
        package_logger.propagate = True

        WikiApi("https://en.wikipedia.org/w/api.php", verbose=True)

        assert package_logger.level == logging.DEBUG
        assert any(
            not isinstance(handler, logging.NullHandler)
            for handler in package_logger.handlers
        )
    finally:
        package_logger.handlers = original_handlers
        package_logger.setLevel(original_level)
        package_logger.propagate = original_propagate
