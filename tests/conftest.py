"""Shared test fixtures for openrpc-schema-utils.

Provides reusable fixtures for loading document fixtures, creating isolated
config environments, and serving documents over a mocked HTTP transport.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from openrpc_schema_utils.models import SchemaUtilsConfig


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore document (uses internal $refs)."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def extended_raw() -> dict[str, Any]:
    """Load the raw document that declares an x-extensions entry."""
    with open(FIXTURES_DIR / "extended.json") as f:
        return json.load(f)


@pytest.fixture
def minimal_document() -> dict[str, Any]:
    """The smallest valid OpenRPC document, without any $ref."""
    return {
        "openrpc": "1.2.6",
        "info": {"title": "t", "version": "1"},
        "methods": [],
    }


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_CACHE_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears all OPENRPC_UTILS_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setattr("openrpc_schema_utils.config._is_xdg_platform", lambda: True)

    for var in [
        "OPENRPC_UTILS_DEFAULT_DOCUMENT",
        "OPENRPC_UTILS_HTTP_TIMEOUT",
        "OPENRPC_UTILS_CACHE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config() -> SchemaUtilsConfig:
    """Default configuration (caching disabled)."""
    return SchemaUtilsConfig()


# ---------------------------------------------------------------------------
# HTTP fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def serve(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[httpx.Request]]:
    """Serve canned bodies for URLs fetched by the loader.

    Call the fixture with a ``{url: body}`` mapping; bodies that are not
    strings are JSON-encoded.  Unknown URLs answer 404.  Returns the list
    of requests the loader made, for assertions on network traffic.
    """

    def _serve(
        routes: dict[str, Any],
        content_type: str = "application/json",
    ) -> list[httpx.Request]:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            url = str(request.url)
            if url not in routes:
                return httpx.Response(404, text="not found")
            body = routes[url]
            text = body if isinstance(body, str) else json.dumps(body)
            return httpx.Response(200, text=text, headers={"content-type": content_type})

        def client_factory(config: SchemaUtilsConfig) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=httpx.MockTransport(handler))

        monkeypatch.setattr("openrpc_schema_utils.loader._http_client", client_factory)
        return requests

    return _serve
