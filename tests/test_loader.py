"""Tests for openrpc_schema_utils.loader."""

from __future__ import annotations

import asyncio
import json
import textwrap
import threading
from pathlib import Path
from typing import Any

import httpx
import pytest

from openrpc_schema_utils.cache import DocumentCache
from openrpc_schema_utils.exceptions import DocumentLoadError
from openrpc_schema_utils.loader import (
    _parse_content,
    acquire_document,
    classify_reference,
    default_reference,
    fetch_url,
    is_json,
    is_url,
    read_file,
    reference_base_uri,
)
from openrpc_schema_utils.models import CacheConfig, ReferenceKind, SchemaUtilsConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassifyReference:
    """Test the pure reference classifier."""

    def test_mapping_is_document(self) -> None:
        assert classify_reference({"openrpc": "1.2.6"}) is ReferenceKind.DOCUMENT

    def test_non_string_scalar_is_document(self) -> None:
        assert classify_reference(42) is ReferenceKind.DOCUMENT

    def test_json_text(self) -> None:
        assert classify_reference('{"openrpc": "1.2.6"}') is ReferenceKind.JSON_TEXT

    def test_https_url(self) -> None:
        assert classify_reference("https://example.com/openrpc.json") is ReferenceKind.URL

    def test_http_url(self) -> None:
        assert classify_reference("http://localhost:8545/openrpc.json") is ReferenceKind.URL

    def test_relative_path(self) -> None:
        assert classify_reference("./openrpc.json") is ReferenceKind.PATH

    def test_bare_domain_is_a_path(self) -> None:
        assert classify_reference("example.com/openrpc.json") is ReferenceKind.PATH

    def test_json_takes_precedence_over_path(self) -> None:
        # A string that is valid JSON is never treated as a file name
        assert classify_reference("[]") is ReferenceKind.JSON_TEXT


class TestPredicates:
    @pytest.mark.parametrize("text", ['{"a": 1}', "[1, 2]", '"quoted"', "3"])
    def test_is_json_true(self, text: str) -> None:
        assert is_json(text) is True

    @pytest.mark.parametrize("text", ["openrpc.json", "{not json", ""])
    def test_is_json_false(self, text: str) -> None:
        assert is_json(text) is False

    def test_is_url(self) -> None:
        assert is_url("https://example.com")
        assert not is_url("ftp://example.com/openrpc.json")
        assert not is_url("/tmp/openrpc.json")


class TestDefaultReference:
    def test_uses_cwd_at_call_time(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert default_reference(SchemaUtilsConfig()) == str(tmp_path / "openrpc.json")

    def test_uses_configured_name(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = SchemaUtilsConfig(default_document="service.yaml")
        assert default_reference(config) == str(tmp_path / "service.yaml")


class TestReferenceBaseUri:
    def test_url_is_its_own_base(self) -> None:
        url = "https://example.com/api/openrpc.json"
        assert reference_base_uri(url) == url

    def test_path_resolves_to_file_uri(self, tmp_path: Path) -> None:
        path = tmp_path / "openrpc.json"
        assert reference_base_uri(str(path)) == path.resolve().as_uri()

    def test_in_memory_uses_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert reference_base_uri({}) == tmp_path.resolve().as_uri() + "/"


# ---------------------------------------------------------------------------
# acquire_document dispatch
# ---------------------------------------------------------------------------


class TestAcquireDocument:
    """All four reference shapes yield the same document."""

    def test_object_is_returned_as_is(self, petstore_raw: dict[str, Any]) -> None:
        result = asyncio.run(acquire_document(petstore_raw))
        assert result is petstore_raw

    def test_json_text(self, petstore_raw: dict[str, Any]) -> None:
        result = asyncio.run(acquire_document(json.dumps(petstore_raw)))
        assert result == petstore_raw

    def test_file_path(self, petstore_raw: dict[str, Any]) -> None:
        result = asyncio.run(acquire_document(str(FIXTURES_DIR / "petstore.json")))
        assert result == petstore_raw

    def test_url(self, petstore_raw: dict[str, Any], serve, config: SchemaUtilsConfig) -> None:
        serve({"https://example.com/openrpc.json": petstore_raw})
        result = asyncio.run(
            acquire_document("https://example.com/openrpc.json", config=config)
        )
        assert result == petstore_raw

    def test_json_text_may_hold_any_value(self) -> None:
        assert asyncio.run(acquire_document("[1, 2]")) == [1, 2]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentLoadError, match="not found"):
            asyncio.run(acquire_document(str(tmp_path / "missing.json")))


# ---------------------------------------------------------------------------
# read_file
# ---------------------------------------------------------------------------


class TestReadFile:
    """Test loading documents from local files."""

    def test_load_json_file(self) -> None:
        result = asyncio.run(read_file(FIXTURES_DIR / "petstore.json"))
        assert result["info"]["title"] == "Petstore"

    def test_load_yaml_file(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            openrpc: "1.2.6"
            info:
              title: YAML Test
              version: "1.0.0"
            methods:
              - name: ping
                params: []
        """)
        yaml_file = tmp_path / "openrpc.yaml"
        yaml_file.write_text(content, encoding="utf-8")
        result = asyncio.run(read_file(str(yaml_file)))
        assert result["methods"][0]["name"] == "ping"

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: Path) -> None:
        doc = tmp_path / "openrpc.txt"
        doc.write_text("openrpc: '1.2.6'\n", encoding="utf-8")
        assert asyncio.run(read_file(doc)) == {"openrpc": "1.2.6"}

    def test_file_not_found_raises(self) -> None:
        with pytest.raises(DocumentLoadError, match="not found"):
            asyncio.run(read_file("/nonexistent/path/to/openrpc.json"))

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentLoadError, match="not found"):
            asyncio.run(read_file(tmp_path))

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="empty"):
            asyncio.run(read_file(str(empty)))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="Invalid JSON"):
            asyncio.run(read_file(str(bad)))

    def test_non_object_json_raises(self, tmp_path: Path) -> None:
        array_file = tmp_path / "array.json"
        array_file.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="must be a JSON/YAML object"):
            asyncio.run(read_file(str(array_file)))


# ---------------------------------------------------------------------------
# fetch_url
# ---------------------------------------------------------------------------


class TestFetchUrl:
    """Test loading documents from URLs."""

    def test_loads_json_from_url(self, serve, config: SchemaUtilsConfig) -> None:
        doc = {"openrpc": "1.2.6", "info": {"title": "Remote", "version": "1.0"}}
        serve({"https://example.com/openrpc.json": doc})
        result = asyncio.run(fetch_url("https://example.com/openrpc.json", config=config))
        assert result["info"]["title"] == "Remote"

    def test_loads_yaml_from_url(self, serve, config: SchemaUtilsConfig) -> None:
        body = "openrpc: '1.2.6'\ninfo:\n  title: YAML Remote\n  version: '1'\n"
        serve({"https://example.com/openrpc.yaml": body}, content_type="application/yaml")
        result = asyncio.run(fetch_url("https://example.com/openrpc.yaml", config=config))
        assert result["info"]["title"] == "YAML Remote"

    def test_http_error_raises(self, serve, config: SchemaUtilsConfig) -> None:
        serve({})
        with pytest.raises(DocumentLoadError, match="HTTP 404"):
            asyncio.run(fetch_url("https://example.com/missing.json", config=config))

    def test_connection_error_raises(
        self, monkeypatch: pytest.MonkeyPatch, config: SchemaUtilsConfig
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        monkeypatch.setattr(
            "openrpc_schema_utils.loader._http_client",
            lambda cfg: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        with pytest.raises(DocumentLoadError, match="Failed to fetch"):
            asyncio.run(fetch_url("https://example.com/openrpc.json", config=config))

    def test_invalid_json_response_raises(self, serve, config: SchemaUtilsConfig) -> None:
        serve({"https://example.com/openrpc.json": "{broken"})
        with pytest.raises(DocumentLoadError, match="Invalid JSON"):
            asyncio.run(fetch_url("https://example.com/openrpc.json", config=config))

    def test_cached_body_skips_network(self, serve, isolated_config: Path) -> None:
        config = SchemaUtilsConfig(cache=CacheConfig(enabled=True, ttl_seconds=60))
        url = "https://example.com/openrpc.json"
        requests = serve({url: {"openrpc": "1.2.6"}})

        first = asyncio.run(fetch_url(url, config=config))
        second = asyncio.run(fetch_url(url, config=config))

        assert first == second == {"openrpc": "1.2.6"}
        assert len(requests) == 1

    def test_cache_access_runs_off_the_event_loop(
        self, serve, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config = SchemaUtilsConfig(cache=CacheConfig(enabled=True))
        url = "https://example.com/openrpc.json"
        serve({url: {"openrpc": "1.2.6"}})
        loop_thread = threading.get_ident()
        threads: list[int] = []
        original_get = DocumentCache.get
        original_set = DocumentCache.set

        def recording_get(self: DocumentCache, key: str):
            threads.append(threading.get_ident())
            return original_get(self, key)

        def recording_set(self: DocumentCache, key: str, content: str, content_type: str = ""):
            threads.append(threading.get_ident())
            original_set(self, key, content, content_type)

        monkeypatch.setattr(DocumentCache, "get", recording_get)
        monkeypatch.setattr(DocumentCache, "set", recording_set)

        asyncio.run(fetch_url(url, config=config))

        assert len(threads) == 2
        assert loop_thread not in threads

    def test_cache_disabled_fetches_every_time(self, serve, config: SchemaUtilsConfig) -> None:
        url = "https://example.com/openrpc.json"
        requests = serve({url: {"openrpc": "1.2.6"}})

        asyncio.run(fetch_url(url, config=config))
        asyncio.run(fetch_url(url, config=config))

        assert len(requests) == 2

    def test_failed_fetch_is_not_cached(self, serve, isolated_config: Path) -> None:
        config = SchemaUtilsConfig(cache=CacheConfig(enabled=True))
        url = "https://example.com/openrpc.json"
        serve({})
        with pytest.raises(DocumentLoadError):
            asyncio.run(fetch_url(url, config=config))

        requests = serve({url: {"openrpc": "1.2.6"}})
        assert asyncio.run(fetch_url(url, config=config)) == {"openrpc": "1.2.6"}
        assert len(requests) == 1


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    """Test content parsing with format hints."""

    def test_json_without_hint(self) -> None:
        assert _parse_content('{"openrpc": "1.2.6"}') == {"openrpc": "1.2.6"}

    def test_yaml_without_hint(self) -> None:
        assert _parse_content("openrpc: 1.2.6\n") == {"openrpc": "1.2.6"}

    def test_yaml_hint_skips_json(self) -> None:
        assert _parse_content('{"a": 1}', hint="yaml") == {"a": 1}

    def test_empty_yaml_document(self) -> None:
        with pytest.raises(DocumentLoadError, match="empty document"):
            _parse_content("---\n", hint="yaml")

    def test_unparseable_content(self) -> None:
        with pytest.raises(DocumentLoadError, match="Failed to parse") as exc_info:
            _parse_content("{a: [", source="document.txt")
        assert "document.txt" in str(exc_info.value)
        assert "JSON error" in str(exc_info.value)
        assert "YAML error" in str(exc_info.value)
