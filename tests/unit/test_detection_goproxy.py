"""Unit tests for Go module proxy resolution.

Run with:
    pytest tests/unit/test_detection_goproxy.py
"""

from __future__ import annotations

import httpx
import pytest

from shepherd.detection import GoModuleInfo, GoModuleResolutionError, GoProxyClient
from shepherd.detection.goproxy import (
    escape_module_path,
    parse_repo_url,
    resolve_go_version,
)

PROXY = "https://proxy.test"


def _client(handler: httpx.MockTransport) -> GoProxyClient:
    return GoProxyClient(PROXY, http_client=httpx.AsyncClient(transport=handler))


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("github.com/google/uuid", "github.com/google/uuid"),
        ("github.com/Azure/azure-sdk", "github.com/!azure/azure-sdk"),
        ("github.com/BurntSushi/toml", "github.com/!burnt!sushi/toml"),
    ],
)
def test_escape_module_path(path: str, expected: str) -> None:
    """Upper-case letters are escaped with an exclamation mark."""
    assert escape_module_path(path) == expected


class TestParseRepoUrl:
    """Tests for parse_repo_url."""

    @pytest.mark.parametrize(
        "url",
        ["https://github.com/google/uuid", "https://github.com/google/uuid.git"],
    )
    def test_github_urls(self, url: str) -> None:
        """Owner and repository are split out and .git dropped."""
        assert parse_repo_url(url) == GoModuleInfo(
            repo_url=url, host="github.com", owner="google", repo="uuid"
        )

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/google",
            "https://github.com/google/uuid/tree/main",
            "not a url",
        ],
    )
    def test_invalid_urls(self, url: str) -> None:
        """Anything but /owner/repo is rejected."""
        with pytest.raises(GoModuleResolutionError, match="Invalid repository URL"):
            parse_repo_url(url)


def test_resolve_go_version_keeps_tags() -> None:
    """Tagged versions are downloaded by the same name."""
    assert resolve_go_version("v1.6.0") == "v1.6.0"


class TestGoProxyClient:
    """Tests for GoProxyClient.resolve_module_repo."""

    def test_info_url_escapes_path_and_version(self) -> None:
        """Both the module path and the version use case encoding."""
        client = GoProxyClient(f"{PROXY}/")
        assert client.info_url("github.com/Azure/sdk", "v1.0.0-RC1") == (
            f"{PROXY}/github.com/!azure/sdk/@v/v1.0.0-!r!c1.info"
        )

    @pytest.mark.asyncio
    async def test_resolves_origin(self) -> None:
        """The Origin URL is parsed into repository coordinates."""
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(
                200,
                json={
                    "Version": "v1.6.0",
                    "Time": "2024-01-23T18:54:04Z",
                    "Origin": {
                        "VCS": "git",
                        "URL": "https://github.com/google/uuid",
                        "Ref": "refs/tags/v1.6.0",
                        "Hash": "0f11ee6918f41a04c201eceeadf612a377bc7fbc",
                    },
                },
            )

        info = await _client(httpx.MockTransport(handler)).resolve_module_repo(
            "github.com/google/uuid", "v1.6.0"
        )

        assert urls == [f"{PROXY}/github.com/google/uuid/@v/v1.6.0.info"]
        assert (info.host, info.owner, info.repo) == ("github.com", "google", "uuid")

    @pytest.mark.asyncio
    async def test_missing_origin(self) -> None:
        """Versions without an Origin block cannot be resolved."""
        client = _client(
            httpx.MockTransport(
                lambda _r: httpx.Response(200, json={"Version": "v1.0.0"})
            )
        )
        with pytest.raises(GoModuleResolutionError, match="No origin URL"):
            await client.resolve_module_repo("example.com/mod", "v1.0.0")

    @pytest.mark.asyncio
    async def test_unexpected_status(self) -> None:
        """Non-200 answers are errors."""
        client = _client(httpx.MockTransport(lambda _r: httpx.Response(410)))
        with pytest.raises(GoModuleResolutionError, match="Unexpected status code 410"):
            await client.resolve_module_repo("example.com/mod", "v1.0.0")

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        """Undecodable bodies are errors."""
        client = _client(
            httpx.MockTransport(lambda _r: httpx.Response(200, content=b"<html>"))
        )
        with pytest.raises(GoModuleResolutionError, match="Failed to parse"):
            await client.resolve_module_repo("example.com/mod", "v1.0.0")

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        """Connection failures are wrapped."""

        def handler(request: httpx.Request) -> httpx.Response:
            message = "no route to host"
            raise httpx.ConnectError(message, request=request)

        client = _client(httpx.MockTransport(handler))
        with pytest.raises(GoModuleResolutionError, match="no route to host"):
            await client.resolve_module_repo("example.com/mod", "v1.0.0")
