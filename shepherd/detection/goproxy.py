"""Resolve Go module versions to their source repositories.

The Go module proxy reports where a version was fetched from in the
``Origin`` block of ``/@v/<version>.info``.  Only repositories hosted on
GitHub can be downloaded afterwards.
"""

from __future__ import annotations

import re
import urllib.parse

import httpx
import msgspec

from shepherd.detection.errors import GoModuleResolutionError
from shepherd.detection.models import GoModuleInfo

__all__ = [
    "DEFAULT_PROXY_URL",
    "GITHUB_HOST",
    "GoProxyClient",
    "escape_module_path",
    "parse_repo_url",
    "resolve_go_version",
]

DEFAULT_PROXY_URL = "https://proxy.golang.org"
GITHUB_HOST = "github.com"

_HTTP_OK = 200
_REPO_PATH_PATTERN = re.compile(r"^/([^/]+)/([^/]+?)(?:\.git)?$")


class _Origin(msgspec.Struct):
    VCS: str = ""
    URL: str = ""
    Ref: str = ""
    Hash: str = ""


class _VersionInfo(msgspec.Struct):
    Version: str = ""
    Time: str = ""
    Origin: _Origin | None = None


def escape_module_path(module_path: str) -> str:
    """Apply the module proxy case encoding (``A`` becomes ``!a``)."""
    return "".join(f"!{ch.lower()}" if ch.isupper() else ch for ch in module_path)


def parse_repo_url(repo_url: str) -> GoModuleInfo:
    """Split a repository URL into host, owner and repository name.

    Examples
    --------
    >>> parse_repo_url("https://github.com/google/uuid.git").repo
    'uuid'

    Raises
    ------
    GoModuleResolutionError
        If the path is not exactly ``/<owner>/<repo>``.

    """
    parsed = urllib.parse.urlsplit(repo_url)
    match = _REPO_PATH_PATTERN.match(parsed.path)
    if match is None:
        raise GoModuleResolutionError.invalid_repo_url(repo_url)
    return GoModuleInfo(
        repo_url=repo_url,
        host=parsed.netloc,
        owner=match.group(1),
        repo=match.group(2),
    )


def resolve_go_version(version: str) -> str:
    """Return the git ref to download for a Go module version.

    Tagged versions map to tags of the same name.
    """
    # TODO: map pseudo-versions (v0.0.0-<date>-<hash>) to their commit hash.
    return version


class GoProxyClient:
    """Client for the Go module proxy ``.info`` endpoint.

    Parameters
    ----------
    base_url
        Proxy base URL.
    http_client
        Optional httpx.AsyncClient for testing. If not provided, the
        instance creates and owns its own client.

    """

    def __init__(
        self,
        base_url: str = DEFAULT_PROXY_URL,
        *,
        timeout_s: float = 20.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the proxy location."""
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def info_url(self, module_path: str, version: str) -> str:
        """Return the ``.info`` URL for *module_path* at *version*."""
        escaped_version = urllib.parse.quote(escape_module_path(version), safe="!")
        return (
            f"{self._base_url}/{escape_module_path(module_path)}"
            f"/@v/{escaped_version}.info"
        )

    async def resolve_module_repo(
        self, module_path: str, version: str
    ) -> GoModuleInfo:
        """Return the repository that hosts *module_path* at *version*.

        Raises
        ------
        GoModuleResolutionError
            If the proxy cannot be queried or reports no usable origin.

        """
        url = self.info_url(module_path, version)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise GoModuleResolutionError.proxy_failed(url, str(exc)) from exc

        if response.status_code != _HTTP_OK:
            raise GoModuleResolutionError.unexpected_status(url, response.status_code)

        try:
            info = msgspec.json.decode(response.content, type=_VersionInfo)
        except msgspec.DecodeError as exc:
            raise GoModuleResolutionError.invalid_response(url, str(exc)) from exc

        if info.Origin is None or not info.Origin.URL:
            raise GoModuleResolutionError.missing_origin(module_path, version)

        return parse_repo_url(info.Origin.URL)
