"""GitHub REST client used by downstream webhook handlers."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
import urllib.parse

import httpx

from .errors import GitHubAPIError, GitHubConfigError

_DEFAULT_API_URL = "https://api.github.com"
_HTTP_ERROR_STATUS_THRESHOLD = 400


class GitHubClient(typ.Protocol):
    """Interface for the GitHub operations Shepherd performs."""

    async def download_zipball(self, owner: str, repo: str, ref: str) -> bytes:
        """Return the source zipball of *owner*/*repo* at *ref*."""
        ...

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        """Post *body* as a comment on issue or pull request *number*."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRESTConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 60.0
    user_agent: str = "shepherd/0.1"

    @classmethod
    def from_env(cls) -> GitHubRESTConfig:
        """Build configuration from ``SHEPHERD_GITHUB_TOKEN``.

        ``SHEPHERD_GITHUB_API_URL`` optionally overrides the API base URL,
        for GitHub Enterprise installations.
        """
        token = os.environ.get("SHEPHERD_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        api_url = os.environ.get("SHEPHERD_GITHUB_API_URL", "").strip()
        return cls(token=token, api_url=api_url or _DEFAULT_API_URL)


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


class GitHubRESTClient:
    """httpx implementation of :class:`GitHubClient`."""

    def __init__(
        self,
        config: GitHubRESTConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._base_url = config.api_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def download_zipball(self, owner: str, repo: str, ref: str) -> bytes:
        """Download the zipball for *ref*, following GitHub's redirect.

        Raises
        ------
        GitHubAPIError
            If the request fails or GitHub answers with an error status.

        """
        url = (
            f"{self._base_url}/repos/{_quote(owner)}/{_quote(repo)}"
            f"/zipball/{_quote(ref)}"
        )
        response = await self._request("GET", url, follow_redirects=True)
        return response.content

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        """Post *body* as an issue comment on *owner*/*repo* #*number*.

        Raises
        ------
        GitHubAPIError
            If the request fails or GitHub answers with an error status.

        """
        url = (
            f"{self._base_url}/repos/{_quote(owner)}/{_quote(repo)}"
            f"/issues/{number}/comments"
        )
        await self._request("POST", url, json={"body": body})

    async def _request(
        self, method: str, url: str, **kwargs: typ.Any
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(url, str(exc)) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, url)
        return response
