"""GitHub REST client used for zipball downloads and PR comments."""

from __future__ import annotations

from .client import GitHubClient, GitHubRESTClient, GitHubRESTConfig
from .errors import GitHubAPIError, GitHubConfigError

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
    "GitHubConfigError",
    "GitHubRESTClient",
    "GitHubRESTConfig",
]
