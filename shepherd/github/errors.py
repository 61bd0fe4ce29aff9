"""GitHub REST client errors."""

from __future__ import annotations

from shepherd.errors import ShepherdError


class GitHubAPIError(ShepherdError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, url: str) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(
            f"GitHub REST HTTP {status_code} for {url}", status_code=status_code
        )

    @classmethod
    def transport_error(cls, url: str, detail: str) -> GitHubAPIError:
        """Return an error for a request that never produced a response."""
        return cls(f"GitHub request to {url} failed: {detail}")


class GitHubConfigError(ShepherdError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("SHEPHERD_GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")

    @classmethod
    def missing_webhook_secret(cls) -> GitHubConfigError:
        """Return an error when no webhook secret is configured."""
        return cls("SHEPHERD_GITHUB_WEBHOOK_SECRET is required to verify webhooks")
