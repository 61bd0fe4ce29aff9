"""Errors raised by package-update detection and its classifier backends."""

from __future__ import annotations

import typing as typ

from shepherd.errors import ShepherdError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Content preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100


class ClassifierError(ShepherdError):
    """Base exception for pull request classifier failures."""


class ClassifierAPIError(ClassifierError):
    """Raised when the classifier API returns an error or cannot be reached.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if available.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> ClassifierAPIError:
        """Create error for HTTP error responses."""
        return cls(f"Classifier API HTTP error {status_code}", status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: int | None = None) -> ClassifierAPIError:
        """Create error for rate limit (429) responses.

        Parameters
        ----------
        retry_after
            Seconds to wait before retrying, from the Retry-After header.

        """
        msg = "Classifier API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=429)

    @classmethod
    def timeout(cls) -> ClassifierAPIError:
        """Create error for request timeouts."""
        return cls("Classifier API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> ClassifierAPIError:
        """Create error for network failures (DNS, connection, TLS)."""
        return cls(f"Classifier API network error: {detail}")


class ClassifierResponseShapeError(ClassifierError):
    """Raised when a classifier response is missing fields or malformed."""

    @classmethod
    def missing(cls, field: str) -> ClassifierResponseShapeError:
        """Create error for a missing response field."""
        return cls(f"Classifier response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, content: str) -> ClassifierResponseShapeError:
        """Create error for content that is not the expected JSON document.

        Parameters
        ----------
        content
            The content that failed to parse; only a preview is kept.

        """
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            preview = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        else:
            preview = content
        return cls(f"Failed to parse classifier response: {preview}")


class ClassifierConfigError(ClassifierError):
    """Raised when OpenAI classifier configuration is invalid."""

    @classmethod
    def missing_api_key(cls) -> ClassifierConfigError:
        """Create error for a missing API key environment variable."""
        return cls("SHEPHERD_OPENAI_API_KEY environment variable is required")

    @classmethod
    def empty_api_key(cls) -> ClassifierConfigError:
        """Create error for an empty API key."""
        return cls("OpenAI API key must be non-empty")


class ClassifierBackendConfigError(ShepherdError):
    """Raised when classifier backend selection is invalid."""

    @classmethod
    def missing_backend(cls) -> ClassifierBackendConfigError:
        """Create error when SHEPHERD_CLASSIFIER_BACKEND is not set."""
        return cls("SHEPHERD_CLASSIFIER_BACKEND environment variable is required")

    @classmethod
    def invalid_backend(
        cls, name: str, valid_backends: cabc.Iterable[str]
    ) -> ClassifierBackendConfigError:
        """Create error for an unrecognised backend name."""
        valid_backends_str = ", ".join(f"'{b}'" for b in sorted(valid_backends))
        return cls(
            f"Invalid classifier backend '{name}'. "
            f"Valid options are: {valid_backends_str}"
        )

    @classmethod
    def invalid_parameter(
        cls, parameter_name: str, value: str, constraint: str
    ) -> ClassifierBackendConfigError:
        """Create error for an invalid configuration parameter value."""
        return cls(f"Invalid {parameter_name} '{value}'. {constraint}")


class GoModuleResolutionError(ShepherdError):
    """Raised when a Go module version cannot be mapped to a repository."""

    @classmethod
    def proxy_failed(cls, url: str, detail: str) -> GoModuleResolutionError:
        """Create error for a failed Go proxy request."""
        return cls(f"Failed to fetch Go proxy info from {url}: {detail}")

    @classmethod
    def unexpected_status(cls, url: str, status_code: int) -> GoModuleResolutionError:
        """Create error for a non-200 Go proxy response."""
        return cls(f"Unexpected status code {status_code} from Go proxy: {url}")

    @classmethod
    def invalid_response(cls, url: str, detail: str) -> GoModuleResolutionError:
        """Create error for an undecodable Go proxy response."""
        return cls(f"Failed to parse Go proxy response from {url}: {detail}")

    @classmethod
    def missing_origin(cls, module: str, version: str) -> GoModuleResolutionError:
        """Create error for a proxy response without ``Origin.URL``."""
        return cls(f"No origin URL in Go proxy response: {module}@{version}")

    @classmethod
    def invalid_repo_url(cls, url: str) -> GoModuleResolutionError:
        """Create error for an origin URL that is not ``host/owner/repo``."""
        return cls(f"Invalid repository URL format: {url}")

    @classmethod
    def unsupported_host(cls, host: str, module: str) -> GoModuleResolutionError:
        """Create error for a module hosted outside GitHub."""
        return cls(
            f"Unsupported VCS host {host!r} for {module} (only GitHub is supported)"
        )
