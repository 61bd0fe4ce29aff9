"""Errors raised while processing release and push sources."""

from __future__ import annotations

from shepherd.errors import ShepherdError


class SourceProcessingError(ShepherdError):
    """Raised when sources for a repository cannot be fetched or extracted.

    Attributes
    ----------
    owner
        Repository owner.
    repo
        Repository name.
    ref
        Commit or ref that was requested.

    """

    def __init__(self, message: str, *, owner: str, repo: str, ref: str) -> None:
        """Initialise with a description and the repository coordinate."""
        self.owner = owner
        self.repo = repo
        self.ref = ref
        super().__init__(message)

    @classmethod
    def download_failed(
        cls, owner: str, repo: str, ref: str, detail: str
    ) -> SourceProcessingError:
        """Return an error for a failed zipball download."""
        return cls(
            f"Failed to download zipball for {owner}/{repo}@{ref}: {detail}",
            owner=owner,
            repo=repo,
            ref=ref,
        )

    @classmethod
    def extraction_failed(
        cls, owner: str, repo: str, ref: str, detail: str
    ) -> SourceProcessingError:
        """Return an error for a zipball that could not be extracted."""
        return cls(
            f"Failed to extract zip for {owner}/{repo}: {detail}",
            owner=owner,
            repo=repo,
            ref=ref,
        )


class InvalidEventError(ShepherdError):
    """Raised when an event payload lacks the fields needed to act on it."""

    @classmethod
    def missing_block(cls, event_type: str, block: str) -> InvalidEventError:
        """Return an error for a payload without a required object."""
        return cls(f"Missing {block} information in {event_type} event")

    @classmethod
    def missing_fields(
        cls, owner: str, repo: str, commit_sha: str
    ) -> InvalidEventError:
        """Return an error for a payload with empty coordinate fields."""
        return cls(
            "Missing required fields: "
            f"owner={owner}, repo={repo}, commit_sha={commit_sha}"
        )
