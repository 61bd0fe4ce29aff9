"""Source coordinates extracted from release and push events."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class SourceInfo:
    """Repository sources to fetch for an event.

    Attributes
    ----------
    owner
        Repository owner login.
    repo
        Repository name.
    commit_sha
        Commit (or commitish) whose zipball is downloaded.
    event_type
        Originating event type, e.g. ``release`` or ``push``.
    ref
        Git ref (branch or tag) named by the event.
    actor
        User who triggered the event; empty when unknown.
    metadata
        Event-specific string metadata.

    """

    owner: str
    repo: str
    commit_sha: str
    event_type: str
    ref: str = ""
    actor: str = ""
    metadata: dict[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseInfo:
    """Release coordinates extracted from a ``release`` event."""

    owner: str
    repo: str
    commit_sha: str
    tag_name: str = ""
    release_name: str = ""

    def to_source_info(self) -> SourceInfo:
        """Return the equivalent :class:`SourceInfo`."""
        return SourceInfo(
            owner=self.owner,
            repo=self.repo,
            commit_sha=self.commit_sha,
            event_type="release",
            ref=self.tag_name,
            metadata={
                "tag_name": self.tag_name,
                "release_name": self.release_name,
            },
        )
