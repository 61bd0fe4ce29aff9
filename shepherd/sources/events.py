"""Turn release and push payloads into source-processing runs."""

from __future__ import annotations

import typing as typ

from shepherd.context import current_logger
from shepherd.logging import log_info
from shepherd.webhooks import PushEvent, ReleaseEvent, WebhookEventType

from .errors import InvalidEventError
from .models import ReleaseInfo, SourceInfo

if typ.TYPE_CHECKING:
    from shepherd.archive import ExtractionResult

    from .service import SourceCodeService

__all__ = ["EventProcessor", "extract_push_info", "extract_release_info"]

_RELEASED_ACTION = "released"


def extract_release_info(event: ReleaseEvent) -> ReleaseInfo:
    """Return release coordinates from a ``release`` payload.

    The release's ``target_commitish`` is used as the commit to fetch.

    Raises
    ------
    InvalidEventError
        If repository or release information is missing or incomplete.

    """
    if event.repository is None:
        raise InvalidEventError.missing_block("release", "repository")
    if event.release is None:
        raise InvalidEventError.missing_block("release", "release")

    owner = event.repository.owner.login if event.repository.owner else ""
    repo = event.repository.name
    commit_sha = event.release.target_commitish
    if not (owner and repo and commit_sha):
        raise InvalidEventError.missing_fields(owner, repo, commit_sha)

    return ReleaseInfo(
        owner=owner,
        repo=repo,
        commit_sha=commit_sha,
        tag_name=event.release.tag_name,
        release_name=event.release.name or "",
    )


def extract_push_info(event: PushEvent) -> SourceInfo:
    """Return source coordinates from a ``push`` payload.

    Raises
    ------
    InvalidEventError
        If repository information or the head commit is missing.

    """
    if event.repository is None:
        raise InvalidEventError.missing_block("push", "repository")

    owner = event.repository.owner.login if event.repository.owner else ""
    repo = event.repository.name
    commit_sha = event.head_commit.id if event.head_commit else ""
    if not (owner and repo and commit_sha):
        raise InvalidEventError.missing_fields(owner, repo, commit_sha)

    metadata: dict[str, str] = {}
    if event.before is not None:
        metadata["before"] = event.before
    if event.created is not None:
        metadata["created"] = str(event.created).lower()
    if event.deleted is not None:
        metadata["deleted"] = str(event.deleted).lower()

    return SourceInfo(
        owner=owner,
        repo=repo,
        commit_sha=commit_sha,
        event_type=str(WebhookEventType.PUSH),
        ref=event.ref,
        actor=(event.pusher.name or "") if event.pusher else "",
        metadata=metadata,
    )


class EventProcessor:
    """Process release and push events through :class:`SourceCodeService`.

    The extracted tree is removed once processing finishes, whatever the
    outcome.
    """

    def __init__(self, sources: SourceCodeService) -> None:
        """Initialise the processor with the source service."""
        self._sources = sources

    async def process_event(
        self,
        event_type: WebhookEventType,
        payload: ReleaseEvent | PushEvent,
    ) -> None:
        """Process *payload* according to *event_type*.

        Raises
        ------
        InvalidEventError
            If the payload lacks the coordinates needed to fetch sources.
        SourceProcessingError
            If the sources cannot be downloaded or extracted.

        """
        match (event_type, payload):
            case (WebhookEventType.RELEASE, ReleaseEvent()):
                await self._process_release(payload)
            case (WebhookEventType.PUSH, PushEvent()):
                await self._process_push(payload)
            case _:
                log_info(
                    current_logger(),
                    "Ignoring unsupported event type event_type=%s",
                    event_type,
                )

    async def _process_release(self, event: ReleaseEvent) -> None:
        logger = current_logger()
        if event.action != _RELEASED_ACTION:
            log_info(
                logger,
                "Ignoring release event with non-released action action=%s",
                event.action,
            )
            return

        info = extract_release_info(event)
        log_info(
            logger,
            "Processing release event owner=%s repo=%s tag=%s commit_sha=%s",
            info.owner,
            info.repo,
            info.tag_name,
            info.commit_sha,
        )
        with await self._sources.process_release(info) as result:
            self._log_processed("release", info.owner, info.repo, result)

    async def _process_push(self, event: PushEvent) -> None:
        info = extract_push_info(event)
        log_info(
            current_logger(),
            "Processing push event owner=%s repo=%s ref=%s commit_sha=%s",
            info.owner,
            info.repo,
            info.ref,
            info.commit_sha,
        )
        with await self._sources.process_source(info) as result:
            self._log_processed("push", info.owner, info.repo, result)

    @staticmethod
    def _log_processed(
        kind: str, owner: str, repo: str, result: ExtractionResult
    ) -> None:
        log_info(
            current_logger(),
            "Successfully processed %s owner=%s repo=%s temp_dir=%s "
            "file_count=%d total_size=%d",
            kind,
            owner,
            repo,
            result.root,
            len(result.files),
            result.size,
        )
