"""Download and extract repository sources for an event."""

from __future__ import annotations

import typing as typ

from shepherd.archive import DEFAULT_LIMITS, ArchiveError, extract_archive_async
from shepherd.context import current_logger
from shepherd.github import GitHubAPIError
from shepherd.logging import log_error, log_info

from .errors import SourceProcessingError

if typ.TYPE_CHECKING:
    from shepherd.archive import ExtractionLimits, ExtractionResult
    from shepherd.github import GitHubClient

    from .models import ReleaseInfo, SourceInfo

__all__ = ["SourceCodeService"]


class SourceCodeService:
    """Fetch a repository zipball and extract it into a private directory.

    Parameters
    ----------
    github_client
        Client used to download zipballs.
    limits
        Extraction ceilings applied to every zipball.

    """

    def __init__(
        self,
        github_client: GitHubClient,
        *,
        limits: ExtractionLimits = DEFAULT_LIMITS,
    ) -> None:
        """Initialise the service with its GitHub client and limits."""
        self._github = github_client
        self._limits = limits

    async def process_release(self, info: ReleaseInfo) -> ExtractionResult:
        """Process a release by delegating to :meth:`process_source`."""
        return await self.process_source(info.to_source_info())

    async def process_source(self, info: SourceInfo) -> ExtractionResult:
        """Download and extract the sources described by *info*.

        Returns
        -------
        ExtractionResult
            Extracted tree; the caller owns and must remove it.

        Raises
        ------
        SourceProcessingError
            If the download or the extraction fails.

        """
        logger = current_logger()
        log_info(
            logger,
            "Processing source code event owner=%s repo=%s commit_sha=%s "
            "event_type=%s ref=%s actor=%s",
            info.owner,
            info.repo,
            info.commit_sha,
            info.event_type,
            info.ref,
            info.actor,
        )

        try:
            data = await self._github.download_zipball(
                info.owner, info.repo, info.commit_sha
            )
        except GitHubAPIError as exc:
            log_error(
                logger,
                "Failed to download zipball owner=%s repo=%s commit_sha=%s: %s",
                info.owner,
                info.repo,
                info.commit_sha,
                exc,
            )
            raise SourceProcessingError.download_failed(
                info.owner, info.repo, info.commit_sha, str(exc)
            ) from exc

        log_info(
            logger,
            "Downloaded zipball size_bytes=%d owner=%s repo=%s",
            len(data),
            info.owner,
            info.repo,
        )

        try:
            result = await extract_archive_async(data, limits=self._limits)
        except ArchiveError as exc:
            log_error(
                logger,
                "Failed to extract zip owner=%s repo=%s: %s",
                info.owner,
                info.repo,
                exc,
            )
            raise SourceProcessingError.extraction_failed(
                info.owner, info.repo, info.commit_sha, str(exc)
            ) from exc

        log_info(
            logger,
            "Extracted zipball temp_dir=%s file_count=%d total_size_bytes=%d "
            "owner=%s repo=%s",
            result.root,
            len(result.files),
            result.size,
            info.owner,
            info.repo,
        )
        return result
