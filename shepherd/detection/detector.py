"""Detect package-update pull requests and annotate them.

For a newly opened pull request the detector asks a
:class:`~shepherd.detection.protocol.PackageClassifier` whether the change
is a dependency update.  Positive verdicts are posted back as a comment.
For Go modules the before and after sources of every updated module are
then fetched and extracted; that step is best effort and its failures are
only logged.
"""

from __future__ import annotations

import typing as typ

from shepherd.archive import DEFAULT_LIMITS, extract_archive_async
from shepherd.context import current_logger
from shepherd.errors import ShepherdError
from shepherd.logging import log_debug, log_error, log_info
from shepherd.webhooks import WebhookEventType, decode_payload

from .comment import format_comment
from .errors import GoModuleResolutionError
from .goproxy import GITHUB_HOST, resolve_go_version
from .models import PRInfo

if typ.TYPE_CHECKING:
    from shepherd.archive import ExtractionLimits, ExtractionResult
    from shepherd.github import GitHubClient
    from shepherd.webhooks import PullRequestEvent, WebhookEvent

    from .goproxy import GoProxyClient
    from .models import PackageUpdate, PackageUpdateDetection
    from .protocol import PackageClassifier

__all__ = ["MAX_BODY_LENGTH", "PackageDetector", "pr_info_from_event", "truncate_text"]

MAX_BODY_LENGTH = 5000
_TRUNCATION_MARKER = "...(truncated)"
_GO_LANGUAGE = "go"


def truncate_text(text: str, max_len: int) -> str:
    """Cut *text* to *max_len* characters, marking the cut.

    Examples
    --------
    >>> truncate_text("abcdef", 3)
    'abc...(truncated)'
    >>> truncate_text("abc", 3)
    'abc'

    """
    if len(text) <= max_len:
        return text
    return text[:max_len] + _TRUNCATION_MARKER


def pr_info_from_event(event: PullRequestEvent) -> PRInfo:
    """Return the pull request coordinates carried by a payload."""
    repository = event.repository
    pull_request = event.pull_request
    return PRInfo(
        owner=repository.owner.login if repository and repository.owner else "",
        repo=repository.name if repository else "",
        number=pull_request.number if pull_request else 0,
        title=pull_request.title if pull_request else "",
        body=(pull_request.body or "") if pull_request else "",
    )


class PackageDetector:
    """Classify newly opened pull requests and act on package updates.

    Parameters
    ----------
    classifier
        Backend deciding whether a pull request updates packages.
    github_client
        Client used to comment and to download module sources.
    go_proxy
        Client resolving Go module versions to repositories.
    limits
        Extraction ceilings for downloaded module sources.

    """

    def __init__(
        self,
        classifier: PackageClassifier,
        github_client: GitHubClient,
        go_proxy: GoProxyClient,
        *,
        limits: ExtractionLimits = DEFAULT_LIMITS,
    ) -> None:
        """Initialise the detector with its collaborators."""
        self._classifier = classifier
        self._github = github_client
        self._go_proxy = go_proxy
        self._limits = limits

    async def detect_package_update(self, event: WebhookEvent) -> None:
        """Process a ``pull_request``/``opened`` event.

        Raises
        ------
        WebhookPayloadError
            If the raw payload is not a pull request payload.
        ClassifierError
            If classification fails.
        GitHubAPIError
            If the comment cannot be posted.

        """
        logger = current_logger()
        payload = decode_payload(WebhookEventType.PULL_REQUEST, event.raw_payload)
        pr_info = pr_info_from_event(payload)
        log_info(
            logger,
            "Analyzing PR for package updates owner=%s repo=%s number=%d",
            pr_info.owner,
            pr_info.repo,
            pr_info.number,
        )

        detection = await self.detect_from_pr_info(pr_info)
        log_info(
            logger,
            "Package update detection completed is_package_update=%s "
            "language=%s package_count=%d",
            detection.is_package_update,
            detection.language,
            len(detection.packages),
        )
        if not detection.is_package_update:
            return

        await self._post_comment(detection, pr_info)
        await self.extract_package_version_sources(detection)

    async def detect_from_pr_info(self, pr_info: PRInfo) -> PackageUpdateDetection:
        """Classify *pr_info* with its body truncated to ``MAX_BODY_LENGTH``."""
        body = truncate_text(pr_info.body, MAX_BODY_LENGTH)
        log_debug(
            current_logger(),
            "Calling classifier for package detection body_length=%d",
            len(body),
        )
        return await self._classifier.classify(pr_info.title, body)

    async def _post_comment(
        self, detection: PackageUpdateDetection, pr_info: PRInfo
    ) -> None:
        logger = current_logger()
        log_info(
            logger,
            "Posting detection result to PR owner=%s repo=%s number=%d",
            pr_info.owner,
            pr_info.repo,
            pr_info.number,
        )
        await self._github.create_comment(
            pr_info.owner, pr_info.repo, pr_info.number, format_comment(detection)
        )
        log_info(logger, "Successfully posted comment to PR")

    async def extract_go_package_source(
        self, module_path: str, version: str
    ) -> ExtractionResult:
        """Download and extract the source of a Go module version.

        Returns
        -------
        ExtractionResult
            Extracted tree; the caller owns and must remove it.

        Raises
        ------
        GoModuleResolutionError
            If the module cannot be resolved to a GitHub repository.
        GitHubAPIError
            If the zipball download fails.
        ArchiveError
            If the zipball cannot be extracted.

        """
        logger = current_logger()
        module = await self._go_proxy.resolve_module_repo(module_path, version)
        log_debug(
            logger,
            "Resolved Go module to repository package=%s version=%s host=%s "
            "owner=%s repo=%s",
            module_path,
            version,
            module.host,
            module.owner,
            module.repo,
        )
        if module.host != GITHUB_HOST:
            raise GoModuleResolutionError.unsupported_host(module.host, module_path)

        ref = resolve_go_version(version)
        data = await self._github.download_zipball(module.owner, module.repo, ref)
        log_debug(
            logger,
            "Downloaded zipball from GitHub owner=%s repo=%s ref=%s size=%d",
            module.owner,
            module.repo,
            ref,
            len(data),
        )

        result = await extract_archive_async(data, limits=self._limits)
        log_info(
            logger,
            "Extracted Go package source package=%s version=%s dir=%s",
            module_path,
            version,
            result.root,
        )
        return result

    async def extract_package_version_sources(
        self, detection: PackageUpdateDetection
    ) -> None:
        """Extract before and after sources for each updated Go module.

        Failures are logged per package and never raised.
        """
        logger = current_logger()
        if not detection.is_package_update:
            log_debug(logger, "Not a package update, skipping source extraction")
            return

        if detection.language.lower() != _GO_LANGUAGE:
            log_info(
                logger,
                "Unsupported language for source extraction, skipping language=%s",
                detection.language,
            )
            return

        total = len(detection.packages)
        log_info(
            logger,
            "Starting Go package source extraction package_count=%d",
            total,
        )
        for index, package in enumerate(detection.packages, start=1):
            log_info(
                logger,
                "Processing package index=%d total=%d package=%s "
                "from_version=%s to_version=%s",
                index,
                total,
                package.name,
                package.from_version,
                package.to_version,
            )
            await self._extract_package_pair(package)

        log_info(logger, "Completed Go package source extraction")

    async def _extract_package_pair(self, package: PackageUpdate) -> None:
        logger = current_logger()
        try:
            before = await self.extract_go_package_source(
                package.name, package.from_version
            )
        except ShepherdError as exc:
            log_error(
                logger,
                "Failed to extract source for from_version package=%s version=%s: %s",
                package.name,
                package.from_version,
                exc,
            )
            return

        with before:
            try:
                after = await self.extract_go_package_source(
                    package.name, package.to_version
                )
            except ShepherdError as exc:
                log_error(
                    logger,
                    "Failed to extract source for to_version package=%s "
                    "version=%s: %s",
                    package.name,
                    package.to_version,
                    exc,
                )
                return

            with after:
                log_info(
                    logger,
                    "Successfully extracted package sources package=%s "
                    "from_version=%s from_dir=%s to_version=%s to_dir=%s",
                    package.name,
                    package.from_version,
                    before.root,
                    package.to_version,
                    after.root,
                )
