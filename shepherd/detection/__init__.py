"""Package-update detection for newly opened pull requests.

Public API
----------
PackageDetector
    Classifies pull requests, comments on package updates and extracts the
    before and after sources of updated Go modules.
PackageClassifier
    Protocol implemented by ``OpenAIPackageClassifier`` and
    ``MockPackageClassifier``.
create_classifier
    Build a classifier from ``SHEPHERD_CLASSIFIER_BACKEND``.
"""

from __future__ import annotations

from shepherd.detection.comment import format_comment
from shepherd.detection.config import OpenAIClassifierConfig
from shepherd.detection.detector import (
    MAX_BODY_LENGTH,
    PackageDetector,
    pr_info_from_event,
    truncate_text,
)
from shepherd.detection.errors import (
    ClassifierAPIError,
    ClassifierBackendConfigError,
    ClassifierConfigError,
    ClassifierError,
    ClassifierResponseShapeError,
    GoModuleResolutionError,
)
from shepherd.detection.factory import create_classifier
from shepherd.detection.goproxy import GoProxyClient, parse_repo_url, resolve_go_version
from shepherd.detection.mock import MockPackageClassifier
from shepherd.detection.models import (
    GoModuleInfo,
    PackageUpdate,
    PackageUpdateDetection,
    PRInfo,
)
from shepherd.detection.openai_client import OpenAIPackageClassifier
from shepherd.detection.protocol import PackageClassifier

__all__ = [
    "MAX_BODY_LENGTH",
    "ClassifierAPIError",
    "ClassifierBackendConfigError",
    "ClassifierConfigError",
    "ClassifierError",
    "ClassifierResponseShapeError",
    "GoModuleInfo",
    "GoModuleResolutionError",
    "GoProxyClient",
    "MockPackageClassifier",
    "OpenAIClassifierConfig",
    "OpenAIPackageClassifier",
    "PRInfo",
    "PackageClassifier",
    "PackageDetector",
    "PackageUpdate",
    "PackageUpdateDetection",
    "create_classifier",
    "format_comment",
    "parse_repo_url",
    "pr_info_from_event",
    "resolve_go_version",
    "truncate_text",
]
