"""PackageClassifier protocol for LLM-backed pull request classification."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from shepherd.detection.models import PackageUpdateDetection


@typ.runtime_checkable
class PackageClassifier(typ.Protocol):
    """Protocol for deciding whether a pull request updates packages.

    Examples
    --------
    >>> from shepherd.detection import MockPackageClassifier, PackageClassifier
    >>> isinstance(MockPackageClassifier(), PackageClassifier)
    True

    """

    async def classify(self, title: str, body: str) -> PackageUpdateDetection:
        """Classify a pull request from its title and (truncated) body.

        Raises
        ------
        ClassifierError
            If the backend fails or returns an unusable verdict.

        """
        ...
