"""Factory for creating PackageClassifier implementations from the environment."""

from __future__ import annotations

import os
import typing as typ

from shepherd.detection.errors import ClassifierBackendConfigError
from shepherd.detection.mock import MockPackageClassifier

if typ.TYPE_CHECKING:
    from shepherd.detection.protocol import PackageClassifier

_VALID_BACKENDS = frozenset({"mock", "openai"})


def create_classifier() -> PackageClassifier:
    """Create a PackageClassifier based on environment configuration.

    Reads ``SHEPHERD_CLASSIFIER_BACKEND`` (``mock`` or ``openai``).  The
    ``openai`` backend also reads the variables documented on
    :meth:`OpenAIClassifierConfig.from_env`.

    Raises
    ------
    ClassifierBackendConfigError
        If the backend variable is missing or names an unknown backend.
    ClassifierConfigError
        If the OpenAI backend is selected but its configuration is invalid.

    Examples
    --------
    >>> import os
    >>> os.environ["SHEPHERD_CLASSIFIER_BACKEND"] = "mock"
    >>> isinstance(create_classifier(), MockPackageClassifier)
    True

    """
    raw_backend = os.environ.get("SHEPHERD_CLASSIFIER_BACKEND")
    if raw_backend is None:
        raise ClassifierBackendConfigError.missing_backend()

    backend = raw_backend.strip().lower()
    if backend not in _VALID_BACKENDS:
        raise ClassifierBackendConfigError.invalid_backend(
            raw_backend, _VALID_BACKENDS
        )

    if backend == "mock":
        return MockPackageClassifier()

    from shepherd.detection.config import OpenAIClassifierConfig
    from shepherd.detection.openai_client import OpenAIPackageClassifier

    return OpenAIPackageClassifier(OpenAIClassifierConfig.from_env())
