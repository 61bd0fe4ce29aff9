"""Keyword-based PackageClassifier for development and tests."""

from __future__ import annotations

import re

from shepherd.detection.models import PackageUpdate, PackageUpdateDetection

_BUMP_PATTERN = re.compile(
    r"\b(?:bump|update|upgrade)s?\s+(?:dependency\s+|module\s+)?"
    r"(?P<name>[^\s`]+)\s+from\s+(?P<from>[^\s`]+)\s+to\s+(?P<to>[^\s`]+)",
    re.IGNORECASE,
)
_VERSION_TRAILING = ".,;:)"

# Ordered: the first ecosystem whose keyword appears wins.
_LANGUAGE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("go", ("go.mod", "go modules", "gomod")),
    ("javascript", ("package.json", "npm", "yarn", "pnpm")),
    ("python", ("requirements.txt", "pyproject", "pip", "poetry", "uv.lock")),
    ("rust", ("cargo",)),
    ("ruby", ("gemfile", "bundler")),
    ("java", ("maven", "gradle")),
)


def _looks_like_go_module(name: str) -> bool:
    first, _, rest = name.partition("/")
    return bool(rest) and "." in first


def _guess_language(text: str, packages: tuple[PackageUpdate, ...]) -> str:
    lowered = text.lower()
    for language, keywords in _LANGUAGE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return language
    if packages and all(_looks_like_go_module(pkg.name) for pkg in packages):
        return "go"
    return ""


class MockPackageClassifier:
    """Deterministic classifier recognising Dependabot-style phrasing.

    A pull request counts as a package update when its title or body
    contains ``bump <name> from <old> to <new>`` (or ``update``/``upgrade``).

    Examples
    --------
    >>> import asyncio
    >>> verdict = asyncio.run(
    ...     MockPackageClassifier().classify(
    ...         "Bump github.com/google/uuid from 1.3.0 to 1.6.0", ""
    ...     )
    ... )
    >>> verdict.language
    'go'

    """

    async def classify(self, title: str, body: str) -> PackageUpdateDetection:
        """Classify a pull request from keyword heuristics."""
        text = f"{title}\n{body}"
        seen: dict[str, PackageUpdate] = {}
        for match in _BUMP_PATTERN.finditer(text):
            name = match.group("name")
            if name in seen:
                continue
            seen[name] = PackageUpdate(
                name=name,
                from_version=match.group("from").rstrip(_VERSION_TRAILING),
                to_version=match.group("to").rstrip(_VERSION_TRAILING),
            )

        packages = tuple(seen.values())
        if not packages:
            return PackageUpdateDetection(is_package_update=False)
        return PackageUpdateDetection(
            is_package_update=True,
            language=_guess_language(text, packages),
            packages=packages,
        )
