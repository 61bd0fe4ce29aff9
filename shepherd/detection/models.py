"""Pull request coordinates and classifier verdicts."""

from __future__ import annotations

import dataclasses

import msgspec


@dataclasses.dataclass(frozen=True, slots=True)
class PRInfo:
    """Pull request details used for classification and commenting."""

    owner: str
    repo: str
    number: int
    title: str
    body: str


class PackageUpdate(msgspec.Struct, kw_only=True, frozen=True):
    """A single dependency change proposed by a pull request."""

    name: str
    from_version: str = ""
    to_version: str = ""


class PackageUpdateDetection(msgspec.Struct, kw_only=True, frozen=True):
    """Classifier verdict for a pull request.

    Attributes
    ----------
    is_package_update
        Whether the pull request only updates dependencies.
    language
        Ecosystem of the updated packages, e.g. ``go`` or ``python``.
    packages
        Updated packages with their old and new versions.

    """

    is_package_update: bool
    language: str = ""
    packages: tuple[PackageUpdate, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class GoModuleInfo:
    """Repository hosting a Go module version.

    Attributes
    ----------
    repo_url
        Repository URL reported by the module proxy.
    host
        VCS host, e.g. ``github.com``.
    owner
        Repository owner.
    repo
        Repository name without a ``.git`` suffix.

    """

    repo_url: str
    host: str
    owner: str
    repo: str
