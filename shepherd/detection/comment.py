"""Markdown rendering of classifier verdicts for pull request comments."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from shepherd.detection.models import PackageUpdateDetection


def format_comment(detection: PackageUpdateDetection) -> str:
    """Return the pull request comment announcing a package update."""
    lines = [
        "## 📦 Package Update Detection",
        "",
        "This pull request appears to be a **package update**.",
        "",
        f"**Language**: {detection.language}",
        "",
    ]
    if detection.packages:
        lines.append("**Packages**:")
        lines.extend(
            f"- `{pkg.name}`: {pkg.from_version} → {pkg.to_version}"
            for pkg in detection.packages
        )
    lines.extend(["", "---", "🤖 Detected by Shepherd", ""])
    return "\n".join(lines)
