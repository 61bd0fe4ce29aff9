"""Prompt templates for the package-update classifier."""

from __future__ import annotations

SYSTEM_PROMPT = """\
You classify GitHub pull requests. Decide whether a pull request is a \
package (dependency) update, such as those opened by Dependabot or Renovate \
or by a developer bumping library versions.

## Output Requirements

You must respond with valid JSON in the following structure:

```json
{
  "is_package_update": true | false,
  "language": "go" | "python" | "javascript" | "rust" | "java" | "ruby" | "...",
  "packages": [
    {"name": "package name", "from_version": "old", "to_version": "new"}
  ]
}
```

## Guidelines

1. Only report `is_package_update: true` when the main purpose of the pull \
request is to change dependency versions.
2. Use the package name exactly as the ecosystem spells it; for Go this is \
the full module path, e.g. `github.com/google/uuid`.
3. Keep version strings exactly as written, including any `v` prefix.
4. When it is not a package update, return an empty `packages` list and an \
empty `language`.
"""


def build_user_prompt(title: str, body: str) -> str:
    """Return the user prompt for a pull request title and body."""
    return (
        "Classify the following pull request.\n\n"
        f"## Title\n\n{title}\n\n"
        f"## Description\n\n{body}\n"
    )
