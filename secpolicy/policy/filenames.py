"""Canonical security policy filenames.

See https://docs.github.com/en/communities/setting-up-your-project-for-healthy-contributions/adding-a-security-policy-to-your-repository
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

SECURITY_POLICY_FILENAMES: Tuple[str, ...] = (
    "SECURITY.md",
    ".github/SECURITY.md",
    "docs/SECURITY.md",
    "SECURITY.adoc",
    ".github/SECURITY.adoc",
    "docs/SECURITY.adoc",
    "SECURITY.rst",
    ".github/SECURITY.rst",
    "doc/SECURITY.rst",
    "docs/SECURITY.rst",
)

_FOLDED_FILENAMES: FrozenSet[str] = frozenset(name.casefold() for name in SECURITY_POLICY_FILENAMES)


def is_security_policy_filename(path: str) -> bool:
    """Return True when `path` is one of the canonical policy locations, ignoring case."""
    return path.casefold() in _FOLDED_FILENAMES


__all__ = ["SECURITY_POLICY_FILENAMES", "is_security_policy_filename"]
