"""Repository client contracts consumed by policy discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

HEAD_REVISION = "HEAD"

# Return False to stop visiting.
PathPredicate = Callable[[str], bool]
ContentHandler = Callable[[str, bytes], bool]


@dataclass(frozen=True)
class PathMatcher:
    """Selects files whose path equals the pattern exactly."""

    pattern: str
    case_sensitive: bool = False

    def matches(self, path: str) -> bool:
        if self.case_sensitive:
            return path == self.pattern
        return path.casefold() == self.pattern.casefold()


class RepoClient(Protocol):
    """Read-only view of a repository at a single revision."""

    def uri(self) -> str:
        """Return the repository's base location."""

    def visit_all_files(self, predicate: PathPredicate) -> None:
        """Call `predicate` for every file path until it returns False."""

    def fetch_matching_content(self, matcher: PathMatcher, handler: ContentHandler) -> None:
        """Call `handler(path, content)` for matching files until it returns False."""

    def close(self) -> None:
        """Release any resources held by the client."""


class RepoOpener(Protocol):
    """Opens an organization's repositories by name."""

    def open(self, org: str, revision: str = HEAD_REVISION) -> RepoClient:
        """Return a client for the organization's fallback repository."""


__all__ = [
    "ContentHandler",
    "HEAD_REVISION",
    "PathMatcher",
    "PathPredicate",
    "RepoClient",
    "RepoOpener",
]
