"""Repository client backed by a directory on the local filesystem."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from ..errors import ProviderError, RepoUnreachableError
from ..logging import get_logger
from .base import HEAD_REVISION, ContentHandler, PathMatcher, PathPredicate

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or exclude_paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    if not pattern:
        return None

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class LocalRepoClient:
    """Presents a checked-out repository directory as a RepoClient."""

    def __init__(self, root: str | Path, *, exclude_paths: Sequence[str] = ()) -> None:
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            raise RepoUnreachableError(f"Repository path not found: {root}")
        self.root = root_path
        self.logger = get_logger("clients.local")
        self._rules = _parse_gitignore(root_path / ".gitignore")
        for pattern in exclude_paths:
            rule = _build_ignore_rule(pattern)
            if rule is not None:
                self._rules.append(rule)

    def uri(self) -> str:
        return self.root.as_posix()

    def visit_all_files(self, predicate: PathPredicate) -> None:
        for rel_path in self._iter_files():
            if not predicate(rel_path):
                return

    def fetch_matching_content(self, matcher: PathMatcher, handler: ContentHandler) -> None:
        for rel_path in self._iter_files():
            if not matcher.matches(rel_path):
                continue
            try:
                content = (self.root / rel_path).read_bytes()
            except OSError as exc:
                raise ProviderError(f"Failed to read {rel_path}: {exc}") from exc
            if not handler(rel_path, content):
                return

    def close(self) -> None:
        self.logger.debug("Closed local repository %s", self.root)

    def _iter_files(self) -> Iterator[str]:
        """Yield POSIX paths relative to the root, files before subdirectories, sorted."""
        yield from self._walk(self.root, "")

    def _walk(self, directory: Path, rel_dir: str) -> Iterator[str]:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            raise ProviderError(f"Failed to list {directory}: {exc}") from exc

        subdirs = []
        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if entry.is_dir(follow_symlinks=False):
                if entry.name in _EXCLUDED_DIRS or _should_ignore(rel_path, True, self._rules):
                    continue
                subdirs.append((Path(entry.path), rel_path))
            elif entry.is_file():
                if _should_ignore(rel_path, False, self._rules):
                    continue
                yield rel_path

        for path, rel_path in subdirs:
            yield from self._walk(path, rel_path)


class LocalOrgOpener:
    """Opens `<org directory>/<repository>` as the organization fallback repository."""

    def __init__(self, *, repository: str = ".github", exclude_paths: Sequence[str] = ()) -> None:
        self.repository = repository
        self.exclude_paths = list(exclude_paths)

    def open(self, org: str, revision: str = HEAD_REVISION) -> LocalRepoClient:
        if revision != HEAD_REVISION:
            raise ValueError(f"Local repositories only support the {HEAD_REVISION} revision")
        return LocalRepoClient(Path(org) / self.repository, exclude_paths=self.exclude_paths)


__all__ = ["LocalOrgOpener", "LocalRepoClient"]
