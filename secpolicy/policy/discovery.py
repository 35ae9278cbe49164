"""Security policy discovery in a repository and its organization fallback."""

from __future__ import annotations

import posixpath
from contextlib import contextmanager
from typing import Iterator, Optional

from ..clients.base import HEAD_REVISION, RepoClient, RepoOpener
from ..errors import RepoUnreachableError
from ..logging import get_logger
from ..models import DEFAULT_OFFSET, PolicyFile, SourceKind
from .filenames import is_security_policy_filename


class LocalDiscoverer:
    """Finds a policy file in a repository by its canonical filename."""

    def __init__(self) -> None:
        self.logger = get_logger("discovery")

    def find(self, client: RepoClient) -> Optional[str]:
        """Return the first visited path that names a policy file."""
        found: Optional[str] = None

        def _visit(path: str) -> bool:
            nonlocal found
            if is_security_policy_filename(path):
                found = path
                return False
            return True

        client.visit_all_files(_visit)
        return found

    def discover(self, client: RepoClient) -> Optional[PolicyFile]:
        path = self.find(client)
        if path is None:
            self.logger.debug("No security policy file in %s", client.uri())
            return None
        self.logger.info("Found security policy %s in %s", path, client.uri())
        return PolicyFile(path=path, source_kind=SourceKind.LOCAL_TEXT, offset=DEFAULT_OFFSET)


class FallbackResolver:
    """Looks up a policy in the organization's default community-health repository."""

    def __init__(
        self,
        opener: RepoOpener,
        *,
        discoverer: LocalDiscoverer | None = None,
    ) -> None:
        self.opener = opener
        self.discoverer = discoverer or LocalDiscoverer()
        self.logger = get_logger("discovery")

    @contextmanager
    def open(self, org: str) -> Iterator[Optional[RepoClient]]:
        """Yield a client for the fallback repository, or None if it is unreachable."""
        try:
            client = self.opener.open(org, HEAD_REVISION)
        except RepoUnreachableError as exc:
            self.logger.debug("Organization fallback for %s unavailable: %s", org, exc)
            client = None

        if client is None:
            yield None
            return

        try:
            yield client
        finally:
            client.close()

    def discover(self, client: RepoClient) -> Optional[PolicyFile]:
        uri = client.uri()
        name = self.discoverer.find(client)
        if name is None:
            self.logger.debug("No security policy file in fallback repository %s", uri)
            return None
        self.logger.info("Found organization security policy %s in %s", name, uri)
        return PolicyFile(
            path=posixpath.join(uri, name),
            source_kind=SourceKind.ORG_URL,
            offset=DEFAULT_OFFSET,
        )

    @staticmethod
    def relative_path(policy_file: PolicyFile, uri: str) -> str:
        """Undo the URI join so content can be fetched relative to the repository root."""
        if policy_file.source_kind is not SourceKind.ORG_URL:
            return policy_file.path
        return policy_file.path.replace(f"{uri}/", "", 1)


__all__ = ["FallbackResolver", "LocalDiscoverer"]
