"""Repository client backed by the GitHub REST API."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import DEFAULT_GITHUB_API_URL, DEFAULT_REQUEST_TIMEOUT
from ..errors import ProviderError, RepoUnreachableError
from ..logging import get_logger
from .base import HEAD_REVISION, ContentHandler, PathMatcher, PathPredicate

_API_VERSION = "2022-11-28"


class GitHubRepoClient:
    """Lists and fetches files of `owner/repo` at a revision."""

    def __init__(
        self,
        owner: str,
        repo: str,
        revision: str = HEAD_REVISION,
        *,
        api_url: str = DEFAULT_GITHUB_API_URL,
        token: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.request_timeout = request_timeout
        self.logger = get_logger("clients.github")
        self._paths: Optional[List[str]] = None

        metadata = self._repo_metadata()
        if revision == HEAD_REVISION:
            branch = metadata.get("default_branch")
            if not isinstance(branch, str) or not branch:
                raise ProviderError(f"{owner}/{repo} has no default branch")
            self.revision = branch
        else:
            self.revision = revision

    def uri(self) -> str:
        return f"github.com/{self.owner}/{self.repo}"

    def visit_all_files(self, predicate: PathPredicate) -> None:
        for path in self._list_paths():
            if not predicate(path):
                return

    def fetch_matching_content(self, matcher: PathMatcher, handler: ContentHandler) -> None:
        for path in self._list_paths():
            if not matcher.matches(path):
                continue
            if not handler(path, self._file_content(path)):
                return

    def close(self) -> None:
        self._paths = None

    def _repo_metadata(self) -> Dict[str, Any]:
        endpoint = f"/repos/{quote(self.owner)}/{quote(self.repo)}"
        # Any failure to look the repository up means it cannot be opened.
        try:
            raw = self._fetch(endpoint)
        except HTTPError as exc:
            raise RepoUnreachableError(
                f"{self.uri()} unreachable (status {exc.code}: {exc.reason})"
            ) from exc
        except URLError as exc:
            raise RepoUnreachableError(f"{self.uri()} unreachable: {exc.reason}") from exc
        payload = _decode_json(raw, endpoint)
        if not isinstance(payload, dict):
            raise ProviderError(f"Unexpected response for {endpoint}")
        return payload

    def _list_paths(self) -> List[str]:
        if self._paths is not None:
            return self._paths

        endpoint = (
            f"/repos/{quote(self.owner)}/{quote(self.repo)}"
            f"/git/trees/{quote(self.revision, safe='')}?recursive=1"
        )
        payload = _decode_json(self._get_or_raise(endpoint), endpoint)
        tree = payload.get("tree") if isinstance(payload, dict) else None
        if not isinstance(tree, list):
            raise ProviderError(f"Unexpected response for {endpoint}")
        if payload.get("truncated"):
            self.logger.warning("File tree for %s was truncated by the API", self.uri())

        self._paths = [
            entry["path"]
            for entry in tree
            if isinstance(entry, dict)
            and entry.get("type") == "blob"
            and isinstance(entry.get("path"), str)
        ]
        return self._paths

    def _file_content(self, path: str) -> bytes:
        endpoint = (
            f"/repos/{quote(self.owner)}/{quote(self.repo)}/contents/{quote(path)}"
            f"?ref={quote(self.revision, safe='')}"
        )
        return self._get_or_raise(endpoint, accept="application/vnd.github.raw+json")

    def _get_or_raise(self, endpoint: str, *, accept: str = "application/vnd.github+json") -> bytes:
        try:
            return self._get(endpoint, accept=accept)
        except HTTPError as exc:
            raise ProviderError(
                f"GitHub API request {endpoint} failed with status {exc.code}: {exc.reason}"
            ) from exc

    def _get(self, endpoint: str, *, accept: str = "application/vnd.github+json") -> bytes:
        try:
            return self._fetch(endpoint, accept=accept)
        except HTTPError:
            raise
        except URLError as exc:
            raise ProviderError(f"GitHub API request failed: {exc.reason}") from exc

    def _fetch(self, endpoint: str, *, accept: str = "application/vnd.github+json") -> bytes:
        headers = {"Accept": accept, "X-GitHub-Api-Version": _API_VERSION}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        request = Request(f"{self.api_url}{endpoint}", headers=headers, method="GET")
        self.logger.debug("GET %s", endpoint)
        with urlopen(request, timeout=self.request_timeout) as response:  # type: ignore[arg-type]
            return response.read()


class GitHubOrgOpener:
    """Opens `owner/<repository>` on GitHub as the organization fallback repository."""

    def __init__(
        self,
        *,
        repository: str = ".github",
        api_url: str = DEFAULT_GITHUB_API_URL,
        token: str | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.repository = repository
        self.api_url = api_url
        self.token = token
        self.request_timeout = request_timeout

    def open(self, org: str, revision: str = HEAD_REVISION) -> GitHubRepoClient:
        return GitHubRepoClient(
            org,
            self.repository,
            revision,
            api_url=self.api_url,
            token=self.token,
            request_timeout=self.request_timeout,
        )


def _decode_json(raw: bytes, endpoint: str) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProviderError(f"GitHub API returned invalid JSON for {endpoint}") from exc


__all__ = ["GitHubOrgOpener", "GitHubRepoClient"]
