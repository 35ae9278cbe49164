"""Repository clients and the factory that builds them for an audit target."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Tuple

from ..config import SecPolicyConfig
from .base import HEAD_REVISION, PathMatcher, RepoClient, RepoOpener
from .github import GitHubOrgOpener, GitHubRepoClient
from .local import LocalOrgOpener, LocalRepoClient

_GITHUB_TARGET = re.compile(
    r"^(?:https?://)?(?:www\.)?(?:github\.com/)?(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?/?$"
)


def parse_github_target(target: str) -> Tuple[str, str]:
    """Split `owner/repo` or a github.com URL into its owner and repository."""
    match = _GITHUB_TARGET.match(target.strip())
    if match is None:
        raise ValueError(f"Not a GitHub repository reference: {target}")
    return match.group("owner"), match.group("repo")


def create_clients(
    target: str,
    config: SecPolicyConfig,
    *,
    provider: Optional[str] = None,
    revision: str = HEAD_REVISION,
) -> Tuple[RepoClient, str, RepoOpener]:
    """Return the target client, its organization, and an opener for the fallback."""
    selected = provider or config.provider
    if selected == "local":
        if revision != HEAD_REVISION:
            raise ValueError(f"Local repositories only support the {HEAD_REVISION} revision")
        client = LocalRepoClient(target, exclude_paths=config.exclude_paths)
        org = str(Path(client.uri()).parent)
        opener: RepoOpener = LocalOrgOpener(
            repository=config.fallback.repository,
            exclude_paths=config.exclude_paths,
        )
        return client, org, opener

    if selected == "github":
        owner, repo = parse_github_target(target)
        github = config.github
        client = GitHubRepoClient(
            owner,
            repo,
            revision,
            api_url=github.api_url,
            token=github.token,
            request_timeout=github.request_timeout,
        )
        opener = GitHubOrgOpener(
            repository=config.fallback.repository,
            api_url=github.api_url,
            token=github.token,
            request_timeout=github.request_timeout,
        )
        return client, owner, opener

    raise ValueError(f"Unknown provider: {selected}")


__all__ = [
    "GitHubOrgOpener",
    "GitHubRepoClient",
    "HEAD_REVISION",
    "LocalOrgOpener",
    "LocalRepoClient",
    "PathMatcher",
    "RepoClient",
    "RepoOpener",
    "create_clients",
    "parse_github_target",
]
