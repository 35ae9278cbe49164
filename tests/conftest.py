from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """An `org/repo` tree under tmp_path; write to `repo=".github"` for the org fallback."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _no_github_token(monkeypatch) -> None:
    """Keep a developer's GitHub token out of config defaults and API fakes."""
    for key in ("SECPOLICY_GITHUB_TOKEN", "GITHUB_TOKEN", "GITHUB_AUTH_TOKEN"):
        monkeypatch.delenv(key, raising=False)
