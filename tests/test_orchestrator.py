"""Tests for the discovery/scan pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from secpolicy.clients.local import LocalOrgOpener, LocalRepoClient
from secpolicy.config import load_config
from secpolicy.errors import ProviderError, RepoUnreachableError
from secpolicy.models import HitCategory, SourceKind
from secpolicy.orchestrator import Orchestrator
from tests._fixtures.repo_builder import RepoBuilder


class _TrackingOpener(LocalOrgOpener):
    def __init__(self) -> None:
        super().__init__()
        self.clients: list[LocalRepoClient] = []
        self.closed = 0

    def open(self, org: str, revision: str = "HEAD") -> LocalRepoClient:
        client = super().open(org, revision)
        opener = self

        original_close = client.close

        def _close() -> None:
            opener.closed += 1
            original_close()

        client.close = _close  # type: ignore[method-assign]
        self.clients.append(client)
        return client


def test_local_policy_is_scanned(repo_builder: RepoBuilder) -> None:
    content = "Report vulnerabilities to security@example.com\nSee https://example.com/security\n"
    repo_builder.write({"SECURITY.md": content, "src/app.py": "print('hi')\n"})

    result = Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=repo_builder.opener())

    assert result.file.source_kind is SourceKind.LOCAL_TEXT
    assert result.file.path == "SECURITY.md"
    assert result.content_length == len(content.encode("utf-8"))
    assert result.file.content_length == result.content_length
    categories = [hit.category for hit in result.hits]
    assert categories == [HitCategory.EMAIL, HitCategory.TEXT, HitCategory.LINK]


def test_local_policy_wins_over_organization(repo_builder: RepoBuilder) -> None:
    repo_builder.write({".github/security.md": "local policy\n"})
    repo_builder.write({"SECURITY.md": "org policy\n"}, repo=".github")
    opener = _TrackingOpener()

    result = Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=opener)

    assert result.file.source_kind is SourceKind.LOCAL_TEXT
    assert result.file.path == ".github/security.md"
    assert opener.clients == []


def test_organization_fallback_is_used_when_repo_has_no_policy(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# widget\n"})
    repo_builder.write({"SECURITY.md": "Vulnerability disclosure: security@acme.dev\n"}, repo=".github")
    opener = _TrackingOpener()

    result = Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=opener)

    assert result.file.source_kind is SourceKind.ORG_URL
    assert result.file.path == "SECURITY.md"
    assert result.content_length == len(b"Vulnerability disclosure: security@acme.dev\n")
    assert [hit.matched_text for hit in result.hits if hit.category is HitCategory.EMAIL] == [
        "security@acme.dev"
    ]
    assert opener.closed == 1


def test_no_policy_anywhere_is_empty_result(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# widget\n"})
    repo_builder.write({"README.md": "# org profile\n"}, repo=".github")
    opener = _TrackingOpener()

    result = Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=opener)

    assert result.file.source_kind is SourceKind.NONE
    assert result.content_length == 0
    assert result.hits == []
    assert opener.closed == 1


def test_missing_organization_repository_is_not_an_error(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# widget\n"})

    result = Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=repo_builder.opener())

    assert not result.found
    assert result.content_length == 0
    assert result.hits == []


def test_empty_policy_keeps_prior_length_and_no_hits(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"SECURITY.md": b""})

    result = Orchestrator().analyze(repo_builder.client())

    assert result.file.source_kind is SourceKind.LOCAL_TEXT
    assert result.file.path == "SECURITY.md"
    assert result.content_length == 0
    assert result.hits == []


def test_fallback_disabled_skips_organization(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"SECURITY.md": "org policy\n"}, repo=".github")
    opener = _TrackingOpener()

    result = Orchestrator(enable_fallback=False).analyze(
        repo_builder.client(), org=str(repo_builder.org), opener=opener
    )

    assert not result.found
    assert opener.clients == []


def test_fallback_hard_errors_propagate(repo_builder: RepoBuilder) -> None:
    class _FailingOpener:
        def open(self, org: str, revision: str = "HEAD"):
            raise ProviderError("API rate limit exceeded")

    with pytest.raises(ProviderError):
        Orchestrator().analyze(repo_builder.client(), org=str(repo_builder.org), opener=_FailingOpener())


def test_run_builds_local_clients_from_config(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"README.md": "# widget\n"})
    repo_builder.write({"docs/SECURITY.rst": "Disclosure policy\n"}, repo=".github")

    result = Orchestrator().run(str(repo_builder.path()), config=load_config(tmp_path))

    assert result.file.source_kind is SourceKind.ORG_URL
    assert result.file.path == "docs/SECURITY.rst"


def test_run_honours_fallback_setting(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    repo_builder.write({"SECURITY.md": "org policy\n"}, repo=".github")
    (tmp_path / ".secpolicy.yml").write_text("fallback:\n  enabled: false\n", encoding="utf-8")

    result = Orchestrator().run(str(repo_builder.path()), config=load_config(tmp_path))

    assert not result.found


def test_run_rejects_missing_repository(tmp_path: Path) -> None:
    with pytest.raises(RepoUnreachableError):
        Orchestrator().run(str(tmp_path / "missing"), config=load_config(tmp_path))
