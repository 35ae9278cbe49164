"""Pipeline orchestration: local discovery, organization fallback, content scan."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .clients import create_clients
from .clients.base import HEAD_REVISION, PathMatcher, RepoClient, RepoOpener
from .config import SecPolicyConfig, load_config
from .logging import get_logger
from .models import AnalysisResult, PolicyFile
from .policy.discovery import FallbackResolver, LocalDiscoverer
from .policy.scanner import ContentScanner


class Orchestrator:
    """Runs security policy discovery and scanning for one repository at a time."""

    def __init__(
        self,
        discoverer: LocalDiscoverer | None = None,
        scanner: ContentScanner | None = None,
        *,
        enable_fallback: bool = True,
    ) -> None:
        self.discoverer = discoverer or LocalDiscoverer()
        self.scanner = scanner or ContentScanner()
        self.enable_fallback = enable_fallback
        self.logger = get_logger("orchestrator")

    def analyze(
        self,
        client: RepoClient,
        *,
        org: Optional[str] = None,
        opener: Optional[RepoOpener] = None,
    ) -> AnalysisResult:
        """Return the policy analysis for `client`, consulting the organization if needed."""
        local_file = self.discoverer.discover(client)
        if local_file is not None:
            return self._scan(client, local_file.path, local_file)

        if not self.enable_fallback or org is None or opener is None:
            self.logger.debug("Organization fallback skipped for %s", client.uri())
            return AnalysisResult()

        resolver = FallbackResolver(opener, discoverer=self.discoverer)
        with resolver.open(org) as org_client:
            if org_client is None:
                return AnalysisResult()
            org_file = resolver.discover(org_client)
            if org_file is None:
                return AnalysisResult()
            pattern = resolver.relative_path(org_file, org_client.uri())
            return self._scan(org_client, pattern, org_file)

    def run(
        self,
        target: str,
        *,
        provider: Optional[str] = None,
        revision: str = HEAD_REVISION,
        config: SecPolicyConfig | None = None,
    ) -> AnalysisResult:
        """Build clients for `target` from configuration and analyze it."""
        if config is None:
            config = load_config(Path.cwd())
        client, org, opener = create_clients(
            target, config, provider=provider, revision=revision
        )
        self.logger.info("Checking security policy for %s", client.uri())
        try:
            if not config.fallback.enabled:
                return self.analyze(client)
            return self.analyze(client, org=org, opener=opener)
        finally:
            client.close()

    def _scan(self, client: RepoClient, pattern: str, policy_file: PolicyFile) -> AnalysisResult:
        result = AnalysisResult(file=policy_file)

        def _handle(path: str, content: bytes) -> bool:
            nonlocal result
            scanned = self.scanner.scan(path, content, policy_file)
            if scanned is None:
                return True
            result = scanned
            return False

        client.fetch_matching_content(PathMatcher(pattern, case_sensitive=False), _handle)
        return result


__all__ = ["Orchestrator"]
