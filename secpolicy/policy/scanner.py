"""Line-oriented scanner turning policy text into categorized hits."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterator, List, Optional, Pattern, Tuple

from ..errors import InternalError
from ..logging import get_logger
from ..models import AnalysisResult, HitCategory, PolicyFile, PolicyHit

# Patterns run against raw bytes so offsets are byte offsets within the line.
_LINK_PATTERN = re.compile(rb"(?:http|https)://[a-zA-Z0-9./?=_%:-]*")
_EMAIL_PATTERN = re.compile(rb"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,6}\b")
# 1-4 digit numbers (CVE ids, years, issue numbers) or partial words such as
# "disclosure" and "vulnerability".
_TEXT_PATTERN = re.compile(rb"[0-9]{1,4}\b|disclos|vuln", re.IGNORECASE)

_PATTERNS: Tuple[Tuple[HitCategory, Pattern[bytes]], ...] = (
    (HitCategory.LINK, _LINK_PATTERN),
    (HitCategory.EMAIL, _EMAIL_PATTERN),
    (HitCategory.TEXT, _TEXT_PATTERN),
)


def _iter_lines(content: bytes) -> Iterator[Tuple[int, bytes]]:
    lines = content.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    for number, line in enumerate(lines, start=1):
        if line.endswith(b"\r"):
            line = line[:-1]
        yield number, line


def collect_policy_hits(content: bytes) -> List[PolicyHit]:
    """Return every link, email and text hit in `content`, in scan order."""
    hits: List[PolicyHit] = []
    for line_number, line in _iter_lines(content):
        if not line:
            continue
        for category, pattern in _PATTERNS:
            for match in pattern.finditer(line):
                hits.append(
                    PolicyHit(
                        category=category,
                        matched_text=match.group(0).decode("utf-8", errors="replace"),
                        line_number=line_number,
                        column_offset=match.start(),
                    )
                )
    return hits


class ContentScanner:
    """Scans the content of a discovered policy file."""

    def __init__(self) -> None:
        self.logger = get_logger("scanner")

    def scan(
        self, path: str, content: bytes, policy_file: Optional[PolicyFile]
    ) -> Optional[AnalysisResult]:
        """Scan `content` fetched from `path`.

        Returns None for empty content so the caller keeps looking at other
        candidates. Otherwise returns the finished result, which means no
        further candidates should be considered.
        """
        if policy_file is None:
            raise InternalError(f"bad file reference while scanning {path!r}")
        if not isinstance(content, (bytes, bytearray)):
            raise InternalError(
                f"policy content for {path!r} must be bytes, got {type(content).__name__}"
            )

        if not content:
            self.logger.debug("Policy candidate %s is empty; continuing search", path)
            return None

        content = bytes(content)
        hits = collect_policy_hits(content)
        self.logger.debug(
            "Scanned %s: %d bytes, %d hits", path, len(content), len(hits)
        )
        scanned_file = replace(policy_file, path=path, content_length=len(content))
        return AnalysisResult(file=scanned_file, content_length=len(content), hits=hits)


__all__ = ["ContentScanner", "collect_policy_hits"]
