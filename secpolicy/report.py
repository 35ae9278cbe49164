"""Rendering helpers for analysis results."""

from __future__ import annotations

import json
from typing import List

from .models import AnalysisResult, HitCategory, SourceKind

_SOURCE_LABELS = {
    SourceKind.LOCAL_TEXT: "repository",
    SourceKind.ORG_URL: "organization fallback",
}


def render_text(result: AnalysisResult) -> str:
    """Return a human-readable summary of `result`."""
    if not result.found:
        return "Security policy: not found\n"

    lines: List[str] = [
        f"Security policy: {result.file.path}",
        f"Source: {_SOURCE_LABELS[result.file.source_kind]}",
        f"Content length: {result.content_length} bytes",
    ]
    for category in HitCategory:
        hits = [hit for hit in result.hits if hit.category is category]
        lines.append(f"{category.value.capitalize()} hits: {len(hits)}")
        for hit in hits:
            lines.append(f"  {hit.line_number}:{hit.column_offset} {hit.matched_text}")
    return "\n".join(lines) + "\n"


def render_json(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2) + "\n"


__all__ = ["render_json", "render_text"]
