"""Core data models shared across secpolicy components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

DEFAULT_OFFSET = 1


class SourceKind(str, Enum):
    """Where a policy file was found."""

    NONE = "none"
    LOCAL_TEXT = "text"
    ORG_URL = "url"


class HitCategory(str, Enum):
    """Kind of signal extracted from policy text."""

    LINK = "link"
    EMAIL = "email"
    TEXT = "text"


@dataclass(frozen=True)
class PolicyFile:
    """Location of a discovered security policy file."""

    path: str = ""
    source_kind: SourceKind = SourceKind.NONE
    offset: int = DEFAULT_OFFSET
    content_length: int = 0


@dataclass(frozen=True)
class PolicyHit:
    """Categorized substring found on a single line of the policy."""

    category: HitCategory
    matched_text: str
    line_number: int
    column_offset: int


@dataclass
class AnalysisResult:
    """Outcome of policy discovery and scanning for one repository."""

    file: PolicyFile = field(default_factory=PolicyFile)
    content_length: int = 0
    hits: List[PolicyHit] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.file.source_kind is not SourceKind.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": {
                "path": self.file.path,
                "source_kind": self.file.source_kind.value,
                "offset": self.file.offset,
                "content_length": self.file.content_length,
            },
            "content_length": self.content_length,
            "hits": [
                {
                    "category": hit.category.value,
                    "matched_text": hit.matched_text,
                    "line_number": hit.line_number,
                    "column_offset": hit.column_offset,
                }
                for hit in self.hits
            ],
        }
