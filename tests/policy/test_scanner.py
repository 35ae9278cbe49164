"""Tests for the policy content scanner."""

from __future__ import annotations

import pytest

from secpolicy.errors import InternalError
from secpolicy.models import HitCategory, PolicyFile, PolicyHit, SourceKind
from secpolicy.policy.scanner import ContentScanner, collect_policy_hits


def _by_category(hits: list[PolicyHit], category: HitCategory) -> list[str]:
    return [hit.matched_text for hit in hits if hit.category is category]


def test_contact_line_yields_email_link_and_number() -> None:
    content = b"Contact security@example.com or see https://example.com/sec, CVE-1234"

    hits = collect_policy_hits(content)

    assert _by_category(hits, HitCategory.EMAIL) == ["security@example.com"]
    assert _by_category(hits, HitCategory.LINK) == ["https://example.com/sec"]
    assert _by_category(hits, HitCategory.TEXT) == ["1234"]
    assert [hit.category for hit in hits] == [
        HitCategory.LINK,
        HitCategory.EMAIL,
        HitCategory.TEXT,
    ]
    link = hits[0]
    assert link.line_number == 1
    assert link.column_offset == content.index(b"https://")
    email = hits[1]
    assert email.column_offset == content.index(b"security@")


def test_keywords_match_case_insensitively_as_partial_words() -> None:
    hits = collect_policy_hits(b"Responsible DISCLOSURE of vulnerabilities; Vulnerable code is disclosed")

    assert _by_category(hits, HitCategory.TEXT) == ["DISCLOS", "vuln", "Vuln", "disclos"]


def test_numbers_are_limited_to_four_digits_before_a_boundary() -> None:
    hits = collect_policy_hits(b"reply within 90 days, report 12345 and 2024")

    assert _by_category(hits, HitCategory.TEXT) == ["90", "2345", "2024"]


def test_lines_are_numbered_from_one_and_offsets_are_per_line() -> None:
    content = b"# Policy\n\nMail sec@corp.io\r\nSee http://corp.io/a?b=1"

    hits = collect_policy_hits(content)

    email = next(hit for hit in hits if hit.category is HitCategory.EMAIL)
    assert (email.line_number, email.column_offset) == (3, 5)
    link = next(hit for hit in hits if hit.category is HitCategory.LINK)
    assert link.matched_text == "http://corp.io/a?b=1"
    assert (link.line_number, link.column_offset) == (4, 4)
    # The link's "1" is also a numeric token.
    assert PolicyHit(HitCategory.TEXT, "1", 4, 23) in hits


def test_overlapping_patterns_all_fire() -> None:
    hits = collect_policy_hits(b"https://vuln.example.org/2023")

    assert _by_category(hits, HitCategory.LINK) == ["https://vuln.example.org/2023"]
    assert _by_category(hits, HitCategory.TEXT) == ["vuln", "2023"]


def test_trailing_newline_does_not_add_a_line() -> None:
    hits = collect_policy_hits(b"line 1\nline 2\n")

    assert [(hit.matched_text, hit.line_number) for hit in hits] == [("1", 1), ("2", 2)]


def test_scan_empty_content_asks_to_continue() -> None:
    policy = PolicyFile(path="SECURITY.md", source_kind=SourceKind.LOCAL_TEXT)

    assert ContentScanner().scan("SECURITY.md", b"", policy) is None
    assert policy.content_length == 0


def test_scan_records_length_and_preserves_source_kind() -> None:
    content = "Report vulnerabilities to sécurité@example.org\n".encode("utf-8")
    policy = PolicyFile(path="github.com/acme/.github/SECURITY.md", source_kind=SourceKind.ORG_URL)

    result = ContentScanner().scan("SECURITY.md", content, policy)

    assert result is not None
    assert result.content_length == len(content)
    assert result.file.content_length == len(content)
    assert result.file.source_kind is SourceKind.ORG_URL
    assert result.file.path == "SECURITY.md"
    assert result.hits


def test_scan_is_deterministic() -> None:
    content = b"Disclosure: security@example.com\nhttps://example.com/security 42\n"
    policy = PolicyFile(path="SECURITY.md", source_kind=SourceKind.LOCAL_TEXT)
    scanner = ContentScanner()

    first = scanner.scan("SECURITY.md", content, policy)
    second = scanner.scan("SECURITY.md", content, policy)

    assert first is not None and second is not None
    assert first.hits == second.hits


def test_scan_without_file_reference_is_internal_error() -> None:
    with pytest.raises(InternalError):
        ContentScanner().scan("SECURITY.md", b"text", None)


def test_scan_rejects_text_content() -> None:
    policy = PolicyFile(path="SECURITY.md", source_kind=SourceKind.LOCAL_TEXT)
    with pytest.raises(InternalError):
        ContentScanner().scan("SECURITY.md", "text", policy)  # type: ignore[arg-type]
