"""Security policy discovery and content scanning."""

from .discovery import FallbackResolver, LocalDiscoverer
from .filenames import SECURITY_POLICY_FILENAMES, is_security_policy_filename
from .scanner import ContentScanner, collect_policy_hits

__all__ = [
    "ContentScanner",
    "FallbackResolver",
    "LocalDiscoverer",
    "SECURITY_POLICY_FILENAMES",
    "collect_policy_hits",
    "is_security_policy_filename",
]
