"""Error taxonomy for secpolicy operations.

All errors inherit from SecPolicyError so callers can catch them in one place.
A missing policy is never an error; it is an AnalysisResult with no file.
"""


class SecPolicyError(RuntimeError):
    """Base exception for secpolicy errors."""


class RepoUnreachableError(SecPolicyError):
    """Raised when a repository cannot be opened (missing, private, deleted)."""


class ProviderError(SecPolicyError):
    """Raised when a repository provider fails while listing or fetching files."""


class InternalError(SecPolicyError):
    """Raised when an internal invariant is violated.

    This indicates a wiring defect (a missing file reference or a handler
    called with the wrong argument types), not a transient condition.
    """


__all__ = ["InternalError", "ProviderError", "RepoUnreachableError", "SecPolicyError"]
