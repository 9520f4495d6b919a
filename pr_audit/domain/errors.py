"""Errors raised while auditing a user's pull requests.

Every error carries a single human-readable message meant to be shown to
the caller as-is.
"""

from typing import Optional


class AuditError(Exception):
    """Base class for all audit failures."""
    
    default_message = "Pull request audit failed."
    
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
    
    @property
    def message(self) -> str:
        return self.args[0]


class InvalidInput(AuditError):
    """Raised when the username input is empty."""
    
    default_message = "Please enter a GitHub username."


class NoPullRequestsFound(AuditError):
    """Raised when the search yields no candidate pull requests."""
    
    default_message = "No public merged PRs found for this user."
    
    @classmethod
    def for_scope(cls, org: Optional[str] = None) -> "NoPullRequestsFound":
        if org:
            return cls(f"No public merged PRs found for this user in {org} repositories.")
        return cls()


class NoMeasurableData(AuditError):
    """Raised when no candidate survives size resolution."""
    
    default_message = "No measurable size data found for this user's PRs."
