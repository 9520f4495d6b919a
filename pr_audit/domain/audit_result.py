"""Domain entities for the audit report."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pr_audit.domain.buckets import Bucket
from pr_audit.domain.pull_request import PullRequestSummary


class Verdict(Enum):
    GOOD = "good"
    TOO_BIG = "too-big"


@dataclass(frozen=True)
class AuditResult:
    """Immutable summary of one user's pull request sizes."""
    
    username: str
    total_prs: int
    average_size: int
    buckets: Mapping[Bucket, int]
    prs: Tuple[PullRequestSummary, ...]
    verdict: Verdict
    reason: str
    scope: Optional[str] = None
    
    def __post_init__(self):
        # Read-only copy so the checked counts cannot drift
        object.__setattr__(self, "buckets", MappingProxyType(dict(self.buckets)))
        if self.total_prs <= 0:
            raise ValueError("An audit result needs at least one pull request")
        if self.total_prs != len(self.prs):
            raise ValueError(f"total_prs={self.total_prs} but {len(self.prs)} PRs given")
        if any(count < 0 for count in self.buckets.values()):
            raise ValueError("Bucket counts must be non-negative")
        if sum(self.buckets.values()) != self.total_prs:
            raise ValueError("Bucket counts must add up to total_prs")
    
    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-serializable representation."""
        return {
            "username": self.username,
            "totalPrs": self.total_prs,
            "averageSize": self.average_size,
            "buckets": {bucket.value: count for bucket, count in self.buckets.items()},
            "prs": [
                {
                    "title": pr.title,
                    "url": pr.url,
                    "repository": pr.repository,
                    "linesChanged": pr.lines_changed,
                    "createdAt": pr.created_at.isoformat(),
                    "mergedAt": pr.merged_at.isoformat() if pr.merged_at else None,
                }
                for pr in self.prs
            ],
            "verdict": self.verdict.value,
            "reason": self.reason,
            "scope": self.scope,
        }
