"""Domain entities for audited pull requests."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PullRequestSummary:
    """Immutable pull request entity with its changed-line estimate."""
    
    title: str
    url: str
    repository: str
    lines_changed: int
    created_at: datetime
    merged_at: Optional[datetime]
