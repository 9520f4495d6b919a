"""Strategies that turn search candidates into sized pull request summaries."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from pr_audit.config import AuditSettings, SizeStrategy
from pr_audit.domain.buckets import ESTIMATED_LINES, classify_by_label
from pr_audit.domain.pull_request import PullRequestSummary
from pr_audit.infrastructure.github_client import (
    GitHubSearchClient,
    parse_timestamp,
    repository_from_url,
)

logger = logging.getLogger(__name__)


class SizeResolver:
    """Common interface: candidates in, sized summaries out (same order)."""

    no_data_message = "No measurable size data found for this user's PRs."

    def resolve(self, candidates: List[Dict[str, Any]]) -> List[PullRequestSummary]:
        raise NotImplementedError


class LabelSizeResolver(SizeResolver):
    """
    Estimate sizes from ``size-*`` labels without any extra requests.

    Each recognized label maps to a bucket's representative line count.
    Candidates without a size label are dropped.
    """

    no_data_message = (
        "No PR size labels found on recent PRs. "
        "This mode requires size labels (like size-XS..size-XL)."
    )

    def resolve(self, candidates: List[Dict[str, Any]]) -> List[PullRequestSummary]:
        summaries = []
        for item in candidates:
            label_names = [label.get("name") or "" for label in item.get("labels") or []]
            bucket = classify_by_label(label_names)
            if bucket is None:
                continue

            merged_at = (item.get("pull_request") or {}).get("merged_at") or item.get("closed_at")
            summaries.append(
                PullRequestSummary(
                    title=item["title"],
                    url=item["html_url"],
                    repository=repository_from_url(item["repository_url"]),
                    lines_changed=ESTIMATED_LINES[bucket],
                    created_at=parse_timestamp(item["created_at"]),
                    merged_at=parse_timestamp(merged_at),
                )
            )

        logger.info(f"{len(summaries)}/{len(candidates)} candidates carry a size label")
        return summaries


class DetailSizeResolver(SizeResolver):
    """
    Measure sizes exactly by fetching every candidate's PR detail.

    Fetches run on a bounded thread pool; results keep candidate order. Any
    failed fetch aborts the whole resolution. PRs that are unmerged or have
    no changed lines are dropped.
    """

    DEFAULT_MAX_WORKERS = 8

    no_data_message = "No merged PRs with measurable size data found for this user."

    def __init__(self, github_client: GitHubSearchClient, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.github_client = github_client
        self.max_workers = max_workers

    def _fetch_details(self, candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        urls = [item["pull_request"]["url"] for item in candidates]
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            # map() yields in submission order regardless of completion order
            return list(executor.map(self.github_client.get_pull_request, urls))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _summarize(item: Dict[str, Any], detail: Dict[str, Any]) -> Optional[PullRequestSummary]:
        lines_changed = (detail.get("additions") or 0) + (detail.get("deletions") or 0)
        merged_at = parse_timestamp(detail.get("merged_at"))
        if lines_changed == 0 or merged_at is None:
            return None

        full_name = ((detail.get("base") or {}).get("repo") or {}).get("full_name")
        return PullRequestSummary(
            title=detail.get("title") or item["title"],
            url=detail.get("html_url") or item["html_url"],
            repository=full_name or repository_from_url(item["repository_url"]),
            lines_changed=lines_changed,
            created_at=parse_timestamp(detail.get("created_at") or item["created_at"]),
            merged_at=merged_at,
        )

    def resolve(self, candidates: List[Dict[str, Any]]) -> List[PullRequestSummary]:
        logger.info(f"Fetching details for {len(candidates)} PRs with {self.max_workers} workers")
        details = self._fetch_details(candidates)

        summaries = []
        for item, detail in zip(candidates, details):
            summary = self._summarize(item, detail)
            if summary is None:
                logger.debug(f"Skipping unmerged or empty PR {item.get('html_url')}")
                continue
            summaries.append(summary)
        return summaries


def build_size_resolver(settings: AuditSettings, github_client: GitHubSearchClient) -> SizeResolver:
    """Pick the resolver named by ``settings.size_strategy``."""
    if settings.size_strategy is SizeStrategy.DETAILS:
        return DetailSizeResolver(github_client, max_workers=settings.max_workers)
    return LabelSizeResolver()
