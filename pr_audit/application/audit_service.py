"""Application service for auditing a GitHub user's pull request sizes."""

import logging
from typing import Dict, List, Optional

from pr_audit.application.size_resolver import SizeResolver, build_size_resolver
from pr_audit.config import AuditSettings, VerdictPolicy
from pr_audit.domain.audit_result import AuditResult, Verdict
from pr_audit.domain.buckets import STANDARD_SCALE, Bucket, SizeScale, classify_by_size
from pr_audit.domain.errors import InvalidInput, NoMeasurableData
from pr_audit.domain.pull_request import PullRequestSummary
from pr_audit.infrastructure.github_client import GitHubSearchClient

logger = logging.getLogger(__name__)


class AuditService:
    """Service that searches, sizes, buckets and judges a user's PRs."""

    # Ratio policy thresholds
    OVERSIZED_RATIO_LIMIT = 0.15
    LARGE_RATIO_LIMIT = 0.40

    REASONS = {
        Verdict.TOO_BIG: (
            "Your PRs read like a jump-scare novel. "
            "Split them up before your reviewers file a missing-person report."
        ),
        Verdict.GOOD: "Nice. Your PRs are compact, readable, and only mildly terrifying to reviewers.",
    }

    def __init__(
        self,
        github_client: GitHubSearchClient,
        size_resolver: SizeResolver,
        verdict_policy: VerdictPolicy = VerdictPolicy.RATIO,
        org: Optional[str] = None,
        scale: SizeScale = STANDARD_SCALE,
    ):
        """
        Initialize audit service.

        Args:
            github_client: GitHub API client
            size_resolver: Strategy that estimates each PR's changed lines
            verdict_policy: Rule that turns bucket counts into a verdict
            org: Organization to restrict the search to, if any
            scale: Bucket boundaries
        """
        self.github_client = github_client
        self.size_resolver = size_resolver
        self.verdict_policy = verdict_policy
        self.org = org
        self.scale = scale

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> "AuditService":
        """Wire a client, resolver and policy from configuration."""
        github_client = GitHubSearchClient(
            token=settings.github_token,
            per_page=settings.per_page,
            timeout=settings.timeout,
        )
        return cls(
            github_client=github_client,
            size_resolver=build_size_resolver(settings, github_client),
            verdict_policy=settings.verdict_policy,
            org=settings.org,
            scale=settings.scale,
        )

    def count_buckets(self, summaries: List[PullRequestSummary]) -> Dict[Bucket, int]:
        buckets = {bucket: 0 for bucket in self.scale.buckets}
        for pr in summaries:
            buckets[classify_by_size(pr.lines_changed, self.scale)] += 1
        return buckets

    def judge(self, buckets: Dict[Bucket, int]) -> Verdict:
        """
        Apply the configured verdict policy to bucket counts.

        Ratio: too big when oversized PRs reach 15% of the total, or large
        plus oversized reach 40%. Majority: too big when oversized PRs
        strictly outnumber all the others.
        """
        total = sum(buckets.values())
        oversized = sum(buckets.get(bucket, 0) for bucket in self.scale.oversized)

        if self.verdict_policy is VerdictPolicy.MAJORITY:
            too_big = oversized > total - oversized
        else:
            large = buckets.get(Bucket.LG, 0) + oversized
            too_big = (
                oversized / total >= self.OVERSIZED_RATIO_LIMIT
                or large / total >= self.LARGE_RATIO_LIMIT
            )
        return Verdict.TOO_BIG if too_big else Verdict.GOOD

    def run_audit(self, username_input: str) -> AuditResult:
        """
        Audit the sizes of a user's merged public pull requests.

        Args:
            username_input: Raw username; surrounding whitespace is ignored

        Returns:
            The audit report

        Raises:
            InvalidInput: If the username is empty
            NoMeasurableData: If no PR could be sized
            AuditError: For any search or fetch failure
        """
        username = (username_input or "").strip()
        if not username:
            raise InvalidInput()

        scope_text = f" in {self.org}" if self.org else ""
        logger.info(f"Starting PR size audit for {username}{scope_text}")

        candidates = self.github_client.search_pull_requests(username, org=self.org)
        summaries = self.size_resolver.resolve(candidates)
        if not summaries:
            raise NoMeasurableData(self.size_resolver.no_data_message)

        buckets = self.count_buckets(summaries)
        total_lines = sum(pr.lines_changed for pr in summaries)
        total_prs = len(summaries)
        # Half-up rounding of the mean
        average_size = (2 * total_lines + total_prs) // (2 * total_prs)
        verdict = self.judge(buckets)

        logger.info(
            f"Audit for {username} completed: {total_prs} PRs, "
            f"average {average_size} lines, verdict {verdict.value}"
        )

        return AuditResult(
            username=username,
            total_prs=total_prs,
            average_size=average_size,
            buckets=buckets,
            prs=tuple(summaries),
            verdict=verdict,
            reason=self.REASONS[verdict],
            scope=self.org,
        )


def run_audit(username_input: str, settings: Optional[AuditSettings] = None) -> AuditResult:
    """Run one audit with settings taken from the environment unless given."""
    if settings is None:
        settings = AuditSettings.from_env()
    return AuditService.from_settings(settings).run_audit(username_input)
