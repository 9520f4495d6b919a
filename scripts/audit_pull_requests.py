#!/usr/bin/env python3
"""Script to audit the size of a GitHub user's merged pull requests."""

import argparse
import json
import logging
import sys
import os
from dataclasses import replace

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pr_audit.application.audit_service import AuditService
from pr_audit.config import AuditSettings, SizeStrategy, VerdictPolicy
from pr_audit.domain.audit_result import AuditResult
from pr_audit.domain.buckets import SCALES, bucket_labels
from pr_audit.domain.errors import AuditError

logger = logging.getLogger(__name__)

MAX_LISTED_PRS = 20


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Check whether a GitHub user's PRs are too big.")
    parser.add_argument("username", help="GitHub username to audit")
    parser.add_argument("--org", help="Only count PRs in this organization's repositories")
    parser.add_argument("--strategy", choices=[s.value for s in SizeStrategy],
                        help="Size from labels (one request) or PR details (one request per PR)")
    parser.add_argument("--policy", choices=[p.value for p in VerdictPolicy],
                        help="Verdict rule")
    parser.add_argument("--scale", choices=list(SCALES), help="Bucket boundaries")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser.parse_args(argv)


def apply_overrides(settings: AuditSettings, args) -> AuditSettings:
    """Command-line flags take precedence over environment variables."""
    overrides = {}
    if args.org:
        overrides["org"] = args.org
    if args.strategy:
        overrides["size_strategy"] = SizeStrategy(args.strategy)
    if args.policy:
        overrides["verdict_policy"] = VerdictPolicy(args.policy)
    if args.scale:
        overrides["scale"] = SCALES[args.scale]
    return replace(settings, **overrides)


def render_report(result: AuditResult, settings: AuditSettings) -> str:
    labels = bucket_labels(settings.scale)
    scope = f" ({result.scope})" if result.scope else ""
    lines = [
        f"PR size audit for {result.username}{scope}",
        f"Total PRs: {result.total_prs}",
        f"Average size: {result.average_size} lines",
        "",
    ]
    for bucket, count in result.buckets.items():
        lines.append(f"  {labels[bucket]:<14} {count}")
    lines += [
        "",
        f"Verdict: {result.verdict.value}",
        result.reason,
        "",
    ]
    for pr in result.prs[:MAX_LISTED_PRS]:
        lines.append(f"  [{pr.lines_changed:>5}] {pr.repository}: {pr.title}")
    if result.total_prs > MAX_LISTED_PRS:
        lines.append(f"  ... and {result.total_prs - MAX_LISTED_PRS} more")
    return "\n".join(lines)


def resolve_log_level(raw_level, verbose: bool = False) -> int:
    """
    Pick the logging level; ``-v`` always means INFO.

    Raises:
        ValueError: If PR_AUDIT_LOG_LEVEL is not a known level name
    """
    if verbose:
        return logging.INFO
    if raw_level is None or not raw_level.strip():
        return logging.WARNING
    level = logging.getLevelName(raw_level.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"PR_AUDIT_LOG_LEVEL must be a logging level name (got '{raw_level}')")
    return level


def main(argv=None):
    """Audit one user and print the report."""
    args = parse_args(argv)

    try:
        level = resolve_log_level(os.getenv("PR_AUDIT_LOG_LEVEL"), args.verbose)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        settings = apply_overrides(AuditSettings.from_env(), args)
        if not settings.github_token:
            logger.info("GITHUB_TOKEN not found. Using unauthenticated requests (limited rate).")

        result = AuditService.from_settings(settings).run_audit(args.username)
    except (AuditError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Audit failed: {e}", exc_info=True)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_report(result, settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
