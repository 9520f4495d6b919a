"""Runtime configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from pr_audit.domain.buckets import SCALES, STANDARD_SCALE, SizeScale


class SizeStrategy(Enum):
    """How PR sizes are obtained."""

    LABELS = "labels"
    DETAILS = "details"


class VerdictPolicy(Enum):
    """How the bucket distribution is turned into a verdict."""

    RATIO = "ratio"
    MAJORITY = "majority"


def _choice(env: Mapping[str, str], name: str, enum_cls, default):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"{name} must be one of: {allowed} (got '{raw}')") from None


def _integer(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got '{raw}')") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


def _seconds(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds (got '{raw}')") from None
    if not value > 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


@dataclass(frozen=True)
class AuditSettings:
    """Deployment choices for an audit run."""

    github_token: Optional[str] = None
    org: Optional[str] = None
    size_strategy: SizeStrategy = SizeStrategy.LABELS
    verdict_policy: VerdictPolicy = VerdictPolicy.RATIO
    scale: SizeScale = STANDARD_SCALE
    per_page: int = 100
    max_workers: int = 8
    timeout: float = 30

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AuditSettings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from. If None, uses os.environ.

        Raises:
            ValueError: If a variable holds an unsupported value
        """
        if env is None:
            env = os.environ

        scale_name = (env.get("PR_AUDIT_SIZE_SCALE") or STANDARD_SCALE.name).strip().lower()
        if scale_name not in SCALES:
            raise ValueError(
                f"PR_AUDIT_SIZE_SCALE must be one of: {', '.join(SCALES)} (got '{scale_name}')"
            )

        per_page = _integer(env, "PR_AUDIT_PER_PAGE", 100)
        if per_page not in (30, 100):
            raise ValueError(f"PR_AUDIT_PER_PAGE must be 30 or 100 (got {per_page})")

        return cls(
            github_token=env.get("GITHUB_TOKEN") or None,
            org=(env.get("PR_AUDIT_ORG") or "").strip() or None,
            size_strategy=_choice(env, "PR_AUDIT_SIZE_STRATEGY", SizeStrategy, SizeStrategy.LABELS),
            verdict_policy=_choice(env, "PR_AUDIT_VERDICT_POLICY", VerdictPolicy, VerdictPolicy.RATIO),
            scale=SCALES[scale_name],
            per_page=per_page,
            max_workers=_integer(env, "PR_AUDIT_MAX_WORKERS", 8),
            timeout=_seconds(env, "PR_AUDIT_TIMEOUT", 30),
        )
