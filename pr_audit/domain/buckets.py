"""Size buckets and the classifiers that map PRs onto them."""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Dict, Iterable, Optional, Tuple


@total_ordering
class Bucket(Enum):
    """Size class of a pull request, ordered from smallest to largest."""
    
    XS = "xs"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"
    XXL = "xxl"
    
    @property
    def rank(self) -> int:
        return _BUCKET_ORDER.index(self)
    
    def __lt__(self, other: "Bucket") -> bool:
        if not isinstance(other, Bucket):
            return NotImplemented
        return self.rank < other.rank


_BUCKET_ORDER = list(Bucket)


@dataclass(frozen=True)
class SizeScale:
    """
    Inclusive upper line-count bounds for every bucket but the last.
    
    The last bucket in ``buckets`` is open-ended.
    """
    
    name: str
    buckets: Tuple[Bucket, ...]
    upper_bounds: Tuple[int, ...]
    
    def __post_init__(self):
        if len(self.upper_bounds) != len(self.buckets) - 1:
            raise ValueError(f"Scale '{self.name}' needs {len(self.buckets) - 1} bounds")
        if list(self.upper_bounds) != sorted(set(self.upper_bounds)):
            raise ValueError(f"Scale '{self.name}' bounds must be strictly increasing")
    
    @property
    def oversized(self) -> Tuple[Bucket, ...]:
        """Buckets above ``lg``; these drive the verdict."""
        return tuple(bucket for bucket in self.buckets if bucket.rank > Bucket.LG.rank)
    
    def range_text(self, bucket: Bucket) -> str:
        index = self.buckets.index(bucket)
        lower = 1 if index == 0 else self.upper_bounds[index - 1] + 1
        if index == len(self.upper_bounds):
            return f"{lower}+"
        return f"{lower}-{self.upper_bounds[index]}"


STANDARD_SCALE = SizeScale(
    name="standard",
    buckets=(Bucket.XS, Bucket.SM, Bucket.MD, Bucket.LG, Bucket.XL),
    upper_bounds=(10, 100, 500, 1000),
)

EXTENDED_SCALE = SizeScale(
    name="extended",
    buckets=(Bucket.XS, Bucket.SM, Bucket.MD, Bucket.LG, Bucket.XL, Bucket.XXL),
    upper_bounds=(10, 100, 500, 1000, 2000),
)

SCALES: Dict[str, SizeScale] = {scale.name: scale for scale in (STANDARD_SCALE, EXTENDED_SCALE)}

# Representative line counts used when only a size label is known
ESTIMATED_LINES: Dict[Bucket, int] = {
    Bucket.XS: 5,
    Bucket.SM: 55,
    Bucket.MD: 300,
    Bucket.LG: 750,
    Bucket.XL: 1250,
    Bucket.XXL: 2500,
}

SIZE_LABELS: Dict[str, Bucket] = {
    "size-xs": Bucket.XS,
    "size-s": Bucket.SM,
    "size-sm": Bucket.SM,
    "size-m": Bucket.MD,
    "size-md": Bucket.MD,
    "size-l": Bucket.LG,
    "size-lg": Bucket.LG,
    "size-xl": Bucket.XL,
    "size-xxl": Bucket.XXL,
}


def classify_by_size(lines_changed: int, scale: SizeScale = STANDARD_SCALE) -> Bucket:
    """
    Map a changed-line count to its bucket.
    
    Args:
        lines_changed: Additions plus deletions (must be non-negative)
        scale: Bucket boundaries to classify against
        
    Returns:
        The bucket whose inclusive range contains ``lines_changed``
    """
    if lines_changed < 0:
        raise ValueError(f"lines_changed must be non-negative, got {lines_changed}")
    
    for bucket, upper_bound in zip(scale.buckets, scale.upper_bounds):
        if lines_changed <= upper_bound:
            return bucket
    return scale.buckets[-1]


def classify_by_label(label_names: Iterable[str]) -> Optional[Bucket]:
    """
    Map PR label names to a bucket.
    
    Matching is case-insensitive and ignores surrounding whitespace. The
    first recognized label wins. Returns None when no size label is present.
    """
    for name in label_names:
        bucket = SIZE_LABELS.get(name.strip().lower())
        if bucket is not None:
            return bucket
    return None


def bucket_labels(scale: SizeScale = STANDARD_SCALE) -> Dict[Bucket, str]:
    """Display labels such as ``"sm: 11-100"`` for each bucket of the scale."""
    return {bucket: f"{bucket.value}: {scale.range_text(bucket)}" for bucket in scale.buckets}
