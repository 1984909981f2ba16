"""
Region records produced by one aggregation pass
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd

REGION_COLUMNS = [
    "chromosome",
    "start",
    "end",
    "n_sites",
    "score",
    "effect",
    "min_score",
    "max_abs_effect",
    "direction",
    "fdr",
    "features",
    "site_ids",
]


@dataclass(frozen=True)
class Region:
    """A contiguous run of significant sites on one chromosome"""

    chromosome: str
    start: int
    end: int
    n_sites: int

    # Aggregated statistics
    score: float
    effect: float
    min_score: float
    max_abs_effect: float
    direction: str

    # Member site identifiers in position order
    site_ids: Tuple[str, ...] = ()

    # Filled in after aggregation
    fdr: Optional[float] = None
    features: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def width(self) -> int:
        """Span in base pairs, inclusive of both end positions"""
        return self.end - self.start + 1

    @property
    def name(self) -> str:
        return f"{self.chromosome}:{self.start}-{self.end}"

    def overlaps(self, other: "Region") -> bool:
        return (
            self.chromosome == other.chromosome
            and self.start <= other.end
            and other.start <= self.end
        )

    def to_dict(self) -> Dict[str, Any]:
        record = asdict(self)
        record["site_ids"] = ",".join(self.site_ids)
        record["features"] = ",".join(self.features)
        return record


def regions_to_dataframe(regions: Sequence[Region]) -> pd.DataFrame:
    """Convert regions to a DataFrame with one row per region"""
    if not regions:
        return pd.DataFrame(columns=REGION_COLUMNS)

    return pd.DataFrame([region.to_dict() for region in regions], columns=REGION_COLUMNS)


def summarize_regions(regions: Sequence[Region]) -> Dict[str, Any]:
    """Summary statistics for a set of regions"""
    n_regions = len(regions)
    return {
        "n_regions": n_regions,
        "n_sites_in_regions": sum(r.n_sites for r in regions),
        "n_hyper": sum(r.direction == "hyper" for r in regions),
        "n_hypo": sum(r.direction == "hypo" for r in regions),
        "n_mixed": sum(r.direction == "mixed" for r in regions),
        "median_width": (
            float(pd.Series([r.width for r in regions]).median()) if n_regions else None
        ),
        "min_score": min(r.score for r in regions) if n_regions else None,
        "chromosomes": sorted({r.chromosome for r in regions}),
    }

