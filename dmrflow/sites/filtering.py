"""
Site filtering ahead of region calling
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Set, Union

import pandas as pd

from ..config import Config
from ..config.chromosomes import standardize_chromosome
from ..utils import get_logger, validate_file_exists
from .models import SITE_COLUMNS

logger = get_logger(__name__)


@dataclass
class FilterResult:
    """Sites kept by the filters and the number removed by each rule"""

    sites: pd.DataFrame
    n_input: int
    removed: Dict[str, int] = field(default_factory=dict)

    @property
    def n_kept(self) -> int:
        return len(self.sites)

    @property
    def n_removed(self) -> int:
        return self.n_input - self.n_kept


def load_probe_list(file_path: Union[str, Path]) -> Set[str]:
    """
    Read probe identifiers to exclude

    One identifier per line, or the first column of a CSV/TSV. Blank lines
    and lines starting with '#' are skipped.
    """
    if not validate_file_exists(file_path, "Probe list"):
        raise FileNotFoundError(f"Probe list not found: {file_path}")

    probes = set()
    with open(file_path, "r") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            probes.add(line.replace("\t", ",").split(",")[0].strip())

    logger.info(f"Loaded {len(probes)} probe identifiers from {Path(file_path).name}")
    return probes


class SiteFilter:
    """Apply configured exclusions to a site table"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.filter_params = self.config.filtering

    def apply(
        self,
        sites: pd.DataFrame,
        exclude_probes: Optional[Iterable[str]] = None,
    ) -> FilterResult:
        """
        Filter sites

        Rules run in order: missing values, excluded chromosomes, excluded
        probes, chromosomes outside the configured ordering.

        Args:
            sites: Canonical site table indexed by identifier
            exclude_probes: Identifiers to drop, in addition to any
                filtering.exclude_probes_file

        Returns:
            FilterResult
        """
        n_input = len(sites)
        removed: Dict[str, int] = {}

        if self.filter_params.get("drop_missing", True):
            keep = sites[SITE_COLUMNS].notna().all(axis=1)
            removed["missing_values"] = int((~keep).sum())
            sites = sites[keep]

        excluded_chroms = {
            standardize_chromosome(c)
            for c in self.filter_params.get("exclude_chromosomes") or []
        }
        if excluded_chroms:
            keep = ~sites["chromosome"].isin(excluded_chroms)
            removed["excluded_chromosomes"] = int((~keep).sum())
            sites = sites[keep]

        probes = set(exclude_probes or [])
        probes_file = self.filter_params.get("exclude_probes_file")
        if probes_file:
            probes |= load_probe_list(probes_file)
        if probes:
            keep = ~sites.index.isin(list(probes))
            removed["excluded_probes"] = int((~keep).sum())
            sites = sites[keep]

        if self.filter_params.get("drop_unordered_chromosomes", False):
            order = set(self.config.get_chromosome_order())
            keep = sites["chromosome"].isin(order)
            removed["unordered_chromosomes"] = int((~keep).sum())
            sites = sites[keep]

        result = FilterResult(sites=sites.copy(), n_input=n_input, removed=removed)

        logger.info(f"Site filtering kept {result.n_kept} of {n_input} sites")
        for rule, count in removed.items():
            if count:
                logger.info(f"  - {rule}: {count} removed")

        if result.n_kept == 0:
            logger.warning("No sites left after filtering")

        return result
