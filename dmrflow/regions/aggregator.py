"""
Region aggregation: roll per-site differential statistics up into
spatially contiguous regions

Sites are partitioned by chromosome, sorted by position and swept left to
right. Significant sites (score <= cutoff) accumulate into the open region
until the gap to the previous member exceeds the maximum gap or a
non-significant site lies between them. Each finished run is kept when it
has at least ``min_sites`` members and is summarised with a combined score
and an aggregated effect size.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from statsmodels.stats.multitest import multipletests

from ..config import Config
from ..config.chromosomes import chromosome_ranks, get_chromosome_order
from ..config.config import EFFECT_METHODS, SCORE_METHODS, WEIGHT_SCHEMES
from ..sites.models import SITE_COLUMNS, Site
from ..utils import InvalidInput, get_logger, log_execution_time
from ..utils.validation import (validate_max_gap, validate_min_effect,
                                validate_min_sites, validate_n_jobs,
                                validate_significance_cutoff)
from .combine import aggregate_effect, combine_scores, effect_direction
from .models import Region, regions_to_dataframe, summarize_regions

logger = get_logger(__name__)

SiteInput = Union[
    Mapping[str, Any],
    Iterable[Site],
    pd.DataFrame,
]


@dataclass(frozen=True)
class AggregationParams:
    """Validated thresholds and combination rules for one aggregation pass"""

    significance_cutoff: float
    max_gap: int
    min_sites: int = 1
    min_effect: Optional[float] = None
    score_method: str = "stouffer"
    weights: str = "equal"
    effect_method: str = "mean"

    def __post_init__(self):
        object.__setattr__(
            self,
            "significance_cutoff",
            validate_significance_cutoff(self.significance_cutoff),
        )
        object.__setattr__(self, "max_gap", validate_max_gap(self.max_gap))
        object.__setattr__(self, "min_sites", validate_min_sites(self.min_sites))
        object.__setattr__(self, "min_effect", validate_min_effect(self.min_effect))

        if self.score_method not in SCORE_METHODS:
            raise InvalidInput(f"Unknown score combination method: {self.score_method}")
        if self.weights not in WEIGHT_SCHEMES:
            raise InvalidInput(f"Unknown weighting scheme: {self.weights}")
        if self.effect_method not in EFFECT_METHODS:
            raise InvalidInput(
                f"Unknown effect aggregation method: {self.effect_method}"
            )

    def is_significant(self, site: Site) -> bool:
        return site.score <= self.significance_cutoff


def coerce_sites(sites: SiteInput) -> List[Site]:
    """
    Turn any supported site input into a list of Site records

    Supported inputs are a mapping of identifier -> record, a DataFrame
    indexed by identifier with the canonical site columns, or an iterable of
    Site objects. Identifiers must be unique.
    """
    if isinstance(sites, pd.DataFrame):
        return _sites_from_dataframe(sites)

    if isinstance(sites, Mapping):
        return [Site.from_record(key, record) for key, record in sites.items()]

    result = []
    seen = set()
    for site in sites:
        if not isinstance(site, Site):
            raise InvalidInput(f"Expected Site records, got {type(site).__name__}")
        if site.identifier in seen:
            raise InvalidInput(f"Duplicate site identifier: {site.identifier}")
        seen.add(site.identifier)
        result.append(site)
    return result


def _sites_from_dataframe(df: pd.DataFrame) -> List[Site]:
    missing = [col for col in SITE_COLUMNS if col not in df.columns]
    if missing:
        raise InvalidInput(f"Site table is missing columns: {missing}")

    identifiers = df.index.astype(str)
    if identifiers.has_duplicates:
        duplicated = identifiers[identifiers.duplicated()].unique().tolist()
        raise InvalidInput(f"Duplicate site identifiers: {duplicated[:10]}")

    return [
        Site(identifier, chrom, pos, effect, score)
        for identifier, chrom, pos, effect, score in zip(
            identifiers,
            df["chromosome"],
            df["position"],
            df["effect"],
            df["score"],
        )
    ]


def partition_by_chromosome(
    sites: Sequence[Site], chromosome_order: Sequence[str]
) -> Dict[str, List[Site]]:
    """
    Group sites by chromosome and sort each group by position

    Raises InvalidInput for any chromosome outside the ordering.
    """
    ranks = chromosome_ranks(chromosome_order)
    partitions: Dict[str, List[Site]] = defaultdict(list)

    for site in sites:
        if site.chromosome not in ranks:
            raise InvalidInput(
                f"Site {site.identifier} is on {site.chromosome}, "
                f"which is not in the chromosome ordering"
            )
        partitions[site.chromosome].append(site)

    for members in partitions.values():
        members.sort(key=lambda s: (s.position, s.identifier))

    return dict(partitions)


def sweep_chromosome(sites: Sequence[Site], params: AggregationParams) -> List[Region]:
    """
    Build regions from the sites of one chromosome

    No shared state is touched, so chromosomes can be swept in parallel.
    At a shared position significant sites are visited first, so a tied
    non-significant site never closes the region.
    """
    regions = []
    run: List[Site] = []

    ordered = sorted(
        sites, key=lambda s: (s.position, not params.is_significant(s), s.identifier)
    )

    for site in ordered:
        if params.is_significant(site):
            if run and site.position - run[-1].position > params.max_gap:
                regions.extend(_finalize_run(run, params))
                run = []
            run.append(site)
        elif run and site.position > run[-1].position:
            regions.extend(_finalize_run(run, params))
            run = []

    regions.extend(_finalize_run(run, params))
    return regions


def _finalize_run(run: Sequence[Site], params: AggregationParams) -> List[Region]:
    if not run or len(run) < params.min_sites:
        return []

    scores = [s.score for s in run]
    effects = [s.effect for s in run]

    return [
        Region(
            chromosome=run[0].chromosome,
            start=min(s.position for s in run),
            end=max(s.position for s in run),
            n_sites=len(run),
            score=combine_scores(
                scores, effects, method=params.score_method, weights=params.weights
            ),
            effect=aggregate_effect(effects, method=params.effect_method),
            min_score=min(scores),
            max_abs_effect=float(np.max(np.abs(effects))),
            direction=effect_direction(effects),
            site_ids=tuple(s.identifier for s in run),
        )
    ]


@log_execution_time
def aggregate_regions(
    sites: SiteInput,
    significance_cutoff: float,
    max_gap: int,
    min_sites: int = 1,
    min_effect: Optional[float] = None,
    chromosome_order: Optional[Sequence[str]] = None,
    genome_build: Optional[str] = "hg38",
    score_method: str = "stouffer",
    weights: str = "equal",
    effect_method: str = "mean",
    fdr_method: Optional[str] = "fdr_bh",
    n_jobs: int = 1,
) -> List[Region]:
    """
    Aggregate significant sites into regions

    Args:
        sites: Mapping of identifier -> (chromosome, position, effect, score),
            a site DataFrame or an iterable of Site records
        significance_cutoff: Sites with score <= cutoff are significant; (0, 1]
        max_gap: Largest allowed distance in bp between consecutive members
        min_sites: Smallest number of members a region may have
        min_effect: Drop regions whose |aggregated effect| is below this
        chromosome_order: Explicit chromosome ordering
        genome_build: Named ordering used when chromosome_order is not given
        score_method: "stouffer", "fisher" or "min_p"
        weights: Stouffer weights, "equal" or "effect"
        effect_method: "mean", "median" or "max_abs"
        fdr_method: statsmodels multipletests method for region-level
            adjustment, or None to skip it
        n_jobs: joblib workers for the per-chromosome sweep

    Returns:
        Regions in chromosome order, then position order
    """
    params = AggregationParams(
        significance_cutoff=significance_cutoff,
        max_gap=max_gap,
        min_sites=min_sites,
        min_effect=min_effect,
        score_method=score_method,
        weights=weights,
        effect_method=effect_method,
    )
    n_jobs = validate_n_jobs(n_jobs)
    order = get_chromosome_order(genome_build, chromosome_order)

    site_list = coerce_sites(sites)
    partitions = partition_by_chromosome(site_list, order)

    n_significant = sum(params.is_significant(s) for s in site_list)
    logger.debug(
        f"{len(site_list)} sites on {len(partitions)} chromosomes, "
        f"{n_significant} pass cutoff {params.significance_cutoff}"
    )

    if n_significant == 0:
        logger.warning("No sites pass the significance cutoff; no regions called")
        return []

    chromosomes = [chrom for chrom in order if chrom in partitions]

    if n_jobs == 1 or len(chromosomes) < 2:
        per_chromosome = [sweep_chromosome(partitions[c], params) for c in chromosomes]
    else:
        per_chromosome = Parallel(n_jobs=n_jobs)(
            delayed(sweep_chromosome)(partitions[c], params) for c in chromosomes
        )

    regions = [region for chunk in per_chromosome for region in chunk]

    if params.min_effect is not None:
        before = len(regions)
        regions = [r for r in regions if abs(r.effect) >= params.min_effect]
        logger.debug(
            f"Effect size filter |effect| >= {params.min_effect} "
            f"removed {before - len(regions)} regions"
        )

    if fdr_method and regions:
        regions = adjust_region_scores(regions, method=fdr_method)

    return regions


def adjust_region_scores(
    regions: Sequence[Region], method: str = "fdr_bh"
) -> List[Region]:
    """Attach multiple-testing adjusted region scores"""
    scores = np.array([r.score for r in regions], dtype=float)

    try:
        adjusted = multipletests(scores, method=method)[1]
    except ValueError as e:
        raise InvalidInput(f"Invalid multiple testing method '{method}': {e}")

    return [replace(region, fdr=float(q)) for region, q in zip(regions, adjusted)]


@dataclass
class RegionCallingResult:
    """Result of one region calling run"""

    regions: List[Region]
    n_sites: int
    n_significant_sites: int
    params: Dict[str, Any] = field(default_factory=dict)
    execution_time: Optional[float] = None

    @property
    def n_regions(self) -> int:
        return len(self.regions)

    def to_dataframe(self) -> pd.DataFrame:
        return regions_to_dataframe(self.regions)

    def summary(self) -> Dict[str, Any]:
        summary = {
            "n_sites": self.n_sites,
            "n_significant_sites": self.n_significant_sites,
            **summarize_regions(self.regions),
            "execution_time": self.execution_time,
        }
        summary.update({f"param_{k}": v for k, v in self.params.items()})
        return summary


class RegionAggregator:
    """Configured region caller"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.region_params = dict(self.config.regions)
        self.chromosome_order = self.config.get_chromosome_order()

    def call_regions(self, sites: SiteInput, **overrides) -> RegionCallingResult:
        """
        Aggregate sites with the configured parameters

        Keyword overrides replace individual region parameters for this call
        only; the configuration itself is not modified.
        """
        params = {**self.region_params, **overrides}
        start_time = time.time()

        site_list = coerce_sites(sites)
        cutoff = validate_significance_cutoff(params["significance_cutoff"])
        n_significant = sum(s.score <= cutoff for s in site_list)

        logger.info(
            f"Calling regions on {len(site_list)} sites "
            f"(cutoff={cutoff}, max_gap={params['max_gap']}, "
            f"min_sites={params['min_sites']})"
        )

        regions = aggregate_regions(
            site_list,
            significance_cutoff=cutoff,
            max_gap=params["max_gap"],
            min_sites=params["min_sites"],
            min_effect=params.get("min_effect"),
            chromosome_order=self.chromosome_order,
            score_method=params.get("score_method", "stouffer"),
            weights=params.get("weights", "equal"),
            effect_method=params.get("effect_method", "mean"),
            fdr_method=params.get("fdr_method", "fdr_bh"),
            n_jobs=params.get("n_jobs", 1),
        )

        result = RegionCallingResult(
            regions=regions,
            n_sites=len(site_list),
            n_significant_sites=n_significant,
            params=params,
            execution_time=time.time() - start_time,
        )

        logger.info(
            f"Called {result.n_regions} regions from {n_significant} significant sites"
        )

        return result
