"""
Region calling module for DMRFlow

This module groups significant per-site statistics into differentially
methylated regions, combines member significance with Stouffer's, Fisher's
or a Sidak-adjusted minimum rule, adjusts region scores for multiple testing,
annotates regions with overlapping features and exports them.
"""

from .aggregator import (AggregationParams, RegionAggregator,
                         RegionCallingResult, adjust_region_scores,
                         aggregate_regions, coerce_sites,
                         partition_by_chromosome, sweep_chromosome)
from .annotation import FeatureAnnotator
from .combine import aggregate_effect, combine_scores, effect_direction
from .export import export_regions_bed, export_regions_csv, export_summary
from .models import Region, regions_to_dataframe, summarize_regions

__all__ = [
    "Region",
    "regions_to_dataframe",
    "summarize_regions",
    "AggregationParams",
    "RegionAggregator",
    "RegionCallingResult",
    "aggregate_regions",
    "adjust_region_scores",
    "coerce_sites",
    "partition_by_chromosome",
    "sweep_chromosome",
    "combine_scores",
    "aggregate_effect",
    "effect_direction",
    "FeatureAnnotator",
    "export_regions_csv",
    "export_regions_bed",
    "export_summary",
]
