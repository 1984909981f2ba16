"""
Core DMRFlow analysis orchestrator
"""

import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .config import Config, load_config, validate_config
from .regions import (FeatureAnnotator, RegionAggregator, RegionCallingResult,
                      export_regions_bed, export_regions_csv, export_summary)
from .sites import FilterResult, SiteFilter, SiteLoader
from .utils import (InvalidInput, get_logger, setup_logging,
                    validate_directory_exists)

logger = get_logger(__name__)

DEFAULT_STEPS = ["load_sites", "filter_sites", "call_regions", "annotate", "export"]


class DMRAnalysis:
    """
    Main orchestrator for the DMRFlow region calling workflow

    Sequences loading of per-site statistics, probe filtering, region
    aggregation, feature annotation and export. Every step reads its
    parameters from the configuration given at construction.
    """

    def __init__(
        self,
        config: Union[str, Path, Config, Dict[str, Any], None] = None,
        log_level: Optional[str] = None,
        log_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize DMRFlow analysis

        Args:
            config: Configuration file path, Config object, or config dict
            log_level: Logging level to configure; None leaves logging as is
            log_file: Optional log file path
        """
        if log_level is not None or log_file is not None:
            setup_logging(level=log_level or "INFO", log_file=log_file)

        if config is None:
            self.config = Config()
        elif isinstance(config, (str, Path)):
            self.config = load_config(config)
        elif isinstance(config, dict):
            self.config = Config(**config)
        elif isinstance(config, Config):
            self.config = config
        else:
            raise InvalidInput(
                "Invalid config type. Expected str, Path, dict, or Config object"
            )

        issues = validate_config(self.config)
        if issues:
            for issue in issues:
                logger.error(f"  - {issue}")
            raise InvalidInput(f"Configuration has {len(issues)} issue(s): {issues}")

        self.loader = SiteLoader(self.config)
        self.site_filter = SiteFilter(self.config)
        self.aggregator = RegionAggregator(self.config)
        self.annotator = FeatureAnnotator(self.config)

        self.results: Dict[str, Any] = {}
        self.execution_times: Dict[str, float] = {}

    @property
    def output_dir(self) -> Optional[Path]:
        return Path(self.config.output_dir) if self.config.output_dir else None

    def load_sites(
        self,
        stats: Optional[Union[str, Path, pd.DataFrame]] = None,
        manifest: Optional[Union[str, Path, pd.DataFrame]] = None,
    ) -> pd.DataFrame:
        sites = self.loader.load(stats, manifest)
        self.results["load_sites"] = sites
        return sites

    def filter_sites(
        self,
        sites: Optional[pd.DataFrame] = None,
        exclude_probes: Optional[Iterable[str]] = None,
    ) -> FilterResult:
        sites = sites if sites is not None else self._require("load_sites")
        result = self.site_filter.apply(sites, exclude_probes=exclude_probes)
        self.results["filter_sites"] = result
        return result

    def call_regions(
        self, sites: Optional[pd.DataFrame] = None, **overrides
    ) -> RegionCallingResult:
        if sites is None:
            sites = self._require("filter_sites").sites
        result = self.aggregator.call_regions(sites, **overrides)
        self.results["call_regions"] = result
        return result

    def annotate(
        self, features: Optional[Union[str, Path, pd.DataFrame]] = None
    ) -> RegionCallingResult:
        """Attach overlapping features to the called regions"""
        calling = self._require("call_regions")

        if features is None and not self.config.annotation.get("features_file"):
            logger.info("No feature annotation configured; skipping annotation")
            return calling

        self.annotator.load_features(features)
        calling.regions = self.annotator.annotate(calling.regions)
        return calling

    def export(self, output_dir: Optional[Union[str, Path]] = None) -> Dict[str, Path]:
        """Write regions (CSV, BED) and a run summary"""
        calling = self._require("call_regions")

        out = Path(output_dir) if output_dir else self.output_dir
        if out is None:
            raise InvalidInput("No output directory configured")
        if not validate_directory_exists(out, create_if_missing=True):
            raise InvalidInput(f"Cannot write to output directory: {out}")

        prefix = self.config.project_name
        files = {
            "regions_csv": export_regions_csv(
                calling.regions, out / f"{prefix}_regions.csv"
            ),
            "regions_bed": export_regions_bed(
                calling.regions, out / f"{prefix}_regions.bed", track_name=prefix
            ),
            "summary": export_summary(self.summary(), out / f"{prefix}_summary.json"),
        }
        self.results["export"] = files
        return files

    def run_full_pipeline(
        self,
        stats: Optional[Union[str, Path, pd.DataFrame]] = None,
        manifest: Optional[Union[str, Path, pd.DataFrame]] = None,
        features: Optional[Union[str, Path, pd.DataFrame]] = None,
        steps: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Run the DMRFlow workflow

        Args:
            stats: Site statistics (defaults to sites.stats_file)
            manifest: Optional probe manifest (defaults to sites.manifest_file)
            features: Optional feature annotation (defaults to
                annotation.features_file)
            steps: Subset of steps to run, in order

        Returns:
            Dictionary of step name -> step result
        """
        logger.info("=" * 60)
        logger.info("Starting DMRFlow region calling pipeline")
        logger.info("=" * 60)

        start_time = time.time()
        steps = steps or list(DEFAULT_STEPS)

        for step in steps:
            step_start = time.time()
            logger.info(f"{'=' * 20} STEP: {step.upper()} {'=' * 20}")

            if step == "load_sites":
                self.load_sites(stats, manifest)
            elif step == "filter_sites":
                self.filter_sites()
            elif step == "call_regions":
                self.call_regions()
            elif step == "annotate":
                self.annotate(features)
            elif step == "export":
                if self.output_dir is None:
                    logger.warning("No output directory configured; skipping export")
                    continue
                self.export()
            else:
                raise InvalidInput(f"Unknown pipeline step: {step}")

            step_time = time.time() - step_start
            self.execution_times[step] = step_time
            logger.info(f"Step {step} completed in {step_time:.2f} seconds")

        total_time = time.time() - start_time
        self.execution_times["total"] = total_time

        logger.info("=" * 60)
        logger.info(f"DMRFlow pipeline completed in {total_time:.2f} seconds")
        logger.info("=" * 60)

        return self.results

    def summary(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"project_name": self.config.project_name}

        if "filter_sites" in self.results:
            filtering = self.results["filter_sites"]
            summary["sites_input"] = filtering.n_input
            summary["sites_kept"] = filtering.n_kept
            summary["sites_removed"] = filtering.removed

        if "call_regions" in self.results:
            summary.update(self.results["call_regions"].summary())

        summary["execution_times"] = dict(self.execution_times)
        return summary

    def get_execution_times(self) -> Dict[str, float]:
        return self.execution_times.copy()

    def _require(self, step: str) -> Any:
        if step not in self.results:
            raise RuntimeError(f"Step '{step}' must be run first")
        return self.results[step]
