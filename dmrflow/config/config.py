"""
Core configuration management for DMRFlow
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..utils.validation import InvalidInput
from .chromosomes import get_chromosome_order

logger = logging.getLogger(__name__)

SCORE_METHODS = ("stouffer", "fisher", "min_p")
WEIGHT_SCHEMES = ("equal", "effect")
EFFECT_METHODS = ("mean", "median", "max_abs")


@dataclass
class Config:
    """Main configuration class for a DMRFlow analysis"""

    # General settings
    project_name: str = "DMRFlow_Analysis"
    genome_build: Optional[str] = "hg38"
    chromosome_order: Optional[List[str]] = None

    # Input/Output paths
    output_dir: Optional[str] = None

    # Analysis parameters
    sites: Dict[str, Any] = field(default_factory=dict)
    filtering: Dict[str, Any] = field(default_factory=dict)
    regions: Dict[str, Any] = field(default_factory=dict)
    annotation: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill in defaults for any section or key left out"""
        default_sites = self._get_default_sites()
        user_sites = dict(self.sites or {})
        columns = {
            **default_sites["columns"],
            **(user_sites.pop("columns", None) or {}),
        }
        self.sites = {**default_sites, **user_sites, "columns": columns}
        self.filtering = {**self._get_default_filtering(), **(self.filtering or {})}
        self.regions = {**self._get_default_regions(), **(self.regions or {})}
        self.annotation = {
            **self._get_default_annotation(),
            **(self.annotation or {}),
        }

    def _get_default_sites(self) -> Dict[str, Any]:
        """Default site table layout"""
        return {
            "stats_file": None,
            "manifest_file": None,
            "sep": None,
            "columns": {
                "id": "probe_id",
                "chromosome": "chr",
                "position": "pos",
                "effect": "delta_beta",
                "score": "p_value",
            },
        }

    def _get_default_filtering(self) -> Dict[str, Any]:
        """Default site filtering"""
        return {
            "drop_missing": True,
            "exclude_chromosomes": [],
            "exclude_probes_file": None,
            "drop_unordered_chromosomes": False,
        }

    def _get_default_regions(self) -> Dict[str, Any]:
        """Default region calling parameters"""
        return {
            "significance_cutoff": 0.05,
            "max_gap": 1000,
            "min_sites": 2,
            "min_effect": None,
            "score_method": "stouffer",
            "weights": "equal",
            "effect_method": "mean",
            "fdr_method": "fdr_bh",
            "n_jobs": 1,
        }

    def _get_default_annotation(self) -> Dict[str, Any]:
        """Default feature annotation"""
        return {
            "features_file": None,
            "flank": 0,
            "name_column": "name",
        }

    def get_chromosome_order(self) -> List[str]:
        return get_chromosome_order(self.genome_build, self.chromosome_order)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_file: Union[str, Path]) -> Config:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_dict = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_dict = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return Config(**(config_dict or {}))


def save_config(config: Config, output_file: Union[str, Path]) -> None:
    """Save configuration to a YAML or JSON file"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if output_path.suffix.lower() == ".json":
            json.dump(config.to_dict(), f, indent=2)
        else:
            yaml.dump(config.to_dict(), f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []

    try:
        config.get_chromosome_order()
    except InvalidInput as e:
        issues.append(str(e))

    regions = config.regions

    cutoff = regions.get("significance_cutoff")
    if not isinstance(cutoff, (int, float)) or not 0 < cutoff <= 1:
        issues.append("Significance cutoff must be in (0, 1]")

    max_gap = regions.get("max_gap")
    if not isinstance(max_gap, int) or isinstance(max_gap, bool) or max_gap < 0:
        issues.append("Maximum gap must be a non-negative integer")

    min_sites = regions.get("min_sites")
    if not isinstance(min_sites, int) or isinstance(min_sites, bool) or min_sites < 1:
        issues.append("Minimum sites must be an integer >= 1")

    min_effect = regions.get("min_effect")
    if min_effect is not None and (
        not isinstance(min_effect, (int, float)) or min_effect < 0
    ):
        issues.append("Minimum effect size must be a non-negative number")

    if regions.get("score_method") not in SCORE_METHODS:
        issues.append(
            f"Score method must be one of {list(SCORE_METHODS)}, "
            f"got {regions.get('score_method')}"
        )

    if regions.get("weights") not in WEIGHT_SCHEMES:
        issues.append(
            f"Weights must be one of {list(WEIGHT_SCHEMES)}, got {regions.get('weights')}"
        )

    if regions.get("effect_method") not in EFFECT_METHODS:
        issues.append(
            f"Effect method must be one of {list(EFFECT_METHODS)}, "
            f"got {regions.get('effect_method')}"
        )

    n_jobs = regions.get("n_jobs", 1)
    if not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or n_jobs == 0:
        issues.append("Number of jobs must be a non-zero integer")

    columns = config.sites.get("columns", {})
    for key in ["id", "chromosome", "position", "effect", "score"]:
        if not columns.get(key):
            issues.append(f"Site column mapping is missing '{key}'")

    flank = config.annotation.get("flank", 0)
    if not isinstance(flank, int) or isinstance(flank, bool) or flank < 0:
        issues.append("Annotation flank must be a non-negative integer")

    return issues


def get_default_config() -> Config:
    """Get default configuration object"""
    return Config()
