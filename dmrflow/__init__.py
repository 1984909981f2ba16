"""
DMRFlow: differentially methylated region calling for methylation arrays

DMRFlow takes per-site differential methylation statistics from an upstream
normalization and testing tool (e.g. an Illumina EPICv2 workflow), filters
probes, and rolls significant sites up into spatially contiguous
differentially methylated regions with combined significance scores.

Main Components:
- Site statistics loading and manifest joins
- Probe filtering
- Region aggregation with Stouffer / Fisher / minimum-p combination
- Region-level multiple testing correction
- Gene-model feature annotation and CSV/BED export

Example:
    >>> from dmrflow import aggregate_regions
    >>> sites = {
    ...     "cg1": ("chr1", 100, 0.2, 0.001),
    ...     "cg2": ("chr1", 150, 0.3, 0.004),
    ... }
    >>> regions = aggregate_regions(sites, significance_cutoff=0.05, max_gap=200)
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("dmrflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

from . import config, regions, sites, utils
from .config import Config, load_config
from .core import DMRAnalysis
from .regions import Region, RegionAggregator, aggregate_regions
from .sites import Site
from .utils import InvalidInput, setup_logging, validate_environment

__all__ = [
    "__version__",
    "DMRAnalysis",
    "Config",
    "load_config",
    "setup_logging",
    "validate_environment",
    "InvalidInput",
    "Site",
    "Region",
    "RegionAggregator",
    "aggregate_regions",
    "config",
    "sites",
    "regions",
    "utils",
]


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "DMRFlow",
        "version": __version__,
        "description": "Differentially methylated region calling for methylation arrays",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": ["config", "sites", "regions", "utils"],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    from .utils.validation import CORE_PACKAGES, validate_python_packages

    return validate_python_packages(CORE_PACKAGES)


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
