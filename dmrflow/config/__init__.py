"""
Configuration management for DMRFlow

This module provides configuration loading, validation, and chromosome
ordering for the DMRFlow region calling pipeline.
"""

from .chromosomes import (GENOME_BUILDS, chromosome_ranks,
                          get_chromosome_order, standardize_chromosome)
from .config import (Config, get_default_config, load_config, save_config,
                     validate_config)

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
    "GENOME_BUILDS",
    "get_chromosome_order",
    "chromosome_ranks",
    "standardize_chromosome",
]
