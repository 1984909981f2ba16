"""
Site statistics module for DMRFlow

Per-site differential methylation statistics come from an external
normalization and testing tool. This module loads them into a canonical
table keyed by site identifier and applies probe-level exclusions.
"""

from .filtering import FilterResult, SiteFilter, load_probe_list
from .loader import SiteLoader, infer_separator, read_table
from .models import SITE_COLUMNS, Site

__all__ = [
    "Site",
    "SITE_COLUMNS",
    "SiteLoader",
    "read_table",
    "infer_separator",
    "SiteFilter",
    "FilterResult",
    "load_probe_list",
]
