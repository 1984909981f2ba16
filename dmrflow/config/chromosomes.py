"""
Chromosome naming and ordering for DMRFlow

Orders are plain data resolved per call; nothing here is mutated at runtime.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Union

from ..utils.validation import InvalidInput

logger = logging.getLogger(__name__)


def _human(n_autosomes: int) -> List[str]:
    return [f"chr{i}" for i in range(1, n_autosomes + 1)] + ["chrX", "chrY", "chrM"]


GENOME_BUILDS: Dict[str, List[str]] = {
    "hg19": _human(22),
    "hg38": _human(22),
    "mm10": _human(19),
    "mm39": _human(19),
}

_ALIASES = {
    "MT": "M",
    "M": "M",
    "23": "X",
    "24": "Y",
}

_CHR_PREFIX = re.compile(r"^chr", re.IGNORECASE)


def standardize_chromosome(name: Union[str, int]) -> str:
    """
    Standardize a chromosome name to UCSC style

    Examples:
        "1" -> "chr1", "chrx" -> "chrX", "MT" -> "chrM", 7 -> "chr7"
    """
    text = str(name).strip()
    if not text:
        raise InvalidInput("Empty chromosome name")

    # Integer-valued floats come out of pandas as "7.0"
    if re.fullmatch(r"\d+\.0", text):
        text = text[:-2]

    bare = _CHR_PREFIX.sub("", text)
    upper = bare.upper()

    if upper in _ALIASES:
        bare = _ALIASES[upper]
    elif upper in ("X", "Y"):
        bare = upper

    return f"chr{bare}"


def get_chromosome_order(
    genome_build: Optional[str] = "hg38",
    chromosome_order: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Resolve the chromosome ordering used to sort and validate sites

    Args:
        genome_build: Name of a known build (hg19, hg38, mm10, mm39)
        chromosome_order: Explicit ordering; takes precedence over the build

    Returns:
        List of standardized chromosome names in order
    """
    if chromosome_order:
        order = [standardize_chromosome(c) for c in chromosome_order]
        duplicates = sorted({c for c in order if order.count(c) > 1})
        if duplicates:
            raise InvalidInput(f"Duplicate chromosomes in ordering: {duplicates}")
        return order

    if genome_build is None:
        raise InvalidInput("Either genome_build or chromosome_order must be given")

    try:
        return list(GENOME_BUILDS[genome_build])
    except KeyError:
        raise InvalidInput(
            f"Unknown genome build: {genome_build}. "
            f"Available builds: {sorted(GENOME_BUILDS)}"
        )


def chromosome_ranks(order: Sequence[str]) -> Dict[str, int]:
    return {chrom: rank for rank, chrom in enumerate(order)}
