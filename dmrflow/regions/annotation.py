"""
Feature annotation for called regions

Regions are annotated with the names of gene-model features they overlap.
Features are loaded once per annotator and kept as per-chromosome tables
sorted by start.
"""

import gzip
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import Config
from ..config.chromosomes import standardize_chromosome
from ..sites.loader import infer_separator
from ..utils import InvalidInput, get_logger, validate_file_exists
from .models import Region

logger = get_logger(__name__)

BED_COLUMNS = ["chrom", "start", "end", "name"]
_CHROM_ALIASES = ["chrom", "chromosome", "chr", "seqname"]


class FeatureAnnotator:
    """Annotate regions with overlapping gene-model features"""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize feature annotator

        Args:
            config: DMRFlow configuration object
        """
        self.config = config or Config()
        self.annotation_params = self.config.annotation

        self.flank = int(self.annotation_params.get("flank", 0) or 0)
        if self.flank < 0:
            raise InvalidInput(f"Annotation flank cannot be negative: {self.flank}")

        self.name_column = self.annotation_params.get("name_column", "name")

        # Cache for loaded features
        self.features_by_chr: Dict[str, pd.DataFrame] = {}
        self._features_loaded = False

    def load_features(
        self, features: Optional[Union[str, Path, pd.DataFrame]] = None
    ) -> Dict[str, pd.DataFrame]:
        """
        Load a feature table

        BED files (0-based, half-open) are shifted to 1-based inclusive
        coordinates. CSV/TSV tables need a header with chromosome, start,
        end and name columns and are taken as 1-based inclusive.

        Args:
            features: Feature file or DataFrame; defaults to
                annotation.features_file

        Returns:
            Dictionary mapping chromosome names to feature DataFrames
        """
        if features is None:
            features = self.annotation_params.get("features_file")
        if features is None:
            raise InvalidInput("No feature annotation given")

        if isinstance(features, pd.DataFrame):
            features_df = self._standardize_columns(features.copy())
        else:
            features_df = self._read_feature_file(Path(features))

        features_df = features_df.dropna(subset=["chrom", "start", "end"]).copy()
        features_df["chrom"] = features_df["chrom"].map(standardize_chromosome)
        features_df["start"] = features_df["start"].astype(int)
        features_df["end"] = features_df["end"].astype(int)
        features_df["name"] = features_df["name"].astype(str)

        inverted = features_df["end"] < features_df["start"]
        if inverted.any():
            logger.warning(f"Dropping {int(inverted.sum())} features with end < start")
            features_df = features_df[~inverted]

        self.features_by_chr = {
            chrom: group.sort_values(["start", "end"]).reset_index(drop=True)
            for chrom, group in features_df.groupby("chrom", sort=False)
        }
        self._features_loaded = True

        logger.info(
            f"Loaded {len(features_df)} features on {len(self.features_by_chr)} chromosomes"
        )
        return self.features_by_chr

    def _read_feature_file(self, path: Path) -> pd.DataFrame:
        if not validate_file_exists(path, "Feature annotation"):
            raise FileNotFoundError(f"Feature annotation not found: {path}")

        logger.info(f"Loading feature annotation from {path.name}")

        if ".bed" in [s.lower() for s in path.suffixes]:
            bed = pd.read_csv(
                path,
                sep="\t",
                header=None,
                comment="#",
                skiprows=self._count_bed_header_lines(path),
            )
            if bed.shape[1] < 4:
                raise InvalidInput(f"BED file needs at least 4 columns: {path}")
            bed = bed.iloc[:, :4].copy()
            bed.columns = BED_COLUMNS
            bed["start"] = bed["start"].astype(int) + 1
            return bed

        table = pd.read_csv(path, sep=infer_separator(path))
        return self._standardize_columns(table)

    @staticmethod
    def _count_bed_header_lines(path: Path) -> int:
        """Leading track/browser lines, which have a different field count"""
        n = 0
        opener = gzip.open if path.suffix.lower() == ".gz" else open
        with opener(path, "rt") as f:
            for line in f:
                if not line.startswith(("track", "browser")):
                    break
                n += 1
        return n

    def _standardize_columns(self, table: pd.DataFrame) -> pd.DataFrame:
        lowered = {col: str(col).lower() for col in table.columns}
        table = table.rename(columns=lowered)

        chrom_column = next((c for c in _CHROM_ALIASES if c in table.columns), None)
        name_column = self.name_column.lower()

        missing = [
            label
            for label, column in [
                ("chromosome", chrom_column),
                ("start", "start" if "start" in table.columns else None),
                ("end", "end" if "end" in table.columns else None),
                (name_column, name_column if name_column in table.columns else None),
            ]
            if column is None
        ]
        if missing:
            raise InvalidInput(f"Feature table is missing columns: {missing}")

        table = table[[chrom_column, "start", "end", name_column]]
        table.columns = BED_COLUMNS
        return table

    def overlapping_features(self, chromosome: str, start: int, end: int) -> List[str]:
        """Names of features overlapping [start - flank, end + flank]"""
        features = self.features_by_chr.get(chromosome)
        if features is None or features.empty:
            return []

        window_start = start - self.flank
        window_end = end + self.flank

        # Features are sorted by start; anything starting past the window is out
        n_candidates = np.searchsorted(
            features["start"].to_numpy(), window_end, side="right"
        )
        candidates = features.iloc[:n_candidates]
        hits = candidates[candidates["end"].to_numpy() >= window_start]

        return list(dict.fromkeys(hits["name"]))

    def annotate(self, regions: Sequence[Region]) -> List[Region]:
        """Return copies of the regions with their overlapping features"""
        if not self._features_loaded:
            self.load_features()

        annotated = [
            replace(
                region,
                features=tuple(
                    self.overlapping_features(region.chromosome, region.start, region.end)
                ),
            )
            for region in regions
        ]

        n_hit = sum(1 for r in annotated if r.features)
        logger.info(f"{n_hit} of {len(annotated)} regions overlap annotated features")

        return annotated
