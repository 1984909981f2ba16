"""
Site statistics loading for DMRFlow

Reads a per-site table produced by an upstream normalization / testing tool
and maps it onto the canonical site columns. Coordinates can come from the
table itself or from a probe manifest joined on the site identifier.
"""

from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from ..config import Config
from ..config.chromosomes import standardize_chromosome
from ..utils import (InvalidInput, get_logger, log_execution_time,
                     validate_file_exists)
from .models import SITE_COLUMNS

logger = get_logger(__name__)

TableInput = Union[str, Path, pd.DataFrame]


def infer_separator(file_path: Union[str, Path]) -> str:
    """Tab for .tsv/.txt/.bed (optionally gzipped), comma otherwise"""
    suffixes = [s.lower() for s in Path(file_path).suffixes]
    if suffixes and suffixes[-1] in (".gz", ".bz2", ".xz", ".zip"):
        suffixes = suffixes[:-1]
    if suffixes and suffixes[-1] in (".tsv", ".txt", ".tab", ".bed"):
        return "\t"
    return ","


def read_table(table: TableInput, sep: Optional[str] = None) -> pd.DataFrame:
    """Read a CSV/TSV file, or copy a DataFrame that is passed through"""
    if isinstance(table, pd.DataFrame):
        return table.copy()

    if not validate_file_exists(table, "Site table"):
        raise FileNotFoundError(f"Table not found: {table}")

    sep = sep or infer_separator(table)
    logger.info(f"Reading {Path(table).name}")
    return pd.read_csv(table, sep=sep)


class SiteLoader:
    """Load per-site statistics into a canonical site table"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.sep = self.config.sites.get("sep")
        self.columns: Dict[str, str] = dict(self.config.sites["columns"])

    @log_execution_time
    def load(
        self,
        stats: Optional[TableInput] = None,
        manifest: Optional[TableInput] = None,
    ) -> pd.DataFrame:
        """
        Load site statistics

        Args:
            stats: Statistics file or DataFrame; defaults to sites.stats_file
            manifest: Optional probe manifest with identifier, chromosome and
                position columns; defaults to sites.manifest_file

        Returns:
            DataFrame indexed by site identifier with columns
            chromosome, position, effect, score
        """
        stats = stats if stats is not None else self.config.sites.get("stats_file")
        manifest = (
            manifest if manifest is not None else self.config.sites.get("manifest_file")
        )

        if stats is None:
            raise InvalidInput("No site statistics given")

        stats_df = self._index_by_identifier(read_table(stats, self.sep), "statistics")

        if manifest is not None:
            manifest_df = self._index_by_identifier(
                read_table(manifest, self.sep), "manifest"
            )
            sites = self._join_manifest(stats_df, manifest_df)
        else:
            sites = self._select_columns(stats_df, SITE_COLUMNS, "statistics")

        sites = self._normalize(sites)

        logger.info(
            f"Loaded {len(sites)} sites on {sites['chromosome'].nunique()} chromosomes"
        )
        return sites

    def _index_by_identifier(self, df: pd.DataFrame, label: str) -> pd.DataFrame:
        id_column = self.columns["id"]

        if id_column in df.columns:
            df = df.set_index(id_column)
        elif df.index.name != id_column:
            raise InvalidInput(
                f"Site {label} table has no identifier column '{id_column}'"
            )

        df.index = df.index.astype(str)
        df.index.name = "site_id"

        if df.index.has_duplicates:
            duplicated = df.index[df.index.duplicated()].unique().tolist()
            raise InvalidInput(
                f"Duplicate identifiers in site {label} table: {duplicated[:10]}"
            )

        return df

    def _select_columns(self, df: pd.DataFrame, fields, label: str) -> pd.DataFrame:
        mapping = {self.columns[f]: f for f in fields}
        missing = [col for col in mapping if col not in df.columns]
        if missing:
            raise InvalidInput(f"Site {label} table is missing columns: {missing}")
        return df[list(mapping)].rename(columns=mapping)

    def _join_manifest(
        self, stats_df: pd.DataFrame, manifest_df: pd.DataFrame
    ) -> pd.DataFrame:
        """Take coordinates from the manifest, statistics from the table"""
        values = self._select_columns(stats_df, ["effect", "score"], "statistics")
        coords = self._select_columns(
            manifest_df, ["chromosome", "position"], "manifest"
        )

        joined = values.join(coords, how="inner")

        n_unmatched = len(values) - len(joined)
        if n_unmatched:
            logger.warning(
                f"{n_unmatched} of {len(values)} sites have no manifest entry and were dropped"
            )

        return joined[SITE_COLUMNS]

    def _normalize(self, sites: pd.DataFrame) -> pd.DataFrame:
        sites = sites.copy()
        sites["chromosome"] = sites["chromosome"].astype(object)

        present = sites["chromosome"].notna()
        sites.loc[present, "chromosome"] = sites.loc[present, "chromosome"].map(
            standardize_chromosome
        )

        for column in ["position", "effect", "score"]:
            sites[column] = pd.to_numeric(sites[column], errors="coerce")

        fractional = sites["position"].notna() & (sites["position"] % 1 != 0)
        if fractional.any():
            raise InvalidInput(
                f"Non-integer positions for sites: {sites.index[fractional][:10].tolist()}"
            )
        sites["position"] = sites["position"].astype("Int64")

        return sites[SITE_COLUMNS]
