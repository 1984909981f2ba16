"""
Region export for downstream reporting and genome browsers
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..utils import get_logger
from .models import Region, regions_to_dataframe

logger = get_logger(__name__)


def export_regions_csv(
    regions: Sequence[Region], output_file: Union[str, Path]
) -> Path:
    """Write all region fields to CSV"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    regions_to_dataframe(regions).to_csv(output_path, index=False)

    logger.info(f"Saved {len(regions)} regions to {output_path}")
    return output_path


def export_regions_bed(
    regions: Sequence[Region],
    output_file: Union[str, Path],
    track_name: Optional[str] = None,
) -> Path:
    """
    Write regions as BED6

    Coordinates are shifted to 0-based half-open. The BED score is
    100 * -log10(region score), capped at 1000. Names are chrom:start-end
    followed by the direction.
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if track_name:
            f.write(f'track name="{track_name}" useScore=1\n')

        for region in regions:
            bed_score = int(min(1000, -np.log10(max(region.score, 1e-300)) * 100))
            row = [
                region.chromosome,
                max(region.start - 1, 0),
                region.end,
                f"{region.name}_{region.direction}",
                bed_score,
                ".",
            ]
            f.write("\t".join(map(str, row)) + "\n")

    logger.info(f"Saved {len(regions)} regions to {output_path}")
    return output_path


def export_summary(summary: Dict[str, Any], output_file: Union[str, Path]) -> Path:
    """Write a run summary as JSON"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(summary, f, indent=2, default=_json_default)

    logger.info(f"Summary saved to {output_path}")
    return output_path


def _json_default(value: Any) -> Any:
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    if isinstance(value, (Path, pd.Timestamp)):
        return str(value)
    raise TypeError(f"Cannot serialize {type(value).__name__}")
