import logging

import numpy as np
import pandas as pd
import pytest

from dmrflow.config import Config


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs attach handlers to captured streams; drop them afterwards"""
    yield
    package_logger = logging.getLogger("dmrflow")
    for handler in list(package_logger.handlers):
        handler.close()
    package_logger.handlers.clear()
    package_logger.propagate = True


@pytest.fixture
def worked_example_sites():
    """Four significant sites on chr1 at 100, 150, 400 and 401"""
    return {
        "cg01": ("chr1", 100, 0.20, 0.001),
        "cg02": ("chr1", 150, 0.30, 0.004),
        "cg03": ("chr1", 400, -0.10, 0.010),
        "cg04": ("chr1", 401, -0.20, 0.020),
    }


@pytest.fixture
def random_sites():
    """Reproducible site table spread over three chromosomes"""
    rng = np.random.default_rng(7)
    frames = []
    for chrom in ["chr1", "chr2", "chrX"]:
        n = 300
        positions = np.sort(rng.integers(1, 200_000, size=n))
        frames.append(
            pd.DataFrame(
                {
                    "chromosome": chrom,
                    "position": positions,
                    "effect": rng.normal(0, 0.1, size=n),
                    "score": rng.uniform(0, 1, size=n) ** 3,
                },
                index=[f"{chrom}_cg{i:05d}" for i in range(n)],
            )
        )
    return pd.concat(frames)


@pytest.fixture
def stats_csv(tmp_path):
    """Per-site statistics in the default column layout"""
    df = pd.DataFrame(
        {
            "probe_id": ["cg01", "cg02", "cg03", "cg04", "cg05", "cg06"],
            "chr": ["1", "1", "1", "1", "2", "X"],
            "pos": [100, 150, 400, 401, 5000, 7000],
            "delta_beta": [0.20, 0.30, -0.10, -0.20, 0.05, 0.40],
            "p_value": [0.001, 0.004, 0.010, 0.020, 0.600, 0.001],
        }
    )
    path = tmp_path / "site_stats.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def genes_bed(tmp_path):
    path = tmp_path / "genes.bed"
    path.write_text(
        "chr1\t50\t120\tGENE_A\t0\t+\n"
        "chr1\t390\t395\tGENE_B\t0\t-\n"
        "chr2\t10000\t20000\tGENE_C\t0\t+\n"
    )
    return path


@pytest.fixture
def config(tmp_path):
    return Config(output_dir=str(tmp_path / "out"))
