"""
Validation utilities for DMRFlow
"""

import importlib
import logging
import math
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class InvalidInput(ValueError):
    """Raised for malformed configuration or inconsistent site data"""


def validate_significance_cutoff(cutoff: float) -> float:
    """Cutoff must lie in the half-open interval (0, 1]"""
    try:
        value = float(cutoff)
    except (TypeError, ValueError):
        raise InvalidInput(f"Significance cutoff must be a number, got {cutoff!r}")

    if math.isnan(value) or not 0.0 < value <= 1.0:
        raise InvalidInput(f"Significance cutoff must be in (0, 1], got {cutoff}")

    return value


def _as_integer(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    if not number.is_integer():
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    return int(number)


def validate_max_gap(max_gap: int) -> int:
    value = _as_integer(max_gap, "Maximum gap")
    if value < 0:
        raise InvalidInput(f"Maximum gap cannot be negative, got {max_gap}")
    return value


def validate_min_sites(min_sites: int) -> int:
    value = _as_integer(min_sites, "Minimum sites")
    if value < 1:
        raise InvalidInput(f"Minimum sites must be at least 1, got {min_sites}")
    return value


def validate_n_jobs(n_jobs: int) -> int:
    """joblib worker count; negative values count back from all CPUs"""
    value = _as_integer(n_jobs, "Number of jobs")
    if value == 0:
        raise InvalidInput("Number of jobs cannot be 0")
    return value


def validate_min_effect(min_effect: Optional[float]) -> Optional[float]:
    if min_effect is None:
        return None
    try:
        value = float(min_effect)
    except (TypeError, ValueError):
        raise InvalidInput(f"Minimum effect size must be a number, got {min_effect!r}")
    if math.isnan(value) or value < 0:
        raise InvalidInput(f"Minimum effect size cannot be negative, got {min_effect}")
    return value


def validate_file_exists(file_path: Union[str, Path], file_type: str = "file") -> bool:
    """
    Validate that a file exists

    Args:
        file_path: Path to file
        file_type: Type description for error messages

    Returns:
        True if file exists, False otherwise
    """
    path = Path(file_path)

    if not path.exists():
        logger.error(f"{file_type} not found: {path}")
        return False

    if not path.is_file():
        logger.error(f"{file_type} is not a file: {path}")
        return False

    return True


def validate_directory_exists(
    dir_path: Union[str, Path], create_if_missing: bool = False
) -> bool:
    """
    Validate that a directory exists

    Args:
        dir_path: Path to directory
        create_if_missing: Whether to create directory if missing

    Returns:
        True if directory exists or was created, False otherwise
    """
    path = Path(dir_path)

    if not path.exists():
        if create_if_missing:
            try:
                path.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created directory: {path}")
                return True
            except OSError as e:
                logger.error(f"Could not create directory {path}: {e}")
                return False
        else:
            logger.error(f"Directory not found: {path}")
            return False

    if not path.is_dir():
        logger.error(f"Path is not a directory: {path}")
        return False

    return True


def validate_python_packages(packages: List[str]) -> Dict[str, bool]:
    """
    Check if Python packages are available

    Args:
        packages: List of importable module names

    Returns:
        Dictionary mapping package names to availability status
    """
    results = {}

    for package in packages:
        try:
            importlib.import_module(package)
            results[package] = True
            logger.debug(f"Package {package}: available")
        except ImportError:
            results[package] = False
            logger.debug(f"Package {package}: not available")

    return results


CORE_PACKAGES = [
    "numpy",
    "pandas",
    "scipy",
    "statsmodels",
    "joblib",
    "yaml",
    "click",
    "colorlog",
]


def validate_environment() -> List[str]:
    """
    Environment validation

    Returns:
        List of validation issues found
    """
    issues = []

    logger.info("Validating DMRFlow environment...")

    if sys.version_info < (3, 8):
        issues.append(
            f"Python 3.8+ required, found {sys.version_info.major}.{sys.version_info.minor}"
        )

    package_status = validate_python_packages(CORE_PACKAGES)
    missing_packages = [
        pkg for pkg, available in package_status.items() if not available
    ]

    if missing_packages:
        issues.append(f"Missing Python packages: {', '.join(missing_packages)}")

    if issues:
        logger.warning(f"Environment validation found {len(issues)} issues")
        for issue in issues:
            logger.warning(f"  - {issue}")
    else:
        logger.info("Environment validation passed")

    return issues


def validate_input_files(config: Any) -> List[str]:
    """
    Validate input files named in a configuration

    Args:
        config: DMRFlow configuration object

    Returns:
        List of validation issues
    """
    issues = []

    named_files = [
        ("Site statistics", config.sites.get("stats_file")),
        ("Probe manifest", config.sites.get("manifest_file")),
        ("Excluded probes", config.filtering.get("exclude_probes_file")),
        ("Feature annotation", config.annotation.get("features_file")),
    ]

    for file_type, file_path in named_files:
        if file_path and not validate_file_exists(file_path, file_type):
            issues.append(f"{file_type} file not found: {file_path}")

    return issues
