"""
Utility functions and classes for DMRFlow
"""

from .logging import get_logger, log_execution_time, setup_logging
from .validation import (InvalidInput, validate_directory_exists,
                         validate_environment, validate_file_exists,
                         validate_input_files)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_execution_time",
    "InvalidInput",
    "validate_file_exists",
    "validate_directory_exists",
    "validate_environment",
    "validate_input_files",
]
