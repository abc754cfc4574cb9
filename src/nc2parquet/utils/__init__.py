"""
nc2parquet Utilities

This package provides dataset inspection helpers.
"""

from .info import (
    get_dimension_info,
    get_dataset_info,
    format_dataset_info,
)

__all__ = [
    "get_dimension_info",
    "get_dataset_info",
    "format_dataset_info",
]
