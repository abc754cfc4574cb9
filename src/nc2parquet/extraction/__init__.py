"""
nc2parquet Extraction

This package reconciles filter results into surviving coordinate tuples and
materializes them as table rows.
"""

from .manager import DimensionIndexManager
from .extractor import Extractor

__all__ = [
    "DimensionIndexManager",
    "Extractor",
]
