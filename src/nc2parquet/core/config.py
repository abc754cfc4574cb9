"""
nc2parquet Configuration and Constants

This module centralizes all configuration parameters, constants, and default values
for better maintainability and consistency across the codebase.
"""

import os
from typing import Optional

import numpy as np

# ============================================================================
# Filter Kinds
# ============================================================================

RANGE_KIND = "range"
LIST_KIND = "list"
POINT2D_KIND = "2d_point"
POINT3D_KIND = "3d_point"

FILTER_KINDS = (RANGE_KIND, LIST_KIND, POINT2D_KIND, POINT3D_KIND)

# ============================================================================
# Environment Variables
# ============================================================================

ENV_RANGE_FILTERS = "NC2PARQUET_RANGE_FILTERS"
ENV_LIST_FILTERS = "NC2PARQUET_LIST_FILTERS"
ENV_POINT2D_FILTERS = "NC2PARQUET_POINT2D_FILTERS"
ENV_POINT3D_FILTERS = "NC2PARQUET_POINT3D_FILTERS"
ENV_MAX_ROWS = "NC2PARQUET_MAX_ROWS"

# Separator between filters of the same kind inside one variable.
# Range filters never contain commas, so they are comma separated.
ENV_FILTER_SEPARATORS = {
    ENV_RANGE_FILTERS: ",",
    ENV_LIST_FILTERS: ";",
    ENV_POINT2D_FILTERS: ";",
    ENV_POINT3D_FILTERS: ";",
}

# ============================================================================
# Extraction Parameters
# ============================================================================

MIN_SUPPORTED_RANK = 1
MAX_SUPPORTED_RANK = 4

# Coordinate tuples read per pointwise selection
DEFAULT_BATCH_SIZE = 65536

# Coordinate columns and value column dtype
DISPLAY_DTYPE = np.float64
VALUE_DTYPE = np.float64

# ============================================================================
# Output
# ============================================================================

PARQUET_EXTENSION = ".parquet"
DEFAULT_COMPRESSION = "snappy"
PARQUET_ENGINE = "pyarrow"

# ============================================================================
# Helper Functions
# ============================================================================

def get_default_max_rows() -> Optional[int]:
    """Get the default row limit from the environment, None when unset."""
    value = os.environ.get(ENV_MAX_ROWS, "").strip()
    if not value:
        return None
    try:
        max_rows = int(value)
    except ValueError:
        from .exceptions import ConfigurationError
        raise ConfigurationError(ENV_MAX_ROWS, f"Expected an integer, got '{value}'")
    return max_rows if max_rows > 0 else None
