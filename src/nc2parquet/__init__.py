"""
nc2parquet - Extract filtered NetCDF variables into Parquet tables.

This package selects index tuples of one NetCDF variable through composable
dimension filters and writes the surviving values, together with their
coordinates, as a flat table.

Key Features:
- Range, list, 2D point and 3D point filters with AND composition
- Joint filtering of coupled dimensions (lat/lon pairs, time/lat/lon triplets)
- Batched pointwise reads through xarray
- JSON job files, command line flags and environment variable filters

Quick Start:
    >>> import nc2parquet as n2p
    >>> with n2p.XarrayDataSource.open("/path/to/data.nc") as source:
    ...     table = n2p.extract_dataframe(
    ...         source, "temperature",
    ...         [n2p.RangeParams("time", 0, 5), n2p.ListParams("level", [100, 300])]
    ...     )
    >>>
    >>> n2p.process_job_file("/path/to/job.json")
"""

__version__ = "1.0.0"
__author__ = "nc2parquet Development Team"

# Import main interface functions
from .main import (
    extract_dataframe,
    estimate_row_count,
    build_manager,
    process_job,
    process_job_file,
    validate_job,
    summarize_job,
)

# Import parameter classes for structured interface
from .core.core_types import (
    RangeParams,
    ListParams,
    Point2DParams,
    Point3DParams,
    JobConfig,
)

# Import filters and extraction components
from .filters import (
    SingleResult,
    PairsResult,
    TripletsResult,
    RangeFilter,
    ListFilter,
    Point2DFilter,
    Point3DFilter,
    build_filter,
)
from .extraction import DimensionIndexManager, Extractor
from .io.data_source import DataSource, XarrayDataSource
from .io.table_sink import TableSink, ParquetSink
from .io.job_config import load_job_config, job_config_from_dict, merge_filters

# Import exceptions for error handling
from .core.exceptions import (
    NC2ParquetError,
    DimensionNotFoundError,
    NotACoordinateError,
    UnknownDimensionError,
    UnsupportedRankError,
    VariableNotFoundError,
    DataSourceError,
    OutputWriteError,
    OutputExistsError,
    ConfigurationError,
    RowLimitExceededError,
)

# Import logging configuration
from .core.logging_config import setup_logging, set_log_level

from .utils import get_dataset_info, format_dataset_info

__all__ = [
    # Version info
    '__version__',

    # Main interface functions
    'extract_dataframe',
    'estimate_row_count',
    'build_manager',
    'process_job',
    'process_job_file',
    'validate_job',
    'summarize_job',

    # Parameter classes
    'RangeParams',
    'ListParams',
    'Point2DParams',
    'Point3DParams',
    'JobConfig',

    # Filters and extraction
    'SingleResult',
    'PairsResult',
    'TripletsResult',
    'RangeFilter',
    'ListFilter',
    'Point2DFilter',
    'Point3DFilter',
    'build_filter',
    'DimensionIndexManager',
    'Extractor',

    # I/O
    'DataSource',
    'XarrayDataSource',
    'TableSink',
    'ParquetSink',
    'load_job_config',
    'job_config_from_dict',
    'merge_filters',

    # Exception classes
    'NC2ParquetError',
    'DimensionNotFoundError',
    'NotACoordinateError',
    'UnknownDimensionError',
    'UnsupportedRankError',
    'VariableNotFoundError',
    'DataSourceError',
    'OutputWriteError',
    'OutputExistsError',
    'ConfigurationError',
    'RowLimitExceededError',

    # Logging configuration
    'setup_logging',
    'set_log_level',

    # Utilities
    'get_dataset_info',
    'format_dataset_info',
]
