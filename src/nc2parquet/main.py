"""
nc2parquet Main Interface

This module provides the main API functions for extracting a filtered
NetCDF variable into a table and writing it as Parquet.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import pandas as pd

from .core.config import DEFAULT_BATCH_SIZE, MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK
from .core.core_types import FilterParams, JobConfig
from .core.exceptions import ConfigurationError, check_supported_rank
from .core.logging_config import get_logger
from .extraction import DimensionIndexManager, Extractor
from .filters import DimensionFilter, apply_filters, build_filter, describe_result
from .io.data_source import DataSource, XarrayDataSource
from .io.job_config import load_job_config
from .io.table_sink import ParquetSink, TableSink, is_remote_path

logger = get_logger('main')

FilterLike = Union[DimensionFilter, FilterParams]


# ============================================================================
# Helpers
# ============================================================================

def _as_filters(filters: Optional[Sequence[FilterLike]]) -> list:
    """Accept filter objects or parameter dataclasses."""
    return [
        f if isinstance(f, DimensionFilter) else build_filter(f)
        for f in (filters or [])
    ]


def build_manager(
    source: DataSource,
    variable_name: str,
    filters: Optional[Sequence[FilterLike]] = None
) -> DimensionIndexManager:
    """
    Create a DimensionIndexManager for a variable and fold every filter in.

    The variable rank is checked before any coordinate is read.

    Raises:
        VariableNotFoundError: If the variable is not in the source
        UnsupportedRankError: If the variable rank is outside 1-4
        DimensionNotFoundError: If a filter references a missing dimension
    """
    manager = DimensionIndexManager.for_variable(source, variable_name)
    check_supported_rank(
        variable_name, len(manager.get_dimension_order()),
        MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK
    )

    for result in apply_filters(_as_filters(filters), source):
        logger.debug("Folding %s", describe_result(result))
        manager.apply_filter_result(result)
    return manager


# ============================================================================
# Main API Functions
# ============================================================================

def extract_dataframe(
    source: DataSource,
    variable_name: str,
    filters: Optional[Sequence[FilterLike]] = None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_rows: Optional[int] = None,
) -> pd.DataFrame:
    """
    Extract the filtered values of one variable as a table.

    Args:
        source: Data source holding the variable
        variable_name: Target variable
        filters: Filters or filter parameters, applied in order (AND semantics)
        batch_size: Number of points read per batch
        max_rows: Reject the job when more rows would be produced

    Returns:
        pd.DataFrame: One column per dimension (display coordinates) and a
        value column named after the variable

    Examples:
        >>> with XarrayDataSource.open("input.nc") as source:
        ...     table = extract_dataframe(
        ...         source, "temperature",
        ...         [RangeParams("time", 0, 5), ListParams("level", [100, 300])]
        ...     )
    """
    manager = build_manager(source, variable_name, filters)
    extractor = Extractor(source, variable_name, batch_size=batch_size, max_rows=max_rows)
    return extractor.extract(manager)


def estimate_row_count(
    source: DataSource,
    variable_name: str,
    filters: Optional[Sequence[FilterLike]] = None
) -> int:
    """Upper bound on the number of rows an extraction would produce."""
    return build_manager(source, variable_name, filters).estimate_row_count()


def process_job(
    config: JobConfig,
    sink: Optional[TableSink] = None,
    output_path: Optional[Union[str, Path]] = None,
    overwrite: bool = False,
) -> str:
    """
    Run one extraction job end to end.

    Args:
        config: Job configuration
        sink: Table writer (ParquetSink with the job's compression by default)
        output_path: Override for config.parquet_key
        overwrite: Replace an existing output file (ignored when sink is given)

    Returns:
        str: Path the table was written to

    Raises:
        NC2ParquetError: Any failure; nothing is written on error
    """
    sink = sink or ParquetSink(compression=config.compression, overwrite=overwrite)
    target = sink.ensure_writable(output_path or config.parquet_key)

    logger.info(
        "Job: %s[%s] -> %s (%d filters)",
        config.nc_key, config.variable_name, target, len(config.filters)
    )

    with XarrayDataSource.open(config.nc_key) as source:
        logger.info("Dataset dimensions: %s", source.dimension_list())
        table = extract_dataframe(
            source,
            config.variable_name,
            config.filters,
            batch_size=config.batch_size,
            max_rows=config.max_rows,
        )

    written = sink.write(table, target)
    logger.info("Wrote %d rows to %s", len(table), written)
    return written


def process_job_file(path: Union[str, Path], output_path: Optional[Union[str, Path]] = None) -> str:
    """Load a JSON job file and run it."""
    return process_job(load_job_config(path), output_path=output_path)


# ============================================================================
# Validation and Dry Runs
# ============================================================================

def validate_job(config: JobConfig) -> None:
    """
    Check a job without opening its dataset.

    Every filter must map to a registered filter type and a local input
    file must exist.

    Raises:
        ConfigurationError: If the job cannot run
    """
    _as_filters(config.filters)
    if not is_remote_path(config.nc_key) and not Path(config.nc_key).is_file():
        raise ConfigurationError("nc_key", f"Input file not found: {config.nc_key}")


def summarize_job(
    config: JobConfig,
    output_path: Optional[Union[str, Path]] = None
) -> Dict[str, Any]:
    """
    Resolve a job against its dataset without reading any values.

    Returns:
        Dict: input, variable, output, dimensions, filters and estimated_rows

    Raises:
        NC2ParquetError: If the job would fail before extraction
    """
    validate_job(config)
    with XarrayDataSource.open(config.nc_key) as source:
        dimensions = source.variable_dimensions(config.variable_name)
        estimated = estimate_row_count(source, config.variable_name, config.filters)

    return {
        'input': config.nc_key,
        'variable': config.variable_name,
        'output': ParquetSink().resolve_path(output_path or config.parquet_key),
        'dimensions': [{'name': name, 'size': size} for name, size in dimensions],
        'filters': config.filter_kinds,
        'estimated_rows': estimated,
    }
