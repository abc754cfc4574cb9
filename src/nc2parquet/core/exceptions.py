"""
nc2parquet Custom Exception Classes

This module defines all custom exception classes for better error handling
and more informative error messages.
"""

from typing import Optional, Sequence

# ============================================================================
# Base Exception
# ============================================================================

class NC2ParquetError(Exception):
    """Base exception class for all nc2parquet related errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = f"{message}\nDetails: {details}" if details else message
        super().__init__(full_message)

# ============================================================================
# Dimension and Coordinate Errors
# ============================================================================

class DimensionNotFoundError(NC2ParquetError):
    """A dimension or its coordinate variable is missing."""

    def __init__(self, dimension: str, context: Optional[str] = None):
        super().__init__(f"Dimension not found: '{dimension}'", context)
        self.dimension = dimension

class NotACoordinateError(NC2ParquetError):
    """A variable exists but cannot be used as a 1-D coordinate vector."""

    def __init__(self, name: str, ndim: int, reason: Optional[str] = None):
        super().__init__(
            f"Variable '{name}' is not a coordinate",
            reason or f"Expected 1D, got {ndim}D"
        )
        self.name = name
        self.ndim = ndim

class UnknownDimensionError(NC2ParquetError):
    """Single-dimension filter result for a dimension the variable does not have."""

    def __init__(self, dimension: str, known_dimensions: Optional[Sequence[str]] = None):
        super().__init__(
            f"Unknown dimension: '{dimension}'",
            f"Variable dimensions: {', '.join(known_dimensions)}" if known_dimensions else None
        )
        self.dimension = dimension
        self.known_dimensions = list(known_dimensions) if known_dimensions else None

class UnsupportedRankError(NC2ParquetError):
    """Target variable rank outside the supported range."""

    def __init__(self, field: str, rank: int, supported: Sequence[int] = (1, 4)):
        super().__init__(
            f"Unsupported number of dimensions for '{field}': {rank}",
            f"Supported ranks: {supported[0]} to {supported[-1]}"
        )
        self.field = field
        self.rank = rank

# ============================================================================
# Data Availability Errors
# ============================================================================

class VariableNotFoundError(NC2ParquetError):
    """Variables not found."""

    def __init__(self, missing_variables: Sequence[str], available_variables: Optional[Sequence[str]] = None):
        vars_str = ", ".join(missing_variables)
        super().__init__(
            f"Variables not found: {vars_str}",
            f"Available variables: {', '.join(sorted(available_variables))}" if available_variables else None
        )
        self.missing_variables = list(missing_variables)
        self.available_variables = list(available_variables) if available_variables else None

class DataSourceError(NC2ParquetError):
    """Reading from the underlying dataset failed."""

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Data source read failed during {operation}", reason)
        self.operation = operation

class OutputWriteError(NC2ParquetError):
    """Persisting the extracted table failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to write output: {path}", reason)
        self.path = path

class OutputExistsError(OutputWriteError):
    """The output file exists and overwriting was not requested."""

    def __init__(self, path: str):
        super().__init__(path, "Output file already exists. Use --force (overwrite=True) to replace it")

# ============================================================================
# Configuration and Job Errors
# ============================================================================

class ConfigurationError(NC2ParquetError):
    """Invalid job or filter configuration."""

    def __init__(self, item: str, reason: str):
        super().__init__(f"Invalid configuration for {item}", reason)
        self.item = item

class RowLimitExceededError(NC2ParquetError):
    """Extraction would produce more rows than allowed."""

    def __init__(self, estimated_rows: int, max_rows: int):
        super().__init__(
            f"Extraction would produce {estimated_rows} rows (limit {max_rows})",
            "Tighten the filters or raise max_rows"
        )
        self.estimated_rows = estimated_rows
        self.max_rows = max_rows

# ============================================================================
# Utility Functions
# ============================================================================

def check_variables_availability(requested: Sequence[str], available: Sequence[str]) -> None:
    """Check if all requested variables are available."""
    missing = [v for v in requested if v not in available]
    if missing:
        raise VariableNotFoundError(missing, available)

def check_supported_rank(field: str, rank: int, min_rank: int, max_rank: int) -> None:
    """
    Validate a variable rank.

    Raises:
        UnsupportedRankError: If rank is outside [min_rank, max_rank]
    """
    if not min_rank <= rank <= max_rank:
        raise UnsupportedRankError(field, rank, (min_rank, max_rank))
