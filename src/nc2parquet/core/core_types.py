"""
nc2parquet Type Definitions and Data Classes

This module defines the parameter structures for filters and jobs, along with
the type aliases used throughout the codebase.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .config import (
    RANGE_KIND, LIST_KIND, POINT2D_KIND, POINT3D_KIND,
    DEFAULT_BATCH_SIZE, DEFAULT_COMPRESSION,
)
from .exceptions import ConfigurationError

# ============================================================================
# Type Aliases
# ============================================================================

CoordinateTuple = Tuple[int, ...]
IndexPair = Tuple[int, int]
IndexTriplet = Tuple[int, int, int]
Point = Tuple[float, float]

# ============================================================================
# Validation Utilities (Module Level)
# ============================================================================

def _validate_dimension_name(item: str, name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ConfigurationError(item, "Dimension name must be a non-empty string")

def _validate_points(item: str, points: List[Point]) -> List[Point]:
    """Normalize points to (float, float) tuples."""
    normalized = []
    for point in points:
        if len(point) != 2:
            raise ConfigurationError(item, f"Point must contain exactly 2 values: {point!r}")
        normalized.append((float(point[0]), float(point[1])))
    return normalized

def _validate_tolerance(item: str, tolerance: float, allow_zero: bool = False) -> None:
    if allow_zero and tolerance < 0:
        raise ConfigurationError(item, f"tolerance must be >= 0, got {tolerance}")
    if not allow_zero and tolerance <= 0:
        raise ConfigurationError(item, f"tolerance must be > 0, got {tolerance}")

# ============================================================================
# Filter Parameters
# ============================================================================

@dataclass
class RangeParams:
    """
    Parameters for range-based filtering.

    Attributes:
        dimension_name: Dimension whose coordinate is tested
        min_value: Lower bound (inclusive)
        max_value: Upper bound (inclusive)
    """
    dimension_name: str
    min_value: float
    max_value: float

    kind = RANGE_KIND

    def __post_init__(self):
        _validate_dimension_name(self.kind, self.dimension_name)
        self.min_value = float(self.min_value)
        self.max_value = float(self.max_value)
        if self.min_value >= self.max_value:
            raise ConfigurationError(
                self.kind,
                f"min_value ({self.min_value}) must be < max_value ({self.max_value})"
            )


@dataclass
class ListParams:
    """
    Parameters for list-based filtering.

    Attributes:
        dimension_name: Dimension whose coordinate is tested
        values: Coordinate values to keep
        tolerance: Absolute tolerance for matching; 0.0 means exact equality
    """
    dimension_name: str
    values: List[float]
    tolerance: float = 0.0

    kind = LIST_KIND

    def __post_init__(self):
        _validate_dimension_name(self.kind, self.dimension_name)
        self.values = [float(v) for v in self.values]
        self.tolerance = float(self.tolerance)
        _validate_tolerance(self.kind, self.tolerance, allow_zero=True)


@dataclass
class Point2DParams:
    """
    Parameters for 2D spatial point filtering.

    Attributes:
        lat_dimension_name: First dimension (pairs index this one first)
        lon_dimension_name: Second dimension
        points: (lat, lon) target points
        tolerance: Absolute tolerance applied to each coordinate
    """
    lat_dimension_name: str
    lon_dimension_name: str
    points: List[Point]
    tolerance: float

    kind = POINT2D_KIND

    def __post_init__(self):
        _validate_dimension_name(self.kind, self.lat_dimension_name)
        _validate_dimension_name(self.kind, self.lon_dimension_name)
        self.points = _validate_points(self.kind, self.points)
        self.tolerance = float(self.tolerance)
        _validate_tolerance(self.kind, self.tolerance)


@dataclass
class Point3DParams:
    """
    Parameters for 3D spatiotemporal point filtering.

    Attributes:
        time_dimension_name: Dimension matched exactly against steps
        lat_dimension_name: First spatial dimension
        lon_dimension_name: Second spatial dimension
        steps: Time coordinate values to keep
        points: (lat, lon) target points
        tolerance: Absolute tolerance for spatial matching
    """
    time_dimension_name: str
    lat_dimension_name: str
    lon_dimension_name: str
    steps: List[float]
    points: List[Point]
    tolerance: float

    kind = POINT3D_KIND

    def __post_init__(self):
        _validate_dimension_name(self.kind, self.time_dimension_name)
        _validate_dimension_name(self.kind, self.lat_dimension_name)
        _validate_dimension_name(self.kind, self.lon_dimension_name)
        self.steps = [float(s) for s in self.steps]
        self.points = _validate_points(self.kind, self.points)
        self.tolerance = float(self.tolerance)
        _validate_tolerance(self.kind, self.tolerance)


FilterParams = Union[RangeParams, ListParams, Point2DParams, Point3DParams]

# ============================================================================
# Job Configuration
# ============================================================================

@dataclass
class JobConfig:
    """
    Complete configuration for one extraction job.

    Attributes:
        nc_key: Path to the input NetCDF file
        variable_name: Variable to extract
        parquet_key: Output Parquet path
        filters: Filters applied in order
        max_rows: Reject jobs whose row estimate exceeds this (None disables)
        batch_size: Coordinate tuples per pointwise read
        compression: Parquet compression codec
    """
    nc_key: str
    variable_name: str
    parquet_key: str
    filters: List[FilterParams] = field(default_factory=list)
    max_rows: Optional[int] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    compression: Optional[str] = DEFAULT_COMPRESSION

    def __post_init__(self):
        for name in ("nc_key", "variable_name", "parquet_key"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(name, "Must be a non-empty string")
        if self.max_rows is not None and self.max_rows <= 0:
            raise ConfigurationError("max_rows", f"Must be positive, got {self.max_rows}")
        if self.batch_size <= 0:
            raise ConfigurationError("batch_size", f"Must be positive, got {self.batch_size}")

    @property
    def filter_kinds(self) -> List[str]:
        """Kinds of the configured filters, in application order."""
        return [params.kind for params in self.filters]
