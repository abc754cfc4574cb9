"""
nc2parquet Dimension Filters

This module implements the four filter types. Each filter reads coordinate
vectors from a data source (never the target variable) and returns a
FilterResult:

- RangeFilter: coordinate within [min, max] -> SingleResult
- ListFilter: coordinate equal to one of a list of values -> SingleResult
- Point2DFilter: (a, b) coordinates within tolerance of target points -> PairsResult
- Point3DFilter: time steps crossed with Point2D matches -> TripletsResult

Filters register themselves under their configuration kind so that parsed
parameters can be turned into filters with build_filter().
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Sequence, Type

from ..core.config import RANGE_KIND, LIST_KIND, POINT2D_KIND, POINT3D_KIND
from ..core.core_types import (
    FilterParams, RangeParams, ListParams, Point2DParams, Point3DParams, Point,
)
from ..core.exceptions import ConfigurationError
from ..core.logging_config import get_logger
from ..io.data_source import DataSource
from .matching import range_indices, value_indices, tolerance_pairs
from .results import FilterResult, SingleResult, PairsResult, TripletsResult

logger = get_logger('filters')

# ============================================================================
# Filter Registry
# ============================================================================

_FILTER_REGISTRY: Dict[str, Type["DimensionFilter"]] = {}


def register_filter(kind: str) -> Callable[[Type["DimensionFilter"]], Type["DimensionFilter"]]:
    """Class decorator registering a filter under its configuration kind."""
    def decorator(cls: Type["DimensionFilter"]) -> Type["DimensionFilter"]:
        if kind in _FILTER_REGISTRY:
            logger.warning("Filter kind '%s' already registered, overwriting", kind)
        cls.kind = kind
        _FILTER_REGISTRY[kind] = cls
        return cls
    return decorator


def list_filter_kinds() -> List[str]:
    """List registered filter kinds."""
    return sorted(_FILTER_REGISTRY)


def build_filter(params: FilterParams) -> "DimensionFilter":
    """
    Create the filter matching a parsed parameter object.

    Args:
        params: Parsed filter parameters

    Returns:
        DimensionFilter: Filter ready to apply

    Raises:
        ConfigurationError: If no filter is registered for the parameters' kind
    """
    kind = getattr(params, "kind", None)
    filter_cls = _FILTER_REGISTRY.get(kind)
    if filter_cls is None:
        raise ConfigurationError(
            "filter kind",
            f"Unknown filter kind: {kind!r}. Available: {', '.join(list_filter_kinds())}"
        )
    return filter_cls.from_params(params)


# ============================================================================
# Base Class
# ============================================================================

class DimensionFilter(ABC):
    """Abstract base class for filters over dimension coordinates."""

    kind: str = ""

    @abstractmethod
    def apply(self, source: DataSource) -> FilterResult:
        """
        Evaluate the filter against a data source.

        Raises:
            DimensionNotFoundError: If a target coordinate variable is missing
            NotACoordinateError: If a target variable is not 1-D
            DataSourceError: If reading a coordinate vector fails
        """

    @classmethod
    @abstractmethod
    def from_params(cls, params: FilterParams) -> "DimensionFilter":
        """Build the filter from parsed parameters."""

    @property
    @abstractmethod
    def dimensions(self) -> Sequence[str]:
        """Dimensions this filter reads."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.dimensions)})"


# ============================================================================
# Single-Dimension Filters
# ============================================================================

@register_filter(RANGE_KIND)
class RangeFilter(DimensionFilter):
    """Keep indices whose coordinate lies in [min_value, max_value]."""

    def __init__(self, dimension: str, min_value: float, max_value: float):
        self.dimension = dimension
        self.min_value = float(min_value)
        self.max_value = float(max_value)

    @classmethod
    def from_params(cls, params: RangeParams) -> "RangeFilter":
        return cls(params.dimension_name, params.min_value, params.max_value)

    @property
    def dimensions(self) -> Sequence[str]:
        return (self.dimension,)

    def apply(self, source: DataSource) -> SingleResult:
        coords = source.read_coordinate(self.dimension)
        return SingleResult(
            self.dimension, range_indices(coords, self.min_value, self.max_value)
        )


@register_filter(LIST_KIND)
class ListFilter(DimensionFilter):
    """
    Keep indices whose coordinate equals one of a list of values.

    Matching is exact floating-point equality unless a tolerance is given.
    Exact matching is only reliable for coordinates stored verbatim; values
    that went through unit conversion or rounding need a tolerance.
    """

    def __init__(self, dimension: str, values: Sequence[float], tolerance: float = 0.0):
        self.dimension = dimension
        self.values = [float(v) for v in values]
        self.tolerance = float(tolerance)

    @classmethod
    def from_params(cls, params: ListParams) -> "ListFilter":
        return cls(params.dimension_name, params.values, params.tolerance)

    @property
    def dimensions(self) -> Sequence[str]:
        return (self.dimension,)

    def apply(self, source: DataSource) -> SingleResult:
        coords = source.read_coordinate(self.dimension)
        return SingleResult(
            self.dimension, value_indices(coords, self.values, self.tolerance)
        )


# ============================================================================
# Multi-Dimension Point Filters
# ============================================================================

@register_filter(POINT2D_KIND)
class Point2DFilter(DimensionFilter):
    """
    Keep (i, j) index pairs near target points.

    A pair survives for a point (pa, pb) when |coord_a[i] - pa| <= tolerance
    and |coord_b[j] - pb| <= tolerance. Cost grows with
    points x size_a x size_b in the worst case, so tolerances should be tight
    relative to grid spacing.
    """

    def __init__(self, dim_a: str, dim_b: str, points: Sequence[Point], tolerance: float):
        self.dim_a = dim_a
        self.dim_b = dim_b
        self.points = [(float(a), float(b)) for a, b in points]
        self.tolerance = float(tolerance)

    @classmethod
    def from_params(cls, params: Point2DParams) -> "Point2DFilter":
        return cls(
            params.lat_dimension_name, params.lon_dimension_name,
            params.points, params.tolerance
        )

    @property
    def dimensions(self) -> Sequence[str]:
        return (self.dim_a, self.dim_b)

    def apply(self, source: DataSource) -> PairsResult:
        coords_a = source.read_coordinate(self.dim_a)
        coords_b = source.read_coordinate(self.dim_b)
        pairs = tolerance_pairs(coords_a, coords_b, self.points, self.tolerance)
        return PairsResult(self.dim_a, self.dim_b, pairs)


@register_filter(POINT3D_KIND)
class Point3DFilter(DimensionFilter):
    """
    Keep (t, i, j) triplets: exact time steps crossed with spatial matches.

    Time indices are selected with list semantics (exact equality against
    steps), spatial pairs exactly as Point2DFilter. The result is the full
    cross product, time-major.
    """

    def __init__(
        self,
        time_dim: str,
        dim_a: str,
        dim_b: str,
        steps: Sequence[float],
        points: Sequence[Point],
        tolerance: float
    ):
        self.time_dim = time_dim
        self.spatial = Point2DFilter(dim_a, dim_b, points, tolerance)
        self.steps = [float(s) for s in steps]

    @classmethod
    def from_params(cls, params: Point3DParams) -> "Point3DFilter":
        return cls(
            params.time_dimension_name, params.lat_dimension_name,
            params.lon_dimension_name, params.steps, params.points,
            params.tolerance
        )

    @property
    def dimensions(self) -> Sequence[str]:
        return (self.time_dim, self.spatial.dim_a, self.spatial.dim_b)

    def apply(self, source: DataSource) -> TripletsResult:
        time_coords = source.read_coordinate(self.time_dim)
        time_indices = sorted(value_indices(time_coords, self.steps))
        pairs = self.spatial.apply(source).pairs

        triplets = [(t, i, j) for t in time_indices for i, j in pairs]
        return TripletsResult(self.time_dim, self.spatial.dim_a, self.spatial.dim_b, triplets)


def apply_filters(filters: Sequence[DimensionFilter], source: DataSource) -> List[FilterResult]:
    """Apply filters in order, returning their results."""
    results = []
    for position, dim_filter in enumerate(filters, start=1):
        result = dim_filter.apply(source)
        logger.debug("Filter %d (%s): %d matches", position, dim_filter.kind, len(result))
        results.append(result)
    return results
