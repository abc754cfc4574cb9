"""
nc2parquet Filtering

This package provides the filter types, their results, and the filter
registry used to build filters from configuration.
"""

from .results import (
    FilterResult,
    SingleResult,
    PairsResult,
    TripletsResult,
    is_empty,
    describe_result,
)

from .filters import (
    DimensionFilter,
    RangeFilter,
    ListFilter,
    Point2DFilter,
    Point3DFilter,
    register_filter,
    list_filter_kinds,
    build_filter,
    apply_filters,
)

__all__ = [
    # Results
    "FilterResult",
    "SingleResult",
    "PairsResult",
    "TripletsResult",
    "is_empty",
    "describe_result",
    # Filters
    "DimensionFilter",
    "RangeFilter",
    "ListFilter",
    "Point2DFilter",
    "Point3DFilter",
    # Registry
    "register_filter",
    "list_filter_kinds",
    "build_filter",
    "apply_filters",
]
