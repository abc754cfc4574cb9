"""
nc2parquet Coordinate Matching

Vectorized helpers that turn coordinate vectors into surviving index sets.
"""

from typing import List, Sequence, Set

import numpy as np

from ..core.core_types import IndexPair, Point


def range_indices(coords: np.ndarray, min_value: float, max_value: float) -> Set[int]:
    """Indices whose coordinate lies in [min_value, max_value]."""
    matched = np.where((coords >= min_value) & (coords <= max_value))[0]
    return {int(i) for i in matched}


def value_indices(coords: np.ndarray, values: Sequence[float], tolerance: float = 0.0) -> Set[int]:
    """
    Indices whose coordinate matches one of values.

    Args:
        coords: 1-D coordinate vector
        values: Target coordinate values
        tolerance: Absolute tolerance; 0.0 means exact floating-point equality

    Returns:
        Set[int]: Matching indices
    """
    if len(values) == 0 or coords.size == 0:
        return set()

    targets = np.asarray(values, dtype=coords.dtype)
    if tolerance == 0.0:
        mask = np.isin(coords, targets)
    else:
        mask = (np.abs(coords[:, np.newaxis] - targets[np.newaxis, :]) <= tolerance).any(axis=1)
    return {int(i) for i in np.where(mask)[0]}


def tolerance_pairs(
    coords_a: np.ndarray,
    coords_b: np.ndarray,
    points: Sequence[Point],
    tolerance: float
) -> List[IndexPair]:
    """
    Index pairs (i, j) lying within tolerance of any target point.

    Pairs are emitted point by point, then in ascending (i, j) order within
    a point. A pair near several points is emitted once per point.
    """
    pairs: List[IndexPair] = []
    for target_a, target_b in points:
        near_a = np.where(np.abs(coords_a - target_a) <= tolerance)[0]
        if near_a.size == 0:
            continue
        near_b = np.where(np.abs(coords_b - target_b) <= tolerance)[0]
        for i in near_a:
            for j in near_b:
                pairs.append((int(i), int(j)))
    return pairs
