"""
nc2parquet Dimension Index Manager

This module reconciles filter results into the set of coordinate tuples that
survive every filter.

Each dimension of the target variable starts with all of its indices as
candidates. Single-dimension results intersect a dimension's candidates.
Pair and triplet results fix several dimensions jointly, so they are expanded
into an explicit list of full coordinate tuples that replaces the cartesian
product at enumeration time.

Composition rules:
- Single results on the same dimension compose as AND (set intersection)
- Explicit lists from several point filters compose as AND: the stored list
  keeps the tuples of the earlier list that also appear in the new one
- Enumeration of an explicit list drops tuples whose indices are no longer
  candidates, so a Single result folded after a point filter still applies
"""

from itertools import product
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from ..core.core_types import CoordinateTuple
from ..core.exceptions import DimensionNotFoundError, UnknownDimensionError
from ..core.logging_config import get_logger
from ..filters.results import FilterResult, SingleResult, PairsResult, TripletsResult

logger = get_logger('extraction.manager')


class DimensionIndexManager:
    """
    Candidate index sets per dimension plus an optional explicit tuple list.

    One manager is created per extraction job, fed each filter result once,
    and then enumerated once.

    Examples:
        >>> manager = DimensionIndexManager([("time", 10), ("lat", 3), ("lon", 2)])
        >>> manager.apply_filter_result(SingleResult("time", {0, 1}))
        >>> manager.apply_filter_result(PairsResult("lat", "lon", [(1, 1)]))
        >>> manager.get_all_coordinate_combinations()
        [(0, 1, 1), (1, 1, 1)]
    """

    def __init__(self, dimensions: Sequence[Tuple[str, int]]):
        """
        Initialize with every index of every dimension as a candidate.

        Args:
            dimensions: Target variable dimensions as (name, size), in storage order
        """
        self.dimension_order: List[str] = [name for name, _ in dimensions]
        self.dimension_sizes: Dict[str, int] = {name: int(size) for name, size in dimensions}
        self.per_dimension: Dict[str, Set[int]] = {
            name: set(range(int(size))) for name, size in dimensions
        }
        self.explicit_override: Optional[List[CoordinateTuple]] = None

    @classmethod
    def for_variable(cls, source, field: str) -> "DimensionIndexManager":
        """Create a manager for one variable of a data source."""
        return cls(source.variable_dimensions(field))

    # ------------------------------------------------------------------
    # Folding
    # ------------------------------------------------------------------

    def apply_filter_result(self, result: FilterResult) -> None:
        """
        Fold one filter result into the manager state.

        Raises:
            UnknownDimensionError: Single result for a dimension not in dimension_order
            DimensionNotFoundError: Pairs/Triplets result naming a dimension not in dimension_order
            TypeError: If result is not a FilterResult
        """
        if isinstance(result, SingleResult):
            self._apply_single(result)
        elif isinstance(result, PairsResult):
            self._apply_explicit(result.dimensions, result.pairs)
        elif isinstance(result, TripletsResult):
            self._apply_explicit(result.dimensions, result.triplets)
        else:
            raise TypeError(f"Unsupported filter result type: {type(result).__name__}")

    def _apply_single(self, result: SingleResult) -> None:
        if result.dimension not in self.per_dimension:
            raise UnknownDimensionError(result.dimension, self.dimension_order)
        current = self.per_dimension[result.dimension]
        self.per_dimension[result.dimension] = current & set(result.indices)
        logger.debug(
            "Dimension '%s': %d -> %d candidates",
            result.dimension, len(current), len(self.per_dimension[result.dimension])
        )

    def _apply_explicit(
        self,
        fixed_dimensions: Sequence[str],
        fixed_indices: Sequence[Tuple[int, ...]]
    ) -> None:
        combinations = self._build_explicit_combinations(fixed_dimensions, fixed_indices)

        if self.explicit_override is None:
            self.explicit_override = combinations
        else:
            incoming = set(combinations)
            self.explicit_override = [
                combo for combo in self.explicit_override if combo in incoming
            ]
        logger.debug(
            "Explicit combinations over %s: %d (stored %d)",
            list(fixed_dimensions), len(combinations), len(self.explicit_override)
        )

    def _build_explicit_combinations(
        self,
        fixed_dimensions: Sequence[str],
        fixed_indices: Sequence[Tuple[int, ...]]
    ) -> List[CoordinateTuple]:
        """
        Expand jointly fixed indices into full coordinate tuples.

        Every dimension outside fixed_dimensions contributes its sorted
        candidate set; the cartesian product of those sets is the outer loop
        and the fixed index groups the inner loop.
        """
        fixed_positions = [self._position_of(name) for name in fixed_dimensions]
        other_positions = [
            pos for pos in range(len(self.dimension_order)) if pos not in fixed_positions
        ]
        other_candidates = [
            sorted(self.per_dimension[self.dimension_order[pos]]) for pos in other_positions
        ]

        combinations: List[CoordinateTuple] = []
        rank = len(self.dimension_order)
        for assignment in product(*other_candidates):
            for group in fixed_indices:
                coord = [0] * rank
                for pos, idx in zip(other_positions, assignment):
                    coord[pos] = idx
                for pos, idx in zip(fixed_positions, group):
                    coord[pos] = idx
                combinations.append(tuple(coord))
        return combinations

    def _position_of(self, dimension: str) -> int:
        try:
            return self.dimension_order.index(dimension)
        except ValueError:
            raise DimensionNotFoundError(
                dimension, f"Variable dimensions: {', '.join(self.dimension_order)}"
            ) from None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_dimension_indices(self, dimension: str) -> Optional[Set[int]]:
        """Current candidate set of a dimension, None for unknown dimensions."""
        return self.per_dimension.get(dimension)

    def get_dimension_order(self) -> List[str]:
        return list(self.dimension_order)

    @property
    def has_explicit_override(self) -> bool:
        return self.explicit_override is not None

    def estimate_row_count(self) -> int:
        """
        Upper bound on the number of coordinate tuples, without enumerating.

        Product of candidate-set sizes, or the explicit list length when a
        point filter has been applied.
        """
        if self.explicit_override is not None:
            return len(self.explicit_override)
        count = 1
        for name in self.dimension_order:
            count *= len(self.per_dimension[name])
        return count

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def iter_coordinate_combinations(self) -> Iterator[CoordinateTuple]:
        """
        Yield every surviving coordinate tuple exactly once.

        Without an explicit list the order is lexicographic by dimension
        order over ascending candidate indices. With an explicit list its
        order is kept and repeated tuples are yielded once.
        """
        if self.explicit_override is None:
            yield from self._iter_cartesian(0, [])
            return

        candidates = [self.per_dimension[name] for name in self.dimension_order]
        seen: Set[CoordinateTuple] = set()
        for combo in self.explicit_override:
            if combo in seen:
                continue
            seen.add(combo)
            if all(idx in allowed for idx, allowed in zip(combo, candidates)):
                yield combo

    def _iter_cartesian(self, dim_index: int, current: List[int]) -> Iterator[CoordinateTuple]:
        if dim_index >= len(self.dimension_order):
            yield tuple(current)
            return

        for idx in sorted(self.per_dimension[self.dimension_order[dim_index]]):
            current.append(idx)
            yield from self._iter_cartesian(dim_index + 1, current)
            current.pop()

    def get_all_coordinate_combinations(self) -> List[CoordinateTuple]:
        """All surviving coordinate tuples as a list."""
        return list(self.iter_coordinate_combinations())
