"""
nc2parquet Filter Results

This module defines what a filter found. A result is one of three shapes:

- SingleResult: surviving indices along one named dimension
- PairsResult: surviving (dim_a, dim_b) index pairs
- TripletsResult: surviving (dim_a, dim_b, dim_c) index triplets

FilterResult is the closed union of the three. Consumers dispatch over all
three shapes and raise TypeError for anything else.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple, Union

from ..core.core_types import IndexPair, IndexTriplet


class _ResultSize:
    """Size queries shared by the result shapes."""

    @property
    def is_empty(self) -> bool:
        return len(self) == 0


@dataclass(frozen=True)
class SingleResult(_ResultSize):
    """Surviving positions along exactly one dimension."""
    dimension: str
    indices: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "indices", frozenset(int(i) for i in self.indices))

    @property
    def dimensions(self) -> Tuple[str]:
        return (self.dimension,)

    def __len__(self) -> int:
        return len(self.indices)


@dataclass(frozen=True)
class PairsResult(_ResultSize):
    """Surviving joint positions along two dimensions; pair[0] indexes dim_a."""
    dim_a: str
    dim_b: str
    pairs: Tuple[IndexPair, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "pairs", tuple((int(i), int(j)) for i, j in self.pairs)
        )

    @property
    def dimensions(self) -> Tuple[str, str]:
        return (self.dim_a, self.dim_b)

    def __len__(self) -> int:
        return len(self.pairs)


@dataclass(frozen=True)
class TripletsResult(_ResultSize):
    """Surviving joint positions along three dimensions."""
    dim_a: str
    dim_b: str
    dim_c: str
    triplets: Tuple[IndexTriplet, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, "triplets", tuple((int(i), int(j), int(k)) for i, j, k in self.triplets)
        )

    @property
    def dimensions(self) -> Tuple[str, str, str]:
        return (self.dim_a, self.dim_b, self.dim_c)

    def __len__(self) -> int:
        return len(self.triplets)


FilterResult = Union[SingleResult, PairsResult, TripletsResult]


def is_empty(result: FilterResult) -> bool:
    """Check whether a filter result kept nothing."""
    return result.is_empty


def describe_result(result: FilterResult) -> str:
    """
    Human-readable one-line summary of a filter result.

    Raises:
        TypeError: If result is not one of the three result shapes
    """
    if isinstance(result, SingleResult):
        return f"{len(result)} indices for dimension '{result.dimension}'"
    if isinstance(result, PairsResult):
        return (f"{len(result)} coordinate pairs for dimensions "
                f"'{result.dim_a}', '{result.dim_b}'")
    if isinstance(result, TripletsResult):
        return (f"{len(result)} coordinate triplets for dimensions "
                f"'{result.dim_a}', '{result.dim_b}', '{result.dim_c}'")
    raise TypeError(f"Unsupported filter result type: {type(result).__name__}")
