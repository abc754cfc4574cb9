"""
nc2parquet Data Sources

This module defines the read interface the extraction engine consumes and the
xarray-backed implementation used for NetCDF files.

The engine only ever needs four things from a dataset: its dimensions, the
dimensions of the target variable, 1-D coordinate vectors, and values of the
target variable at explicit index tuples.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import xarray as xr

from ..core.config import (
    DISPLAY_DTYPE, VALUE_DTYPE, MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK,
)
from ..core.core_types import CoordinateTuple
from ..core.exceptions import (
    DataSourceError, DimensionNotFoundError, NotACoordinateError,
    check_supported_rank, check_variables_availability,
)
from ..core.logging_config import get_logger

logger = get_logger('io.data_source')

ChunkSetting = Optional[Union[str, Dict[str, int]]]


# ============================================================================
# Abstract Interface
# ============================================================================

class DataSource(ABC):
    """
    Abstract base class for multidimensional array sources.

    Implementations must provide dimension listing, coordinate reads and
    scalar reads. read_points has a per-tuple default; implementations
    should override it when the backend supports batched selection.
    """

    @abstractmethod
    def dimension_list(self) -> List[Tuple[str, int]]:
        """All dimensions of the source as (name, size)."""

    @abstractmethod
    def variable_dimensions(self, field: str) -> List[Tuple[str, int]]:
        """
        Dimensions of one variable, in storage order.

        Raises:
            VariableNotFoundError: If the variable does not exist
        """

    @abstractmethod
    def read_coordinate(self, name: str) -> np.ndarray:
        """
        Read the 1-D coordinate vector of a dimension.

        Raises:
            DimensionNotFoundError: If no variable with that name exists
            NotACoordinateError: If the variable is not 1-D
            DataSourceError: If reading fails
        """

    @abstractmethod
    def read_scalar(self, field: str, index: CoordinateTuple) -> float:
        """
        Read one value of a variable at a full index tuple.

        Raises:
            UnsupportedRankError: If the variable rank is outside 1-4
            DataSourceError: If reading fails
        """

    def has_coordinate(self, name: str) -> bool:
        """Check whether a usable 1-D coordinate vector exists for name."""
        try:
            self.read_coordinate(name)
        except (DimensionNotFoundError, NotACoordinateError):
            return False
        return True

    def read_points(self, field: str, indices: Sequence[CoordinateTuple]) -> np.ndarray:
        """Read many values of a variable, one per index tuple."""
        return np.array(
            [self.read_scalar(field, index) for index in indices],
            dtype=VALUE_DTYPE
        )


# ============================================================================
# xarray Implementation
# ============================================================================

class XarrayDataSource(DataSource):
    """
    Data source backed by an xarray Dataset.

    A dimension's coordinate vector is the same-named 1-D variable of the
    dataset, whether xarray holds it as an index coordinate or as a plain
    data variable.

    Examples:
        >>> source = XarrayDataSource.open("/path/to/data.nc")
        >>> source.dimension_list()
        [('time', 10), ('lat', 3), ('lon', 2)]
        >>> source.read_scalar("temperature", (0, 1, 1))
        287.5
    """

    def __init__(self, dataset: xr.Dataset, path: Optional[Path] = None):
        self.dataset = dataset
        self.path = path
        self._coordinate_cache: Dict[str, np.ndarray] = {}

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        engine: Optional[str] = None,
        chunks: ChunkSetting = None
    ) -> "XarrayDataSource":
        """
        Open a NetCDF file.

        Times are left undecoded so time coordinates stay numeric and can be
        compared against filter values.

        Raises:
            DataSourceError: If the file cannot be opened
        """
        path = Path(path)
        try:
            dataset = xr.open_dataset(path, engine=engine, chunks=chunks, decode_times=False)
        except Exception as e:
            raise DataSourceError("open", f"Failed to open {path}: {e}") from e
        logger.debug("Opened dataset %s with dimensions %s", path, dict(dataset.sizes))
        return cls(dataset, path)

    def close(self) -> None:
        self.dataset.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def dimension_list(self) -> List[Tuple[str, int]]:
        return [(str(name), int(size)) for name, size in self.dataset.sizes.items()]

    def variable_dimensions(self, field: str) -> List[Tuple[str, int]]:
        variable = self._get_variable(field)
        return [(str(dim), int(size)) for dim, size in zip(variable.dims, variable.shape)]

    def read_coordinate(self, name: str) -> np.ndarray:
        if name in self._coordinate_cache:
            return self._coordinate_cache[name]

        if name not in self.dataset.variables:
            raise DimensionNotFoundError(name, "No coordinate variable with this name")

        variable = self.dataset.variables[name]
        if variable.ndim != 1:
            raise NotACoordinateError(name, variable.ndim)
        if not np.issubdtype(variable.dtype, np.number):
            raise NotACoordinateError(
                name, variable.ndim, f"Expected numeric values, got dtype {variable.dtype}"
            )

        try:
            values = np.asarray(variable.values, dtype=DISPLAY_DTYPE)
        except Exception as e:
            raise DataSourceError(f"coordinate read of '{name}'", str(e)) from e

        self._coordinate_cache[name] = values
        return values

    def read_scalar(self, field: str, index: CoordinateTuple) -> float:
        variable = self._get_variable(field)
        check_supported_rank(field, variable.ndim, MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK)
        if len(index) != variable.ndim:
            raise DataSourceError(
                f"scalar read of '{field}'",
                f"Index {tuple(index)} has {len(index)} entries, variable has {variable.ndim} dimensions"
            )
        try:
            value = variable.isel(dict(zip(variable.dims, index))).values
        except Exception as e:
            raise DataSourceError(f"scalar read of '{field}' at {tuple(index)}", str(e)) from e
        return float(value)

    def read_points(self, field: str, indices: Sequence[CoordinateTuple]) -> np.ndarray:
        """Read many values with one vectorized pointwise selection."""
        variable = self._get_variable(field)
        check_supported_rank(field, variable.ndim, MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK)
        if len(indices) == 0:
            return np.empty(0, dtype=VALUE_DTYPE)

        index_array = np.asarray(indices, dtype=np.intp).reshape(len(indices), variable.ndim)
        indexers = {
            dim: xr.DataArray(index_array[:, position], dims="points")
            for position, dim in enumerate(variable.dims)
        }
        try:
            values = variable.isel(indexers).values
        except Exception as e:
            raise DataSourceError(f"batched read of '{field}'", str(e)) from e
        return np.asarray(values, dtype=VALUE_DTYPE)

    def _get_variable(self, field: str) -> xr.DataArray:
        check_variables_availability([field], list(map(str, self.dataset.variables)))
        return self.dataset[field]
