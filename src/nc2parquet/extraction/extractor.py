"""
nc2parquet Row Extractor

This module turns surviving coordinate tuples into table rows: one column per
dimension holding display coordinates, followed by one value column named
after the target variable.
"""

from itertools import islice
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from ..core.config import (
    DEFAULT_BATCH_SIZE, DISPLAY_DTYPE, VALUE_DTYPE,
    MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK,
)
from ..core.core_types import CoordinateTuple
from ..core.exceptions import (
    ConfigurationError, DimensionNotFoundError, NotACoordinateError, RowLimitExceededError,
    check_supported_rank,
)
from ..core.logging_config import get_logger
from ..io.data_source import DataSource
from .manager import DimensionIndexManager

logger = get_logger('extraction.extractor')


def _batched(iterable: Iterable[CoordinateTuple], size: int) -> Iterable[List[CoordinateTuple]]:
    iterator = iter(iterable)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class Extractor:
    """
    Materializes surviving coordinate tuples of one variable into a table.

    Values are read in batches of batch_size tuples through
    DataSource.read_points. Coordinate vectors are read once per dimension.
    """

    def __init__(
        self,
        source: DataSource,
        field: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_rows: Optional[int] = None
    ):
        self.source = source
        self.field = field
        self.batch_size = batch_size
        self.max_rows = max_rows

    def resolve_display_coordinates(self, dimension_order: List[str]) -> Dict[str, Optional[np.ndarray]]:
        """
        Coordinate vector per dimension, None where the dimension has none.

        A dimension without a usable coordinate variable is displayed by
        its raw index. Read failures still propagate.
        """
        display: Dict[str, Optional[np.ndarray]] = {}
        for name in dimension_order:
            try:
                display[name] = self.source.read_coordinate(name)
            except (DimensionNotFoundError, NotACoordinateError):
                logger.debug("No coordinate variable for '%s', using raw indices", name)
                display[name] = None
        return display

    def extract(self, manager: DimensionIndexManager) -> pd.DataFrame:
        """
        Build the output table for every coordinate tuple of the manager.

        Args:
            manager: Manager with all filter results folded in

        Returns:
            pd.DataFrame: Dimension columns in dimension order, then the value column

        Raises:
            UnsupportedRankError: If the variable rank is outside 1-4
            ConfigurationError: If the variable is named like one of its dimensions
            RowLimitExceededError: If the row estimate exceeds max_rows
            DataSourceError: If reading values fails
        """
        dimension_order = manager.get_dimension_order()
        check_supported_rank(
            self.field, len(dimension_order), MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK
        )
        if self.field in dimension_order:
            raise ConfigurationError(
                self.field,
                "Value column would replace the dimension column of the same name"
            )

        estimated = manager.estimate_row_count()
        if self.max_rows is not None and estimated > self.max_rows:
            raise RowLimitExceededError(estimated, self.max_rows)
        logger.info("Extracting '%s': up to %d rows", self.field, estimated)

        display = self.resolve_display_coordinates(dimension_order)

        index_blocks: List[np.ndarray] = []
        value_blocks: List[np.ndarray] = []
        for batch in _batched(manager.iter_coordinate_combinations(), self.batch_size):
            index_blocks.append(np.asarray(batch, dtype=np.intp))
            value_blocks.append(self.source.read_points(self.field, batch))

        rank = len(dimension_order)
        if index_blocks:
            indices = np.concatenate(index_blocks).reshape(-1, rank)
            values = np.concatenate(value_blocks).astype(VALUE_DTYPE, copy=False)
        else:
            indices = np.empty((0, rank), dtype=np.intp)
            values = np.empty(0, dtype=VALUE_DTYPE)

        columns: Dict[str, np.ndarray] = {}
        for position, name in enumerate(dimension_order):
            dim_indices = indices[:, position]
            coords = display[name]
            if coords is None:
                columns[name] = dim_indices.astype(DISPLAY_DTYPE)
            else:
                columns[name] = coords[dim_indices].astype(DISPLAY_DTYPE, copy=False)
        columns[self.field] = values

        table = pd.DataFrame(columns)
        logger.info("Extracted %d rows for '%s'", len(table), self.field)
        return table
