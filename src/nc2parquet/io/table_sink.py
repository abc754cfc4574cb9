"""
nc2parquet Table Sinks

This module defines the interface for persisting extracted tables and the
Parquet implementation built on pandas and pyarrow.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..core.config import PARQUET_EXTENSION, DEFAULT_COMPRESSION, PARQUET_ENGINE
from ..core.exceptions import OutputExistsError, OutputWriteError
from ..core.logging_config import get_logger

logger = get_logger('io.table_sink')


def is_remote_path(path: str) -> bool:
    """Check if path is a remote URI (has a scheme like s3://)."""
    return "://" in path


def _ensure_parent_dir(path: str) -> None:
    """Create parent directory for local paths, skip for remote URIs."""
    if not is_remote_path(path):
        Path(path).parent.mkdir(parents=True, exist_ok=True)


class TableSink(ABC):
    """
    Abstract base class for table writers.

    Implementations receive a table whose columns are the dimension
    coordinates in dimension order followed by the value column.
    """

    def __init__(self, overwrite: bool = False):
        self.overwrite = overwrite

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension for this sink's format (including leading dot)."""

    def resolve_path(self, path: Union[str, Path]) -> str:
        """Output path with the sink's extension appended when missing."""
        path = str(path)
        if not path.endswith(self.file_extension):
            path = f"{path}{self.file_extension}"
        return path

    def ensure_writable(self, path: Union[str, Path]) -> str:
        """
        Resolve the output path and refuse to replace an existing local file.

        Raises:
            OutputExistsError: If the file exists and overwrite is False
        """
        path = self.resolve_path(path)
        if not self.overwrite and not is_remote_path(path) and Path(path).exists():
            raise OutputExistsError(path)
        return path

    @abstractmethod
    def write(self, table: pd.DataFrame, path: Union[str, Path]) -> str:
        """
        Persist a table.

        Args:
            table: Extracted table
            path: Output path (extension added if missing)

        Returns:
            str: The path actually written to

        Raises:
            OutputExistsError: If the file exists and overwrite is False
            OutputWriteError: If writing fails
        """


class ParquetSink(TableSink):
    """
    Writer for Parquet files using pandas with the pyarrow engine.

    Examples:
        >>> sink = ParquetSink(compression="zstd")
        >>> sink.write(table, "/path/to/output")
        '/path/to/output.parquet'
    """

    def __init__(self, compression: Optional[str] = DEFAULT_COMPRESSION, overwrite: bool = False):
        super().__init__(overwrite)
        self.compression = compression

    @property
    def file_extension(self) -> str:
        return PARQUET_EXTENSION

    def write(self, table: pd.DataFrame, path: Union[str, Path]) -> str:
        path = self.ensure_writable(path)
        _ensure_parent_dir(path)

        logger.info("Writing %d rows x %d columns to %s", len(table), len(table.columns), path)
        logger.debug("Schema: %s", dict(table.dtypes.astype(str)))
        try:
            table.to_parquet(path, engine=PARQUET_ENGINE, compression=self.compression, index=False)
        except (OSError, ValueError) as e:
            raise OutputWriteError(path, str(e)) from e
        return path
