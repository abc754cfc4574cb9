"""
nc2parquet Information Utilities

This module provides functions for inspecting a NetCDF dataset before
extraction: its dimensions, their coordinate ranges and its variables.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ..core.config import MIN_SUPPORTED_RANK, MAX_SUPPORTED_RANK
from ..core.exceptions import DimensionNotFoundError, NotACoordinateError
from ..io.data_source import XarrayDataSource


# ============================================================================
# Dimension Information
# ============================================================================

def get_dimension_info(source: XarrayDataSource, name: str, size: int) -> Dict[str, Any]:
    """
    Describe one dimension.

    Returns:
        Dict: name, size, has_coordinate and, when a coordinate exists,
        its min/max
    """
    info: Dict[str, Any] = {'name': name, 'size': size, 'has_coordinate': False}
    try:
        coords = source.read_coordinate(name)
    except (DimensionNotFoundError, NotACoordinateError):
        return info

    info['has_coordinate'] = True
    if coords.size:
        info['min'] = float(np.nanmin(coords))
        info['max'] = float(np.nanmax(coords))
    return info


# ============================================================================
# Dataset Information
# ============================================================================

def _variable_info(source: XarrayDataSource, name: str) -> Dict[str, Any]:
    variable = source.dataset.variables[name]
    rank = variable.ndim
    return {
        'name': name,
        'dimensions': [str(d) for d in variable.dims],
        'shape': [int(s) for s in variable.shape],
        'dtype': str(variable.dtype),
        'extractable': MIN_SUPPORTED_RANK <= rank <= MAX_SUPPORTED_RANK,
        'attributes': {str(k): str(v) for k, v in variable.attrs.items()},
    }


def get_dataset_info(
    dataset: Union[str, Path, XarrayDataSource],
    variable: Optional[str] = None
) -> Dict[str, Any]:
    """
    Collect dimensions and variables of a dataset.

    Args:
        dataset: NetCDF path or an open XarrayDataSource
        variable: Restrict the variable listing to this one

    Returns:
        Dict: 'path', 'dimensions' (list of dimension dicts) and 'variables'

    Raises:
        DataSourceError: If the file cannot be opened
        VariableNotFoundError: If variable is given but missing

    Examples:
        >>> info = get_dataset_info("/path/to/data.nc", variable="temperature")
        >>> [d['name'] for d in info['dimensions']]
        ['time', 'lat', 'lon']
    """
    if isinstance(dataset, XarrayDataSource):
        return _collect_info(dataset, variable)

    with XarrayDataSource.open(dataset) as source:
        return _collect_info(source, variable)


def _collect_info(source: XarrayDataSource, variable: Optional[str]) -> Dict[str, Any]:
    if variable is not None:
        dims = source.variable_dimensions(variable)
        names: List[str] = [variable]
    else:
        dims = source.dimension_list()
        names = [str(n) for n in source.dataset.data_vars]

    return {
        'path': str(source.path) if source.path else None,
        'dimensions': [get_dimension_info(source, name, size) for name, size in dims],
        'variables': [_variable_info(source, name) for name in names],
    }


def format_dataset_info(info: Dict[str, Any]) -> str:
    """Render get_dataset_info output as readable text."""
    lines = []
    if info.get('path'):
        lines.append(f"Dataset: {info['path']}")

    lines.append("Dimensions:")
    for dim in info['dimensions']:
        line = f"  {dim['name']}: {dim['size']}"
        if 'min' in dim:
            line += f" [{dim['min']:g} .. {dim['max']:g}]"
        elif not dim['has_coordinate']:
            line += " (no coordinate)"
        lines.append(line)

    lines.append("Variables:")
    for var in info['variables']:
        flag = "" if var['extractable'] else "  (unsupported rank)"
        lines.append(f"  {var['name']}({', '.join(var['dimensions'])}) {var['dtype']}{flag}")

    return "\n".join(lines)
