"""
nc2parquet Job Configuration Loading

This module turns JSON job files, plain dictionaries, compact filter strings
and environment variables into JobConfig and filter parameter objects.

JSON filter entries carry a "kind" and either a nested "params" object or the
parameters inline:

    {"kind": "range", "params": {"dimension_name": "time", "min_value": 0, "max_value": 10}}
    {"kind": "list", "dimension_name": "level", "values": [100, 300]}

Compact strings (command line and environment variables):

    range:    dim:min:max
    list:     dim:v1,v2,v3
    2d_point: lat_dim,lon_dim:lat,lon:tolerance
    3d_point: time_dim,lat_dim,lon_dim:time,lat,lon:tolerance
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from ..core.config import (
    RANGE_KIND, LIST_KIND, POINT2D_KIND, POINT3D_KIND, FILTER_KINDS,
    ENV_RANGE_FILTERS, ENV_LIST_FILTERS, ENV_POINT2D_FILTERS, ENV_POINT3D_FILTERS,
    ENV_FILTER_SEPARATORS, DEFAULT_BATCH_SIZE, DEFAULT_COMPRESSION,
    get_default_max_rows,
)
from ..core.core_types import (
    FilterParams, JobConfig, RangeParams, ListParams, Point2DParams, Point3DParams,
)
from ..core.exceptions import ConfigurationError
from ..core.logging_config import get_logger

logger = get_logger('io.job_config')

_PARAMS_BY_KIND = {
    RANGE_KIND: RangeParams,
    LIST_KIND: ListParams,
    POINT2D_KIND: Point2DParams,
    POINT3D_KIND: Point3DParams,
}

# ============================================================================
# Dictionary / JSON Parsing
# ============================================================================

def parse_filter_config(entry: Mapping[str, Any]) -> FilterParams:
    """
    Parse one filter entry of a job configuration.

    Args:
        entry: Mapping with a "kind" key and nested or inline parameters

    Returns:
        FilterParams: Validated parameter object

    Raises:
        ConfigurationError: If the kind is missing/unknown or parameters are invalid
    """
    if not isinstance(entry, Mapping):
        raise ConfigurationError("filter", f"Expected an object, got {type(entry).__name__}")

    kind = entry.get("kind")
    if kind is None:
        raise ConfigurationError("filter", "Missing 'kind' field")
    params_cls = _PARAMS_BY_KIND.get(kind)
    if params_cls is None:
        raise ConfigurationError(
            "filter", f"Unknown filter kind: {kind!r}. Expected one of {', '.join(FILTER_KINDS)}"
        )

    if "params" in entry:
        params = dict(entry["params"])
    else:
        params = {key: value for key, value in entry.items() if key != "kind"}

    try:
        return params_cls(**params)
    except TypeError as e:
        raise ConfigurationError(kind, f"Invalid parameters {sorted(params)}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(kind, str(e)) from e


def _as_int(item: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(item, f"Expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(item, f"Expected an integer, got {value!r}") from e


def job_config_from_dict(data: Mapping[str, Any]) -> JobConfig:
    """
    Build a JobConfig from a parsed JSON object.

    Raises:
        ConfigurationError: If required keys are missing or values are invalid
    """
    missing = [key for key in ("nc_key", "variable_name", "parquet_key") if key not in data]
    if missing:
        raise ConfigurationError("job", f"Missing required keys: {', '.join(missing)}")

    filters = data.get("filters") or []
    if not isinstance(filters, list):
        raise ConfigurationError("filters", "Must be a list")

    max_rows = data.get("max_rows")
    if max_rows is None:
        max_rows = get_default_max_rows()
    else:
        max_rows = _as_int("max_rows", max_rows)

    batch_size = _as_int("batch_size", data.get("batch_size", DEFAULT_BATCH_SIZE))

    return JobConfig(
        nc_key=data["nc_key"],
        variable_name=data["variable_name"],
        parquet_key=data["parquet_key"],
        filters=[parse_filter_config(entry) for entry in filters],
        max_rows=max_rows,
        batch_size=batch_size,
        compression=data.get("compression", DEFAULT_COMPRESSION),
    )


def job_config_from_json(json_str: str) -> JobConfig:
    """Build a JobConfig from a JSON string."""
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ConfigurationError("job", f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("job", "Top-level JSON value must be an object")
    return job_config_from_dict(data)


def load_job_config(path: Union[str, Path]) -> JobConfig:
    """
    Load a JobConfig from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError("job", f"Configuration file not found: {path}") from e
    except OSError as e:
        raise ConfigurationError("job", f"Cannot read {path}: {e}") from e

    logger.info("Loaded configuration from %s", path)
    return job_config_from_json(content)

# ============================================================================
# Compact Filter Strings
# ============================================================================

def _split_parts(text: str, expected: int, usage: str) -> List[str]:
    parts = [part.strip() for part in text.strip().split(":")]
    if len(parts) != expected or not all(parts):
        raise ConfigurationError("filter string", f"'{text}' must be in format '{usage}'")
    return parts


def _parse_floats(text: str, what: str, count: Optional[int] = None) -> List[float]:
    try:
        values = [float(v) for v in text.split(",") if v.strip()]
    except ValueError as e:
        raise ConfigurationError("filter string", f"Invalid {what}: '{text}'") from e
    if not values or (count is not None and len(values) != count):
        expected = f"{count} values" if count is not None else "at least one value"
        raise ConfigurationError("filter string", f"Expected {expected} for {what}: '{text}'")
    return values


def _parse_names(text: str, count: int, usage: str) -> List[str]:
    names = [name.strip() for name in text.split(",")]
    if len(names) != count or not all(names):
        raise ConfigurationError("filter string", f"Dimensions must be '{usage}'")
    return names


def parse_range_filter(text: str) -> RangeParams:
    """Parse 'dimension:min:max'."""
    dimension, min_text, max_text = _split_parts(text, 3, "dimension:min:max")
    min_value = _parse_floats(min_text, "minimum value", 1)[0]
    max_value = _parse_floats(max_text, "maximum value", 1)[0]
    return RangeParams(dimension, min_value, max_value)


def parse_list_filter(text: str) -> ListParams:
    """Parse 'dimension:val1,val2,val3'."""
    dimension, values_text = _split_parts(text, 2, "dimension:val1,val2,val3")
    return ListParams(dimension, _parse_floats(values_text, "list values"))


def parse_point2d_filter(text: str) -> Point2DParams:
    """Parse 'lat_dim,lon_dim:lat,lon:tolerance'."""
    dims_text, coords_text, tol_text = _split_parts(text, 3, "lat_dim,lon_dim:lat,lon:tolerance")
    lat_dim, lon_dim = _parse_names(dims_text, 2, "lat_dim,lon_dim")
    lat, lon = _parse_floats(coords_text, "point coordinates", 2)
    tolerance = _parse_floats(tol_text, "tolerance", 1)[0]
    return Point2DParams(lat_dim, lon_dim, [(lat, lon)], tolerance)


def parse_point3d_filter(text: str) -> Point3DParams:
    """Parse 'time_dim,lat_dim,lon_dim:time,lat,lon:tolerance'."""
    dims_text, coords_text, tol_text = _split_parts(
        text, 3, "time_dim,lat_dim,lon_dim:time,lat,lon:tolerance"
    )
    time_dim, lat_dim, lon_dim = _parse_names(dims_text, 3, "time_dim,lat_dim,lon_dim")
    step, lat, lon = _parse_floats(coords_text, "point coordinates", 3)
    tolerance = _parse_floats(tol_text, "tolerance", 1)[0]
    return Point3DParams(time_dim, lat_dim, lon_dim, [step], [(lat, lon)], tolerance)


FILTER_STRING_PARSERS: Dict[str, Callable[[str], FilterParams]] = {
    RANGE_KIND: parse_range_filter,
    LIST_KIND: parse_list_filter,
    POINT2D_KIND: parse_point2d_filter,
    POINT3D_KIND: parse_point3d_filter,
}

# ============================================================================
# Environment Variables
# ============================================================================

_ENV_BY_KIND = {
    RANGE_KIND: ENV_RANGE_FILTERS,
    LIST_KIND: ENV_LIST_FILTERS,
    POINT2D_KIND: ENV_POINT2D_FILTERS,
    POINT3D_KIND: ENV_POINT3D_FILTERS,
}


def parse_filters_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, List[FilterParams]]:
    """
    Read filters from the NC2PARQUET_*_FILTERS environment variables.

    Args:
        environ: Environment mapping, os.environ when None

    Returns:
        Dict[str, List[FilterParams]]: Filters per kind (every kind present)

    Raises:
        ConfigurationError: If a variable holds a malformed filter
    """
    environ = os.environ if environ is None else environ
    filters: Dict[str, List[FilterParams]] = {kind: [] for kind in FILTER_KINDS}

    for kind, env_name in _ENV_BY_KIND.items():
        raw = environ.get(env_name, "")
        if not raw.strip():
            continue
        parser = FILTER_STRING_PARSERS[kind]
        for item in raw.split(ENV_FILTER_SEPARATORS[env_name]):
            if not item.strip():
                continue
            try:
                filters[kind].append(parser(item))
            except ConfigurationError as e:
                raise ConfigurationError(env_name, e.details or e.message) from e

    return filters


def merge_filters(
    explicit: Sequence[FilterParams],
    environ: Optional[Mapping[str, str]] = None
) -> List[FilterParams]:
    """
    Combine explicit filters with environment filters.

    Per filter kind, explicit filters win; environment filters of a kind are
    appended only when no explicit filter of that kind was given.
    """
    explicit = list(explicit)
    explicit_kinds = {params.kind for params in explicit}
    merged = list(explicit)
    for kind, env_filters in parse_filters_from_env(environ).items():
        if kind in explicit_kinds or not env_filters:
            continue
        logger.debug("Using %d %s filter(s) from environment", len(env_filters), kind)
        merged.extend(env_filters)
    return merged
