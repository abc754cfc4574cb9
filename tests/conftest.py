"""Shared fixtures: a small in-memory dataset and data sources over it."""

from pathlib import Path

import numpy as np
import pytest
import xarray as xr

from nc2parquet.core.config import (
    ENV_RANGE_FILTERS, ENV_LIST_FILTERS, ENV_POINT2D_FILTERS, ENV_POINT3D_FILTERS,
    ENV_MAX_ROWS,
)
from nc2parquet.io.data_source import XarrayDataSource


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (ENV_RANGE_FILTERS, ENV_LIST_FILTERS, ENV_POINT2D_FILTERS,
                 ENV_POINT3D_FILTERS, ENV_MAX_ROWS):
        monkeypatch.delenv(name, raising=False)


def make_dataset() -> xr.Dataset:
    """
    time: 0..9, lat: [10, 20, 30], lon: [100, 200], level: [100, 200, 300, 400].

    temperature(time, lat, lon) holds t*6 + i*2 + j so a value identifies its index.
    station and member have no coordinate variable.
    """
    time = np.arange(10, dtype=np.float64)
    lat = np.array([10.0, 20.0, 30.0])
    lon = np.array([100.0, 200.0])
    level = np.array([100.0, 200.0, 300.0, 400.0])

    return xr.Dataset(
        data_vars={
            "temperature": (("time", "lat", "lon"), np.arange(60, dtype=np.float64).reshape(10, 3, 2)),
            "profile": (("time", "level"), np.arange(40, dtype=np.float32).reshape(10, 4)),
            "counts": (("station",), np.array([1.0, 2.0, 3.0])),
            "surface": (("lat", "lon"), np.ones((3, 2))),
            "ensemble": (
                ("time", "lat", "lon", "level", "member"),
                np.zeros((10, 3, 2, 4, 2)),
            ),
        },
        coords={"time": time, "lat": lat, "lon": lon, "level": level},
        attrs={"title": "test dataset"},
    )


class RecordingSource(XarrayDataSource):
    """XarrayDataSource that records coordinate and point reads."""

    def __init__(self, dataset, path=None):
        super().__init__(dataset, path)
        self.coordinate_reads = []
        self.point_reads = 0

    def read_coordinate(self, name):
        self.coordinate_reads.append(name)
        return super().read_coordinate(name)

    def read_points(self, field, indices):
        self.point_reads += 1
        return super().read_points(field, indices)


@pytest.fixture
def dataset() -> xr.Dataset:
    return make_dataset()


@pytest.fixture
def source(dataset) -> XarrayDataSource:
    return XarrayDataSource(dataset)


@pytest.fixture
def recording_source(dataset) -> RecordingSource:
    return RecordingSource(dataset)


@pytest.fixture
def netcdf_path(tmp_path: Path, dataset) -> Path:
    path = tmp_path / "input.nc"
    dataset.to_netcdf(path)
    return path
