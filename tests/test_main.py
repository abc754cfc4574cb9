import json

import numpy as np
import pandas as pd
import pytest
import xarray as xr

from nc2parquet import (
    JobConfig, ListParams, Point2DParams, Point3DParams, RangeParams,
    RangeFilter, XarrayDataSource, estimate_row_count, extract_dataframe,
    process_job, process_job_file, summarize_job, validate_job,
)
from nc2parquet.core.exceptions import (
    ConfigurationError, DimensionNotFoundError, OutputExistsError, RowLimitExceededError,
    UnsupportedRankError, VariableNotFoundError,
)


class TestExtractDataframe:
    def test_filters_and_params_mix(self, source):
        table = extract_dataframe(
            source, "profile",
            [RangeFilter("time", 8, 9), ListParams("level", [100, 300])],
        )
        assert table["time"].tolist() == [8.0, 8.0, 9.0, 9.0]
        assert table["level"].tolist() == [100.0, 300.0, 100.0, 300.0]
        assert table["profile"].tolist() == [32.0, 34.0, 36.0, 38.0]

    def test_no_filters_returns_everything(self, source):
        table = extract_dataframe(source, "temperature")
        assert len(table) == 60
        assert table["temperature"].tolist() == list(map(float, range(60)))

    def test_point3d(self, source):
        table = extract_dataframe(
            source, "temperature",
            [Point3DParams("time", "lat", "lon", [2, 5], [(10, 100)], 0.5)],
        )
        assert table[["time", "lat", "lon"]].values.tolist() == [
            [2.0, 10.0, 100.0], [5.0, 10.0, 100.0],
        ]
        assert table["temperature"].tolist() == [12.0, 30.0]

    def test_unsupported_rank_before_any_read(self, recording_source):
        with pytest.raises(UnsupportedRankError):
            extract_dataframe(recording_source, "ensemble", [RangeParams("time", 0, 1)])
        assert recording_source.coordinate_reads == []
        assert recording_source.point_reads == 0

    def test_missing_variable(self, source):
        with pytest.raises(VariableNotFoundError):
            extract_dataframe(source, "humidity")

    def test_filter_on_missing_dimension(self, source):
        with pytest.raises(DimensionNotFoundError):
            extract_dataframe(source, "temperature", [RangeParams("depth", 0, 1)])

    def test_max_rows(self, source):
        with pytest.raises(RowLimitExceededError):
            extract_dataframe(source, "temperature", max_rows=10)

    def test_string_coordinate_falls_back_to_index(self):
        source = XarrayDataSource(xr.Dataset(
            {"obs": (("station",), np.array([1.0, 2.0, 3.0]))},
            coords={"station": ["a", "b", "c"]},
        ))
        table = extract_dataframe(source, "obs")
        assert table["station"].tolist() == [0.0, 1.0, 2.0]
        assert table["obs"].tolist() == [1.0, 2.0, 3.0]

    def test_variable_named_like_its_dimension(self):
        source = XarrayDataSource(xr.Dataset(coords={"time": np.arange(3.0)}))
        with pytest.raises(ConfigurationError):
            extract_dataframe(source, "time")


def test_estimate_row_count(source):
    assert estimate_row_count(source, "temperature") == 60
    assert estimate_row_count(source, "temperature", [RangeParams("time", 0, 1)]) == 12
    assert estimate_row_count(
        source, "temperature",
        [Point2DParams("lat", "lon", [(20, 200)], 1.0)],
    ) == 10


class TestProcessJob:
    def test_writes_parquet(self, netcdf_path, tmp_path):
        config = JobConfig(
            nc_key=str(netcdf_path),
            variable_name="temperature",
            parquet_key=str(tmp_path / "out" / "result"),
            filters=[RangeParams("time", 0, 1), Point2DParams("lat", "lon", [(20, 200)], 1.0)],
        )
        written = process_job(config)

        assert written == str(tmp_path / "out" / "result.parquet")
        table = pd.read_parquet(written)
        assert list(table.columns) == ["time", "lat", "lon", "temperature"]
        assert table["temperature"].tolist() == [3.0, 9.0]

    def test_output_override(self, netcdf_path, tmp_path):
        config = JobConfig(str(netcdf_path), "counts", str(tmp_path / "ignored.parquet"))
        written = process_job(config, output_path=tmp_path / "counts.parquet")

        assert written.endswith("counts.parquet")
        assert not (tmp_path / "ignored.parquet").exists()
        assert pd.read_parquet(written)["station"].tolist() == [0.0, 1.0, 2.0]

    def test_nothing_written_on_error(self, netcdf_path, tmp_path):
        output = tmp_path / "big.parquet"
        config = JobConfig(str(netcdf_path), "temperature", str(output), max_rows=5)
        with pytest.raises(RowLimitExceededError):
            process_job(config)
        assert not output.exists()

    def test_process_job_file(self, netcdf_path, tmp_path):
        job_path = tmp_path / "job.json"
        output = tmp_path / "levels.parquet"
        job_path.write_text(json.dumps({
            "nc_key": str(netcdf_path),
            "variable_name": "profile",
            "parquet_key": str(output),
            "filters": [
                {"kind": "list", "params": {"dimension_name": "level", "values": [400]}},
                {"kind": "range", "dimension_name": "time", "min_value": 0, "max_value": 2},
            ],
        }), encoding="utf-8")

        assert process_job_file(job_path) == str(output)
        table = pd.read_parquet(output)
        assert table["profile"].tolist() == [3.0, 7.0, 11.0]

    def test_existing_output_is_kept(self, netcdf_path, tmp_path):
        output = tmp_path / "counts.parquet"
        output.write_bytes(b"previous")
        config = JobConfig(str(netcdf_path), "counts", str(output))

        with pytest.raises(OutputExistsError) as exc:
            process_job(config)
        assert exc.value.path == str(output)
        assert output.read_bytes() == b"previous"

    def test_overwrite_replaces_output(self, netcdf_path, tmp_path):
        output = tmp_path / "counts.parquet"
        output.write_bytes(b"previous")
        config = JobConfig(str(netcdf_path), "counts", str(output))

        assert process_job(config, overwrite=True) == str(output)
        assert pd.read_parquet(output)["counts"].tolist() == [1.0, 2.0, 3.0]


def test_summarize_job(netcdf_path, tmp_path):
    config = JobConfig(
        nc_key=str(netcdf_path),
        variable_name="temperature",
        parquet_key=str(tmp_path / "result"),
        filters=[RangeParams("time", 0, 1), Point2DParams("lat", "lon", [(20, 200)], 1.0)],
    )
    summary = summarize_job(config)

    assert summary["output"] == str(tmp_path / "result.parquet")
    assert summary["filters"] == ["range", "2d_point"]
    assert [d["name"] for d in summary["dimensions"]] == ["time", "lat", "lon"]
    assert summary["estimated_rows"] == 2
    assert not (tmp_path / "result.parquet").exists()


def test_validate_job_missing_input(tmp_path):
    config = JobConfig(str(tmp_path / "absent.nc"), "temperature", str(tmp_path / "out"))
    with pytest.raises(ConfigurationError) as exc:
        validate_job(config)
    assert exc.value.item == "nc_key"
