import json
import logging

import pandas as pd
import pytest

from nc2parquet.cli import main
from nc2parquet.core.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)


def test_extract_command(netcdf_path, tmp_path, capsys):
    output = tmp_path / "out.parquet"
    exit_code = main([
        "extract", str(netcdf_path),
        "-v", "temperature",
        "-o", str(output),
        "--range", "time:0:1",
        "--point2d", "lat,lon:20,200:1.0",
    ])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == str(output)
    assert pd.read_parquet(output)["temperature"].tolist() == [3.0, 9.0]


def test_extract_uses_environment_filters(netcdf_path, tmp_path, monkeypatch):
    monkeypatch.setenv("NC2PARQUET_RANGE_FILTERS", "time:0:1")
    output = tmp_path / "env.parquet"

    assert main(["extract", str(netcdf_path), "-v", "temperature", "-o", str(output)]) == 0
    assert len(pd.read_parquet(output)) == 12


def test_cli_filters_override_environment(netcdf_path, tmp_path, monkeypatch):
    monkeypatch.setenv("NC2PARQUET_LIST_FILTERS", "level:100")
    output = tmp_path / "levels.parquet"

    assert main([
        "extract", str(netcdf_path), "-v", "profile", "-o", str(output),
        "--list", "level:200,400", "--range", "time:0:0.5",
    ]) == 0
    assert pd.read_parquet(output)["level"].tolist() == [200.0, 400.0]


def test_convert_command(netcdf_path, tmp_path, capsys):
    job_path = tmp_path / "job.json"
    job_path.write_text(json.dumps({
        "nc_key": str(netcdf_path),
        "variable_name": "counts",
        "parquet_key": str(tmp_path / "counts.parquet"),
    }), encoding="utf-8")
    output = tmp_path / "override.parquet"

    assert main(["convert", str(job_path), "--output", str(output)]) == 0
    assert capsys.readouterr().out.strip() == str(output)
    assert pd.read_parquet(output)["counts"].tolist() == [1.0, 2.0, 3.0]


def test_convert_max_rows(netcdf_path, tmp_path, capsys):
    job_path = tmp_path / "job.json"
    job_path.write_text(json.dumps({
        "nc_key": str(netcdf_path),
        "variable_name": "temperature",
        "parquet_key": str(tmp_path / "t.parquet"),
    }), encoding="utf-8")

    assert main(["convert", str(job_path), "--max-rows", "10"]) == 1
    assert "60 rows" in capsys.readouterr().err
    assert not (tmp_path / "t.parquet").exists()


def test_info_command(netcdf_path, capsys):
    assert main(["info", str(netcdf_path)]) == 0
    out = capsys.readouterr().out
    assert "time: 10" in out
    assert "temperature(time, lat, lon)" in out


def test_info_json(netcdf_path, capsys):
    assert main(["info", str(netcdf_path), "--variable", "profile", "--json"]) == 0
    info = json.loads(capsys.readouterr().out)
    assert [d["name"] for d in info["dimensions"]] == ["time", "level"]


@pytest.mark.parametrize("argv", [
    ["extract", "{nc}", "-v", "humidity", "-o", "{out}"],
    ["extract", "{nc}", "-v", "temperature", "-o", "{out}", "--range", "time:5"],
    ["extract", "{nc}", "-v", "ensemble", "-o", "{out}"],
    ["convert", "{missing}"],
])
def test_errors_exit_with_one(argv, netcdf_path, tmp_path, capsys):
    values = {
        "nc": str(netcdf_path),
        "out": str(tmp_path / "out.parquet"),
        "missing": str(tmp_path / "missing.json"),
    }
    exit_code = main([arg.format(**values) for arg in argv])

    assert exit_code == 1
    assert capsys.readouterr().err.startswith("error: ")
    assert not (tmp_path / "out.parquet").exists()


def test_subcommand_required():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_extract_refuses_existing_output(netcdf_path, tmp_path, capsys):
    output = tmp_path / "out.parquet"
    output.write_bytes(b"previous")

    exit_code = main(["extract", str(netcdf_path), "-v", "counts", "-o", str(output)])

    assert exit_code == 1
    assert "already exists" in capsys.readouterr().err
    assert output.read_bytes() == b"previous"


def test_extract_force_overwrites(netcdf_path, tmp_path):
    output = tmp_path / "out.parquet"
    output.write_bytes(b"previous")

    assert main(["extract", str(netcdf_path), "-v", "counts", "-o", str(output), "--force"]) == 0
    assert pd.read_parquet(output)["counts"].tolist() == [1.0, 2.0, 3.0]


def test_extract_dry_run(netcdf_path, tmp_path, capsys):
    output = tmp_path / "out.parquet"
    exit_code = main([
        "extract", str(netcdf_path),
        "-v", "temperature",
        "-o", str(output),
        "--range", "time:0:1",
        "--point2d", "lat,lon:20,200:1.0",
        "--dry-run",
    ])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Configuration Summary:" in out
    assert "1. range" in out
    assert "2. 2d_point" in out
    assert "Estimated rows: 2" in out
    assert not output.exists()


def test_convert_dry_run_ignores_existing_output(netcdf_path, tmp_path, capsys):
    output = tmp_path / "counts.parquet"
    output.write_bytes(b"previous")
    job_path = _write_job(tmp_path, netcdf_path, output)

    assert main(["convert", str(job_path), "--dry-run"]) == 0
    assert "Estimated rows: 3" in capsys.readouterr().out
    assert output.read_bytes() == b"previous"


def test_convert_force(netcdf_path, tmp_path):
    output = tmp_path / "counts.parquet"
    output.write_bytes(b"previous")
    job_path = _write_job(tmp_path, netcdf_path, output)

    assert main(["convert", str(job_path)]) == 1
    assert main(["convert", str(job_path), "--force"]) == 0
    assert len(pd.read_parquet(output)) == 3


def test_validate_command(netcdf_path, tmp_path, capsys):
    job_path = _write_job(tmp_path, netcdf_path, tmp_path / "counts.parquet")

    assert main(["validate", str(job_path)]) == 0
    assert "Configuration validation passed successfully" in capsys.readouterr().out

    assert main(["validate", str(job_path), "--detailed"]) == 0
    out = capsys.readouterr().out
    assert "Variable: counts" in out
    assert "Estimated rows: 3" in out
    assert not (tmp_path / "counts.parquet").exists()


@pytest.mark.parametrize("job", [
    {"variable_name": "counts", "parquet_key": "out.parquet"},
    {"nc_key": "absent.nc", "variable_name": "counts", "parquet_key": "out.parquet"},
    {"nc_key": "{nc}", "variable_name": "counts", "parquet_key": "out.parquet",
     "filters": [{"kind": "polygon"}]},
    {"nc_key": "{nc}", "variable_name": "counts", "parquet_key": "out.parquet",
     "max_rows": "many"},
])
def test_validate_rejects_bad_config(job, netcdf_path, tmp_path, capsys):
    job = {key: value.format(nc=netcdf_path) if isinstance(value, str) else value
           for key, value in job.items()}
    job_path = tmp_path / "job.json"
    job_path.write_text(json.dumps(job), encoding="utf-8")

    assert main(["validate", str(job_path)]) == 1
    assert capsys.readouterr().err.startswith("error: ")


def _write_job(tmp_path, netcdf_path, output):
    job_path = tmp_path / "job.json"
    job_path.write_text(json.dumps({
        "nc_key": str(netcdf_path),
        "variable_name": "counts",
        "parquet_key": str(output),
    }), encoding="utf-8")
    return job_path
