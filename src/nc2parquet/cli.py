"""Command-line entry point for converting NetCDF variables to Parquet."""

import argparse
import dataclasses
import json
import sys
from typing import Any, Dict, Iterable, List, Optional

from . import __version__
from .core.config import get_default_max_rows
from .core.core_types import FilterParams, JobConfig
from .core.exceptions import NC2ParquetError
from .core.logging_config import setup_logging
from .io.job_config import (
    load_job_config, merge_filters,
    parse_range_filter, parse_list_filter, parse_point2d_filter, parse_point3d_filter,
)
from .main import process_job, summarize_job, validate_job
from .utils.info import get_dataset_info, format_dataset_info

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _add_write_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--max-rows", type=int, help="Reject jobs producing more rows")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Show the resolved job and estimated row count without writing",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nc2parquet",
        description="Extract filtered NetCDF variables into Parquet tables",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level", choices=LOG_LEVELS, default="WARNING", help="Logging verbosity"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Run a JSON job configuration")
    convert.add_argument("config", help="Path to the JSON job file")
    convert.add_argument("--output", help="Override the job's parquet_key")
    _add_write_options(convert)

    extract = subparsers.add_parser("extract", help="Extract one variable with inline filters")
    extract.add_argument("input", help="NetCDF input file")
    extract.add_argument("-v", "--variable", required=True, help="Variable to extract")
    extract.add_argument("-o", "--output", required=True, help="Parquet output path")
    extract.add_argument(
        "--range", action="append", default=[], metavar="DIM:MIN:MAX",
        help="Range filter (may be repeated)",
    )
    extract.add_argument(
        "--list", action="append", default=[], metavar="DIM:V1,V2",
        help="List filter (may be repeated)",
    )
    extract.add_argument(
        "--point2d", action="append", default=[], metavar="LAT,LON:A,B:TOL",
        help="2D point filter (may be repeated)",
    )
    extract.add_argument(
        "--point3d", action="append", default=[], metavar="T,LAT,LON:S,A,B:TOL",
        help="3D point filter (may be repeated)",
    )
    _add_write_options(extract)

    validate = subparsers.add_parser("validate", help="Check a JSON job configuration")
    validate.add_argument("config", help="Path to the JSON job file")
    validate.add_argument(
        "--detailed", action="store_true", help="Also resolve the job against its dataset"
    )

    info = subparsers.add_parser("info", help="Show dimensions and variables of a dataset")
    info.add_argument("input", help="NetCDF input file")
    info.add_argument("--variable", help="Only describe this variable and its dimensions")
    info.add_argument("--json", action="store_true", help="Print JSON instead of text")

    return parser


def _filters_from_args(args: argparse.Namespace) -> List[FilterParams]:
    filters: List[FilterParams] = []
    filters.extend(parse_range_filter(text) for text in args.range)
    filters.extend(parse_list_filter(text) for text in args.list)
    filters.extend(parse_point2d_filter(text) for text in args.point2d)
    filters.extend(parse_point3d_filter(text) for text in args.point3d)
    return filters


def format_job_summary(summary: Dict[str, Any]) -> str:
    """Render the result of summarize_job as text."""
    lines = [
        "Configuration Summary:",
        f"  Input: {summary['input']}",
        f"  Variable: {summary['variable']}",
        f"  Output: {summary['output']}",
        "  Dimensions: " + ", ".join(f"{d['name']}({d['size']})" for d in summary['dimensions']),
        f"  Filters: {len(summary['filters'])}",
    ]
    lines.extend(f"    {i}. {kind}" for i, kind in enumerate(summary['filters'], 1))
    lines.append(f"  Estimated rows: {summary['estimated_rows']}")
    return "\n".join(lines)


def _run_job(config: JobConfig, args: argparse.Namespace, output_path: Optional[str] = None) -> int:
    if args.dry_run:
        print(format_job_summary(summarize_job(config, output_path=output_path)))
        return 0
    written = process_job(config, output_path=output_path, overwrite=args.force)
    print(written)
    return 0


def _run_convert(args: argparse.Namespace) -> int:
    config = load_job_config(args.config)
    changes = {"filters": merge_filters(config.filters)}
    if args.max_rows is not None:
        changes["max_rows"] = args.max_rows
    config = dataclasses.replace(config, **changes)

    return _run_job(config, args, output_path=args.output)


def _run_extract(args: argparse.Namespace) -> int:
    config = JobConfig(
        nc_key=args.input,
        variable_name=args.variable,
        parquet_key=args.output,
        filters=merge_filters(_filters_from_args(args)),
        max_rows=args.max_rows if args.max_rows is not None else get_default_max_rows(),
    )
    return _run_job(config, args)


def _run_validate(args: argparse.Namespace) -> int:
    config = load_job_config(args.config)
    config = dataclasses.replace(config, filters=merge_filters(config.filters))
    validate_job(config)
    if args.detailed:
        print(format_job_summary(summarize_job(config)))
    print("Configuration validation passed successfully")
    return 0


def _run_info(args: argparse.Namespace) -> int:
    info = get_dataset_info(args.input, variable=args.variable)
    if args.json:
        print(json.dumps(info, indent=2))
    else:
        print(format_dataset_info(info))
    return 0


_COMMANDS = {
    "convert": _run_convert,
    "extract": _run_extract,
    "info": _run_info,
    "validate": _run_validate,
}


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return _COMMANDS[args.command](args)
    except NC2ParquetError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def entrypoint() -> None:  # pragma: no cover - console entry
    raise SystemExit(main())
