"""Command line entry point: resolve one device snapshot and print or export it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence, TextIO

from intune_insight.config import SettingsManager
from intune_insight.services import DeviceReportService, ExportFormat, ExportService
from intune_insight.utils import (
    InsightError,
    LoggingOptions,
    configure_logging,
    describe_exception,
    get_logger,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intune-insight",
        description=(
            "Explain which groups and filters make each application, "
            "configuration policy and script apply to a device."
        ),
    )
    parser.add_argument("snapshot", type=Path, help="Device snapshot JSON document")
    parser.add_argument(
        "--extended",
        action="store_true",
        default=None,
        help="Also analyze Settings Catalog conflicts between co-assigned policies",
    )
    parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in ExportFormat],
        default=ExportFormat.JSON.value,
        help="Output format (CSV holds resolved assignment rows only)",
    )
    parser.add_argument("--output", type=Path, help="Write the report to this path")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging")
    parser.add_argument(
        "--no-log-file",
        dest="log_file",
        action="store_false",
        help="Do not write the rotating log file",
    )
    parser.add_argument("--env-file", type=Path, help="Settings file to load")
    return parser


def run(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    out = stdout or sys.stdout

    settings = SettingsManager(args.env_file).load()
    options = LoggingOptions.from_settings(settings, debug=args.debug)
    options.file_sink = args.log_file
    configure_logging(options)
    logger = get_logger(__name__)

    try:
        report = DeviceReportService(settings).build_from_path(
            args.snapshot, extended=args.extended
        )
    except InsightError as exc:
        descriptor = describe_exception(exc)
        logger.error("Device report failed", error=descriptor.detail)
        print(descriptor.headline, file=sys.stderr)
        print(descriptor.detail, file=sys.stderr)
        if descriptor.suggestion:
            print(descriptor.suggestion, file=sys.stderr)
        return 1

    exporter = ExportService()
    fmt = ExportFormat(args.format)
    if args.output is not None:
        try:
            exporter.export(report, args.output, fmt)
        except OSError as exc:
            descriptor = describe_exception(exc)
            logger.error("Export failed", path=str(args.output), error=descriptor.detail)
            print(descriptor.headline, file=sys.stderr)
            print(descriptor.detail, file=sys.stderr)
            return 1
        logger.info("Report written", path=str(args.output), format=fmt.value)
    else:
        if fmt is ExportFormat.CSV and report.conflicts is not None:
            logger.warning(
                "CSV output omits the conflict report; use --output or --format json",
            )
        out.write(exporter.render(report, fmt))
        out.write("\n")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    raise SystemExit(run(argv))


__all__ = ["build_parser", "main", "run"]
