# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI for checking data class compatibility between two source versions."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text

from dcc.comparator import compare_sources
from dcc.discovery import DEFAULT_PATTERN, discover_source_pairs
from dcc.extractor import extract
from dcc.model import CompatibilityReport, RecordComparison, RecordDescriptor, Severity

logger = logging.getLogger(__name__)

SEVERITY_MARKERS: dict[Severity, tuple[str, str]] = {
    Severity.BREAKING: ("[BREAKING]", "bold red"),
    Severity.WARNING: ("[WARNING]", "yellow"),
    Severity.SAFE: ("[SAFE]", "green"),
}
ADDED_MARKER: tuple[str, str] = ("[ADDED]", "cyan")

REMEDIATION_SUGGESTIONS: tuple[str, ...] = (
    "Add default values to new fields",
    "Make new fields nullable",
    "Append new fields at the end instead of inserting them in the middle",
    "Deprecate fields and data classes before removing them",
)

EXIT_OK = 0
EXIT_FAILURE = 1

VERBOSE_LOGGERS: tuple[str, ...] = ("dcc", "cli")


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class InputUnavailableError(RuntimeError):
    """Represent a source file that cannot be read."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler on stderr.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="dcc",
        description="Detect breaking changes between two versions of data classes.",
    )
    parser.add_argument("old", help="Old source file or directory.")
    parser.add_argument("new", help="New source file or directory.")
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="File glob used when comparing directories.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Gitignore-style pattern to skip when comparing directories. Repeatable.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run the compatibility check.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code: 0 when compatible, 1 on breaking changes or input errors.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code == 0:
            return EXIT_OK
        logger.warning(f"Argument parsing failed (argv={argv})")
        return EXIT_FAILURE
    if not args.verbose:
        return _run_check(args=args, stdout=stdout, stderr=stderr)

    loggers = [logging.getLogger(name) for name in VERBOSE_LOGGERS]
    previous_levels = [log.level for log in loggers]
    for log in loggers:
        log.setLevel(logging.DEBUG)
    try:
        return _run_check(args=args, stdout=stdout, stderr=stderr)
    finally:
        for log, level in zip(loggers, previous_levels):
            log.setLevel(level)


def _run_check(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run the check for parsed arguments.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    if args.output and args.format != "json":
        logger.warning(f"Output file requires JSON format (format={args.format})")
        stderr.write("--output requires --format json\n")
        return EXIT_FAILURE

    try:
        report = _build_report(args)
    except (ValidationError, InputUnavailableError) as exc:
        logger.warning(f"Input check failed (error={exc})")
        stderr.write(f"{exc}\n")
        return EXIT_FAILURE

    logger.info(
        f"Compatibility check completed (records={len(report.sources[0].comparisons)} "
        f"breaking={report.has_breaking_changes})"
    )
    if args.format == "json":
        if args.output:
            try:
                _write_json_file(report=report, output_path=Path(args.output))
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return EXIT_FAILURE
        else:
            _write_json(report=report, stdout=stdout)
    else:
        _write_text(report=report, stdout=stdout)
    return EXIT_FAILURE if report.has_breaking_changes else EXIT_OK


def _build_report(args: argparse.Namespace) -> CompatibilityReport:
    """Read inputs and compare them.

    In directory mode every record of every file is gathered first, so data
    classes are paired by name across the whole tree and a class moved to
    another file is still compared. File paths are kept as record sources.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Report holding one source comparison.

    Raises:
        ValidationError: If paths are missing or of mixed kinds.
        InputUnavailableError: If a source file cannot be read.
    """
    old_path, new_path = _validate_paths(Path(args.old), Path(args.new))
    if old_path.is_dir():
        pairs = discover_source_pairs(
            old_root=old_path,
            new_root=new_path,
            pattern=args.pattern,
            exclude=args.exclude or [],
        )
        old_records: list[RecordDescriptor] = []
        new_records: list[RecordDescriptor] = []
        for pair in pairs:
            old_records.extend(_extract_file(pair.old_path, source=pair.relative_path))
            new_records.extend(_extract_file(pair.new_path, source=pair.relative_path))
        label = f"{old_path} -> {new_path}"
    else:
        old_records = _extract_file(old_path)
        new_records = _extract_file(new_path)
        label = new_path.name
    logger.debug(
        f"Extracted data classes (label={label} old={len(old_records)} new={len(new_records)})"
    )
    source = compare_sources(old_records, new_records, label=label)
    return CompatibilityReport(sources=(source,))


def _validate_paths(old_path: Path, new_path: Path) -> tuple[Path, Path]:
    for path in (old_path, new_path):
        if not path.exists():
            raise ValidationError(f"Path does not exist: {path}")
    if old_path.is_dir() != new_path.is_dir():
        raise ValidationError(
            f"Paths must both be files or both be directories: {old_path}, {new_path}"
        )
    return old_path, new_path


def _extract_file(path: Path | None, source: str = "") -> list[RecordDescriptor]:
    records = extract(_read_source(path))
    if not source:
        return records
    return [replace(record, source=source) for record in records]


def _read_source(path: Path | None) -> str:
    """Read one source file; a missing side of a pair reads as empty text.

    Raises:
        InputUnavailableError: If the file cannot be read or decoded.
    """
    if path is None:
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputUnavailableError(f"Cannot read source file: {path} ({exc})") from exc


def _write_json(report: CompatibilityReport, stdout: TextIO) -> None:
    """Write the report in JSON format.

    Args:
        report: Completed compatibility report.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(report.to_dict(REMEDIATION_SUGGESTIONS), indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(report: CompatibilityReport, output_path: Path) -> None:
    """Write raw JSON report to an output file.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(report.to_dict(REMEDIATION_SUGGESTIONS), indent=2, sort_keys=True),
        encoding="utf-8",
    )


def _write_text(report: CompatibilityReport, stdout: TextIO) -> None:
    """Write the human-readable report.

    Args:
        report: Completed compatibility report.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print("Analyzing data class changes...", markup=False, highlight=False)
    console.rule(style=Style(color="cyan"), characters="-")

    if report.is_empty:
        console.print(
            "No data classes found in the provided sources",
            markup=False,
            highlight=False,
        )

    for source in report.sources:
        for comparison in source.comparisons:
            _write_comparison(console=console, comparison=comparison)

    console.rule(style=Style(color="cyan"), characters="-")
    if report.passed:
        console.print(
            Text("No breaking changes detected", style="bold green"), soft_wrap=True
        )
        return
    console.print(Text("Breaking changes detected", style="bold red"), soft_wrap=True)
    console.print("Suggestions:", markup=False, highlight=False)
    for suggestion in REMEDIATION_SUGGESTIONS:
        console.print(f"   - {suggestion}", markup=False, highlight=False)


def _write_comparison(console: Console, comparison: RecordComparison) -> None:
    location = f" ({comparison.location})" if comparison.location else ""
    if comparison.status == "added":
        marker, style = ADDED_MARKER
        console.print(
            Text.assemble(
                (marker, style), f" New data class added: {comparison.name}{location}"
            ),
            soft_wrap=True,
        )
        return
    if comparison.status == "removed":
        for finding in comparison.findings:
            marker, style = SEVERITY_MARKERS[finding.severity]
            console.print(
                Text.assemble((marker, style), f" {finding.message}{location}"),
                soft_wrap=True,
            )
        return

    console.print(
        Text(f"Analyzing: {comparison.name}{location}", style="bold"), soft_wrap=True
    )
    if not comparison.findings:
        console.print("   No breaking changes", markup=False, highlight=False)
        return
    for finding in comparison.findings:
        marker, style = SEVERITY_MARKERS[finding.severity]
        console.print(
            Text.assemble("   ", (marker, style), f" {finding.message}"),
            soft_wrap=True,
        )


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
