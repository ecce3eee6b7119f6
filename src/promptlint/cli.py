"""CLI entry point — ``promptlint check`` and ``promptlint rules``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from promptlint import __version__
from promptlint.analysis.engine import analyze_paths
from promptlint.analysis.rules import ALL_RULES, select_rules
from promptlint.config import MAX_TOKENS_OPTION, Settings
from promptlint.constants import ExitCode, OutputFormat
from promptlint.errors import GrammarUnavailableError
from promptlint.export import export_report
from promptlint.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point. Exits with an :class:`ExitCode`."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"promptlint {__version__}")
        return

    settings = Settings()
    setup_logging(settings.log_level)

    if args.command == "check":
        sys.exit(_run_check(args, settings))
    elif args.command == "rules":
        _run_rules()
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="promptlint",
        description=(
            "Static analysis of prompt-engineering code — "
            "finds risky LLM prompts and client calls in Ruby."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser(
        "check",
        help="Analyze Ruby files and directories",
    )
    check.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files or directories to analyze",
    )
    check.add_argument(
        "--max-tokens",
        default=None,
        help="Token limit for prompt text (default: from settings)",
    )
    check.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format (default: text)",
    )
    check.add_argument(
        "--only",
        type=_split_ids,
        default=None,
        help="Comma-separated rule ids to run exclusively",
    )
    check.add_argument(
        "--except",
        dest="exclude",
        type=_split_ids,
        default=None,
        help="Comma-separated rule ids to skip",
    )
    check.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    sub.add_parser(
        "rules",
        help="List available rules",
    )

    return parser


def _split_ids(value: str) -> list[str]:
    return [s.strip() for s in value.split(",") if s.strip()]


def _run_check(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the check command and return the exit code."""
    if args.verbose:
        logging.getLogger("promptlint").setLevel(logging.DEBUG)

    try:
        rules = select_rules(
            only=args.only,
            exclude=[*settings.disabled_rules, *(args.exclude or [])],
        )
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    options = (
        {MAX_TOKENS_OPTION: args.max_tokens}
        if args.max_tokens is not None
        else None
    )

    try:
        report = analyze_paths(
            args.paths, settings, options=options, rules=rules
        )
    except GrammarUnavailableError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    print(export_report(report, args.format))

    if report.failed_files:
        return ExitCode.ERROR
    if report.findings:
        return ExitCode.FINDINGS
    return ExitCode.CLEAN


def _run_rules() -> None:
    """Print every registered rule id with its description."""
    width = max(len(rule.rule_id) for rule in ALL_RULES)
    for rule in ALL_RULES:
        print(f"{rule.rule_id:<{width}}  {rule.description}")
