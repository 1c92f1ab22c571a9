"""Command line interface for processing player ledgers."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Callable, Protocol, Sequence, TypeVar

from .config import get_config
from .configuration import (
    ConfigurationError,
    RunConfig,
    load_run_config,
    validate_run_config,
)
from .io import write_report
from .ledger import Ledger
from .logging import configure_logging
from .pipeline import process_files
from .player import SettlementMode
from .report import LedgerReport, persist_report_tables, render_report


class CommandHandler(Protocol):
    def __call__(self, config: RunConfig, args: argparse.Namespace) -> int:
        """Execute a command and return the process exit code."""


HandlerT = TypeVar("HandlerT", bound=CommandHandler)


@dataclasses.dataclass(slots=True)
class Subcommand:
    """Container describing a CLI sub-command."""

    name: str
    help: str
    configure: Callable[[argparse.ArgumentParser], None]
    handler: CommandHandler

    def add_to_parser(
        self,
        subparsers,
        parent: argparse.ArgumentParser,
    ) -> argparse.ArgumentParser:
        """Create the parser for this subcommand."""

        parser = subparsers.add_parser(self.name, parents=[parent], help=self.help)
        self.configure(parser)
        parser.set_defaults(handler=self.handler, command=self.name)
        return parser


class SubcommandApp:
    """Registry that wires handlers into an :class:`argparse` parser."""

    def __init__(self, description: str | None = None) -> None:
        self._commands: list[Subcommand] = []
        self._description = description

    def command(
        self,
        name: str,
        *,
        help: str,
        configure: Callable[[argparse.ArgumentParser], None],
    ) -> Callable[[HandlerT], HandlerT]:
        """Register ``handler`` as a sub-command with configuration callback."""

        def _decorator(handler: HandlerT) -> HandlerT:
            self._commands.append(
                Subcommand(name=name, help=help, configure=configure, handler=handler)
            )
            return handler

        return _decorator

    @property
    def commands(self) -> Sequence[Subcommand]:
        return tuple(self._commands)

    def build_parser(self) -> argparse.ArgumentParser:
        parent = argparse.ArgumentParser(add_help=False)
        parent.add_argument("--config", dest="config_file")
        parent.add_argument("--environment", dest="config_environment")
        parent.add_argument("--log-level", dest="log_level")

        parser = argparse.ArgumentParser(description=self._description)
        subparsers = parser.add_subparsers(dest="command", required=True)
        for command in self._commands:
            command.add_to_parser(subparsers, parent)
        return parser


APP = SubcommandApp(description=__doc__)


def _configure_inputs(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--match-data", help="Rate records, loaded first")
    parser.add_argument("--player-data", help="Deposit, bet and withdraw records")
    parser.add_argument(
        "--settlement",
        choices=[mode.value for mode in SettlementMode],
        help="How winning bets are credited",
    )


def _configure_report_parser(parser: argparse.ArgumentParser) -> None:
    _configure_inputs(parser)
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--output", help="Write the report to this file")
    output.add_argument(
        "--stdout",
        action="store_true",
        help="Print the report even when an output path is configured",
    )


def _configure_export_parser(parser: argparse.ArgumentParser) -> None:
    _configure_inputs(parser)
    parser.add_argument("--tables-dir", help="Directory for the CSV tables")


def _configure_check_parser(parser: argparse.ArgumentParser) -> None:
    del parser


def _process(config: RunConfig, args: argparse.Namespace) -> tuple[Ledger, LedgerReport]:
    match_path = args.match_data or config.inputs.match_data
    player_path = args.player_data or config.inputs.player_data
    settlement = args.settlement or config.ledger.settlement
    return process_files(match_path, player_path, settlement=settlement)


def _print_metrics(ledger: Ledger) -> None:
    metrics = dict(ledger.metrics)
    metrics["discarded"] = dict(metrics["discarded"])
    print(json.dumps(metrics, indent=2, sort_keys=True), file=sys.stderr)


@APP.command(
    "report",
    help="Process both input streams and emit the three-section report",
    configure=_configure_report_parser,
)
def _cmd_report(config: RunConfig, args: argparse.Namespace) -> int:
    ledger, report = _process(config, args)
    output_path = None if args.stdout else (args.output or config.output.path)
    if output_path:
        write_report(report, output_path, encoding=get_config().encoding)
    else:
        sys.stdout.write(render_report(report))
    if get_config().verbose:
        _print_metrics(ledger)
    return 0


@APP.command(
    "export",
    help="Process both input streams and write the report sections as CSV tables",
    configure=_configure_export_parser,
)
def _cmd_export(config: RunConfig, args: argparse.Namespace) -> int:
    tables_dir = args.tables_dir or config.output.tables_dir
    if not tables_dir:
        print("No tables directory given; pass --tables-dir or set output.tables_dir.")
        return 2
    ledger, report = _process(config, args)
    artifacts = persist_report_tables(report, tables_dir)
    print(
        json.dumps(
            {
                "legitimate": str(artifacts.legitimate_path),
                "illegitimate": str(artifacts.illegitimate_path),
                "summary": str(artifacts.summary_path),
            },
            indent=2,
        )
    )
    if get_config().verbose:
        _print_metrics(ledger)
    return 0


@APP.command(
    "check-config",
    help="Validate the layered configuration and print warnings",
    configure=_configure_check_parser,
)
def _cmd_check_config(config: RunConfig, args: argparse.Namespace) -> int:
    del args
    print(config.model_dump_json(indent=2))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    return APP.build_parser()


def _dispatch(args: argparse.Namespace) -> int:
    configure_logging((args.log_level or get_config().log_level.value).upper())
    try:
        config = load_run_config(
            base_path=args.config_file,
            environment=args.config_environment,
        )
        warnings = validate_run_config(config)
    except (ConfigurationError, FileNotFoundError, TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    for message in warnings:
        print(f"[config-warning] {message}", file=sys.stderr)

    handler: CommandHandler = args.handler
    try:
        return handler(config, args)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


__all__ = ["main"]


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
