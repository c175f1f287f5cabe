"""Command-line entry point: resolve the serial configuration and run a session."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import NoReturn, Sequence

from pydantic import ValidationError

from simplecom.config import Settings, get_settings
from simplecom.shared.enums import ExitCode, FlowControl, Parity
from simplecom.shared.exceptions import ConfigurationError, DeviceOpenError, IOInitError
from simplecom.terminal.channel import list_available_ports
from simplecom.terminal.interfaces import Reporter
from simplecom.terminal.reporter import select_reporter
from simplecom.terminal.session import run_session

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="simplecom",
        description="Serial terminal: F1 leaves the session, F8 toggles pause.",
    )
    parser.add_argument("port", nargs="?", default=None, help="Serial device (e.g. COM3, /dev/ttyUSB0)")
    parser.add_argument("--baud-rate", type=int, default=None, help="Baud rate (default: 115200)")
    parser.add_argument("--byte-size", type=int, choices=[5, 6, 7, 8], default=None, help="Data bits")
    parser.add_argument("--parity", choices=[p.value for p in Parity], default=None)
    parser.add_argument("--stop-bits", type=float, choices=[1, 1.5, 2], default=None)
    parser.add_argument("--flow-control", choices=[f.value for f in FlowControl], default=None)
    parser.add_argument("--write-timeout", type=float, default=None, help="Seconds before a device write fails")
    parser.add_argument("--no-confirm", action="store_true", help="Leave on F1 without asking")
    parser.add_argument(
        "--batch",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Forward all bytes already received per device read (default: on)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", default=None, help="Write logs to this file instead of stderr")
    parser.add_argument("--list", action="store_true", help="List available serial ports and exit")
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates: dict[str, object] = {}
    if args.no_confirm:
        updates["confirm_exit"] = False
    if args.batch is not None:
        updates["batch_reads"] = args.batch
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.log_file:
        updates["log_file"] = args.log_file
    return settings.model_copy(update=updates) if updates else settings


def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown log level: {settings.log_level}")
    kwargs: dict[str, object] = {"level": level, "format": LOG_FORMAT}
    if settings.log_file:
        kwargs["filename"] = settings.log_file
    logging.basicConfig(**kwargs)  # type: ignore[arg-type]


def _print_ports() -> None:
    ports = list_available_ports()
    if not ports:
        print("no serial ports found")
        return
    for device, description in ports:
        print(f"{device}\t{description}")


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stderr.isatty()


def main(argv: Sequence[str] | None = None) -> int:
    """Run SimpleCom and return the process exit code."""
    reporter: Reporter = select_reporter(_is_interactive())
    try:
        args = build_parser().parse_args(argv)
        settings = _apply_overrides(get_settings(), args)
        configure_logging(settings)
        if args.list:
            _print_ports()
            return ExitCode.OK
        config = settings.serial_config(
            port=args.port,
            baud_rate=args.baud_rate,
            byte_size=args.byte_size,
            parity=args.parity,
            stop_bits=args.stop_bits,
            flow_control=args.flow_control,
            write_timeout=args.write_timeout,
        )
    except (ValidationError, ConfigurationError) as exc:
        reporter.error(str(exc), caption="SimpleCom configuration")
        return ExitCode.CONFIGURATION

    logger.info("starting session on %s", config.port)
    try:
        error = asyncio.run(run_session(config, settings, interactive=_is_interactive()))
    except DeviceOpenError as exc:
        reporter.error(str(exc), caption="Open serial connection")
        return ExitCode.DEVICE_OPEN
    except IOInitError as exc:
        reporter.error(str(exc), caption=settings.app_name)
        return ExitCode.IO_INIT
    except KeyboardInterrupt:
        return ExitCode.INTERRUPTED
    except Exception as exc:
        logger.exception("session on %s failed unexpectedly", config.port)
        reporter.error(f"unexpected error: {exc}", caption=settings.app_name)
        return ExitCode.ERROR

    if error is not None:
        reporter.error(str(error), caption=settings.app_name)
    return ExitCode.OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
