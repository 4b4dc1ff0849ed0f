# --- Standard library imports ---
import sys
import signal
import logging
import argparse

# --- Project imports ---
from .config import Config
from .errors import ConfigError
from .logger import get_logger, setup_logging
from .menu import Menu
from .scheduler import Scheduler


COMMANDS = ("start", "stop", "restart", "status", "login")

logger = get_logger("cli")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotspot-login",
        description="Keep a captive-portal hotspot session logged in.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=COMMANDS,
        help="run one command; omit for the interactive menu",
    )
    return parser

def install_signal_handlers(scheduler: Scheduler) -> None:
    """Stop the service and exit 0 on interrupt, terminate or quit."""

    def handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down gracefully...")
        scheduler.stop()
        sys.exit(0)

    for name in ("SIGINT", "SIGTERM", "SIGQUIT"):
        if hasattr(signal, name):   # SIGQUIT is POSIX-only
            signal.signal(getattr(signal, name), handler)

def run_command(command: str, scheduler: Scheduler) -> int:
    """
    Execute one batch command.

    Returns:
        Process exit status.
    """
    match command:
        case "start":
            scheduler.start()
            scheduler.wait()
        case "stop":
            scheduler.stop()
        case "restart":
            scheduler.restart()
            scheduler.wait()
        case "status":
            print(scheduler.status())
        case "login":
            outcome = scheduler.login_now()
            print(outcome.message)
            return 0 if outcome.success else 1
    return 0

def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the hotspot auto-login service.

    Configures logging, wires the service and dispatches either a batch
    command or the interactive menu. Configuration errors exit 1;
    unexpected errors stop the service, are logged and exit 1.
    """
    args = build_parser().parse_args(argv)

    setup_logging(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
    logger.debug(f"Python version: {sys.version}")

    scheduler = Scheduler.from_config()
    install_signal_handlers(scheduler)

    try:
        if args.command is None:
            status = Menu(scheduler, scheduler.report.sink).run()
        else:
            status = run_command(args.command, scheduler)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        status = 1
    except Exception as e:
        logger.exception(f"Unhandled exception: {e}")
        scheduler.stop()
        status = 1

    sys.exit(status)
