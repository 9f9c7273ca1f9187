"""Entry point for webttfb."""

import argparse
import logging
import os
import sys

from webttfb.errors import ConfigurationError
from webttfb.logging_config import configure_logging
from webttfb.models import Criterion
from webttfb.render import render_report
from webttfb.report import write_csv
from webttfb.runner import PROBE_MODES, run_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 2

DESCRIPTION = """\
Website TTFB

Time To First Byte (TTFB) is a measurement used as an indication of the
responsiveness of a webserver or other network resource. It is made up of
the socket connection time, the time taken to send the HTTP request, and the
time taken to get the first byte of the page.
"""

EPILOG = """\
Time is measured in seconds. Performance is based on TTL.
  Conn  Connection Time
  TTFB  Time To First Byte
  TTL   Total Time

Environment:
  WEBTTFB_CONFIG     vantage directory file (default ~/.webttfb.cfg)
  WEBTTFB_PROBE      remote, local or fake (overrides -l)
  WEBTTFB_LOG_LEVEL  DEBUG, INFO, WARNING, ERROR or CRITICAL
"""


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webttfb",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-d", "--domain", default="example.com", help="Domain name to be tested")
    parser.add_argument(
        "-s",
        "--sort",
        default=Criterion.STATUS.value,
        choices=[c.value for c in Criterion],
        help="Criteria to sort the results",
    )
    parser.add_argument(
        "-p", "--private", action="store_true", help="Hide results from public stats"
    )
    parser.add_argument(
        "-l", "--local", action="store_true", help="Run the tests with local resources"
    )
    parser.add_argument("--config", help="Vantage directory file")
    parser.add_argument(
        "--timeout", type=float, default=30.0, help="Per-probe timeout in seconds"
    )
    parser.add_argument("--csv", metavar="PATH", help="Also export the report as CSV")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument(
        "--no-progress", action="store_true", help="Do not print progress while testing"
    )
    parser.add_argument("--gui", action="store_true", help="Open the desktop window")
    return parser.parse_args(argv)


def resolve_mode(local: bool) -> str:
    """Probe mode from WEBTTFB_PROBE, else from the -l flag."""
    mode = os.environ.get("WEBTTFB_PROBE", "").strip().lower()
    if mode in PROBE_MODES:
        return mode

    if mode:
        logger.warning("Unknown WEBTTFB_PROBE=%s, ignored", mode)
    return "local" if local else "remote"


def _print_progress(done: int, total: int):
    sys.stderr.write(f"\rTesting {done:02d}/{total} ...")
    sys.stderr.flush()


def _clear_progress():
    sys.stderr.write("\r" + " " * 20 + "\r")
    sys.stderr.flush()


def _run_gui(args: argparse.Namespace, mode: str) -> int:
    from PySide6.QtWidgets import QApplication

    from webttfb.ui.main_window import MainWindow

    app = QApplication(sys.argv)
    window = MainWindow(
        domain=args.domain,
        criterion=Criterion(args.sort),
        mode=mode,
        private=args.private,
        config=args.config,
        timeout=args.timeout,
    )
    window.show()
    return app.exec()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the webttfb command."""
    # Quiet by default, the report goes to stdout
    configure_logging(default_level=logging.WARNING)
    args = _parse_args(argv)
    mode = resolve_mode(args.local)

    if args.gui:
        return _run_gui(args, mode)

    show_progress = not args.no_progress and sys.stderr.isatty()

    try:
        report = run_report(
            args.domain,
            Criterion(args.sort),
            mode=mode,
            private=args.private,
            config=args.config,
            timeout=args.timeout,
            progress=_print_progress if show_progress else None,
        )
    except (ConfigurationError, ValueError) as e:
        print(e, file=sys.stderr)
        return EXIT_CONFIG
    finally:
        if show_progress:
            _clear_progress()

    print(render_report(report, color=not args.no_color and sys.stdout.isatty()))

    if args.csv:
        path = write_csv(report, args.csv)
        logger.info("Report exported: %s", path)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
