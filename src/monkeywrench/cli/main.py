# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""MonkeyWrench CLI."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from colorama import just_fix_windows_console

from ..config import (
    DEFAULT_WORKERS,
    HttpSettings,
    ProbeConfig,
    ProbeMode,
    RuleSet,
    clamp_workers,
    load_http_settings,
    parse_custom_headers,
)
from ..errors import ConfigError, InputError
from ..log import cli_log_level, setup_logging
from ..runtime import MonkeyWrench
from ..targets import read_lines, read_stream_lines

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  # full mode with custom headers
  monkeywrench --mode full --file urls.txt -H "User-Agent: Mozilla, X-Test: Test"

  # headers mode reading stdin, with YAML output and raw requests
  cat urls.txt | monkeywrench --mode headers --yaml --requests

  # hide 403s, keep only 200 responses of 512 bytes
  monkeywrench --mode full --file urls.txt -fc 403 -mc 200 -ms 512
"""

# (flag, dest, help) for the comma separated integer rules.
_RULE_OPTIONS = (
    ("-fs", "filter_size", "Exclude responses by body size"),
    ("-fw", "filter_words", "Exclude responses by word count"),
    ("-fc", "filter_status", "Exclude responses by HTTP status code"),
    ("-fl", "filter_lines", "Exclude responses by line count"),
    ("-ms", "match_size", "Only show responses with this body size"),
    ("-mw", "match_words", "Only show responses with this word count"),
    ("-mc", "match_status", "Only show responses with this HTTP status code"),
    ("-ml", "match_lines", "Only show responses with this line count"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monkeywrench",
        description="Probe URLs for 401/403 bypasses using spoofed proxy and routing headers",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--mode", choices=[mode.value for mode in ProbeMode], help="Probing mode to run")
    parser.add_argument("--file", help="File containing URLs, one per line (default: read stdin)")
    parser.add_argument("-X", "--method", default="GET", help="HTTP method to use (default: GET)")
    parser.add_argument(
        "-H",
        "--headers",
        default="",
        help="Comma separated custom headers in 'Key: Value' format, sent after each bypass header",
    )
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Number of workers, 1-100 (default: 10)")
    parser.add_argument(
        "--rate",
        type=float,
        default=0.0,
        help="Requests per second per worker (default: 0, unlimited)",
    )
    parser.add_argument(
        "--global-rate",
        action="store_true",
        help="Apply --rate to the whole worker pool instead of to each worker",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds (default: 15)")
    parser.add_argument("--verify-ssl", action="store_true", help="Verify TLS certificates")
    parser.add_argument("--requests", action="store_true", help="Print each reported request in raw HTTP form")
    parser.add_argument("--yaml", action="store_true", help="Print status and body of reported responses as YAML")
    parser.add_argument("--simple", action="store_true", help="Print only the URL of reported responses")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    rules = parser.add_argument_group("filter/match", "Comma separated integer lists, e.g. -fc 403,404")
    for flag, dest, help_text in _RULE_OPTIONS:
        rules.add_argument(flag, dest=dest, default="", metavar="LIST", help=help_text)
    return parser


def build_http_settings(args: argparse.Namespace) -> HttpSettings:
    settings = load_http_settings()
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigError(f"Invalid timeout: {args.timeout}")
        settings.timeout = args.timeout
    if args.verify_ssl:
        settings.verify_ssl = True
    return settings


def build_probe_config(args: argparse.Namespace, settings: HttpSettings) -> ProbeConfig:
    """Validate user input into a ProbeConfig; raises ConfigError before any request is sent."""
    rules = RuleSet.from_strings(**{dest: getattr(args, dest) for _, dest, _ in _RULE_OPTIONS})
    return ProbeConfig(
        method=args.method,
        custom_headers=parse_custom_headers(args.headers),
        rules=rules,
        timeout=settings.timeout,
        print_requests=args.requests,
        yaml_output=args.yaml,
        simple=args.simple,
        debug=args.debug,
    )


def load_targets(path: str | None, stdin: TextIO | None = None) -> list[str]:
    if path:
        return read_lines(path)
    return read_stream_lines(stdin or sys.stdin)


@contextmanager
def sigint_cancels(cancel: threading.Event) -> Iterator[None]:
    """First Ctrl+C stops new work; a second one aborts immediately."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):  # noqa: ANN001, ARG001
        if cancel.is_set():
            raise KeyboardInterrupt
        cancel.set()
        logger.warning("Interrupted, finishing in-flight requests (press Ctrl+C again to force quit)")

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(cli_log_level(args.debug))
    just_fix_windows_console()

    try:
        settings = build_http_settings(args)
        config = build_probe_config(args, settings)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    if not args.mode:
        parser.print_help(sys.stderr)
        return 1

    workers = clamp_workers(args.workers)
    if workers != args.workers:
        logger.warning("Workers clamped to %d", workers)

    try:
        targets = load_targets(args.file)
    except InputError as exc:
        logger.error("%s", exc)
        return 1

    cancel = threading.Event()
    with sigint_cancels(cancel), MonkeyWrench(
        config,
        http_settings=settings,
        workers=workers,
        rate=args.rate,
        shared_rate_limit=args.global_rate,
    ) as wrench:
        wrench.run(targets, args.mode, cancel)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
