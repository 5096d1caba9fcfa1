"""Command-line entry point for dnsmasq-stats.

Brief:
  Loads configuration, sets up logging and sinks, runs exactly one collection
  cycle and maps the outcome to a process exit status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .collector import DESCRIPTION, Collector, sample_config
from .config.config_parser import AppConfig, parse_config_file, resolve_config
from .config.logging_config import init_logging
from .exchange import TRANSPORTS, Exchanger
from .sinks import load_sinks

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CYCLE_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser.

    Inputs:
      - None
    Outputs:
      - argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="dnsmasq-stats",
        description=DESCRIPTION + " (runs one collection cycle)",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to YAML configuration file (defaults apply when omitted)",
    )
    parser.add_argument("--server", help="Dnsmasq server address, host:port")
    parser.add_argument(
        "--transport", choices=TRANSPORTS, help="Query transport (default: udp)"
    )
    parser.add_argument(
        "--timeout-ms", type=int, help="Per-query timeout in milliseconds"
    )
    parser.add_argument(
        "--log-level",
        help="Override logging.level (debug, info, warn, error, crit)",
    )
    parser.add_argument(
        "--sample-config",
        action="store_true",
        help="Print a sample configuration file and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point: parse arguments, run one cycle, return the exit status.

    Inputs:
      - argv: Optional argument list (defaults to sys.argv[1:])
    Outputs:
      - int: 0 on success, 1 when the cycle failed, 2 on configuration errors

    Example:
      >>> main(["--sample-config"])  # doctest: +SKIP
      0
    """
    args = build_parser().parse_args(argv)

    if args.sample_config:
        sys.stdout.write(sample_config())
        return EXIT_OK

    try:
        cfg = parse_config_file(args.config) if args.config else AppConfig()
        init_logging(cfg.logging, level=args.log_level)
        effective = resolve_config(
            cfg.dnsmasq,
            server=args.server,
            transport=args.transport,
            timeout_ms=args.timeout_ms,
        )
        sink = load_sinks(cfg.outputs)
    except (OSError, ValueError) as exc:
        logging.basicConfig()
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    exchanger = Exchanger(
        transport=effective.transport,
        timeout_ms=effective.timeout_ms,
        single_inflight=effective.single_inflight,
    )
    collector = Collector(effective, exchanger, sink)
    try:
        ok = collector.run_once()
    finally:
        sink.close()
    return EXIT_OK if ok else EXIT_CYCLE_FAILED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
