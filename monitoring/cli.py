#!/usr/bin/env python3
"""
monitoring/cli.py — Runs the monitoring checks for an OpenShift node.

Runs major and minor checks for the node type configured in the config
file (worker, master or storage) and prints one JSON report for the
monitoring integration on stdout.

Usage:
    openshift-monitoring-cli                     # reads ./config.yml
    openshift-monitoring-cli -p -d -c /etc/openshift-monitoring/config.yml

Exit codes:
    0  checks ran (the report may still contain MAJOR events)
    1  fatal configuration error, no report printed
"""

from __future__ import annotations

import argparse
import os
import sys

from config.settings import DEFAULT_CONFIG_FILE, ConfigurationError, load_settings
from monitoring.log import setup_logging
from monitoring.orchestrator import run
from monitoring.report import to_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openshift-monitoring-cli",
        description="This cli tool runs monitoring checks for OpenShift installations.",
    )
    parser.add_argument("-p", "--pretty", action="store_true", help="print pretty json output")
    parser.add_argument("-d", "--debug", action="store_true", help="print debug messages")
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get("MONITORING_CONFIG", DEFAULT_CONFIG_FILE),
        help=f"path to the YAML config file (default: {DEFAULT_CONFIG_FILE})",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    log = setup_logging(debug=args.debug)

    try:
        cfg = load_settings(args.config)
        log = setup_logging(debug=args.debug, level=cfg.LOGGING_LEVEL)
        report = run(cfg)
    except ConfigurationError as exc:
        log.critical(str(exc))
        sys.exit(1)

    print(to_json(report, pretty=args.pretty))


if __name__ == "__main__":
    main()
