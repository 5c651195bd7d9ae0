"""
Command-line interface for tfridge.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from . import __version__
from .reporting import build_report, export_report_csv, print_report, save_report_json
from .resolvers import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT, TerraformRegistryClient
from .walker import CONFIG_EXTENSION, ScanError, scan_tree


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class ScanConfig:
    """Settings for one scan run, built from the command line."""

    root: Optional[Path]
    registry_url: str = DEFAULT_REGISTRY_URL
    timeout: float = DEFAULT_TIMEOUT
    extension: str = CONFIG_EXTENSION
    csv_path: Optional[Path] = None
    json_path: Optional[Path] = None
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tfridge",
        description="Scan a specified directory for Terraform module and provider updates",
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="Directory (or single .tf file) to scan"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--registry-url",
        default=DEFAULT_REGISTRY_URL,
        help=f"Base URL of the registry API. Default: {DEFAULT_REGISTRY_URL}"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Per-request timeout in seconds. Default: {DEFAULT_TIMEOUT:g}"
    )

    parser.add_argument(
        "--csv",
        dest="csv_path",
        default=None,
        help="Also write the report as CSV to this file"
    )

    parser.add_argument(
        "--json",
        dest="json_path",
        default=None,
        help="Also write the report as JSON to this file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> ScanConfig:
    """Parse command-line arguments into a ScanConfig."""
    args = build_parser().parse_args(argv)
    return ScanConfig(
        root=Path(args.path) if args.path else None,
        registry_url=args.registry_url,
        timeout=args.timeout,
        csv_path=Path(args.csv_path) if args.csv_path else None,
        json_path=Path(args.json_path) if args.json_path else None,
        verbose=args.verbose,
    )


def run(config: ScanConfig) -> int:
    """Scan, look up and report. Returns the process exit status."""
    print(f"Scanning directory: {config.root}")
    print("")

    try:
        scan = scan_tree(config.root, config.extension)
    except ScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with TerraformRegistryClient(config.registry_url, timeout=config.timeout) as client:
        entries = build_report(scan, client)

    print_report(entries)

    try:
        if config.csv_path is not None:
            csv_file = export_report_csv(entries, config.csv_path)
            print(f"Report saved to: {csv_file}")
        if config.json_path is not None:
            json_file = save_report_json(entries, config.json_path)
            print(f"Report saved to: {json_file}")
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    config = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    if config.root is None:
        print("Please specify a path to the directory you want to scan", file=sys.stderr)
        return 1

    if not config.root.exists():
        print(f"Path '{config.root}' does not exist.", file=sys.stderr)
        return 1

    return run(config)


if __name__ == "__main__":
    sys.exit(main())
