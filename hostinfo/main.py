from __future__ import annotations

import argparse
import json
import logging
import sys

from hostinfo.config import ConfigError, HostInfoConfig, load_config
from hostinfo.detector import PlatformDetector
from hostinfo.endian import machine_endian
from hostinfo.installation import InstallationIdError, installation_guid, program_id
from hostinfo.log_setup import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Report the detected host platform")
    parser.add_argument("config", nargs="?", default=None,
                        help="Path to YAML config file (default: built-in settings)")
    parser.add_argument("--json", action="store_true",
                        help="Print the report as JSON")
    parser.add_argument("--installation", action="store_true",
                        help="Include the installation GUID and program id")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug mode (verbose logging)")
    parser.add_argument("--trace", action="store_true",
                        help="Enable trace mode (writes trace file to debug/)")
    parser.add_argument("--verbose", action="store_true",
                        help="With --trace, also send trace output to terminal")
    return parser.parse_args(argv)


def build_report(config: HostInfoConfig, include_installation: bool = False) -> dict:
    """Collect the platform report as a plain dictionary."""
    detector = PlatformDetector(config)
    report = detector.report().as_dict()
    report["machine_endian"] = machine_endian().value
    if include_installation:
        report["installation_guid"] = str(installation_guid(config.installation))
        report["program_id"] = f"{program_id(config.installation, context=detector.context):08x}"
    return report


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hostinfo`` command. Returns the exit status."""
    args = _parse_args(argv)

    try:
        config = load_config(args.config) if args.config else HostInfoConfig()
    except ConfigError as e:
        setup_logging(debug=args.debug, trace=args.trace, verbose=args.verbose)
        logger.error("%s", e)
        return 2

    if args.debug:
        config.debug.enabled = True
    if args.trace:
        config.debug.trace = True
    if args.verbose:
        config.debug.verbose = True
    setup_logging(
        debug=config.debug.enabled, trace=config.debug.trace, verbose=config.debug.verbose
    )

    try:
        report = build_report(config, include_installation=args.installation)
    except (OSError, ValueError, InstallationIdError) as e:
        logger.error("Cannot determine installation id: %s", e)
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        width = max(len(key) for key in report)
        for key, value in report.items():
            print(f"{key:<{width}}  {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
