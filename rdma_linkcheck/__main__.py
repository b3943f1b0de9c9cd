"""CLI entry point for the RDMA link checker.

Usage:
    python -m rdma_linkcheck [-e] [-o table|csv|json] [--config /path/to/config.yaml]
"""

import argparse
import sys

from rdma_linkcheck.checker import LinkChecker
from rdma_linkcheck.errors import LinkCheckError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rdma-linkcheck",
        description="RDMA link checker - report physical-layer health of "
                    "InfiniBand/RoCE ports using mlxlink",
    )
    parser.add_argument(
        "-e", "--errors",
        action="store_true",
        help="Display faulty ports only",
    )
    parser.add_argument(
        "-o", "--output-format",
        default=None,
        help="Output format: table, csv or json (default: from config, else table)",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to YAML configuration file "
             "(default: auto-detect from standard locations)",
    )
    parser.add_argument(
        "--replay-dir",
        default=None,
        help="Read <port>.json mlxlink documents from this directory "
             "instead of running mlxlink",
    )
    parser.add_argument(
        "--port",
        dest="ports",
        action="append",
        default=None,
        metavar="DEVICE:PORT",
        help="Check this port instead of discovering ports (repeatable)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        checker = LinkChecker(
            config_path=args.config,
            output_format=args.output_format,
            errors_only=args.errors,
            replay_dir=args.replay_dir,
            ports=args.ports,
        )
        report = checker.run()
    except LinkCheckError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    if report is not None:
        print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
