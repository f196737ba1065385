"""
Command-line entry point: ``pgext-install``.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pgext_installer import __version__
from pgext_installer.config import BuildSettings
from pgext_installer.errors import InstallError
from pgext_installer.policy.profile import InstallProfile
from pgext_installer.runner import run_install

logger = logging.getLogger("pgext_installer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgext-install",
        description="pgext_installer — build a PostgreSQL extension and install it "
                    "into the pg_config layout",
    )
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path("."),
        help="Extension crate directory (default: current directory)",
    )
    parser.add_argument(
        "-c", "--pg-config",
        default=None,
        help="Path to the pg_config executable to install against",
    )
    parser.add_argument(
        "-r", "--release",
        action="store_true",
        help="Build and install the release profile",
    )
    parser.add_argument(
        "--base-directory",
        type=Path,
        default=None,
        help="Staging root to install under instead of /",
    )
    parser.add_argument(
        "--receipt",
        type=Path,
        default=None,
        help="Write a JSON install receipt to this path",
    )
    parser.add_argument(
        "--strict-artifact",
        action="store_true",
        help="Fail instead of using the first match when several libraries match",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        receipt = run_install(
            args.project_dir,
            pg_config=args.pg_config,
            is_release=args.release,
            staging_root=args.base_directory,
            settings=BuildSettings(),
            profile=InstallProfile.v1(strict_artifact=args.strict_artifact),
            receipt_path=args.receipt,
        )
    except InstallError as e:
        stage = e.stage.value if e.stage is not None else "START"
        logger.error("%s (install stopped after %s)", e, stage)
        return 1

    print(f"Installed {receipt.extension} {receipt.version} ({len(receipt.files)} files)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
