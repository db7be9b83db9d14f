from __future__ import annotations

"""Command-line entry point.

Usage:
    pagefold --root site/index.html --dest bundle.html
    DEST=bundle.html pagefold --root site/index.html

Exit status is 0 on success, 1 when a document could not be processed and 2
on usage errors.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pagefold.core.exceptions import PagefoldError
from pagefold.core.services import BundleService
from pagefold.logging_config import setup_logging

logger = logging.getLogger(__name__)

__all__ = ["build_parser", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagefold",
        description="Fold a tree of locally linked HTML/SVG pages into one self-contained HTML file.",
    )
    parser.add_argument("--root", type=Path, required=True,
                        help="root HTML document to start from")
    parser.add_argument("--dest", type=Path, default=None,
                        help="output file (default: $DEST)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log traversal details")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    dest = args.dest
    if dest is None:
        env_dest = os.environ.get("DEST", "").strip()
        if not env_dest:
            parser.error("--dest is required when the DEST environment variable is not set")
        dest = Path(env_dest)

    setup_logging(verbose=args.verbose)

    try:
        BundleService().build(args.root, dest)
    except PagefoldError as exc:
        logger.error("Failed to fold %s: %s", args.root, exc)
        return 1
    except OSError as exc:
        logger.error("Could not write %s: %s", dest, exc)
        return 1

    logging.getLogger("pagefold").debug("===== pagefold finished =====")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
