from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from snowtree.config import ConfigError, load_config

log = logging.getLogger("snowtree")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snowtree", description="Snow, a dot tree and emoji stickers.")
    parser.add_argument("--config", help="scene YAML file (defaults to the bundled scene.yaml)")
    parser.add_argument("--url", help="share link or query string to restore at startup")
    parser.add_argument("--snow", type=int, help="number of snowflakes")
    parser.add_argument("--seed", type=int, help="seed for the snow field")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        log.error("%s", exc)
        return 2
    if args.snow is not None:
        cfg.snow_pool_size = max(0, args.snow)

    # Imported late so --help works without a display.
    from snowtree.engine import Engine

    Engine(cfg, query=args.url, seed=args.seed).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
