from __future__ import annotations

"""
CLI entrypoint for the scraper.

Usage (from repo root):

    python -m src.run_scrape -i bookmarks.html -c data/cache -o scrape.csv

This will:
- Read links from the input file (bookmark export or plain text)
- Answer already-known posts from the cache directory
- Fetch the rest from Reddit, one request every few seconds
- Write one CSV row per resolved post
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from src.config import get_config
from src.errors import CacheIOFailure
from src.pipeline import run_scrape


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reddit-scrape",
        description="Resolve Reddit post links into metadata (title, subreddit, votes, ...).",
    )
    parser.add_argument(
        "-i",
        "--input",
        required=True,
        help="input file, either plain text or a [firefox] bookmark file",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="output file name - a csv file will be written (default: scrape.csv)",
    )
    parser.add_argument(
        "-c",
        "--cache",
        help="directory to use as cache, will be read if present and filled with new files",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="print the outbound url of every resolved post",
    )
    parser.add_argument(
        "--format",
        choices=["auto", "plain", "bookmark"],
        default="auto",
        help="input format; 'auto' treats .html/.htm files as bookmark exports",
    )
    parser.add_argument(
        "--all-hosts",
        action="store_true",
        help="do not restrict input links to www.reddit.com",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = get_config()

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"[scrape] ERROR input file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else cfg.paths.output_path
    cache_dir = Path(args.cache) if args.cache else None
    line_format = None if args.format == "auto" else args.format

    try:
        run_scrape(
            input_path,
            output_path=output_path,
            cache_dir=cache_dir,
            line_format=line_format,
            only_target_site=not args.all_hosts,
            verbose=args.verbose,
            cfg=cfg,
        )
    except CacheIOFailure as exc:
        print(f"[scrape] ERROR cache unusable: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
