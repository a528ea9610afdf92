# src/pipeline.py
from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .cache import Cache
from .clients.reddit_client import PostFetcher, RedditJsonClient
from .config import AppConfig, get_config
from .entries import DEFAULT_ORIGIN, decode
from .errors import CacheIOFailure, InvalidLink, NoIdentifier
from .export import write_entries_csv
from .links import identifier_of, is_target_site, parse
from .models import Entry, LineFormat, Link
from .sources import LINE_CLEANUPS, detect_line_format, read_lines
from .throttle import Throttle


@dataclass
class ScrapeStats:
    """Counters reported at the end of a run."""

    lines_read: int = 0
    links_parsed: int = 0
    links_kept: int = 0
    unique_links: int = 0
    cached: int = 0
    fetched: int = 0
    failed: int = 0


# -----------------------------------------------------------------------------
# Extract + dedupe
# -----------------------------------------------------------------------------


def extract_links(
    lines: Iterable[str],
    line_format: LineFormat = "plain",
    target_host: Optional[str] = None,
    stats: Optional[ScrapeStats] = None,
) -> List[Link]:
    """
    Turn raw input lines into Links.

    Lines that carry no parseable absolute URL are dropped. When
    `target_host` is given, links on any other host are dropped too.
    """
    cleanup = LINE_CLEANUPS[line_format]
    stats = stats if stats is not None else ScrapeStats()

    links: List[Link] = []
    for line in lines:
        stats.lines_read += 1
        candidate = cleanup(line)
        if candidate is None:
            continue
        try:
            link = parse(candidate)
        except InvalidLink:
            continue
        stats.links_parsed += 1

        if target_host is not None and not is_target_site(link, target_host):
            continue
        links.append(link)

    stats.links_kept += len(links)
    return links


def dedupe_links(links: Iterable[Link]) -> List[Link]:
    """Deduplicate while preserving order (deterministic fetch order)."""
    seen: Set[Link] = set()
    result: List[Link] = []
    for link in links:
        if link not in seen:
            seen.add(link)
            result.append(link)
    return result


# -----------------------------------------------------------------------------
# Cache pass + gap
# -----------------------------------------------------------------------------


def collect_cached(
    links: Sequence[Link],
    cache: Cache,
    origin: str = DEFAULT_ORIGIN,
) -> Tuple[List[Entry], Set[Link]]:
    """
    Answer as many links as possible from the cache, without any network.

    Returns (entries, answered_links). Links without a post id, or whose id
    is not cached (or whose cached document no longer decodes), are left
    for the network pass.
    """
    entries: List[Entry] = []
    answered: Set[Link] = set()

    for link in links:
        try:
            post_id = identifier_of(link)
        except NoIdentifier:
            continue

        raw = cache.try_get(post_id)
        if raw is None:
            continue

        entry = decode(raw, origin=origin)
        if entry is None:
            continue

        entries.append(entry)
        answered.add(link)

    return entries, answered


def find_missing(
    links: Sequence[Link],
    cached_entries: Iterable[Entry],
    answered: Optional[Set[Link]] = None,
) -> List[Link]:
    """
    Links still to be fetched: everything not answered from the cache.

    A link counts as answered if it hit the cache directly, or if it equals
    the permalink (self_link) of any cached entry.
    """
    known: Set[Link] = {e.self_link for e in cached_entries if e.self_link is not None}
    if answered:
        known |= answered
    return [link for link in links if link not in known]


# -----------------------------------------------------------------------------
# Network pass
# -----------------------------------------------------------------------------


def fetch_and_cache(
    link: Link,
    fetcher: PostFetcher,
    cache: Optional[Cache] = None,
    pace: Optional[Throttle] = None,
    origin: str = DEFAULT_ORIGIN,
) -> Optional[Entry]:
    """
    Fetch one post, persist the raw document, then decode it.

    The document is stored before decoding so a hand-fixed cache file can
    recover a bad decode on a later run. Store failures are reported but
    do not fail the link.
    """
    raw = pace(fetcher.fetch, link) if pace is not None else fetcher.fetch(link)
    if raw is None:
        return None

    if cache is not None:
        try:
            cache.store(identifier_of(link), raw)
        except NoIdentifier:
            print(f"[pipeline] Not caching {link}: no post id in link.")
        except CacheIOFailure as exc:
            print(f"[pipeline] WARNING cache store failed: {exc}", file=sys.stderr)

    return decode(raw, origin=origin)


def _cached_this_run(link: Link, cache: Cache) -> bool:
    try:
        return cache.try_get(identifier_of(link)) is not None
    except NoIdentifier:
        return False


def resolve_links(
    links: Iterable[Link],
    fetcher: PostFetcher,
    cache: Optional[Cache] = None,
    pace: Optional[Throttle] = None,
    origin: str = DEFAULT_ORIGIN,
    stats: Optional[ScrapeStats] = None,
) -> List[Entry]:
    """
    Resolve links into Entries: cache first, network for the rest.

    Cached entries come first, followed by fetched entries in input order.
    Network calls are strictly sequential and paced by `pace` (a Throttle
    with the configured cooldown when omitted). Links that fail to fetch
    or decode are skipped.
    """
    stats = stats if stats is not None else ScrapeStats()
    pace = pace if pace is not None else Throttle(get_config().scraper.request_delay_seconds)

    unique = dedupe_links(links)
    stats.unique_links = len(unique)

    entries: List[Entry] = []
    answered: Set[Link] = set()
    if cache is not None:
        entries, answered = collect_cached(unique, cache, origin=origin)
    stats.cached = len(entries)

    missing = find_missing(unique, entries, answered)

    print(f"[pipeline] {len(unique)} unique links, {len(entries)} answered from cache.")
    print(f"[pipeline] Will fetch {len(missing)} links (not cached).", flush=True)

    for idx, link in enumerate(missing, start=1):
        print(f"[pipeline] [{idx}/{len(missing)}] {link}", flush=True)
        if cache is not None and _cached_this_run(link, cache):
            # Another form of the same post was fetched earlier in this pass.
            print(f"[pipeline] already cached, skipping: {link}")
            continue

        entry = fetch_and_cache(link, fetcher, cache=cache, pace=pace, origin=origin)
        if entry is None:
            stats.failed += 1
            continue

        stats.fetched += 1
        print(f"[pipeline] downloaded: {entry.self_link}", flush=True)
        entries.append(entry)

    return entries


# -----------------------------------------------------------------------------
# Whole run
# -----------------------------------------------------------------------------


def _summarize(stats: ScrapeStats) -> None:
    print(f"Read {stats.lines_read} lines, {stats.links_parsed} links.")
    print(f"  kept:    {stats.links_kept:5d}")
    print(f"  unique:  {stats.unique_links:5d}")
    print(f"  cached:  {stats.cached:5d}")
    print(f"  fetched: {stats.fetched:5d}")
    print(f"  failed:  {stats.failed:5d}")


def run_scrape(
    input_path: Path,
    output_path: Optional[Path] = None,
    cache_dir: Optional[Path] = None,
    line_format: Optional[LineFormat] = None,
    only_target_site: bool = True,
    verbose: bool = False,
    cfg: Optional[AppConfig] = None,
    fetcher: Optional[PostFetcher] = None,
) -> List[Entry]:
    """
    High-level function to be called by the CLI entrypoint (run_scrape.py).

    - Reads links from `input_path` (bookmark export or plain text)
    - Loads the cache directory if given (created when absent)
    - Resolves every Reddit post link, cache first
    - Writes the entries as CSV to `output_path` if given
    """
    if cfg is None:
        cfg = get_config()

    input_path = Path(input_path)
    if line_format is None:
        line_format = detect_line_format(input_path)

    stats = ScrapeStats()
    print(f"[pipeline] Reading {line_format} links from: {input_path}")
    links = extract_links(
        read_lines(input_path),
        line_format=line_format,
        target_host=cfg.scraper.target_host if only_target_site else None,
        stats=stats,
    )

    cache = Cache.open(Path(cache_dir)) if cache_dir is not None else None
    if fetcher is None:
        fetcher = RedditJsonClient(scraper_config=cfg.scraper)

    entries = resolve_links(
        links,
        fetcher,
        cache=cache,
        pace=Throttle(cfg.scraper.request_delay_seconds),
        origin=cfg.scraper.base_url,
        stats=stats,
    )

    if verbose:
        for entry in entries:
            if entry.url is not None:
                print(entry.url)

    if output_path is not None:
        count = write_entries_csv(entries, Path(output_path))
        print(f"[pipeline] Wrote {count} entries to: {output_path}")

    _summarize(stats)
    return entries
