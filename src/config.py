from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


# Base directory of the project (one level above src/)
BASE_DIR = Path(__file__).resolve().parent.parent


# ---------- Scraper configuration ----------


@dataclass
class ScraperConfig:
    """
    Settings for talking to Reddit's public .json read API.
    """

    base_url: str = "https://www.reddit.com"  # origin prefixed to permalinks
    target_host: str = "www.reddit.com"  # links on other hosts are ignored
    user_agent: str = "reddit-scrape/1.0"
    request_delay_seconds: float = 3.0  # Reddit's unauthenticated cooldown
    timeout_seconds: float = 30.0  # HTTP timeout


# ---------- Paths configuration ----------


@dataclass
class PathsConfig:
    """
    Central place for file paths used by the scraper.
    """

    data_dir: Path = BASE_DIR / "data"
    cache_dir: Path = data_dir / "cache"
    output_path: Path = Path("scrape.csv")


# ---------- Top-level application configuration ----------


@dataclass
class AppConfig:
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)


def get_config() -> AppConfig:
    """
    Main entrypoint to get the full application config.

    Usage:
        from src.config import get_config
        cfg = get_config()
        cfg.scraper.request_delay_seconds
    """
    return AppConfig()
