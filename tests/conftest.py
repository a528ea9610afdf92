from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from src.models import Link


FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

POST_LINK = "https://www.reddit.com/r/Metal/comments/5k0ncr/black_weakling_dead_as_dreams/"


def load_fixture(name: str) -> str:
    with (FIXTURES_DIR / name).open("r", encoding="utf-8", newline="") as f:
        return f.read()


class FakeFetcher:
    """
    In-memory PostFetcher: serves documents by link string and records calls.
    """

    def __init__(self, documents: Optional[Dict[str, str]] = None) -> None:
        self.documents = dict(documents or {})
        self.calls: List[Link] = []

    def fetch(self, link: Link) -> Optional[str]:
        self.calls.append(link)
        return self.documents.get(link.value)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def post_document() -> str:
    return load_fixture("5k0ncr.json")


@pytest.fixture
def post_link() -> str:
    return POST_LINK


@pytest.fixture
def make_fetcher():
    return FakeFetcher
