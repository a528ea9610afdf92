from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .models import Entry


# Fixed, explicit column order for the CSV
FIELDNAMES: List[str] = [
    "url",
    "id",
    "title",
    "subreddit",
    "votes",
    "comments",
    "self_link",
]


def _cell(value: Optional[object]) -> str:
    return "" if value is None else str(value)


def entry_to_row(entry: Entry) -> Dict[str, str]:
    """Flatten an Entry into a CSV row; missing fields become empty cells."""
    return {
        "url": _cell(entry.url),
        "id": _cell(entry.id),
        "title": _cell(entry.title),
        "subreddit": _cell(entry.subreddit),
        "votes": _cell(entry.votes),
        "comments": _cell(entry.comments),
        "self_link": _cell(entry.self_link),
    }


def write_entries_csv(entries: Iterable[Entry], path: Path, header: bool = True) -> int:
    """
    Write entries to `path` as CSV (overwriting it). Returns the row count.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        if header:
            writer.writeheader()
        for entry in entries:
            writer.writerow(entry_to_row(entry))
            count += 1

    return count
