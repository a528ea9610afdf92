from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from bs4 import BeautifulSoup

from .models import LineFormat


def read_lines(path: Path) -> Iterator[str]:
    """
    Yield the lines of a text file without their line endings.

    Undecodable bytes are replaced rather than aborting the whole file;
    such lines simply fail link parsing later.
    """
    with Path(path).open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")


def plain_cleanup(line: str) -> Optional[str]:
    """A plain text file holds one link per line."""
    stripped = line.strip()
    return stripped or None


def bookmark_cleanup(line: str) -> Optional[str]:
    """
    Pull the link out of one line of a Netscape/Firefox bookmark export:

        <DT><A HREF="https://..." ADD_DATE="1480000000">Title</A>

    Lines without an <a href> (folders, <DL>, <p>, ...) yield None.
    """
    if "<" not in line:
        return None

    soup = BeautifulSoup(line, "html.parser")
    anchor = soup.find("a", href=True)
    if anchor is None:
        return None
    href = anchor["href"].strip()
    return href or None


LINE_CLEANUPS: Dict[str, Callable[[str], Optional[str]]] = {
    "plain": plain_cleanup,
    "bookmark": bookmark_cleanup,
}


def detect_line_format(path: Path) -> LineFormat:
    """Bookmark exports are HTML files; anything else is read as plain text."""
    if Path(path).suffix.lower() in {".html", ".htm"}:
        return "bookmark"
    return "plain"
