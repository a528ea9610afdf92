from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


# How a raw input line is turned into a candidate link.
LineFormat = Literal["plain", "bookmark"]


@dataclass(frozen=True)
class Link:
    """
    A validated absolute URL.

    Build instances through `src.links.parse` so that two spellings of the
    same URL compare (and hash) equal; the stored value is already normalized.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class Entry:
    """
    Metadata for a single Reddit post, decoded from the .json API document.

    Every field is optional: the document may omit any of them, or carry
    a value of the wrong type. This is what ends up as one CSV row.
    """

    url: Optional[Link] = None  # Outbound link the post points at
    id: Optional[str] = None  # Reddit's base36 post id (e.g. 5k0ncr)
    title: Optional[str] = None
    subreddit: Optional[str] = None  # Subreddit name (without 'r/')
    votes: Optional[int] = None  # "score"
    comments: Optional[int] = None  # "num_comments"
    self_link: Optional[Link] = None  # Absolute permalink back to the post
