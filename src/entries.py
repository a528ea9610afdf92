from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .errors import InvalidLink
from .links import parse
from .models import Entry, Link


DEFAULT_ORIGIN = "https://www.reddit.com"


# -----------------------------------------------------------------------------
# Field helpers
# -----------------------------------------------------------------------------


def _post_data(document: Any) -> Optional[Dict[str, Any]]:
    """
    Locate the post payload inside a .json API document.

    A single post is always wrapped three levels deep:

        [ {"data": {"children": [ {"data": {...post fields...}} ]}}, ...comments ]

    Only the first listing's first child is consulted.
    """
    try:
        data = document[0]["data"]["children"][0]["data"]
    except (LookupError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def _string(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _count(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    # bool is an int subclass; JSON true/false is not a count.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _link(value: Optional[str]) -> Optional[Link]:
    if value is None:
        return None
    try:
        return parse(value)
    except InvalidLink:
        return None


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def decode(
    raw: str,
    origin: str = DEFAULT_ORIGIN,
    strict_url: bool = False,
) -> Optional[Entry]:
    """
    Decode a raw .json API document into an Entry.

    Returns None when the text is not JSON or lacks the post payload.
    Every field is extracted on its own: a missing or wrong-typed field
    becomes None without affecting the others.

    strict_url:
        When True, a non-null "url" that is not an absolute URL rejects the
        whole document instead of only blanking the field.
    """
    try:
        document = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return None

    data = _post_data(document)
    if data is None:
        return None

    raw_url = data.get("url")
    url = _link(raw_url) if isinstance(raw_url, str) else None
    if strict_url and raw_url is not None and url is None:
        return None

    # permalink is path-only ("/r/Metal/comments/5k0ncr/...")
    permalink = _string(data, "permalink")
    self_link = _link(f"{origin}{permalink}") if permalink is not None else None

    return Entry(
        url=url,
        id=_string(data, "id"),
        title=_string(data, "title"),
        subreddit=_string(data, "subreddit"),
        votes=_count(data, "score"),
        comments=_count(data, "num_comments"),
        self_link=self_link,
    )
