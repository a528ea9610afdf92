from __future__ import annotations

from pathlib import Path
from typing import List, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from .errors import InvalidLink, NoIdentifier
from .models import Link


# Characters allowed unescaped in a URL path (RFC 3986 pchar + "/" + "%").
PATH_SAFE = "/%:@!$&'()*+,;="


def parse(raw: str) -> Link:
    """
    Validate an absolute URL and return it as a normalized Link.

    Only syntax is checked (scheme + network location); nothing is fetched.
    Normalization lower-cases scheme and host, percent-encodes spaces and
    non-ASCII characters in the path and turns an empty path into "/", so "HTTPS://WWW.Reddit.com" and "https://www.reddit.com/" are the
    same Link.

    Raises InvalidLink for anything else.
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise InvalidLink("empty link")

    try:
        parts = urlsplit(candidate)
        # Accessing .port validates it (raises ValueError on garbage).
        parts.port
    except ValueError as exc:
        raise InvalidLink(f"{candidate!r}: {exc}") from exc

    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidLink(f"{candidate!r} is not an absolute URL")
    if any(ch.isspace() for ch in parts.netloc):
        raise InvalidLink(f"{candidate!r} has whitespace in its host")

    userinfo, _, host = parts.netloc.rpartition("@")
    netloc = f"{userinfo}@{host.lower()}" if userinfo else host.lower()
    # Existing %XX escapes are kept; spaces and non-ASCII get encoded.
    path = quote(parts.path, safe=PATH_SAFE) or "/"

    return Link(
        urlunsplit((parts.scheme.lower(), netloc, path, parts.query, parts.fragment))
    )


def host_of(link: Link) -> str:
    return urlsplit(link.value).hostname or ""


def is_target_site(link: Link, host: str = "www.reddit.com") -> bool:
    return host_of(link) == host.lower()


def _id_and_slug(link: Link) -> Tuple[str, str]:
    # One-character segments (the "r" in /r/<sub>/, stray empties from
    # trailing or doubled slashes) never carry an id or a slug.
    segments: List[str] = [
        segment for segment in urlsplit(link.value).path.split("/") if len(segment) > 1
    ]
    if len(segments) < 2:
        raise NoIdentifier(f"no post id in {link.value}")
    return segments[-2], segments[-1]


def identifier_of(link: Link) -> str:
    """
    Reddit post id of a permalink, used as the cache key.

        https://www.reddit.com/r/Metal/comments/5k0ncr/black_weakling/ -> "5k0ncr"

    Raises NoIdentifier when the path has fewer than two usable segments.
    """
    return _id_and_slug(link)[0]


def slug_of(link: Link) -> str:
    """Human-readable title slug of a permalink (last usable path segment)."""
    return _id_and_slug(link)[1]


def canonical_filename(link: Link, base_dir: Path) -> Path:
    """
    Canonical storage name for a post: base_dir / "<id>_<slug>.json".

    Callers that need graceful handling must check `identifier_of` first.
    """
    try:
        post_id, slug = _id_and_slug(link)
    except NoIdentifier:
        raise AssertionError(f"cannot derive a filename from {link.value}") from None
    return Path(base_dir) / f"{post_id}_{slug}.json"


def to_api_link(link: Link) -> Link:
    """
    Turn a human-facing post URL into the URL of its .json document.

    Links already ending in ".json" are returned unchanged; otherwise ".json"
    is appended as a new last path segment. The fragment is dropped.
    """
    if link.value.endswith(".json"):
        return link

    parts = urlsplit(link.value)
    path = parts.path if parts.path.endswith("/") else parts.path + "/"
    return Link(urlunsplit((parts.scheme, parts.netloc, path + ".json", parts.query, "")))
