from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import requests

from ..config import ScraperConfig, get_config
from ..links import to_api_link
from ..models import Link


@runtime_checkable
class PostFetcher(Protocol):
    """
    Minimal abstraction for retrieving the raw .json document of a post.

    Implementations decide *how* the document is retrieved, but they must:
    - issue at most one request per call (no retries),
    - return the response body as text, or None on any failure.

    Pacing between calls is the caller's job (see src.throttle).
    """

    def fetch(self, link: Link) -> Optional[str]:
        raise NotImplementedError


class RedditJsonClient(PostFetcher):
    """
    Client for Reddit's unauthenticated .json read API.

    Responsibilities:
    - Map a post permalink onto its .json URL.
    - Perform a single GET with the configured User-Agent and timeout.
    - Hide HTTP details from the rest of the pipeline.
    """

    def __init__(
        self,
        scraper_config: Optional[ScraperConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._cfg = scraper_config or get_config().scraper

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._cfg.user_agent})

    def fetch(self, link: Link) -> Optional[str]:
        """
        GET the .json document for `link`.

        Returns the UTF-8 body on HTTP 200, or None on a transport error,
        any other status (429 bodies must never reach the cache) or a body
        that is not valid UTF-8.
        """
        url = to_api_link(link).value
        print(f"[fetch] GET {url}", flush=True)

        try:
            resp = self._session.get(url, timeout=self._cfg.timeout_seconds)
        except (requests.RequestException, OSError) as exc:
            print(f"[fetch] Request failed for {url}: {exc}")
            return None

        if resp.status_code != 200:
            print(f"[fetch] Unexpected status {resp.status_code} for {url}")
            return None

        try:
            return resp.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            print(f"[fetch] Body of {url} is not UTF-8: {exc}")
            return None
