"""
Exceptions raised by the scraper core.

Decode and fetch failures are not exceptions: `entries.decode` and
`PostFetcher.fetch` return None so one bad link never aborts a batch.
"""


class ScrapeError(Exception):
    """Base exception for reddit-scrape."""
    pass


class InvalidLink(ScrapeError, ValueError):
    """Raised when a string is not an absolute URL."""
    pass


class NoIdentifier(ScrapeError, ValueError):
    """Raised when a link's path is too shallow to carry a post id."""
    pass


class CacheIOFailure(ScrapeError, OSError):
    """Raised when the cache directory cannot be created or written."""
    pass
