from __future__ import annotations

"""
Client package for external data sources (Reddit).

This package currently exposes:
- PostFetcher: minimal protocol for retrieving a post's raw .json document.
- RedditJsonClient: requests-based implementation against www.reddit.com.
"""

from .reddit_client import PostFetcher, RedditJsonClient

__all__ = [
    "PostFetcher",
    "RedditJsonClient",
]
