"""
On-disk cache of raw .json API documents, one file per post.

Layout: <cache_dir>/<post id>.json, holding the API response body as-is.
The directory may be filled by hand: any *.json file that decodes to a
post with an id is adopted under that id.

A single process owns the directory for the length of a run; sharing one
cache directory between concurrent processes is not supported.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .entries import decode
from .errors import CacheIOFailure


def read_document(path: Path) -> Optional[str]:
    """
    Read a cached document verbatim (no newline translation).

    Returns None if the file cannot be read or is not UTF-8.
    """
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError):
        return None


def write_document(path: Path, raw: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(raw)


class Cache:
    """
    Mapping of post id -> raw document, mirrored onto a directory.

    Build with `Cache.new` (empty) or `Cache.load` (scan an existing
    directory); `Cache.open` tries the latter and falls back to the former.
    """

    def __init__(self, directory: Path, storage: Optional[Dict[str, str]] = None) -> None:
        self.directory = Path(directory)
        self._storage: Dict[str, str] = dict(storage or {})

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def new(cls, directory: Path) -> "Cache":
        """
        Create (recursively) the cache directory and return an empty cache.

        Raises CacheIOFailure if the path exists but is not a directory, or
        cannot be created.
        """
        directory = Path(directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheIOFailure(f"could not create cache directory {directory}: {exc}") from exc

        if not directory.is_dir():
            raise CacheIOFailure(f"{directory} is not a directory")

        return cls(directory)

    @classmethod
    def load(cls, directory: Path) -> Optional["Cache"]:
        """
        Index every decodable *.json document in an existing directory.

        Returns None if `directory` is not a directory or cannot be listed.
        Documents that do not decode, or decode without an id, are left on
        disk but kept out of the index.
        """
        directory = Path(directory)
        if not directory.is_dir():
            return None

        try:
            paths: List[Path] = sorted(
                p for p in directory.iterdir() if p.suffix == ".json" and p.is_file()
            )
        except OSError:
            return None

        storage: Dict[str, str] = {}
        for path in paths:
            raw = read_document(path)
            if raw is None:
                continue
            entry = decode(raw)
            if entry is None or entry.id is None:
                continue
            storage[entry.id] = raw

        return cls(directory, storage)

    @classmethod
    def open(cls, directory: Path) -> "Cache":
        """Load an existing cache directory, or create an empty one."""
        cache = cls.load(directory)
        if cache is not None:
            print(f"[cache] Loaded {len(cache)} cached posts from: {cache.directory}")
            return cache

        cache = cls.new(directory)
        print(f"[cache] Created empty cache at: {cache.directory}")
        return cache

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def path_for(self, post_id: str) -> Path:
        return self.directory / f"{post_id}.json"

    def try_get(self, post_id: str) -> Optional[str]:
        """In-memory lookup; never touches disk or network."""
        return self._storage.get(post_id)

    def store(self, post_id: str, raw: str) -> None:
        """
        Persist `raw` as <directory>/<post_id>.json, then index it.

        Overwrites any previous document for the same id. On a write error
        the in-memory index is left untouched and CacheIOFailure is raised.
        """
        path = self.path_for(post_id)
        try:
            write_document(path, raw)
        except OSError as exc:
            raise CacheIOFailure(f"could not write {path}: {exc}") from exc

        self._storage[post_id] = raw

    def identifiers(self) -> List[str]:
        return sorted(self._storage)

    def __len__(self) -> int:
        return len(self._storage)

    def __contains__(self, post_id: object) -> bool:
        return post_id in self._storage

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cache):
            return NotImplemented
        return self.directory == other.directory and self._storage == other._storage

    def __repr__(self) -> str:
        return f"Cache(directory={self.directory!r}, documents={len(self)})"
