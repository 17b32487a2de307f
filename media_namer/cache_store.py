# media_namer/cache_store.py

import sqlite3
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import diskcache
import platformdirs

from .config_manager import APP_NAME, APP_AUTHOR
from .enums import MediaFileType
from .exceptions import CollaboratorError
from .models import CacheItem

log = logging.getLogger(__name__)

_STORE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


def default_cache_dir() -> Path:
    return Path(platformdirs.user_cache_dir(APP_NAME, APP_AUTHOR)) / "online"


class DiskCacheStore:
    """
    Append-only store of external lookup results on top of diskcache.
    All items for one (media type, search name) pair live under a single key;
    the year filter is applied when reading.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        cache_dir = Path(directory).expanduser() if directory else default_cache_dir()
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            self.cache = diskcache.Cache(str(cache_dir))
        except _STORE_ERRORS as e:
            raise CollaboratorError(f"Failed to open cache store at '{cache_dir}': {e}") from e
        self.directory = cache_dir
        log.info(f"Persistent cache store initialized at: {cache_dir}")

    @staticmethod
    def _key(search_name: str, media_type: MediaFileType) -> str:
        return f"online::{media_type.name}::{search_name}"

    def query(self, search_name: str, search_year: Optional[int], media_type: MediaFileType) -> List[CacheItem]:
        key = self._key(search_name, media_type)
        try:
            stored = self.cache.get(key, default=[])
        except _STORE_ERRORS as e:
            raise CollaboratorError(f"Error reading cache key '{key}': {e}") from e

        items = [CacheItem.from_dict(d) for d in stored]
        if search_year is not None:
            items = [i for i in items if i.search_year == search_year]
        log.debug(f"Cache query '{key}' (year: {search_year}) -> {len(items)} item(s)")
        return items

    def insert(self, items: Sequence[CacheItem]) -> None:
        grouped: Dict[str, List[dict]] = defaultdict(list)
        for item in items:
            grouped[self._key(item.search_name, item.media_type)].append(item.to_dict())
        try:
            with self.cache.transact():
                for key, new_rows in grouped.items():
                    self.cache.set(key, self.cache.get(key, default=[]) + new_rows)
        except _STORE_ERRORS as e:
            raise CollaboratorError(f"Error writing {len(items)} item(s) to cache store: {e}") from e
        log.debug(f"Cache SET {len(items)} item(s) across {len(grouped)} key(s)")

    def close(self) -> None:
        self.cache.close()
