# media_namer/cache_renamer.py

import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from .enums import MediaFileType, RenameOrigin
from .models import BaseInfo, CacheItem, MediaDescription, RenamedMediaOptions
from .renamer_base import Renamer

log = logging.getLogger(__name__)


class CacheStore(Protocol):
    def query(self, search_name: str, search_year: Optional[int], media_type: MediaFileType) -> List[CacheItem]: ...
    def insert(self, items: Sequence[CacheItem]) -> None: ...


def to_date(millis: int) -> str:
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError, TypeError) as e:
        log.warning(f"Could not convert epoch millis {millis!r} to a date: {e}")
        return ""


class CacheRenamer(Renamer):
    """Serves results of earlier external lookups stored by ExternalRenamer."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def find_options(self, base_info: BaseInfo, media_type: MediaFileType) -> Optional[RenamedMediaOptions]:
        items = await self._run_sync(self.store.query, base_info.name, base_info.year, media_type)
        if not items:
            log.debug(f"Cache MISS for '{base_info.formatted()}' ({media_type})")
            return None

        log.debug(f"Cache HIT for '{base_info.formatted()}' ({media_type}): {len(items)} item(s)")
        descriptions = [
            MediaDescription(
                poster_url=i.cover_path,
                title=i.title,
                date=to_date(i.date),
                description=i.description,
                cast=list(i.cast),
            )
            for i in items
        ]
        return RenamedMediaOptions(RenameOrigin.CACHE, descriptions)

    async def save_items(self, items: Sequence[CacheItem]) -> None:
        await self._run_sync(self.store.insert, list(items))
