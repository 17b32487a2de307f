# media_namer/external_renamer.py

import re
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .cache_renamer import CacheRenamer
from .enums import MediaFileType, RenameOrigin
from .exceptions import InvalidMediaTypeError
from .models import BaseInfo, CacheItem, ExternalMedia, MediaDescription, RenamedMediaOptions
from .renamer_base import Renamer
from .api_clients import ExternalSearcher

log = logging.getLogger(__name__)


def parse_date(date: str) -> int:
    """Epoch millis of midnight UTC for a "YYYY-MM-DD" string, 0 when it does not parse."""
    try:
        parsed = datetime.strptime(date, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except (TypeError, ValueError) as e:
        log.warning(f"Could not parse date string {date!r}: {e}")
        return 0
    return int(parsed.timestamp()) * 1000


class ExternalRenamer(Renamer):
    """
    Queries the external metadata searcher and writes every result through
    to the cache so the next identical request is served by CacheRenamer.
    """

    def __init__(self, searcher: ExternalSearcher, cache: Optional[CacheRenamer], poster_base: str = ""):
        self.searcher = searcher
        self.cache = cache
        self.poster_base = poster_base
        self.special_chars_regex = re.compile(r"[^a-zA-Z0-9\-\s]")

    def parse_poster(self, poster_path: Optional[str]) -> str:
        if not poster_path:
            return ""
        return f"{self.poster_base}{poster_path}"

    def parse_title(self, title: str) -> str:
        return self.special_chars_regex.sub("", title.replace("&", "and"))

    def convert_media(self, media: List[ExternalMedia]) -> List[MediaDescription]:
        return [
            MediaDescription(
                poster_url=self.parse_poster(m.poster_path),
                title=self.parse_title(m.title),
                date=m.date,
                description=m.description,
                cast=list(m.cast),
            )
            for m in media
        ]

    def create_cache_item(self, base_info: BaseInfo, desc: MediaDescription, media_type: MediaFileType) -> CacheItem:
        return CacheItem(
            search_name=base_info.name,
            search_year=base_info.year,
            cover_path=desc.poster_url,
            title=desc.title,
            date=parse_date(desc.date),
            description=desc.description,
            cast=list(desc.cast),
            media_type=media_type,
        )

    async def find_options(self, base_info: BaseInfo, media_type: MediaFileType) -> Optional[RenamedMediaOptions]:
        if media_type not in (MediaFileType.MOVIE, MediaFileType.TV):
            raise InvalidMediaTypeError(f"unknown media type provided for searcher: {media_type}")

        media = await self.searcher.search(media_type, base_info.name, base_info.year)
        descriptions = self.convert_media(media)
        if not descriptions:
            log.debug(f"External search found nothing for '{base_info.formatted()}' ({media_type}).")
            return None

        if self.cache is None:
            log.info(f"External search found {len(descriptions)} option(s) for '{base_info.formatted()}', cache disabled.")
            return RenamedMediaOptions(RenameOrigin.EXTERNAL, descriptions)

        items = [self.create_cache_item(base_info, d, media_type) for d in descriptions]
        await self.cache.save_items(items)
        log.info(f"External search found {len(descriptions)} option(s) for '{base_info.formatted()}', cached.")
        return RenamedMediaOptions(RenameOrigin.EXTERNAL, descriptions)
