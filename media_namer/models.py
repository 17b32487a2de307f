# models.py
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from .enums import MediaFileType, RenameOrigin

@dataclass(frozen=True)
class BaseInfo:
    """Normalized search key derived once per request from a raw filesystem name."""
    name: str
    year: Optional[int] = None

    def formatted(self) -> str:
        if self.year is not None:
            return f"{self.name} ({self.year:04d})"
        return self.name

@dataclass
class MediaDescription:
    """One presentable option: a title with whatever metadata the source had."""
    poster_url: str = ""
    title: str = ""
    date: str = "" # "YYYY-MM-DD", "YYYY" or empty
    description: str = ""
    cast: List[str] = field(default_factory=list)

@dataclass
class RenamedMediaOptions:
    origin: RenameOrigin
    descriptions: List[MediaDescription] = field(default_factory=list)

@dataclass
class ExternalMedia:
    """A single search result as returned by the external metadata searcher."""
    title: str
    date: str = ""
    description: str = ""
    poster_path: Optional[str] = None
    external_id: Optional[int] = None
    cast: List[str] = field(default_factory=list)

@dataclass
class CacheItem:
    """Persisted result of a successful external lookup. Never updated once written."""
    search_name: str
    search_year: Optional[int]
    cover_path: str
    title: str
    date: int # epoch millis, 0 when the source date was unparseable
    description: str
    cast: List[str]
    media_type: MediaFileType

    def to_dict(self) -> Dict[str, Any]:
        return {
            'search_name': self.search_name,
            'search_year': self.search_year,
            'cover_path': self.cover_path,
            'title': self.title,
            'date': self.date,
            'description': self.description,
            'cast': list(self.cast),
            'media_type': self.media_type.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheItem":
        return cls(
            search_name=data['search_name'],
            search_year=data.get('search_year'),
            cover_path=data.get('cover_path', ''),
            title=data.get('title', ''),
            date=int(data.get('date', 0) or 0),
            description=data.get('description', ''),
            cast=list(data.get('cast') or []),
            media_type=MediaFileType[data['media_type']],
        )
