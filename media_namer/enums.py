# media_namer/enums.py
from enum import Enum, auto

class MediaFileType(Enum):
    """Kind of media a rename request is about. UNKNOWN cannot be searched."""
    MOVIE = auto()
    TV = auto()
    UNKNOWN = auto()

    @classmethod
    def parse(cls, value: str) -> "MediaFileType":
        normalized = (value or "").strip().upper()
        try:
            return cls[normalized]
        except KeyError:
            return cls.UNKNOWN

    def __str__(self):
        return self.name.lower()


class RenameOrigin(Enum):
    """
    Provenance of a set of renamed options.
    DISK: an existing library folder, CACHE: a previous external lookup,
    EXTERNAL: a fresh metadata search, NAME: the normalized input name only.
    """
    DISK = auto()
    CACHE = auto()
    EXTERNAL = auto()
    NAME = auto()

    def __str__(self):
        return self.name.title()
