# media_namer/disk_renamer.py

import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from rapidfuzz.distance import Levenshtein

from .enums import MediaFileType, RenameOrigin
from .exceptions import InvalidMediaTypeError
from .file_system_ops import list_dirs
from .models import BaseInfo, RenamedMediaOptions
from .name_generator import NameGenerator
from .renamer_base import Renamer

log = logging.getLogger(__name__)

DirLister = Callable[[Union[str, Path], int], List[Path]]


@dataclass
class DiskPath:
    file_name: str
    trimmed_file_name: str
    distance: int


def similarity_percent(distance: int, left: str, right: str) -> int:
    """Inverse edit distance relative to the longer string, truncated to a whole percent."""
    bigger = max(len(left), len(right))
    if bigger == 0:
        return 100
    return int((bigger - distance) / bigger * 100)


class DiskRenamer(Renamer):
    """Offers folders already present in the media library that look like the requested name."""

    def __init__(self, generator: NameGenerator, movies_path: Union[str, Path], tv_path: Union[str, Path],
                 max_depth: int = 1, min_similarity: int = 75, dir_lister: DirLister = list_dirs):
        self.generator = generator
        self.movies_path = Path(movies_path).expanduser()
        self.tv_path = Path(tv_path).expanduser()
        self.max_depth = max_depth
        self.min_similarity = min_similarity
        self.dir_lister = dir_lister
        self.release_date_regex = re.compile(r"\s+\(\d{4}(?:-\d{2}-\d{2})?\)$")

    def _library_root(self, base_info: BaseInfo, media_type: MediaFileType) -> Path:
        if media_type == MediaFileType.MOVIE: return self.movies_path
        if media_type == MediaFileType.TV: return self.tv_path
        raise InvalidMediaTypeError(f"unknown media type provided for base info {base_info}")

    def _to_disk_path(self, dir_path: Path, name: str) -> DiskPath:
        file_name = dir_path.name
        trimmed = self.release_date_regex.sub("", file_name)
        return DiskPath(file_name, trimmed, Levenshtein.distance(trimmed, name))

    def _is_similar(self, disk_path: DiskPath, name: str) -> bool:
        calculated = similarity_percent(disk_path.distance, disk_path.trimmed_file_name, name)
        if calculated >= self.min_similarity:
            log.info(f"For name '{name}', library folder '{disk_path.trimmed_file_name}' is {calculated}% similar (distance {disk_path.distance}).")
            return True
        return False

    async def find_options(self, base_info: BaseInfo, media_type: MediaFileType) -> Optional[RenamedMediaOptions]:
        media_path = self._library_root(base_info, media_type)
        dirs = await self._run_sync(self.dir_lister, media_path, self.max_depth)

        candidates = [self._to_disk_path(d, base_info.name) for d in dirs if Path(d) != media_path]
        candidates = [c for c in candidates if self._is_similar(c, base_info.name)]
        # Ordered by raw edit distance, not by similarity percent
        candidates.sort(key=lambda c: c.distance)

        if not candidates:
            log.debug(f"No library folder under '{media_path}' is similar enough to '{base_info.name}'.")
            return None
        return RenamedMediaOptions(RenameOrigin.DISK, self.generator.generate_media_descriptions(c.file_name for c in candidates))
