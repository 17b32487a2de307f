# media_namer/rename_coordinator.py

import logging
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

from .api_clients import TmdbSearcher
from .cache_renamer import CacheRenamer
from .cache_store import DiskCacheStore
from .disk_renamer import DiskRenamer
from .enums import MediaFileType, RenameOrigin
from .exceptions import CollaboratorError, MetadataError, RenamerError
from .external_renamer import ExternalRenamer
from .models import RenamedMediaOptions
from .name_generator import NameGenerator
from .renamer_base import Renamer

if TYPE_CHECKING:
    from .config_manager import ConfigHelper

log = logging.getLogger(__name__)


class RenameCoordinator:
    """
    Runs the renamers in their fixed priority order and returns the first
    non-empty answer. Never raises: failing renamers are logged and skipped,
    and when nothing matches the normalized input name is offered instead.
    """

    def __init__(self, generator: NameGenerator, renamers: Sequence[Renamer]):
        self.generator = generator
        self.renamers: Tuple[Renamer, ...] = tuple(renamers)

    async def produce_renames(self, raw_name: str, media_type: MediaFileType) -> RenamedMediaOptions:
        base_info = self.generator.generate_base_info(raw_name)
        log.debug(f"Resolving '{raw_name}' as '{base_info.formatted()}' ({media_type})")

        for renamer in self.renamers:
            renamer_name = type(renamer).__name__
            try:
                options = await renamer.find_options(base_info, media_type)
            except RenamerError as e:
                log.warning(f"{renamer_name} failed for '{base_info.formatted()}': {e}")
                continue
            except Exception as e:
                log.error(f"Unexpected error in {renamer_name} for '{base_info.formatted()}': {type(e).__name__}: {e}", exc_info=True)
                continue
            if options is not None:
                log.info(f"'{raw_name}' resolved by {renamer_name} ({options.origin}): {len(options.descriptions)} option(s).")
                return options

        log.info(f"No source matched '{raw_name}'. Falling back to the normalized name.")
        return RenamedMediaOptions(RenameOrigin.NAME, self.generator.generate_media_descriptions([base_info.formatted()]))


def build_coordinator(cfg: "ConfigHelper", store: Optional[DiskCacheStore] = None, use_cache: bool = True) -> RenameCoordinator:
    generator = NameGenerator(cfg.get_list('trim_regex'))
    disk = DiskRenamer(
        generator,
        movies_path=cfg('movies_path'),
        tv_path=cfg('tv_path'),
        max_depth=int(cfg('rename_max_depth', 1)),
        min_similarity=int(cfg('similarity_percent', 75)),
    )
    renamers = [disk]
    cache = None
    if use_cache and store is None:
        try:
            store = DiskCacheStore(cfg('cache_directory'))
        except CollaboratorError as e:
            log.warning(f"Cache disabled: {e}")
    if use_cache and store is not None:
        cache = CacheRenamer(store)
        renamers.append(cache)

    try:
        searcher = TmdbSearcher.from_config(cfg)
    except MetadataError as e:
        log.warning(f"External search disabled: {e}")
    else:
        renamers.append(ExternalRenamer(searcher, cache, poster_base=cfg('poster_base', "")))

    log.debug(f"Coordinator built with renamers: {', '.join(type(r).__name__ for r in renamers)}")
    return RenameCoordinator(generator, renamers)
