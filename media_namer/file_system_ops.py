# media_namer/file_system_ops.py
import os
import logging
from pathlib import Path
from typing import List, Union

from .exceptions import FileOperationError

log = logging.getLogger(__name__)

def list_dirs(root: Union[str, Path], max_depth: int) -> List[Path]:
    """
    Lists every directory below `root` down to `max_depth` levels, depth first and
    sorted by name within each level. The root itself is never part of the result.
    Symlinked directories are followed.
    """
    root_path = Path(root).expanduser()
    if root_path.is_file():
        raise FileOperationError(f"root walk path should be a dir, given '{root_path}'")
    if max_depth < 1:
        raise FileOperationError(f"max_depth cannot be lower than 1, given {max_depth}")
    if not root_path.is_dir():
        log.warning(f"Library root '{root_path}' does not exist. Nothing to list.")
        return []

    found: List[Path] = []
    root_depth = len(root_path.parts)

    def _on_error(err: OSError):
        log.warning(f"Skipping unreadable path while listing '{root_path}': {err}")

    for current, dirnames, _ in os.walk(root_path, topdown=True, onerror=_on_error, followlinks=True):
        current_path = Path(current)
        depth = len(current_path.parts) - root_depth
        dirnames.sort()
        if depth >= 1:
            found.append(current_path)
        if depth >= max_depth:
            dirnames[:] = [] # prune: children would exceed max_depth
    log.debug(f"Listed {len(found)} directories under '{root_path}' (max depth {max_depth}).")
    return found
