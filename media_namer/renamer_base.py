# media_namer/renamer_base.py

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from .enums import MediaFileType
from .models import BaseInfo, RenamedMediaOptions


async def run_sync(func, *args):
    """Runs a blocking call on the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


class Renamer(ABC):
    """A source of rename options. Returns None when it has nothing to offer."""

    @abstractmethod
    async def find_options(self, base_info: BaseInfo, media_type: MediaFileType) -> Optional[RenamedMediaOptions]:
        ...

    async def _run_sync(self, func, *args):
        return await run_sync(func, *args)
