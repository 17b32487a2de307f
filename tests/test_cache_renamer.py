# tests/test_cache_renamer.py

import pytest

from media_namer.cache_renamer import CacheRenamer, to_date
from media_namer.enums import MediaFileType, RenameOrigin
from media_namer.models import BaseInfo, CacheItem


def make_item(year=2022, media_type=MediaFileType.MOVIE, date=0, title="My Movie"):
    return CacheItem(search_name="My Movie", search_year=year, cover_path="http://img/poster.jpg", title=title,
                     date=date, description="desc", cast=["Hero"], media_type=media_type)


@pytest.mark.parametrize("millis, expected", [
    (1700092800000, "2023-11-16"),
    (0, "1970-01-01"),
    (922838400000, "1999-03-31"),
])
def test_to_date(millis, expected):
    assert to_date(millis) == expected

def test_to_date_failure_returns_empty(caplog):
    assert to_date(10 ** 20) == ""
    assert "Could not convert epoch millis" in caplog.text

@pytest.mark.asyncio
async def test_find_options_filters_media_type(memory_store):
    memory_store.insert([make_item(media_type=MediaFileType.MOVIE), make_item(media_type=MediaFileType.TV)])
    renamer = CacheRenamer(memory_store)

    options = await renamer.find_options(BaseInfo("My Movie", 2022), MediaFileType.MOVIE)

    assert options.origin == RenameOrigin.CACHE
    assert len(options.descriptions) == 1
    desc = options.descriptions[0]
    assert desc.title == "My Movie"
    assert desc.date == "1970-01-01"
    assert desc.poster_url == "http://img/poster.jpg"
    assert desc.description == "desc"
    assert desc.cast == ["Hero"]

@pytest.mark.asyncio
async def test_find_options_without_year_keeps_dated_items(memory_store):
    memory_store.insert([make_item(year=None, title="A"), make_item(year=2022, title="B")])
    renamer = CacheRenamer(memory_store)

    options = await renamer.find_options(BaseInfo("My Movie"), MediaFileType.MOVIE)

    assert [d.title for d in options.descriptions] == ["A", "B"]

@pytest.mark.asyncio
async def test_find_options_miss_returns_none(memory_store):
    renamer = CacheRenamer(memory_store)
    assert await renamer.find_options(BaseInfo("My Movie", 2022), MediaFileType.MOVIE) is None
    assert memory_store.query_calls == 1

@pytest.mark.asyncio
async def test_save_items_delegates_to_store(memory_store):
    renamer = CacheRenamer(memory_store)
    await renamer.save_items([make_item(), make_item(title="Other")])
    assert memory_store.insert_calls == 1
    assert len(memory_store.items) == 2

@pytest.mark.asyncio
async def test_cache_renamer_with_disk_store(tmp_path):
    from media_namer.cache_store import DiskCacheStore
    store = DiskCacheStore(tmp_path)
    try:
        renamer = CacheRenamer(store)
        await renamer.save_items([make_item(date=1700092800000)])
        options = await renamer.find_options(BaseInfo("My Movie", 2022), MediaFileType.MOVIE)
        assert options.descriptions[0].date == "2023-11-16"
    finally:
        store.close()
