# tests/test_models.py

import pytest
import dataclasses

from media_namer.enums import MediaFileType, RenameOrigin
from media_namer.models import BaseInfo, CacheItem


@pytest.mark.parametrize("value, expected", [
    ("movie", MediaFileType.MOVIE),
    ("TV", MediaFileType.TV),
    (" tv ", MediaFileType.TV),
    ("series", MediaFileType.UNKNOWN),
    ("music", MediaFileType.UNKNOWN),
    ("", MediaFileType.UNKNOWN),
    (None, MediaFileType.UNKNOWN),
])
def test_media_file_type_parse(value, expected):
    assert MediaFileType.parse(value) is expected

def test_enum_display_names():
    assert str(MediaFileType.TV) == "tv"
    assert str(RenameOrigin.EXTERNAL) == "External"

def test_base_info_is_immutable():
    base = BaseInfo("Some Movie", 2021)
    with pytest.raises(dataclasses.FrozenInstanceError):
        base.name = "Other"

def test_cache_item_dict_form():
    item = CacheItem(search_name="My Movie", search_year=None, cover_path="", title="My Movie",
                     date=1700092800000, description="", cast=["A", "B"], media_type=MediaFileType.TV)
    data = item.to_dict()
    assert data['media_type'] == "TV"
    assert data['search_year'] is None
    assert CacheItem.from_dict(data) == item

def test_cache_item_from_sparse_dict():
    item = CacheItem.from_dict({'search_name': "X", 'media_type': "MOVIE"})
    assert item.search_year is None
    assert item.date == 0
    assert item.cast == []
