# tests/conftest.py
import pytest
from pathlib import Path
from unittest.mock import MagicMock
import sys
import argparse

# Ensure the app package is findable by pytest by adding the project root to the path
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from media_namer.config_manager import DEFAULT_TRIM_REGEX
from media_namer.models import ExternalMedia
from media_namer.name_generator import NameGenerator


# --- Mock Config Fixture ---
@pytest.fixture
def mock_cfg_helper(mocker):
    mock_args = argparse.Namespace(profile='default')
    mock_config_manager = MagicMock()
    class MockConfigHelper:
        def __init__(self, manager, args): self.manager = manager; self.args = args; self.profile = getattr(args, 'profile', 'default') or 'default'
        def __call__(self, key, default_value=None, arg_value=None):
             if arg_value is not None: return arg_value
             if key in self.manager._mock_values: return self.manager._mock_values[key]
             return default_value
        def get_api_key(self, service_name): return self.manager._mock_apikeys.get(service_name)
        def get_list(self, key, default_value=None):
            val = self(key, default_value)
            if isinstance(val, str): return [val]
            if isinstance(val, list): return val
            return default_value if isinstance(default_value, list) else []
    mock_config_manager._mock_values = {}
    mock_config_manager._mock_apikeys = {}
    helper = MockConfigHelper(mock_config_manager, mock_args)
    helper.manager = mock_config_manager
    return helper


@pytest.fixture
def generator():
    return NameGenerator(DEFAULT_TRIM_REGEX)


# --- Fake Collaborators ---
class InMemoryStore:
    """Mirrors DiskCacheStore semantics without touching disk."""
    def __init__(self):
        self.items = []
        self.query_calls = 0
        self.insert_calls = 0

    def query(self, search_name, search_year, media_type):
        self.query_calls += 1
        return [i for i in self.items
                if i.search_name == search_name and i.media_type == media_type
                and (search_year is None or i.search_year == search_year)]

    def insert(self, items):
        self.insert_calls += 1
        self.items.extend(items)


class FakeSearcher:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = []

    async def search(self, kind, query, year):
        self.calls.append((kind, query, year))
        if self.error:
            raise self.error
        return list(self.results)


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def fake_searcher():
    return FakeSearcher(results=[
        ExternalMedia(title="The Matrix", date="1999-03-31", description="A hacker learns the truth.",
                      poster_path="/matrix.jpg", external_id=603, cast=["Neo", "Trinity"]),
        ExternalMedia(title="The Matrix Reloaded", date="2003-05-15", description="",
                      poster_path=None, external_id=604, cast=[]),
    ])


@pytest.fixture
def library(tmp_path: Path):
    """A movie and a TV library with a few existing title folders."""
    movies = tmp_path / "movies"
    tv = tmp_path / "tv"
    for d in ["My Coding Movee (2020)", "My Codig Movee", "Some Other Film (1999-01-01)", "Completely Different"]:
        (movies / d).mkdir(parents=True)
    (movies / "Completely Different" / "Extras").mkdir()
    for d in ["Bodyguard (2018)", "Gnarly Feels Move"]:
        (tv / d).mkdir(parents=True)
    return movies, tv


@pytest.fixture
def make_searcher():
    return FakeSearcher
