# tests/test_file_system_ops.py

import os
import pytest
from pathlib import Path

from media_namer import file_system_ops
from media_namer.exceptions import FileOperationError


@pytest.fixture
def tree(tmp_path: Path):
    root = tmp_path / "library"
    for rel in ["b_show", "a_movie/extras/deep", "c_other"]:
        (root / rel).mkdir(parents=True)
    (root / "a_movie" / "movie.mkv").touch()
    (root / "loose_file.txt").touch()
    return root


def test_list_dirs_depth_one(tree):
    result = file_system_ops.list_dirs(tree, 1)
    assert [p.name for p in result] == ["a_movie", "b_show", "c_other"]
    assert tree not in result

def test_list_dirs_depth_two(tree):
    result = file_system_ops.list_dirs(tree, 2)
    assert [p.relative_to(tree).as_posix() for p in result] == ["a_movie", "a_movie/extras", "b_show", "c_other"]

def test_list_dirs_accepts_str_root(tree):
    assert len(file_system_ops.list_dirs(str(tree), 3)) == 5

def test_list_dirs_root_is_file(tree):
    with pytest.raises(FileOperationError, match="should be a dir"):
        file_system_ops.list_dirs(tree / "loose_file.txt", 1)

@pytest.mark.parametrize("depth", [0, -1])
def test_list_dirs_invalid_depth(tree, depth):
    with pytest.raises(FileOperationError, match="max_depth"):
        file_system_ops.list_dirs(tree, depth)

def test_list_dirs_missing_root(tmp_path, caplog):
    assert file_system_ops.list_dirs(tmp_path / "missing", 1) == []
    assert "does not exist" in caplog.text

@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_list_dirs_follows_symlinks(tree, tmp_path):
    outside = tmp_path / "elsewhere" / "Linked Movie"
    (outside / "inner").mkdir(parents=True)
    try:
        (tree / "d_link").symlink_to(outside.parent, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks here")

    result = file_system_ops.list_dirs(tree, 2)

    names = [p.relative_to(tree).as_posix() for p in result]
    assert "d_link" in names
    assert "d_link/Linked Movie" in names
