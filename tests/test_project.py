import os

import pytest

from teamctx.project import (
    ProjectNotFoundError,
    find_project_root,
    find_teamcontext_dir,
    find_teamcontext_dir_from_cwd,
)


@pytest.fixture
def project(tmp_path):
    tc_dir = tmp_path / ".teamcontext"
    tc_dir.mkdir()
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)
    return tmp_path, tc_dir, nested


def test_finds_dir_in_start_directory(project):
    root, tc_dir, _ = project
    assert find_teamcontext_dir(str(root)) == str(tc_dir)


def test_walks_up_to_ancestor(project):
    _, tc_dir, nested = project
    assert find_teamcontext_dir(str(nested)) == str(tc_dir)


def test_relative_start_dir_is_made_absolute(project, monkeypatch):
    _, tc_dir, nested = project
    monkeypatch.chdir(nested)
    result = find_teamcontext_dir(".")
    assert os.path.isabs(result)
    assert os.path.realpath(result) == os.path.realpath(str(tc_dir))


def test_from_cwd(project, monkeypatch):
    _, tc_dir, nested = project
    monkeypatch.chdir(nested)
    result = find_teamcontext_dir_from_cwd()
    assert os.path.realpath(result) == os.path.realpath(str(tc_dir))


def test_missing_raises(tmp_path):
    lonely = tmp_path / "lonely"
    lonely.mkdir()
    with pytest.raises(ProjectNotFoundError, match="not a TeamContext project"):
        find_teamcontext_dir(str(lonely))


def test_not_found_is_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_teamcontext_dir(str(tmp_path))


def test_plain_file_counts_as_marker(tmp_path):
    marker = tmp_path / ".teamcontext"
    marker.write_text("")
    assert find_teamcontext_dir(str(tmp_path)) == str(marker)


def test_find_project_root_returns_pair(project):
    root, tc_dir, nested = project
    assert find_project_root(str(nested)) == (str(root), str(tc_dir))


def test_find_project_root_defaults_to_cwd(project, monkeypatch):
    root, tc_dir, nested = project
    monkeypatch.chdir(nested)
    found_root, found_tc = find_project_root()
    assert os.path.realpath(found_root) == os.path.realpath(str(root))
    assert os.path.realpath(found_tc) == os.path.realpath(str(tc_dir))


def test_find_project_root_outside_project(tmp_path):
    lonely = tmp_path / "lonely"
    lonely.mkdir()
    assert find_project_root(str(lonely)) is None