"""Locating the .teamcontext directory of a project."""

from __future__ import annotations

import os

TEAMCONTEXT_DIR_NAME = ".teamcontext"


class ProjectNotFoundError(FileNotFoundError):
    """Raised when no .teamcontext directory exists in a path or its parents."""


def _candidates(start_dir: str):
    directory = os.path.abspath(start_dir)
    while True:
        yield directory
        parent = os.path.dirname(directory)
        if parent == directory:
            return
        directory = parent


def find_teamcontext_dir(start_dir: str) -> str:
    """Return the .teamcontext path in start_dir or its nearest ancestor that has one."""
    for directory in _candidates(start_dir):
        candidate = os.path.join(directory, TEAMCONTEXT_DIR_NAME)
        if os.path.exists(candidate):
            return candidate
    raise ProjectNotFoundError(
        "not a TeamContext project (no .teamcontext directory found)"
    )


def find_teamcontext_dir_from_cwd() -> str:
    """Return the .teamcontext path for the current working directory."""
    return find_teamcontext_dir(os.getcwd())


def find_project_root(start_dir: str | None = None) -> tuple[str, str] | None:
    """Return (project root, .teamcontext path), or None outside a project."""
    try:
        tc_dir = find_teamcontext_dir(os.getcwd() if start_dir is None else start_dir)
    except ProjectNotFoundError:
        return None
    return os.path.dirname(tc_dir), tc_dir