"""Sharing the .teamcontext knowledge files with a team through git."""

from __future__ import annotations

import os
import subprocess
from datetime import datetime

_KNOWLEDGE_DIR = ".teamcontext/"
_REMOTE = "origin"


class SyncError(Exception):
    """Raised when a git step of a knowledge sync fails."""


def run_git(directory: str | os.PathLike, *args: str) -> str:
    """Run git in a directory and return its combined output; raise SyncError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=directory,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as exc:
        raise SyncError(f"could not run git: {exc}") from exc
    output = result.stdout
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    output = output or ""
    if result.returncode != 0:
        command = args[0] if args else "git"
        raise SyncError(f"git {command} failed: {output.strip()}")
    return output


def _has_remote(git_root: str | os.PathLike) -> bool:
    try:
        return run_git(git_root, "remote").strip() != ""
    except SyncError:
        return False


def has_uncommitted_knowledge(git_root: str | os.PathLike) -> bool:
    """Return True if the knowledge directory has uncommitted changes."""
    return run_git(git_root, "status", "--porcelain", _KNOWLEDGE_DIR).strip() != ""


def auto_resolve_knowledge_merge(git_root: str | os.PathLike) -> None:
    """Resolve merge conflicts in knowledge files by taking the remote side."""
    output = run_git(git_root, "diff", "--name-only", "--diff-filter=U")
    for name in output.strip().split("\n"):
        if not name:
            continue
        if not name.startswith(_KNOWLEDGE_DIR):
            raise SyncError(f"conflict in non-knowledge file: {name}")
        abs_path = os.path.join(os.fspath(git_root), name)
        try:
            run_git(git_root, "checkout", "--theirs", abs_path)
        except SyncError as exc:
            raise SyncError(f"checkout theirs failed for {name}: {exc}") from exc
        try:
            run_git(git_root, "add", abs_path)
        except SyncError as exc:
            raise SyncError(f"staging resolved file failed for {name}: {exc}") from exc
    try:
        run_git(git_root, "commit", "--no-edit")
    except SyncError as exc:
        raise SyncError(f"merge commit failed: {exc}") from exc


def _merge_remote(git_root: str | os.PathLike, branch: str, notes: list[str]) -> None:
    remote_ref = f"{_REMOTE}/{branch}"
    try:
        run_git(git_root, "fetch", _REMOTE, branch)
    except SyncError as exc:
        raise SyncError(f"fetch failed: {exc}") from exc

    try:
        changed = run_git(
            git_root, "diff", "--name-only", "HEAD", remote_ref, "--", _KNOWLEDGE_DIR
        ).strip()
    except SyncError:
        notes.append("Remote branch not found or no remote changes.")
        return

    if not changed:
        notes.append("Already up to date.")
        return

    notes.append(f"{len(changed.split(chr(10)))} knowledge file(s) changed on remote.")

    try:
        run_git(git_root, "merge", remote_ref, "--no-edit")
    except SyncError:
        notes.append(
            "Merge conflict detected. Attempting auto-resolve for JSON knowledge files..."
        )
        try:
            auto_resolve_knowledge_merge(git_root)
        except SyncError as exc:
            try:
                run_git(git_root, "merge", "--abort")
            except SyncError:
                pass
            raise SyncError(f"auto-resolve failed: {exc} — merge aborted") from exc
        notes.append("Auto-resolved merge conflicts in knowledge files.")


def pull_knowledge(git_root: str | os.PathLike) -> list[str]:
    """Merge remote knowledge changes into the current branch; return progress notes."""
    if not _has_remote(git_root):
        raise SyncError("no git remote configured")

    try:
        branch = run_git(git_root, "rev-parse", "--abbrev-ref", "HEAD").strip()
    except SyncError as exc:
        raise SyncError(f"could not determine current branch: {exc}") from exc

    notes: list[str] = []
    stashed = has_uncommitted_knowledge(git_root)
    if stashed:
        notes.append("Stashing local knowledge changes...")
        try:
            run_git(
                git_root, "stash", "push", "-m", "teamcontext-sync-stash", "--", _KNOWLEDGE_DIR
            )
        except SyncError as exc:
            raise SyncError(f"stash failed: {exc}") from exc

    try:
        _merge_remote(git_root, branch, notes)
    finally:
        if stashed:
            notes.append("Restoring local knowledge changes...")
            try:
                run_git(git_root, "stash", "pop")
            except SyncError:
                pass
    return notes


def push_knowledge(git_root: str | os.PathLike) -> list[str]:
    """Commit local knowledge changes and push them; return progress notes."""
    notes: list[str] = []
    if has_uncommitted_knowledge(git_root):
        try:
            run_git(git_root, "add", _KNOWLEDGE_DIR)
        except SyncError as exc:
            raise SyncError(f"staging failed: {exc}") from exc
        message = f"teamcontext: sync knowledge ({datetime.now():%Y-%m-%d %H:%M})"
        try:
            run_git(git_root, "commit", "-m", message, "--", _KNOWLEDGE_DIR)
        except SyncError as exc:
            raise SyncError(f"commit failed: {exc}") from exc
        notes.append("Committed local knowledge changes.")
    else:
        notes.append("No local changes to push.")

    if not _has_remote(git_root):
        notes.append("No remote configured — changes committed locally only.")
        return notes

    try:
        branch = run_git(git_root, "rev-parse", "--abbrev-ref", "HEAD").strip()
    except SyncError:
        branch = ""
    try:
        run_git(git_root, "push", _REMOTE, branch)
    except SyncError as exc:
        raise SyncError(f"push failed: {exc}") from exc
    return notes


def sync_knowledge(
    git_root: str | os.PathLike, pull: bool = False, push: bool = False
) -> list[str]:
    """Pull and push knowledge; pull or push alone restricts the sync to that direction.

    Failures of either direction are reported in the returned notes, not raised.
    """
    if not os.path.exists(os.path.join(os.fspath(git_root), ".teamcontext")):
        raise SyncError("No .teamcontext directory found. Run 'teamcontext init' first.")

    do_pull = not push
    do_push = not pull
    notes: list[str] = []

    if do_pull:
        notes.append("Pulling latest knowledge...")
        try:
            notes.extend(pull_knowledge(git_root))
        except SyncError as exc:
            notes.append(f"Pull failed: {exc}")
            notes.append("Continuing with local state.")
        else:
            notes.append("Pull complete.")

    if do_push:
        notes.append("Pushing local knowledge...")
        try:
            notes.extend(push_knowledge(git_root))
        except SyncError as exc:
            notes.append(f"Push failed: {exc}")
        else:
            notes.append("Push complete.")

    notes.append("Sync done.")
    return notes