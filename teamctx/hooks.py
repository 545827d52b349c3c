"""Installation and removal of the git post-commit hook that analyses commits."""

from __future__ import annotations

import enum
import os
import subprocess
from pathlib import Path

HOOK_MARKER = "# === TEAMCONTEXT HOOK ==="

POST_COMMIT_HOOK_SCRIPT = (
    "#!/bin/sh\n"
    + HOOK_MARKER
    + """
# Auto-analyze commits for knowledge extraction.
# Installed by: teamcontext install-hooks
# Remove with:  teamcontext uninstall-hooks

# Find the teamcontext binary
TEAMCONTEXT=$(command -v teamcontext 2>/dev/null)
if [ -z "$TEAMCONTEXT" ]; then
    # Try common install locations
    for p in "$HOME/go/bin/teamcontext" "/usr/local/bin/teamcontext"; do
        if [ -x "$p" ]; then
            TEAMCONTEXT="$p"
            break
        fi
    done
fi

if [ -z "$TEAMCONTEXT" ]; then
    exit 0  # Silently skip if teamcontext not found
fi

# Run analysis in background so it doesn't slow down commits
"$TEAMCONTEXT" analyze-commit --quiet &
"""
)

_HOOK_MODE = 0o755


class HookError(Exception):
    """Raised when a hook cannot be installed or removed."""


class InstallResult(enum.Enum):
    """Outcome of installing the post-commit hook."""

    INSTALLED = "installed"
    APPENDED = "appended"
    ALREADY_INSTALLED = "already_installed"


def _hook_path(git_root: str | os.PathLike) -> Path:
    return Path(git_root) / ".git" / "hooks" / "post-commit"


def _write_hook(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")
    os.chmod(path, _HOOK_MODE)


def find_git_root(cwd: str | os.PathLike | None = None) -> str:
    """Return the top-level directory of the git repository containing cwd."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise HookError("not a git repository") from exc
    return result.stdout.decode("utf-8", errors="replace").strip()


def install_post_commit_hook(git_root: str | os.PathLike) -> InstallResult:
    """Install the post-commit hook, appending to any hook that is already there."""
    root = Path(git_root)
    if not (root / ".teamcontext").exists():
        raise HookError("No .teamcontext directory found. Run 'teamcontext init' first.")

    hook_path = _hook_path(root)
    try:
        hook_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise HookError(f"error creating hooks directory: {exc}") from exc

    try:
        existing = hook_path.read_text(encoding="utf-8")
    except OSError:
        existing = None

    try:
        if existing is None:
            _write_hook(hook_path, POST_COMMIT_HOOK_SCRIPT)
            return InstallResult.INSTALLED
        if HOOK_MARKER in existing:
            return InstallResult.ALREADY_INSTALLED
        _write_hook(hook_path, existing + "\n\n" + POST_COMMIT_HOOK_SCRIPT)
        return InstallResult.APPENDED
    except OSError as exc:
        raise HookError(f"error writing hook: {exc}") from exc


def strip_hook_section(content: str) -> str:
    """Remove the marked hook section, up to the next shebang line, and trim the rest."""
    cleaned: list[str] = []
    in_section = False
    for line in content.split("\n"):
        if HOOK_MARKER in line:
            in_section = True
            continue
        if in_section:
            if line.startswith("#!/"):
                in_section = False
                cleaned.append(line)
            continue
        cleaned.append(line)
    return "\n".join(cleaned).strip()


def uninstall_post_commit_hook(git_root: str | os.PathLike) -> bool:
    """Remove the hook section; return True if the hook file itself was deleted."""
    hook_path = _hook_path(git_root)
    try:
        content = hook_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise HookError("No post-commit hook found.") from exc

    if HOOK_MARKER not in content:
        raise HookError("No TeamContext hook found in post-commit.")

    remaining = strip_hook_section(content)
    if remaining in ("", "#!/bin/sh"):
        hook_path.unlink()
        return True
    _write_hook(hook_path, remaining + "\n")
    return False