"""MCP server configuration files for IDEs that can talk to the knowledge server."""

from __future__ import annotations

import json
import os
import shutil
import sys
from dataclasses import dataclass

SERVER_NAME = "teamcontext"
LEGACY_SERVER_NAME = "teambrain"
BINARY_NAME = "teamcontext"


class ConfigError(Exception):
    """Raised when an IDE configuration cannot be found, read, or changed."""


@dataclass(frozen=True)
class IDEConfig:
    """Where an IDE keeps its MCP server configuration."""

    name: str
    config_paths: tuple[str, ...]
    project_config_dir: str = ""

    @property
    def supports_project_config(self) -> bool:
        return bool(self.project_config_dir)


SUPPORTED_IDES: dict[str, IDEConfig] = {
    "cursor": IDEConfig(
        name="Cursor",
        config_paths=("~/.cursor/mcp.json", "~/.config/cursor/mcp.json"),
        project_config_dir=".cursor",
    ),
    "claude": IDEConfig(
        name="Claude Desktop",
        config_paths=(
            "~/Library/Application Support/Claude/claude_desktop_config.json",
            "~/.config/claude-desktop/claude_desktop_config.json",
            os.path.join(os.environ.get("APPDATA", ""), "Claude", "claude_desktop_config.json"),
        ),
    ),
    # Claude Code reads .mcp.json from the project root.
    "claudecode": IDEConfig(
        name="Claude Code (CLI)",
        config_paths=("~/.claude/config.json",),
        project_config_dir=".",
    ),
    "windsurf": IDEConfig(
        name="Windsurf",
        config_paths=("~/.windsurf/mcp.json", "~/.config/windsurf/mcp.json"),
        project_config_dir=".windsurf",
    ),
    "vscode": IDEConfig(
        name="VS Code",
        config_paths=("~/.vscode/mcp.json", "~/.config/Code/User/mcp.json"),
        project_config_dir=".vscode",
    ),
}


def _lookup(ide_name: str) -> tuple[str, IDEConfig]:
    key = ide_name.lower()
    try:
        return key, SUPPORTED_IDES[key]
    except KeyError:
        supported = ", ".join(SUPPORTED_IDES)
        raise ConfigError(f"Unknown IDE: {key} (supported: {supported})") from None


def expand_path(path: str) -> str:
    """Expand a leading "~/" to the user's home directory."""
    if path.startswith("~/"):
        home = os.path.expanduser("~")
        if home == "~":
            return path
        return os.path.join(home, path[2:])
    return path


def find_config_path(paths) -> str:
    """Return the first of the given paths that exists, expanded."""
    for path in paths:
        expanded = expand_path(path)
        if os.path.exists(expanded):
            return expanded
    raise ConfigError("config file not found")


def read_or_create_config(path: str) -> dict:
    """Load a JSON config, or return an empty one (creating its directory) if missing."""
    try:
        with open(path, encoding="utf-8") as fh:
            raw = fh.read()
    except FileNotFoundError:
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"error creating config directory: {exc}") from exc
        return {"mcpServers": {}}
    except OSError as exc:
        raise ConfigError(f"error reading config: {exc}") from exc

    try:
        config = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigError(f"config in {path} is not a JSON object")

    config.setdefault("mcpServers", {})
    return config


def add_server_to_config(config: dict, binary_path: str, project_path: str | None = None) -> list[str]:
    """Register the server in config; return notes on what was replaced."""
    servers = config.get("mcpServers")
    if not isinstance(servers, dict):
        servers = {}
        config["mcpServers"] = servers

    notes: list[str] = []
    if LEGACY_SERVER_NAME in servers:
        notes.append("Removing legacy 'teambrain' entry...")
        del servers[LEGACY_SERVER_NAME]
    if SERVER_NAME in servers:
        notes.append("TeamContext is already configured. Updating...")

    args = ["serve"] if project_path is None else ["serve", project_path]
    servers[SERVER_NAME] = {"command": binary_path, "args": args}
    return notes


def remove_server_from_config(config: dict) -> None:
    """Remove the server entry; raise ConfigError if it is not there."""
    servers = config.get("mcpServers")
    if not isinstance(servers, dict):
        raise ConfigError("no MCP servers configured")
    if SERVER_NAME not in servers:
        raise ConfigError("TeamContext is not installed")
    del servers[SERVER_NAME]


def write_config(path: str, config: dict) -> None:
    """Write config as indented JSON."""
    data = json.dumps(config, indent=2, sort_keys=True, ensure_ascii=False)
    try:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(data)
    except OSError as exc:
        raise ConfigError(f"error writing config: {exc}") from exc


def find_binary_path() -> str:
    """Locate the executable that starts the server."""
    found = shutil.which(BINARY_NAME)
    if found:
        return found

    program = sys.argv[0] if sys.argv else ""
    if program and os.path.isfile(program):
        return os.path.abspath(program)

    local = os.path.join(os.getcwd(), BINARY_NAME)
    if sys.platform.startswith("win"):
        local += ".exe"
    if os.path.exists(local):
        return local

    raise ConfigError("teamcontext binary not found")


def project_config_path(ide_name: str, project_root: str) -> str | None:
    """Path of the project-level config for an IDE, or None if it has none."""
    key, ide = _lookup(ide_name)
    if not ide.supports_project_config:
        return None
    file_name = ".mcp.json" if key == "claudecode" and ide.project_config_dir == "." else "mcp.json"
    return os.path.join(project_root, ide.project_config_dir, file_name)


def install_for_ide(
    ide_name: str,
    binary_path: str,
    project_root: str | None = None,
    global_install: bool = False,
) -> str:
    """Add the server to an IDE's config and return the path written.

    A project-level config bound to project_root is used when a project root
    is given, the IDE supports it and a global install is not requested.
    """
    key, ide = _lookup(ide_name)
    use_project = project_root is not None and not global_install and ide.supports_project_config

    if use_project:
        path = project_config_path(key, project_root)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"error creating config directory: {exc}") from exc
        config = read_or_create_config(path)
        add_server_to_config(config, binary_path, project_root)
    else:
        try:
            path = find_config_path(ide.config_paths)
        except ConfigError:
            path = expand_path(ide.config_paths[0])
        config = read_or_create_config(path)
        add_server_to_config(config, binary_path)

    write_config(path, config)
    return path


def uninstall_for_ide(
    ide_name: str,
    project_root: str | None = None,
    global_install: bool = False,
) -> str:
    """Remove the server from an IDE's config and return the path updated."""
    key, ide = _lookup(ide_name)
    use_project = project_root is not None and not global_install and ide.supports_project_config

    if use_project:
        path = project_config_path(key, project_root)
    else:
        try:
            path = find_config_path(ide.config_paths)
        except ConfigError:
            raise ConfigError(f"Global config file not found for {ide.name}") from None

    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    config = read_or_create_config(path)
    remove_server_from_config(config)
    write_config(path, config)
    return path