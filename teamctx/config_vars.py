"""Discovery of environment and configuration variables used by a project."""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass, field
from typing import Callable, Iterator

_SKIP_DIRS = frozenset({"node_modules", "dist", ".git", "vendor"})

_CONFIG_NAMES = frozenset(
    {
        ".env",
        ".env.local",
        ".env.development",
        ".env.production",
        ".env.staging",
        "config.yaml",
        "config.yml",
        "config.json",
        "config.toml",
        "application.yaml",
        "application.yml",
        "application.properties",
        "settings.py",
        "settings.json",
    }
)

# Node.js / TypeScript
_PROCESS_ENV = re.compile(r"process\.env\.(\w+)", re.ASCII)
_PROCESS_ENV_BRACKET = re.compile(r"""process\.env\[['"](\w+)['"]\]""", re.ASCII)
_CONFIG_GET = re.compile(r"""config(?:Service)?\.get[^(]*\(['"]([^'"]+)['"]""", re.ASCII)

# Go
_OS_GETENV = re.compile(r"""os\.Getenv\(['"](\w+)['"]\)""", re.ASCII)
_OS_LOOKUP_ENV = re.compile(r"""os\.LookupEnv\(['"](\w+)['"]\)""", re.ASCII)
_VIPER_GET = re.compile(
    r"""viper\.Get(?:String|Int|Bool|Duration)?\(['"]([^'"]+)['"]\)""", re.ASCII
)
_ENV_STRUCT_TAG = re.compile(r'env:"(\w+)"', re.ASCII)

# Python
_OS_ENVIRON = re.compile(r"""os\.environ(?:\.get)?\[?['"](\w+)['"]\]?""", re.ASCII)
_OS_GETENV_PY = re.compile(r"""os\.getenv\(['"](\w+)['"]""", re.ASCII)

# .env files
_ENV_FILE_LINE = re.compile(r"(\w+)=(.*)", re.ASCII)

_TS_PATTERNS = ((_PROCESS_ENV, "env"), (_PROCESS_ENV_BRACKET, "env"), (_CONFIG_GET, "config"))
_USAGE_PATTERNS: dict[str, tuple[tuple[re.Pattern, str], ...]] = {
    ".ts": _TS_PATTERNS,
    ".js": _TS_PATTERNS,
    ".go": ((_OS_GETENV, "env"), (_OS_LOOKUP_ENV, "env"), (_VIPER_GET, "config")),
    ".py": ((_OS_ENVIRON, "env"), (_OS_GETENV_PY, "env")),
}

_SOURCE_EXTENSIONS = frozenset({".ts", ".js", ".go", ".py"})


@dataclass
class ConfigVar:
    """An environment or configuration variable and where it was found."""

    name: str
    source: str
    default: str = ""
    required: bool = False
    description: str = ""
    file: str = ""
    line: int = 0

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "source": self.source}
        if self.default:
            data["default"] = self.default
        if self.required:
            data["required"] = self.required
        if self.description:
            data["description"] = self.description
        data["file"] = self.file
        data["line"] = self.line
        return data


@dataclass
class ConfigMap:
    """All configuration extracted from a directory tree."""

    env_vars: list[ConfigVar] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "env_vars": [v.to_dict() for v in self.env_vars],
            "config_files": list(self.config_files),
        }


def _extension(path: str) -> str:
    name = os.path.basename(path)
    idx = name.rfind(".")
    return name[idx:] if idx >= 0 else ""


def _read_text(path: str) -> str:
    with open(path, "rb") as fh:
        return fh.read().decode("utf-8", errors="replace")


def _walk_dir(directory: str) -> Iterator[str]:
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if is_dir:
            if entry.name not in _SKIP_DIRS:
                yield from _walk_dir(entry.path)
        else:
            yield entry.path


def _walk_files(root: str) -> Iterator[str]:
    try:
        info = os.lstat(root)
    except OSError:
        return
    if stat.S_ISDIR(info.st_mode):
        if os.path.basename(os.path.normpath(root)) in _SKIP_DIRS:
            return
        yield from _walk_dir(root)
    else:
        yield root


def is_config_file(name: str) -> bool:
    """Return True if a file name looks like a configuration file."""
    return name in _CONFIG_NAMES or name.startswith(".env")


def extract_env_file(file_path: str) -> list[ConfigVar]:
    """Parse KEY=value lines from a dotenv file; raises OSError if unreadable."""
    found: list[ConfigVar] = []
    for number, raw in enumerate(_read_text(file_path).split("\n"), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        match = _ENV_FILE_LINE.fullmatch(line)
        if match:
            found.append(
                ConfigVar(
                    name=match.group(1),
                    default=match.group(2),
                    source="env",
                    file=file_path,
                    line=number,
                )
            )
    return found


def extract_env_usage(file_path: str) -> list[ConfigVar]:
    """Find variables read by source code; raises OSError if unreadable."""
    text = _read_text(file_path)
    ext = _extension(file_path)
    found: list[ConfigVar] = []
    seen: set[str] = set()

    for pattern, source in _USAGE_PATTERNS.get(ext, ()):
        for match in pattern.finditer(text):
            name = match.group(1)
            if name in seen:
                continue
            seen.add(name)
            found.append(
                ConfigVar(
                    name=name,
                    source=source,
                    file=file_path,
                    line=text.count("\n", 0, match.start()) + 1,
                )
            )

    if ext == ".go":
        for number, line in enumerate(text.split("\n"), start=1):
            match = _ENV_STRUCT_TAG.search(line)
            if match and match.group(1) not in seen:
                seen.add(match.group(1))
                found.append(
                    ConfigVar(name=match.group(1), source="env", file=file_path, line=number)
                )

    return found


def _quietly(reader: Callable[[str], list[ConfigVar]], path: str) -> list[ConfigVar]:
    try:
        return reader(path)
    except OSError:
        return []


def extract_config_map(dir_path: str) -> ConfigMap:
    """Walk a directory and collect config files and the variables they use."""
    config_map = ConfigMap()
    seen: set[str] = set()

    for path in _walk_files(dir_path):
        base = os.path.basename(path)
        if is_config_file(base):
            config_map.config_files.append(path)

        if base.startswith(".env"):
            found = _quietly(extract_env_file, path)
        elif _extension(path).lower() in _SOURCE_EXTENSIONS:
            found = _quietly(extract_env_usage, path)
        else:
            continue

        for var in found:
            if var.name not in seen:
                seen.add(var.name)
                config_map.env_vars.append(var)

    return config_map