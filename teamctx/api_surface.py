"""Extraction of HTTP endpoints and message handlers from source files."""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass, field
from typing import Iterator

_SKIP_DIRS = frozenset({"node_modules", "dist", ".git", "vendor", "target", "bin", "obj"})

# NestJS
_NEST_CONTROLLER = re.compile(r"""@Controller\(['"]([^'"]*)['"]\)""")
_NEST_METHODS = (
    ("GET", re.compile(r"""@Get\(['"]?([^'")\s]*)?['"]?\)""")),
    ("POST", re.compile(r"""@Post\(['"]?([^'")\s]*)?['"]?\)""")),
    ("PUT", re.compile(r"""@Put\(['"]?([^'")\s]*)?['"]?\)""")),
    ("PATCH", re.compile(r"""@Patch\(['"]?([^'")\s]*)?['"]?\)""")),
    ("DELETE", re.compile(r"""@Delete\(['"]?([^'")\s]*)?['"]?\)""")),
)
_NEST_AUTH = re.compile(r"@UseGuards\(([^)]+)\)")
_NEST_HANDLER = re.compile(r"^\s*(?:async\s+)?(\w+)\s*\(", re.MULTILINE)
_PATH_PARAM = re.compile(r":(\w+)")

# Express
_EXPRESS_ROUTER = re.compile(r"""router\.(get|post|put|patch|delete)\s*\(\s*['"]([^'"]+)['"]""")
_EXPRESS_APP = re.compile(r"""app\.(get|post|put|patch|delete)\s*\(\s*['"]([^'"]+)['"]""")

# Kafka (NestJS microservices)
_KAFKA_MESSAGE = re.compile(r"""@MessagePattern\(['"]([^'"]+)['"]\)""")
_KAFKA_EVENT = re.compile(r"""@EventPattern\(['"]([^'"]+)['"]\)""")
_KAFKA_SEND = re.compile(r"""client\.send\(['"]([^'"]+)['"]""")
_KAFKA_EMIT = re.compile(r"""client\.emit\(['"]([^'"]+)['"]""")

# Go (gin, echo, chi)
_GO_GIN = re.compile(r'(?:r|router|g|group)\.(GET|POST|PUT|PATCH|DELETE)\s*\(\s*"([^"]+)"')
_GO_ECHO = re.compile(r'(?:e|echo|g|group)\.(GET|POST|PUT|PATCH|DELETE)\s*\(\s*"([^"]+)"')

# Python (Flask, FastAPI, Django)
_FLASK_ROUTE = re.compile(
    r"""@(?:app|bp|blueprint)\.(route|get|post|put|patch|delete)\s*\(\s*['"]([^'"]+)['"]"""
)
_FASTAPI_ROUTE = re.compile(r"""@(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*['"]([^'"]+)['"]""")
_DJANGO_URL = re.compile(r"""path\s*\(\s*['"]([^'"]+)['"]""")

# Java (Spring Boot)
_SPRING_MAPPING = re.compile(
    r"""@(GetMapping|PostMapping|PutMapping|PatchMapping|DeleteMapping|RequestMapping)"""
    r"""\s*\(\s*(?:value\s*=\s*)?['"]?([^'")\s,]+)['"]?"""
)
_SPRING_CONTROLLER = re.compile(r"""@(?:Rest)?Controller\s*(?:\(\s*['"]([^'"]*)['"]\s*\))?""")
_SPRING_CLASS_MAPPING = re.compile(r"""@RequestMapping\s*\(\s*(?:value\s*=\s*)?['"]([^'"]+)['"]""")
_JAVA_METHOD = re.compile(r"(?:public|private|protected)?\s*\w+\s+(\w+)\s*\(")
_SPRING_METHODS = {
    "PostMapping": "POST",
    "PutMapping": "PUT",
    "PatchMapping": "PATCH",
    "DeleteMapping": "DELETE",
}

# C# (ASP.NET)
_ASPNET_ROUTE = re.compile(r"""\[Http(Get|Post|Put|Patch|Delete)\s*\(\s*['"]?([^'")\]]*)?['"]?\s*\)\]""")
_ASPNET_CONTROLLER_ROUTE = re.compile(r"""\[Route\s*\(\s*['"]([^'"]+)['"]\s*\)\]""")
_CSHARP_METHOD = re.compile(
    r"(?:public|private|protected|async)?\s*(?:async\s+)?(?:Task<)?[\w<>]+\)?\s+(\w+)\s*\("
)


@dataclass
class APIEndpoint:
    """A REST API endpoint found in source code."""

    method: str
    path: str
    handler: str = ""
    controller: str = ""
    auth: str = ""
    file: str = ""
    line: int = 0
    params: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {
            "method": self.method,
            "path": self.path,
            "handler": self.handler,
            "controller": self.controller,
        }
        if self.auth:
            data["auth"] = self.auth
        data["file"] = self.file
        data["line"] = self.line
        if self.params:
            data["params"] = list(self.params)
        return data


@dataclass
class KafkaHandler:
    """A Kafka consumer or producer found in source code."""

    topic: str
    kind: str
    handler: str = ""
    file: str = ""
    line: int = 0
    channel: str = ""

    def to_dict(self) -> dict:
        data: dict = {
            "topic": self.topic,
            "type": self.kind,
            "handler": self.handler,
            "file": self.file,
            "line": self.line,
        }
        if self.channel:
            data["channel"] = self.channel
        return data


@dataclass
class APISurface:
    """The full API surface of an application."""

    app: str
    endpoints: list[APIEndpoint] = field(default_factory=list)
    kafka_consumers: list[KafkaHandler] = field(default_factory=list)
    kafka_producers: list[KafkaHandler] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"app": self.app, "endpoints": [e.to_dict() for e in self.endpoints]}
        if self.kafka_consumers:
            data["kafka_consumers"] = [k.to_dict() for k in self.kafka_consumers]
        if self.kafka_producers:
            data["kafka_producers"] = [k.to_dict() for k in self.kafka_producers]
        return data


def _extension(path: str) -> str:
    name = os.path.basename(path)
    idx = name.rfind(".")
    return name[idx:].lower() if idx >= 0 else ""


def _line_of(content: str, pos: int) -> int:
    return content.count("\n", 0, pos) + 1


def _read_text(path: str) -> str | None:
    try:
        with open(path, "rb") as fh:
            return fh.read().decode("utf-8", errors="replace")
    except OSError:
        return None


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


def extract_api_surface(dir_path: str, app_name: str) -> APISurface:
    """Walk a directory and collect every endpoint and Kafka handler it defines."""
    surface = APISurface(app=app_name)
    for path in _walk_files(dir_path):
        ext = _extension(path)
        text = _read_text(path)
        if text is None:
            continue
        if ext in (".ts", ".js"):
            extract_ts_endpoints(text, path, surface)
            extract_kafka_handlers(text, path, surface)
        elif ext == ".go":
            extract_go_endpoints(text, path, surface)
        elif ext == ".py":
            extract_python_endpoints(text, path, surface)
        elif ext == ".java":
            extract_java_endpoints(text, path, surface)
        elif ext == ".cs":
            extract_csharp_endpoints(text, path, surface)
    return surface


def extract_api_surface_from_file(file_path: str) -> APISurface:
    """Extract the API surface of a single file; raises OSError if it cannot be read."""
    with open(file_path, "rb") as fh:
        text = fh.read().decode("utf-8", errors="replace")
    parent = os.path.dirname(os.path.normpath(file_path)) or "."
    app = os.path.basename(parent.rstrip(os.sep)) or parent
    surface = APISurface(app=app)
    if _extension(file_path) == ".go":
        extract_go_endpoints(text, file_path, surface)
    else:
        extract_ts_endpoints(text, file_path, surface)
        extract_kafka_handlers(text, file_path, surface)
    return surface


def _nest_handler_after(lines: list[str], index: int) -> str:
    for line in lines[index + 1 : index + 5]:
        match = _NEST_HANDLER.search(line)
        if match:
            return match.group(1)
    return ""


def _nest_controller_name(file_path: str) -> str:
    base = os.path.basename(file_path)
    if ".controller." not in base:
        return ""
    stem = base.split(".controller.")[0]
    words = stem.replace("-", " ").split(" ")
    return "".join(w[:1].upper() + w[1:].lower() for w in words) + "Controller"


def _append_regex_routes(
    content: str, file_path: str, surface: APISurface, patterns, upper: bool
) -> None:
    for pattern in patterns:
        for match in pattern.finditer(content):
            method = match.group(1).upper() if upper else match.group(1)
            surface.endpoints.append(
                APIEndpoint(
                    method=method,
                    path=match.group(2),
                    file=file_path,
                    line=_line_of(content, match.start()),
                )
            )


def extract_ts_endpoints(content: str, file_path: str, surface: APISurface) -> None:
    """Add NestJS and Express endpoints found in TypeScript/JavaScript text."""
    lines = content.split("\n")

    base_path = ""
    match = _NEST_CONTROLLER.search(content)
    if match:
        base_path = "/" + match.group(1).strip("/")

    controller = _nest_controller_name(file_path)

    class_auth = ""
    match = _NEST_AUTH.search(content)
    if match:
        class_auth = match.group(1)

    for i, line in enumerate(lines):
        for method, pattern in _NEST_METHODS:
            match = pattern.search(line)
            if not match:
                continue
            path = base_path
            sub_path = (match.group(1) or "").strip("/")
            if sub_path:
                path = base_path + "/" + sub_path

            auth = class_auth
            for previous in reversed(lines[max(0, i - 4) : i]):
                auth_match = _NEST_AUTH.search(previous)
                if auth_match:
                    auth = auth_match.group(1)
                    break

            surface.endpoints.append(
                APIEndpoint(
                    method=method,
                    path=path,
                    handler=_nest_handler_after(lines, i),
                    controller=controller,
                    auth=auth,
                    file=file_path,
                    line=i + 1,
                    params=_PATH_PARAM.findall(path),
                )
            )

    _append_regex_routes(content, file_path, surface, (_EXPRESS_ROUTER, _EXPRESS_APP), upper=True)


def extract_go_endpoints(content: str, file_path: str, surface: APISurface) -> None:
    """Add gin/echo/chi style routes found in Go text."""
    _append_regex_routes(content, file_path, surface, (_GO_GIN, _GO_ECHO), upper=False)


def extract_kafka_handlers(content: str, file_path: str, surface: APISurface) -> None:
    """Add Kafka consumers (decorated handlers) and producers (client calls)."""
    lines = content.split("\n")
    for i, line in enumerate(lines):
        for pattern in (_KAFKA_MESSAGE, _KAFKA_EVENT):
            match = pattern.search(line)
            if match:
                surface.kafka_consumers.append(
                    KafkaHandler(
                        topic=match.group(1),
                        kind="consumer",
                        handler=_nest_handler_after(lines, i),
                        file=file_path,
                        line=i + 1,
                    )
                )

    for pattern in (_KAFKA_SEND, _KAFKA_EMIT):
        for match in pattern.finditer(content):
            surface.kafka_producers.append(
                KafkaHandler(
                    topic=match.group(1),
                    kind="producer",
                    file=file_path,
                    line=_line_of(content, match.start()),
                )
            )


def _flask_handler(lines: list[str], index: int) -> str:
    for line in lines[index + 1 : index + 3]:
        if line.strip().startswith("def "):
            parts = line.split()
            if len(parts) >= 2:
                return parts[1].removesuffix("(").split("(")[0]
            return ""
    return ""


def _fastapi_handler(lines: list[str], index: int) -> str:
    for line in lines[index + 1 : index + 5]:
        trimmed = line.strip()
        if trimmed.startswith("async def ") or trimmed.startswith("def "):
            parts = trimmed.split()
            idx = 2 if parts[0] == "async" else 1
            return parts[idx].split("(")[0] if len(parts) > idx else ""
    return ""


def extract_python_endpoints(content: str, file_path: str, surface: APISurface) -> None:
    """Add Flask, FastAPI and Django routes found in Python text."""
    lines = content.split("\n")
    for i, line in enumerate(lines):
        match = _FLASK_ROUTE.search(line)
        if match:
            method = match.group(1).upper()
            if method == "ROUTE":
                method = "GET"
            surface.endpoints.append(
                APIEndpoint(
                    method=method,
                    path=match.group(2),
                    handler=_flask_handler(lines, i),
                    file=file_path,
                    line=i + 1,
                )
            )

        match = _FASTAPI_ROUTE.search(line)
        if match:
            surface.endpoints.append(
                APIEndpoint(
                    method=match.group(1).upper(),
                    path=match.group(2),
                    handler=_fastapi_handler(lines, i),
                    file=file_path,
                    line=i + 1,
                )
            )

    for match in _DJANGO_URL.finditer(content):
        surface.endpoints.append(
            APIEndpoint(
                method="ANY",
                path="/" + match.group(1).strip("/"),
                file=file_path,
                line=_line_of(content, match.start()),
            )
        )


def _join_route(base_path: str, path: str) -> str:
    if not path:
        return base_path
    return base_path.removesuffix("/") + "/" + path.removeprefix("/")


def _method_name_after(lines: list[str], index: int, skip_prefix: str, pattern: re.Pattern) -> str:
    for line in lines[index + 1 : index + 5]:
        trimmed = line.strip()
        if "(" in trimmed and not trimmed.startswith(skip_prefix) and not trimmed.startswith("//"):
            match = pattern.search(trimmed)
            return match.group(1) if match else ""
    return ""


def extract_java_endpoints(content: str, file_path: str, surface: APISurface) -> None:
    """Add Spring Boot mappings found in Java text."""
    lines = content.split("\n")

    base_path = ""
    match = _SPRING_CONTROLLER.search(content)
    if match:
        base_path = match.group(1) or ""
    match = _SPRING_CLASS_MAPPING.search(content)
    if match:
        base_path = match.group(1)

    for i, line in enumerate(lines):
        match = _SPRING_MAPPING.search(line)
        if not match:
            continue
        annotation, path = match.group(1), match.group(2)
        if annotation == "RequestMapping":
            if "POST" in line:
                method = "POST"
            elif "PUT" in line:
                method = "PUT"
            else:
                method = "GET"
        else:
            method = _SPRING_METHODS.get(annotation, "GET")

        surface.endpoints.append(
            APIEndpoint(
                method=method,
                path=_join_route(base_path, path),
                handler=_method_name_after(lines, i, "@", _JAVA_METHOD),
                file=file_path,
                line=i + 1,
            )
        )


def extract_csharp_endpoints(content: str, file_path: str, surface: APISurface) -> None:
    """Add ASP.NET routes found in C# text."""
    lines = content.split("\n")

    base_path = ""
    match = _ASPNET_CONTROLLER_ROUTE.search(content)
    if match:
        base_path = match.group(1)
        if "[controller]" in base_path:
            name = os.path.basename(file_path).removesuffix("Controller.cs").removesuffix(".cs")
            base_path = base_path.replace("[controller]", name.lower(), 1)

    for i, line in enumerate(lines):
        match = _ASPNET_ROUTE.search(line)
        if not match:
            continue
        full_path = _join_route(base_path, match.group(2) or "")
        surface.endpoints.append(
            APIEndpoint(
                method=match.group(1).upper(),
                path="/" + full_path.strip("/"),
                handler=_method_name_after(lines, i, "[", _CSHARP_METHOD),
                file=file_path,
                line=i + 1,
            )
        )