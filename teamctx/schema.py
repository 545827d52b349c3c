"""Extraction of database models and enums from Prisma schema files."""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass, field
from typing import Iterator

_SKIP_DIRS = frozenset(
    {"node_modules", ".git", "dist", ".nx", "coverage", "__pycache__", "vendor", ".cache"}
)

_PRISMA_MODEL = re.compile(r"^model\s+(\w+)\s*\{", re.MULTILINE | re.ASCII)
_PRISMA_ENUM = re.compile(r"^enum\s+(\w+)\s*\{", re.MULTILINE | re.ASCII)
_PRISMA_FIELD = re.compile(r"^\s*(\w+)\s+(\w+)(\[\])?\??(.*)$", re.ASCII)
_PRISMA_RELATION = re.compile(r"@relation\(([^)]+)\)")
_ATTRIBUTE = re.compile(r"@\w+(?:\([^)]*\))?", re.ASCII)
_DEFAULT = re.compile(r"@default\(([^)]+)\)")
_RELATION_FIELDS = re.compile(r"fields:\s*\[([^\]]+)\]")
_RELATION_REFERENCES = re.compile(r"references:\s*\[([^\]]+)\]")


@dataclass
class SchemaField:
    """A field of a database model."""

    name: str
    type: str
    is_optional: bool = False
    is_array: bool = False
    default: str = ""
    attributes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "type": self.type}
        if self.is_optional:
            data["is_optional"] = True
        if self.is_array:
            data["is_array"] = True
        if self.default:
            data["default"] = self.default
        if self.attributes:
            data["attributes"] = list(self.attributes)
        return data


@dataclass
class Relation:
    """A relationship from one model to another."""

    name: str
    type: str
    model: str
    fields: list[str] = field(default_factory=list)
    references: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "type": self.type, "model": self.model}
        if self.fields:
            data["fields"] = list(self.fields)
        if self.references:
            data["references"] = list(self.references)
        return data


@dataclass
class SchemaModel:
    """A database model with its fields and relations."""

    name: str
    fields: list[SchemaField] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    file: str = ""
    line: int = 0

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "fields": [f.to_dict() for f in self.fields]}
        if self.relations:
            data["relations"] = [r.to_dict() for r in self.relations]
        if self.attributes:
            data["attributes"] = list(self.attributes)
        data["file"] = self.file
        data["line"] = self.line
        return data


@dataclass
class SchemaEnum:
    """An enum definition and its values."""

    name: str
    values: list[str] = field(default_factory=list)
    file: str = ""
    line: int = 0

    def to_dict(self) -> dict:
        return {"name": self.name, "values": list(self.values), "file": self.file, "line": self.line}


@dataclass
class SchemaInfo:
    """Every model and enum extracted from one or more schema files."""

    models: list[SchemaModel] = field(default_factory=list)
    enums: list[SchemaEnum] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"models": [m.to_dict() for m in self.models]}
        if self.enums:
            data["enums"] = [e.to_dict() for e in self.enums]
        return data


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


def _block_end(text: str, start: int) -> int:
    """Index of the brace closing the first block opened at or after start."""
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(text)


def _parse_field(line: str, model: SchemaModel) -> None:
    match = _PRISMA_FIELD.match(line)
    if not match:
        return
    schema_field = SchemaField(
        name=match.group(1),
        type=match.group(2),
        is_array=match.group(3) == "[]",
        is_optional="?" in line,
    )
    if "@" in line:
        schema_field.attributes = _ATTRIBUTE.findall(line)
    if "@default(" in line:
        default = _DEFAULT.search(line)
        if default:
            schema_field.default = default.group(1)
    relation = _PRISMA_RELATION.search(line)
    if relation:
        model.relations.append(parse_relation(match.group(1), match.group(2), relation.group(1)))
    model.fields.append(schema_field)


def extract_prisma_schema(file_path: str) -> SchemaInfo:
    """Parse one Prisma schema file; raises OSError if it cannot be read."""
    with open(file_path, "rb") as fh:
        text = fh.read().decode("utf-8", errors="replace")

    schema = SchemaInfo()

    for match in _PRISMA_MODEL.finditer(text):
        model = SchemaModel(
            name=match.group(1),
            file=file_path,
            line=text.count("\n", 0, match.start()) + 1,
        )
        body = text[match.end() : _block_end(text, match.start())]
        for raw in body.split("\n"):
            line = raw.strip()
            if not line or line.startswith("//") or line.startswith("@@"):
                continue
            _parse_field(line, model)
        schema.models.append(model)

    for match in _PRISMA_ENUM.finditer(text):
        enum = SchemaEnum(
            name=match.group(1),
            file=file_path,
            line=text.count("\n", 0, match.start()) + 1,
        )
        body = text[match.end() : _block_end(text, match.start())]
        for raw in body.split("\n"):
            line = raw.strip()
            if line and not line.startswith("//"):
                enum.values.append(line)
        schema.enums.append(enum)

    return schema


def extract_schema_models(path: str) -> SchemaInfo:
    """Extract models from a Prisma file, or from every Prisma file under a directory.

    Raises OSError if the path does not exist.
    """
    info = os.stat(path)
    if not stat.S_ISDIR(info.st_mode):
        return extract_prisma_schema(path)

    schema = SchemaInfo()
    for file_path in _walk_files(path):
        base = os.path.basename(file_path)
        if base == "schema.prisma" or base.endswith(".prisma"):
            try:
                found = extract_prisma_schema(file_path)
            except OSError:
                continue
            schema.models.extend(found.models)
            schema.enums.extend(found.enums)
    return schema


def parse_relation(field_name: str, field_type: str, relation_str: str) -> Relation:
    """Build a relation from a field and the arguments of its @relation attribute."""
    relation = Relation(
        name=field_name,
        model=field_type,
        type="one-to-many" if field_type.endswith("[]") else "one-to-one",
    )
    match = _RELATION_FIELDS.search(relation_str)
    if match:
        relation.fields = parse_array_items(match.group(1))
    match = _RELATION_REFERENCES.search(relation_str)
    if match:
        relation.references = parse_array_items(match.group(1))
    return relation


def parse_array_items(s: str) -> list[str]:
    """Split a comma separated list, dropping blank items."""
    return [item.strip() for item in s.split(",") if item.strip()]