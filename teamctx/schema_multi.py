"""Extraction of database models from Go, Python, Java, TypeORM and Prisma sources."""

from __future__ import annotations

import os
import re
import stat
from typing import Iterator

from teamctx.schema import (
    SchemaField,
    SchemaInfo,
    SchemaModel,
    extract_prisma_schema,
)

_SKIP_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "vendor",
        "dist",
        "target",
        "__pycache__",
        ".nx",
        ".cache",
        "coverage",
    }
)

# Go (GORM, sqlx)
_GO_STRUCT = re.compile(r"^type\s+(\w+)\s+struct\s*\{", re.MULTILINE | re.ASCII)
_GO_FIELD = re.compile(r"^\s*(\w+)\s+(\S+).*?`([^`]+)`", re.ASCII)
_GORM_TAG = re.compile(r'gorm:"([^"]+)"')

# Python (SQLAlchemy, Django)
_SQLALCHEMY_MODEL = re.compile(
    r"class\s+(\w+)\s*\([^)]*(?:Base|Model|db\.Model)[^)]*\)", re.ASCII
)
_SQLALCHEMY_COLUMN = re.compile(r"(\w+)\s*=\s*(?:Column|db\.Column)\s*\(\s*(\w+)", re.ASCII)
_DJANGO_MODEL = re.compile(r"class\s+(\w+)\s*\(\s*models\.Model\s*\)", re.ASCII)
_DJANGO_FIELD = re.compile(r"(\w+)\s*=\s*models\.(\w+Field)", re.ASCII)

# Java (JPA/Hibernate)
_JPA_ENTITY = re.compile(r"@Entity")
_JPA_TABLE = re.compile(r'@Table\s*\(\s*name\s*=\s*"(\w+)"', re.ASCII)
_JPA_CLASS = re.compile(r"(?:public\s+)?class\s+(\w+)", re.ASCII)
_JPA_FIELD = re.compile(r"(?:private|public|protected)\s+(\w+)\s+(\w+)\s*;", re.ASCII)

# TypeORM
_TYPEORM_ENTITY = re.compile(r"""@Entity\s*\(\s*(?:['"](\w+)['"])?\s*\)""", re.ASCII)
_TYPEORM_COLUMN = re.compile(r"@Column\s*\([^)]*\)\s*(\w+)\s*[?:]?\s*:\s*(\w+)", re.ASCII)
_TS_CLASS = re.compile(r"(?:export\s+)?class\s+(\w+)", re.ASCII)


def _extension(path: str) -> str:
    name = os.path.basename(path)
    idx = name.rfind(".")
    return name[idx:].lower() if idx >= 0 else ""


def _is_prisma(path: str) -> bool:
    base = os.path.basename(path)
    return base == "schema.prisma" or base.endswith(".prisma")


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


def _extract_by_extension(text: str, path: str, schema: SchemaInfo) -> None:
    ext = _extension(path)
    if ext == ".go":
        extract_go_models(text, path, schema)
    elif ext == ".py":
        extract_python_models(text, path, schema)
    elif ext == ".java":
        extract_java_models(text, path, schema)
    elif ext == ".ts":
        extract_typeorm_models(text, path, schema)


def extract_multi_lang_schema(path: str) -> SchemaInfo:
    """Extract models from a file or a directory tree in any supported language.

    Raises OSError if the path does not exist or a single file cannot be read.
    """
    info = os.stat(path)

    if stat.S_ISDIR(info.st_mode):
        schema = SchemaInfo()
        if os.path.basename(os.path.normpath(path)) in _SKIP_DIRS:
            return schema
        for file_path in _walk_dir(path):
            if _is_prisma(file_path):
                try:
                    found = extract_prisma_schema(file_path)
                except OSError:
                    continue
                schema.models.extend(found.models)
                schema.enums.extend(found.enums)
                continue
            try:
                text = _read_text(file_path)
            except OSError:
                continue
            _extract_by_extension(text, file_path, schema)
        return schema

    text = _read_text(path)
    if _extension(path) == ".prisma":
        return extract_prisma_schema(path)
    schema = SchemaInfo()
    _extract_by_extension(text, path, schema)
    return schema


def extract_go_models(content: str, file_path: str, schema: SchemaInfo) -> None:
    """Add Go structs that carry gorm or db tags as models."""
    for match in _GO_STRUCT.finditer(content):
        body = content[match.end() : _block_end(content, match.start())]
        if 'gorm:"' not in body and 'db:"' not in body:
            continue

        model = SchemaModel(
            name=match.group(1),
            file=file_path,
            line=content.count("\n", 0, match.start()) + 1,
        )
        for line in body.split("\n"):
            field_match = _GO_FIELD.search(line)
            if not field_match:
                continue
            schema_field = SchemaField(name=field_match.group(1), type=field_match.group(2))
            gorm = _GORM_TAG.search(field_match.group(3))
            if gorm:
                schema_field.attributes = ["gorm:" + gorm.group(1)]
            model.fields.append(schema_field)

        if model.fields:
            schema.models.append(model)


def _following(lines: list[str], index: int, limit: int) -> list[str]:
    return lines[index + 1 : index + limit]


def extract_python_models(content: str, file_path: str, schema: SchemaInfo) -> None:
    """Add SQLAlchemy and Django model classes."""
    lines = content.split("\n")

    for i, line in enumerate(lines):
        match = _SQLALCHEMY_MODEL.search(line)
        if match:
            model = SchemaModel(name=match.group(1), file=file_path, line=i + 1)
            for field_line in _following(lines, i, 50):
                trimmed = field_line.strip()
                if not trimmed or trimmed.startswith("class "):
                    break
                column = _SQLALCHEMY_COLUMN.search(field_line)
                if column:
                    model.fields.append(SchemaField(name=column.group(1), type=column.group(2)))
            if model.fields:
                schema.models.append(model)

        match = _DJANGO_MODEL.search(line)
        if match:
            model = SchemaModel(name=match.group(1), file=file_path, line=i + 1)
            for field_line in _following(lines, i, 50):
                trimmed = field_line.strip()
                if not trimmed:
                    continue
                if trimmed.startswith("class "):
                    break
                django_field = _DJANGO_FIELD.search(field_line)
                if django_field:
                    model.fields.append(
                        SchemaField(name=django_field.group(1), type=django_field.group(2))
                    )
            if model.fields:
                schema.models.append(model)


def extract_java_models(content: str, file_path: str, schema: SchemaInfo) -> None:
    """Add the JPA entity defined in a Java file, if any."""
    if not _JPA_ENTITY.search(content):
        return

    lines = content.split("\n")
    class_name = ""
    class_line = 0
    for number, line in enumerate(lines, start=1):
        match = _JPA_CLASS.search(line)
        if match:
            class_name = match.group(1)
            class_line = number
            break
    if not class_name:
        return

    model = SchemaModel(name=class_name, file=file_path, line=class_line)
    table = _JPA_TABLE.search(content)
    if table:
        model.attributes = ["table:" + table.group(1)]

    for line in lines:
        match = _JPA_FIELD.search(line)
        if match and match.group(2) != "serialVersionUID":
            model.fields.append(SchemaField(name=match.group(2), type=match.group(1)))

    if model.fields:
        schema.models.append(model)


def extract_typeorm_models(content: str, file_path: str, schema: SchemaInfo) -> None:
    """Add TypeORM entity classes and their columns."""
    lines = content.split("\n")

    for i, line in enumerate(lines):
        entity = _TYPEORM_ENTITY.search(line)
        if not entity:
            continue

        class_name = ""
        for following in _following(lines, i, 5):
            match = _TS_CLASS.search(following)
            if match:
                class_name = match.group(1)
                break
        if not class_name:
            continue

        model = SchemaModel(name=class_name, file=file_path, line=i + 1)
        if entity.group(1):
            model.attributes = ["table:" + entity.group(1)]

        for j in range(i, len(lines)):
            column = _TYPEORM_COLUMN.search(lines[j])
            if column:
                model.fields.append(SchemaField(name=column.group(1), type=column.group(2)))
            if j > i + 5 and "class " in lines[j]:
                break

        if model.fields:
            schema.models.append(model)