[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teamctx"
version = "0.1.0"
description = "Extract API surfaces, config variables and schema models from a codebase, and capture team knowledge from git commits."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "codebase",
    "knowledge",
    "api-surface",
    "schema",
    "prisma",
    "git-hooks",
    "mcp",
    "documentation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Documentation",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["teamctx"]

[tool.hatch.build.targets.sdist]
include = ["teamctx", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
