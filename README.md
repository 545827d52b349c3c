# teamctx

A library for building a long-term technical memory of a codebase.
`teamctx` reads source trees, commit messages and git state and turns them
into plain Python data:

- **API surfaces** (`teamctx.api_surface`): REST endpoints from NestJS,
  Express, Gin/Echo, Flask, FastAPI, Django, Spring Boot and ASP.NET, plus
  Kafka consumers and producers.
- **Configuration** (`teamctx.config_vars`): environment variables from
  `.env` files and from code (`process.env`, `os.Getenv`, `viper`,
  `os.environ`, ...), and the config files found in a project.
- **Database schemas** (`teamctx.schema`, `teamctx.schema_multi`): Prisma
  models, enums and relations, GORM/sqlx structs, SQLAlchemy and Django
  models, JPA entities and TypeORM entities.
- **Commit knowledge** (`teamctx.commit_analysis`): decisions and warnings
  written into commit messages (`Decision:`, `Why:`, `Warning:`,
  `BREAKING CHANGE:`, `feat!:` ...), and notable changes such as reverts,
  large deletions, dependency and config edits.
- **Project plumbing** (`teamctx.project`, `teamctx.hooks`, `teamctx.sync`,
  `teamctx.ide_config`): locating the `.teamcontext` directory, installing a
  post-commit hook, syncing knowledge files through git, and writing MCP
  server entries into IDE configuration files.

The package has no third-party runtime dependencies. Every result class is
a dataclass; the extraction results also have a `to_dict()` method that
gives JSON-ready data.

## Extracting an API surface

```python
from teamctx.api_surface import extract_api_surface, extract_api_surface_from_file

surface = extract_api_surface("apps/billing", "billing")
for endpoint in surface.endpoints:
    print(endpoint.method, endpoint.path, endpoint.handler, endpoint.line)

for consumer in surface.kafka_consumers:
    print("consumes", consumer.topic, consumer.handler)
for producer in surface.kafka_producers:
    print("produces", producer.topic)

single = extract_api_surface_from_file("src/users/users.controller.ts")
```

Files are chosen by extension (`.ts`, `.js`, `.go`, `.py`, `.java`, `.cs`).
Directories named `node_modules`, `dist`, `.git`, `vendor`, `target`, `bin`
and `obj` are skipped. `extract_api_surface_from_file` treats `.go` files as
Go and every other file as TypeScript/JavaScript, and raises `OSError` if
the file cannot be read.

## Configuration variables

```python
from teamctx.config_vars import extract_config_map, extract_env_file, is_config_file

config_map = extract_config_map(".")
for var in config_map.env_vars:
    print(var.name, var.source, var.file, var.line)
print(config_map.config_files)

defaults = extract_env_file(".env.example")
print(is_config_file("application.yml"))   # True
```

`extract_config_map` reports each variable once, at the first place it is
found. `source` is `"env"` for environment reads and `"config"` for
`configService.get(...)` and `viper.Get...(...)` calls.

## Schema models

```python
from teamctx.schema import extract_schema_models
from teamctx.schema_multi import extract_multi_lang_schema

prisma = extract_schema_models("prisma/schema.prisma")
for model in prisma.models:
    print(model.name, [field.name for field in model.fields])
    for relation in model.relations:
        print("  ->", relation.model, relation.fields, relation.references)

everything = extract_multi_lang_schema("services/")
for enum in everything.enums:
    print(enum.name, enum.values)
```

`extract_schema_models` reads Prisma files only; `extract_multi_lang_schema`
also understands Go, Python, Java and TypeScript model definitions. Both
raise `OSError` when the given path does not exist.

## Knowledge from commits

```python
from teamctx.commit_analysis import (
    extract_decisions_from_message,
    extract_warnings_from_message,
    count_deletions,
    assess_impact,
)

message = """feat: add user validation

Decision: Use Zod for validation
Why: Better TypeScript inference than class-validator
Warning: Don't call this API without auth token
"""

for decision in extract_decisions_from_message(message):
    print(decision.title, "-", decision.reason)

for warning in extract_warnings_from_message(message):
    print(warning.severity, warning.title)

print(count_deletions(" file.go | 10 ----"))   # 4
print(assess_impact(["Revert detected"]))       # high
```

Warning severities are `"critical"` for `Danger:`, `Important:` and
breaking-change markers, `"info"` for `Note:`, and `"warning"` otherwise.

`detect_findings(commit_msg, commit_hash, diff_stat, diff_content)` returns
a list of finding strings for reverts, deletions of more than 100 lines,
dependency files, config files and added TODO/FIXME/HACK lines.
`extract_changed_files` lists the files in `git diff --stat` output.
`extract_from_pr_description` finds the pull request number in a merge
message (`extract_pr_number`), fetches its description with the GitHub CLI
(`gh`), and parses it with `parse_pr_body`; it returns empty lists when
there is no number or `gh` fails.

## Finding the project

```python
from teamctx.project import find_teamcontext_dir, find_project_root, ProjectNotFoundError

try:
    tc_dir = find_teamcontext_dir("src/deep/module")
except ProjectNotFoundError:
    tc_dir = None

found = find_project_root()   # (project_root, tc_dir) or None
```

The search starts at the given directory (or the current one) and walks up
to the filesystem root.

## Git hooks and sync

```python
from teamctx.hooks import find_git_root, install_post_commit_hook, uninstall_post_commit_hook
from teamctx.sync import sync_knowledge

root = find_git_root(".")
result = install_post_commit_hook(root)   # InstallResult.INSTALLED / APPENDED / ALREADY_INSTALLED

for note in sync_knowledge(root):        # pull, then push
    print(note)
sync_knowledge(root, pull=True)           # pull only
sync_knowledge(root, push=True)           # push only

deleted = uninstall_post_commit_hook(root)
```

An existing post-commit hook is kept: the hook section is appended to it,
and `uninstall_post_commit_hook` strips only that section, deleting the
file when nothing else is left (it then returns `True`). Hook problems
raise `HookError`.

`sync_knowledge` stashes local changes under `.teamcontext/`, fetches and
merges the current branch from `origin`, resolves conflicts in
`.teamcontext/` files in favour of the remote side, restores the stash,
then commits and pushes local knowledge changes. It raises `SyncError` only
when the `.teamcontext` directory is missing; a failed pull or push is
reported in the returned notes. `pull_knowledge`, `push_knowledge`,
`auto_resolve_knowledge_merge` and `run_git` raise `SyncError` directly.

## IDE configuration

```python
from teamctx.ide_config import find_binary_path, install_for_ide, uninstall_for_ide

binary = find_binary_path()
path = install_for_ide("cursor", binary, "/path/to/project", False)
uninstall_for_ide("cursor", "/path/to/project", False)
```

Supported IDEs are `cursor`, `claude`, `claudecode`, `windsurf` and
`vscode`. A project-level install writes `<project>/.cursor/mcp.json` (and
so on; `.mcp.json` at the project root for `claudecode`) with an
`mcpServers.teamcontext` entry whose arguments are `serve <project>`. A
global install, or an IDE without project-level config (`claude`), writes
to the first existing user config, or creates the first listed one. A
legacy `teambrain` entry is removed when found. Errors raise `ConfigError`.

## What this package does not do

`teamctx` is a library only. It installs no command-line program, runs no
MCP server, and keeps no store of decisions, warnings or features: the
functions above return their results to the caller. The post-commit hook
it installs, and the IDE entries it writes, start an executable named
`teamcontext` (`find_binary_path` looks for one on `PATH`); that executable
is not part of this package and has to be provided separately.

## Running the tests

Install the `test` extra and run `pytest`.