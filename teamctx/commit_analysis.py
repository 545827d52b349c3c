"""Knowledge extraction from git commit messages, diffs and pull request bodies."""

from __future__ import annotations

import posixpath
import subprocess
from dataclasses import dataclass

_DECISION_PREFIXES = (
    "decision:",
    "Decision:",
    "DECISION:",
    "architectural decision:",
    "arch decision:",
    "design decision:",
    "tech decision:",
    "chose:",
    "decided:",
    "we decided:",
    "going with:",
    "using:",
    "switched to:",
)

_REASON_PREFIXES = (
    "why:",
    "Why:",
    "WHY:",
    "reason:",
    "Reason:",
    "REASON:",
    "because:",
    "Because:",
    "rationale:",
    "Rationale:",
)

_WARNING_PREFIXES = (
    "warning:", "Warning:", "WARNING:",
    "caution:", "Caution:", "CAUTION:",
    "gotcha:", "Gotcha:", "GOTCHA:",
    "pitfall:", "Pitfall:", "PITFALL:",
    "danger:", "Danger:", "DANGER:",
    "note:", "Note:", "NOTE:",
    "important:", "Important:", "IMPORTANT:",
    "beware:", "Beware:", "BEWARE:",
    "don't:", "Don't:", "DON'T:",
    "avoid:", "Avoid:", "AVOID:",
)

_BREAKING_PREFIXES = (
    "breaking change:", "Breaking Change:", "BREAKING CHANGE:",
    "breaking:", "Breaking:", "BREAKING:",
)

_PR_SECTIONS = (
    ("## decisions", "decision"),
    ("## architectural", "decision"),
    ("### decisions", "decision"),
    ("## warnings", "warning"),
    ("## breaking changes", "warning"),
    ("### breaking", "warning"),
    ("## notes", "warning"),
)

_DEPENDENCY_FILES = frozenset(
    {
        "package.json", "go.mod", "go.sum", "Cargo.toml", "Cargo.lock",
        "requirements.txt", "Pipfile", "pyproject.toml", "Gemfile", "Gemfile.lock",
        "pom.xml", "build.gradle", "composer.json", "pubspec.yaml",
    }
)

_CONFIG_PATTERNS = (
    ".env", "Dockerfile", "docker-compose", ".yml", ".yaml",
    "tsconfig", "webpack", "vite.config", "next.config", ".eslintrc",
    "Makefile", "CMakeLists",
)

_LARGE_DELETION_THRESHOLD = 100
_PR_REASON = "From PR description"


@dataclass
class ExtractedDecision:
    """A decision found in a commit message or PR description."""

    title: str
    reason: str = ""


@dataclass
class ExtractedWarning:
    """A warning found in a commit message or PR description."""

    title: str
    reason: str = ""
    severity: str = "warning"


def _matching_prefix(line: str, prefixes, ignore_case: bool) -> str | None:
    lowered = line.lower()
    for prefix in prefixes:
        if line.startswith(prefix) or (ignore_case and lowered.startswith(prefix.lower())):
            return prefix
    return None


def extract_decisions_from_message(msg: str) -> list[ExtractedDecision]:
    """Find decisions marked by prefixes such as "Decision:" or a "type!:" subject."""
    decisions: list[ExtractedDecision] = []
    lines = msg.split("\n")
    current: ExtractedDecision | None = None

    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue

        prefix = _matching_prefix(trimmed, _DECISION_PREFIXES, ignore_case=True)
        if prefix is not None:
            content = trimmed[len(prefix):].strip()
            if content:
                current = ExtractedDecision(title=content)

        if current is not None:
            prefix = _matching_prefix(trimmed, _REASON_PREFIXES, ignore_case=True)
            if prefix is not None:
                content = trimmed[len(prefix):].strip()
                if content:
                    current.reason = content
                    decisions.append(current)
                    current = None

    if current is not None and current.title:
        decisions.append(current)

    first_line = lines[0].strip()
    if "!:" in first_line:
        title = first_line.split("!:", 1)[1].strip()
        if title and all(d.title != title for d in decisions):
            decisions.append(
                ExtractedDecision(title=title, reason="Breaking change - see commit for details")
            )

    return decisions


def _warning_severity(prefix: str) -> str:
    lowered = prefix.lower()
    if "danger" in lowered or "important" in lowered:
        return "critical"
    if "note" in lowered:
        return "info"
    return "warning"


def extract_warnings_from_message(msg: str) -> list[ExtractedWarning]:
    """Find warnings marked by prefixes such as "Warning:" or "BREAKING CHANGE:"."""
    warnings: list[ExtractedWarning] = []
    for line in msg.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        prefix = _matching_prefix(trimmed, _WARNING_PREFIXES, ignore_case=False)
        if prefix is not None:
            content = trimmed[len(prefix):].strip()
            if content:
                warnings.append(
                    ExtractedWarning(title=content, severity=_warning_severity(prefix))
                )

        prefix = _matching_prefix(trimmed, _BREAKING_PREFIXES, ignore_case=False)
        if prefix is not None:
            content = trimmed[len(prefix):].strip()
            if content:
                warnings.append(
                    ExtractedWarning(
                        title=content,
                        reason="Breaking change introduced in commit",
                        severity="critical",
                    )
                )

    return warnings


def _section_type(line: str) -> str | None:
    lowered = line.strip().lower()
    for header, section_type in _PR_SECTIONS:
        if lowered.startswith(header):
            return section_type
    return None


def parse_pr_body(pr_body: str) -> tuple[list[ExtractedDecision], list[ExtractedWarning]]:
    """Extract decisions and warnings from a PR body, including template sections."""
    decisions = extract_decisions_from_message(pr_body)
    warnings = extract_warnings_from_message(pr_body)

    current_section: str | None = None
    section_content: list[str] = []

    def flush() -> None:
        if current_section is None or not section_content:
            return
        content = " ".join(section_content).strip()
        if not content:
            return
        if current_section == "decision":
            decisions.append(ExtractedDecision(title=content, reason=_PR_REASON))
        else:
            warnings.append(
                ExtractedWarning(title=content, reason=_PR_REASON, severity="warning")
            )

    for line in pr_body.split("\n"):
        new_section = _section_type(line)
        if new_section is not None:
            flush()
            current_section = new_section
            section_content = []
        elif current_section is not None and line.strip():
            content = line.strip().removeprefix("- ").removeprefix("* ")
            if content and not content.startswith("#"):
                section_content.append(content)

    flush()
    return decisions, warnings


def extract_pr_number(commit_msg: str) -> str | None:
    """Return the digits following the first "#" in a merge message, if any."""
    idx = commit_msg.find("#")
    if idx == -1:
        return None
    digits = []
    for char in commit_msg[idx + 1:]:
        if "0" <= char <= "9":
            digits.append(char)
        else:
            break
    return "".join(digits) or None


def extract_from_pr_description(
    commit_msg: str,
) -> tuple[list[ExtractedDecision], list[ExtractedWarning]]:
    """Fetch the merged PR's body with the GitHub CLI and parse it.

    Returns empty lists when there is no PR number or the CLI is unavailable.
    """
    pr_number = extract_pr_number(commit_msg)
    if pr_number is None:
        return [], []
    try:
        result = subprocess.run(
            ["gh", "pr", "view", pr_number, "--json", "body", "--jq", ".body"],
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return [], []

    body = result.stdout.decode("utf-8", errors="replace").strip()
    if not body or body == "null":
        return [], []
    return parse_pr_body(body)


def _stat_entries(diff_stat: str):
    for line in diff_stat.split("\n"):
        parts = line.split("|")
        if len(parts) >= 2:
            yield parts


def count_deletions(diff_stat: str) -> int:
    """Count the minus signs in the change column of `git diff --stat` output."""
    return sum(parts[1].strip().count("-") for parts in _stat_entries(diff_stat))


def extract_changed_files(diff_stat: str) -> list[str]:
    """Return the file names listed in `git diff --stat` output."""
    files = []
    for parts in _stat_entries(diff_stat):
        name = parts[0].strip()
        if name and "changed" not in name:
            files.append(name)
    return files


def assess_impact(findings: list[str]) -> str:
    """Rate a set of findings as "high", "medium" or "low" impact."""
    if any("Revert" in f or "Large deletion" in f for f in findings):
        return "high"
    if len(findings) > 3:
        return "medium"
    return "low"


def _base_name(path: str) -> str:
    return posixpath.basename(path.rstrip("/")) or path


def detect_findings(
    commit_msg: str, commit_hash: str, diff_stat: str, diff_content: str
) -> list[str]:
    """Detect reverts, large deletions, dependency/config changes and debt markers."""
    findings: list[str] = []
    short_hash = commit_hash[:8]

    if "revert" in commit_msg.lower():
        findings.append(f"Warning: Revert detected in commit {short_hash}")

    deletions = count_deletions(diff_stat)
    if deletions > _LARGE_DELETION_THRESHOLD:
        findings.append(f"Warning: Large deletion ({deletions} lines) in commit {short_hash}")

    changed = extract_changed_files(diff_stat)
    for name in changed:
        if _base_name(name) in _DEPENDENCY_FILES:
            findings.append(f"Dependency change: {name} modified")

    for name in changed:
        base = _base_name(name).lower()
        if any(pattern in base for pattern in _CONFIG_PATTERNS):
            findings.append(f"Config change: {name} modified")

    for line in diff_content.split("\n") if diff_content else ():
        if line.startswith("+") and not line.startswith("+++"):
            lowered = line.lower()
            if "todo" in lowered or "fixme" in lowered or "hack" in lowered:
                findings.append(f"Code debt marker added: {line[:80].strip()}")
                break

    return findings