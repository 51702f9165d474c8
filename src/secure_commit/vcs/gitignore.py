# SPDX-License-Identifier: MIT
"""
.gitignore templating per detected framework.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from secure_commit.core.exceptions import GitignoreError

GITIGNORE_TEMPLATES: Dict[str, List[str]] = {
    "node": [".env*", "node_modules/", ".DS_Store", "npm-debug.log*", "dist/", "build/", "*.log"],
    "python": [".env*", "__pycache__/", "*.pyc", "*.pyo", "*.pyd", ".Python", "venv/", "env/", "pip-log.txt"],
    "php": [".env*", "vendor/", "*.log", ".DS_Store"],
    "ruby": [".env*", ".bundle/", "vendor/", "*.log", ".DS_Store"],
    "java": [".env*", "target/", "*.class", "*.log", ".DS_Store"],
    "generic": [".env*", "*.log", ".DS_Store", "secrets.json", "config.json"],
}

SECURITY_PATTERNS = [".env*", "*.log", ".DS_Store"]
ESSENTIAL_PATTERNS = [".env*", "*.log"]

_FRAMEWORK_MARKERS = [
    ("node", ["package.json"]),
    ("python", ["requirements.txt", "Pipfile", "pyproject.toml"]),
    ("php", ["composer.json"]),
    ("ruby", ["Gemfile"]),
    ("java", ["pom.xml", "build.gradle"]),
]

_ENV_PATTERNS = {".env", ".env*", ".env.*"}


def detect_frameworks(project_path: str = ".") -> List[str]:
    """Frameworks whose marker files exist at the project root."""
    root = Path(project_path)
    found = [name for name, markers in _FRAMEWORK_MARKERS if any((root / m).exists() for m in markers)]
    return found or ["generic"]


def normalize_pattern(pattern: str) -> str:
    normalized = pattern.strip()
    if normalized.startswith("!"):
        return normalized
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def patterns_equivalent(a: str, b: str) -> bool:
    # ".env*" covers ".env" and ".env.*"
    if a in _ENV_PATTERNS and b in _ENV_PATTERNS:
        return a == ".env*" or b == ".env*" or a == b
    return a.rstrip("/") == b.rstrip("/")


class GitignoreFile:
    """A parsed .gitignore that can be extended and rewritten safely."""

    def __init__(self, file_path: Path) -> None:
        self.file_path = Path(file_path)
        self.exists = self.file_path.exists()
        self.lines: List[str] = []
        self.patterns: Set[str] = set()
        self.original_content = ""
        if self.exists:
            self.load()

    def load(self) -> None:
        try:
            self.original_content = self.file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise GitignoreError(
                f"{self.file_path} is not valid UTF-8 (byte {e.start}); fix or re-encode it first",
                path=str(self.file_path),
            ) from e
        except OSError as e:
            raise GitignoreError(
                f"Could not read {self.file_path}: {e.strerror or e}", path=str(self.file_path)
            ) from e
        self.lines = self.original_content.splitlines()
        for line in self.lines:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                self.patterns.add(normalize_pattern(stripped))

    def has_pattern(self, pattern: str) -> bool:
        normalized = normalize_pattern(pattern)
        if normalized in self.patterns:
            return True
        return any(patterns_equivalent(existing, normalized) for existing in self.patterns)

    def add_patterns(self, new_patterns: Sequence[str], section_title: Optional[str] = None) -> bool:
        """Append the patterns not already covered. Returns True if anything changed."""
        to_add = [p for p in new_patterns if not self.has_pattern(p)]
        if not to_add:
            return False

        if self.lines and self.lines[-1].strip():
            self.lines.append("")
        if section_title:
            self.lines.append(f"# {section_title}")
        self.lines.extend(to_add)
        self.patterns.update(normalize_pattern(p) for p in to_add)
        return True

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"

    def save(self) -> bool:
        """Write atomically via a temp file. Returns False when nothing changed."""
        content = self.render()
        if self.exists and content.rstrip("\n") == self.original_content.rstrip("\r\n"):
            return False

        tmp = self.file_path.with_name(self.file_path.name + ".tmp")
        try:
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, self.file_path)
        except OSError:
            if tmp.exists():
                tmp.unlink()
            raise
        self.exists = True
        self.original_content = content
        return True


@dataclass
class GitignoreUpdate:
    frameworks: List[str]
    added: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    updated: bool = False


@dataclass
class GitignoreValidation:
    valid: bool
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def patterns_for(frameworks: Sequence[str]) -> List[str]:
    """Template patterns for *frameworks* plus the security patterns, deduplicated in order."""
    ordered: List[str] = []
    for framework in frameworks:
        for pattern in GITIGNORE_TEMPLATES.get(framework, GITIGNORE_TEMPLATES["generic"]):
            if pattern not in ordered:
                ordered.append(pattern)
    for pattern in SECURITY_PATTERNS:
        if pattern not in ordered:
            ordered.append(pattern)
    return ordered


def update_gitignore(frameworks: Sequence[str], project_path: str = ".") -> GitignoreUpdate:
    gitignore = GitignoreFile(Path(project_path) / ".gitignore")
    result = GitignoreUpdate(frameworks=list(frameworks))
    for pattern in patterns_for(frameworks):
        (result.skipped if gitignore.has_pattern(pattern) else result.added).append(pattern)

    if result.added:
        gitignore.add_patterns(result.added, f"secure-commit - {', '.join(frameworks)} patterns")
        result.updated = gitignore.save()
    return result


def preview_gitignore_changes(frameworks: Sequence[str], project_path: str = ".") -> GitignoreUpdate:
    """Same as :func:`update_gitignore` without writing anything."""
    gitignore = GitignoreFile(Path(project_path) / ".gitignore")
    result = GitignoreUpdate(frameworks=list(frameworks))
    for pattern in patterns_for(frameworks):
        (result.skipped if gitignore.has_pattern(pattern) else result.added).append(pattern)
    return result


def validate_gitignore(frameworks: Sequence[str], project_path: str = ".") -> GitignoreValidation:
    path = Path(project_path) / ".gitignore"
    if not path.exists():
        return GitignoreValidation(
            valid=False,
            issues=["No .gitignore file found"],
            suggestions=["Run `secure-commit init` to create .gitignore"],
        )

    gitignore = GitignoreFile(path)
    issues: List[str] = []
    suggestions: List[str] = []
    for pattern in ESSENTIAL_PATTERNS:
        if not gitignore.has_pattern(pattern):
            issues.append(f"Missing pattern: {pattern}")
            suggestions.append(f"Add {pattern} to .gitignore")

    for framework in frameworks:
        missing = [p for p in GITIGNORE_TEMPLATES.get(framework, []) if not gitignore.has_pattern(p)]
        if missing:
            issues.append(f"Missing {framework} patterns: {', '.join(missing)}")
            suggestions.append(f"Add {framework}-specific patterns")

    return GitignoreValidation(valid=not issues, issues=issues, suggestions=suggestions)
