# SPDX-License-Identifier: MIT
"""
Thin wrapper around the ``git`` executable.

The scanning core never calls git itself; the CLI asks this gateway for the
staged or tracked file lists and hands them to the scanner.
"""

from __future__ import annotations

import fnmatch
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

from secure_commit.core.exceptions import GitError

logger = logging.getLogger(__name__)

# Basenames that should never be tracked, whatever their content.
SENSITIVE_FILES = [
    ".env*",
    "secrets.json",
    "config.json",
    "credentials.json",
    "private.key",
    "*.pem",
    "id_rsa",
    "id_dsa",
]


@dataclass(frozen=True)
class FileStatus:
    staged: bool = False
    unstaged: bool = False
    untracked: bool = False

    @property
    def dirty(self) -> bool:
        return self.staged or self.unstaged


class GitGateway:
    """Runs git commands inside *project_root*."""

    def __init__(self, project_root: str = ".") -> None:
        self.root = Path(project_root)

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            proc = subprocess.run(cmd, cwd=self.root, capture_output=True, text=True)
        except FileNotFoundError:
            raise GitError("git executable not found", command=" ".join(cmd))
        if proc.returncode != 0:
            raise GitError(
                proc.stderr.strip() or f"{' '.join(cmd)} failed with code {proc.returncode}",
                command=" ".join(cmd),
                returncode=proc.returncode,
            )
        return proc.stdout

    @staticmethod
    def _split_z(output: str) -> List[str]:
        return [item for item in output.split("\0") if item]

    def is_repository(self) -> bool:
        try:
            self._run("rev-parse", "--git-dir")
        except GitError:
            return False
        return True

    def top_level(self) -> Path:
        """Working tree root; staged paths are relative to it."""
        return Path(self._run("rev-parse", "--show-toplevel").strip())

    def staged_files(self) -> List[str]:
        """Files added, copied or modified in the index (deletions excluded).

        Paths are relative to :meth:`top_level`, not to the project root.
        """
        out = self._run("diff", "--cached", "--name-only", "--diff-filter=ACM", "-z")
        return self._split_z(out)

    def tracked_files(self) -> List[str]:
        return self._split_z(self._run("ls-files", "-z"))

    def file_status(self, files: Iterable[str]) -> Dict[str, FileStatus]:
        """
        Parse ``git status --porcelain`` for *files*.

        Files git does not mention are clean. If status cannot be read every
        file is reported as having unstaged changes, so callers err on the
        side of not touching it.
        """
        wanted = list(files)
        try:
            out = self._run("status", "--porcelain", "-z")
        except GitError as e:
            logger.warning("git status failed: %s", e)
            return {f: FileStatus(unstaged=True) for f in wanted}

        parsed: Dict[str, FileStatus] = {}
        entries = self._split_z(out)
        i = 0
        while i < len(entries):
            entry = entries[i]
            code, name = entry[:2], entry[3:]
            # renames and copies carry the original path as the next entry
            if code[0] in "RC":
                i += 1
            i += 1
            parsed[name] = FileStatus(
                staged=code[0] not in " ?",
                unstaged=code[1] not in " ?",
                untracked=code == "??",
            )
        return {f: parsed.get(f, FileStatus()) for f in wanted}

    def remove_from_index(self, path: str) -> None:
        """``git rm --cached``: stop tracking *path* but keep it on disk."""
        self._run("rm", "--cached", "--quiet", "--", path)


def is_sensitive_filename(name: str) -> bool:
    base = Path(name).name
    return any(fnmatch.fnmatchcase(base, pattern) for pattern in SENSITIVE_FILES)


def find_tracked_sensitive_files(gateway: GitGateway) -> List[str]:
    """Tracked files whose basename matches :data:`SENSITIVE_FILES`.

    Returns an empty list outside a git repository.
    """
    try:
        tracked = gateway.tracked_files()
    except GitError as e:
        logger.debug("Cannot list tracked files: %s", e)
        return []
    return [f for f in tracked if is_sensitive_filename(f)]
