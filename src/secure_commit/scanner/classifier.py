# SPDX-License-Identifier: MIT
from __future__ import annotations

import os
from pathlib import PurePath
from typing import FrozenSet, Iterable, Optional, Union

# Only these extensions are read. Anything else (archives, images, compiled
# artifacts, unknown binaries) is never scanned, even if it holds a secret.
SCAN_EXTENSIONS = frozenset(
    {
        ".js",
        ".ts",
        ".jsx",
        ".tsx",
        ".py",
        ".rb",
        ".php",
        ".java",
        ".env",
        ".json",
        ".yaml",
        ".yml",
        ".txt",
        ".md",
        ".config",
    }
)

IGNORE_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "__pycache__",
        "vendor",
        ".venv",
        "env",
        "target",
    }
)


def _normalize_ext(ext: str) -> str:
    ext = ext.strip()
    return ext if ext.startswith(".") else "." + ext


class FileClassifier:
    """Decides which files are scanned and which directories are pruned."""

    def __init__(
        self,
        extensions: Optional[Iterable[str]] = None,
        ignore_dirs: Optional[Iterable[str]] = None,
    ) -> None:
        self.extensions: FrozenSet[str] = (
            frozenset(_normalize_ext(e) for e in extensions)
            if extensions is not None
            else SCAN_EXTENSIONS
        )
        self.ignore_dirs: FrozenSet[str] = (
            frozenset(ignore_dirs) if ignore_dirs is not None else IGNORE_DIRS
        )

    @classmethod
    def with_extras(
        cls,
        extra_extensions: Iterable[str] = (),
        extra_ignore_dirs: Iterable[str] = (),
    ) -> "FileClassifier":
        """Default tables extended (never replaced) by the given entries."""
        return cls(
            extensions=SCAN_EXTENSIONS | {_normalize_ext(e) for e in extra_extensions},
            ignore_dirs=IGNORE_DIRS | set(extra_ignore_dirs),
        )

    def should_scan_file(self, path: Union[str, os.PathLike]) -> bool:
        name = PurePath(path).name
        if name.startswith(".env"):
            return True
        # os.path.splitext treats a leading dot as part of the name, so
        # ".babelrc" has no extension, matching the dotfile rule above.
        return os.path.splitext(name)[1] in self.extensions

    def should_ignore_dir(self, name: str) -> bool:
        return name in self.ignore_dirs

    def should_descend(self, name: str) -> bool:
        return not self.should_ignore_dir(name)
