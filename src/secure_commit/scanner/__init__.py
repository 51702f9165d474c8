# SPDX-License-Identifier: MIT
"""Public scanning API for secure-commit.

    from secure_commit.scanner import scan_tree, scan_files

``scan_tree`` walks a project directory; ``scan_files`` scans an explicit
file list such as the staged files of a pending commit.
"""

from secure_commit.scanner.classifier import FileClassifier
from secure_commit.scanner.engine import FileScan, SecretScanner, SignatureMatch
from secure_commit.scanner.walker import TreeWalker, scan_files, scan_tree

__all__ = [
    "FileClassifier",
    "FileScan",
    "SecretScanner",
    "SignatureMatch",
    "TreeWalker",
    "scan_files",
    "scan_tree",
]
