# SPDX-License-Identifier: MIT
"""
Directory traversal and multi-file scanning.

Files are discovered depth-first with an explicit stack (entries sorted by
name) and scanned on a thread pool. Results are merged in discovery order, so
a parallel run reports exactly what a sequential run would. Warnings raised
during discovery travel in the same stream as the files, so they keep their
place too.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from secure_commit.core.exceptions import InvalidRootError
from secure_commit.core.findings import ScanResult
from secure_commit.scanner.classifier import FileClassifier
from secure_commit.scanner.engine import FileScan, SecretScanner

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

# A file to scan with its display path, or a warning already produced.
Job = Union[Tuple[Path, str], FileScan]


def default_workers() -> int:
    return os.cpu_count() or 1


class TreeWalker:
    """
    Walks a directory tree and scans every file the classifier accepts.

    Holds no per-scan state; one instance can serve any number of concurrent
    ``walk`` calls on independent roots.
    """

    def __init__(
        self,
        scanner: Optional[SecretScanner] = None,
        classifier: Optional[FileClassifier] = None,
        workers: Optional[int] = None,
        follow_symlinks: bool = False,
        max_files: Optional[int] = None,
    ) -> None:
        self.scanner = scanner or SecretScanner()
        self.classifier = classifier or FileClassifier()
        self.workers = workers or default_workers()
        self.follow_symlinks = follow_symlinks
        self.max_files = max_files

    # -- discovery ---------------------------------------------------
    def iter_files(self, root: Path) -> Iterator[Union[Path, FileScan]]:
        """Yield scannable files under *root* in pre-order, sorted by name.

        An unreadable directory yields a warning-only :class:`FileScan` at the
        point it was met. Entries that cannot be statted are skipped silently.
        """
        visited = {os.path.realpath(root)} if self.follow_symlinks else set()
        stack: List[Tuple[Path, bool]] = [(root, True)]

        while stack:
            path, is_dir = stack.pop()
            if not is_dir:
                yield path
                continue

            try:
                with os.scandir(path) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                msg = f"Could not read directory: {path} - {e.strerror or e}"
                logger.warning(msg)
                yield FileScan(warning=msg)
                continue

            children: List[Tuple[Path, bool]] = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=self.follow_symlinks):
                        if self.classifier.should_ignore_dir(entry.name):
                            continue
                        if self.follow_symlinks:
                            real = os.path.realpath(entry.path)
                            if real in visited:
                                logger.debug("Skipping already visited %s", entry.path)
                                continue
                            visited.add(real)
                        children.append((Path(entry.path), True))
                    elif entry.is_file(follow_symlinks=self.follow_symlinks):
                        if self.classifier.should_scan_file(entry.name):
                            children.append((Path(entry.path), False))
                except OSError as e:
                    logger.debug("Skipping %s: %s", entry.path, e)
                    continue

            # reversed so the first entry is popped first
            stack.extend(reversed(children))

    # -- scanning ----------------------------------------------------
    def walk(self, root: PathLike) -> ScanResult:
        """Scan the tree under *root*.

        Raises:
            InvalidRootError: if *root* does not exist or is not a directory
        """
        root_path = Path(root)
        if not root_path.exists():
            raise InvalidRootError(f"Path not found: {root_path}", root=str(root_path))
        if not root_path.is_dir():
            raise InvalidRootError(f"Not a directory: {root_path}", root=str(root_path))

        result = ScanResult()
        items = _limit(self.iter_files(root_path), self.max_files)
        jobs = (
            item if isinstance(item, FileScan) else (item, item.relative_to(root_path).as_posix())
            for item in items
        )
        self._collect(jobs, result)
        return result

    def scan_files(self, paths: Iterable[PathLike], root: Optional[PathLike] = None) -> ScanResult:
        """Scan an explicit file list (e.g. the staged files of a commit).

        Relative paths are resolved against *root* and reported as given.
        The classifier still decides which files are read; directory pruning
        does not apply.
        """
        base = Path(root) if root is not None else None
        result = ScanResult()
        jobs: List[Job] = []
        for raw in paths:
            given = Path(raw)
            if not self.classifier.should_scan_file(given):
                continue
            full = base / given if base is not None and not given.is_absolute() else given
            if not full.is_file():
                msg = f"Could not read file: {given.as_posix()} - not a regular file"
                logger.warning(msg)
                jobs.append(FileScan(warning=msg))
                continue
            jobs.append((full, given.as_posix()))

        self._collect(_limit(iter(jobs), self.max_files), result)
        return result

    def _collect(self, jobs: Iterable[Job], result: ScanResult) -> None:
        for scan in self._run(jobs):
            if scan.warning:
                result.warnings.append(scan.warning)
            else:
                result.files_scanned += 1
            result.findings.extend(scan.findings)

    def _run(self, jobs: Iterable[Job]) -> Iterator[FileScan]:
        if self.workers <= 1:
            for job in jobs:
                yield self._scan_job(job)
            return
        # Executor.map yields in submission order regardless of completion.
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="scan") as pool:
            yield from pool.map(self._scan_job, jobs)

    def _scan_job(self, job: Job) -> FileScan:
        if isinstance(job, FileScan):
            return job
        path, shown = job
        return self.scanner.scan_file(path, shown)


def _limit(items: Iterator, max_files: Optional[int]) -> Iterator:
    """Pass *items* through until a file beyond *max_files* turns up.

    Warning records are forwarded but not counted.
    """
    if max_files is None:
        yield from items
        return
    count = 0
    for item in items:
        if not isinstance(item, FileScan):
            if count >= max_files:
                msg = f"Stopped after {max_files} files (max_files limit)"
                logger.warning(msg)
                yield FileScan(warning=msg)
                return
            count += 1
        yield item


def scan_tree(
    root: PathLike,
    walker: Optional[TreeWalker] = None,
) -> ScanResult:
    """Scan a whole project directory."""
    return (walker or TreeWalker()).walk(root)


def scan_files(
    paths: Sequence[PathLike],
    root: Optional[PathLike] = None,
    walker: Optional[TreeWalker] = None,
) -> ScanResult:
    """Scan a caller-supplied file list, as the pre-commit hook does."""
    return (walker or TreeWalker()).scan_files(paths, root=root)
