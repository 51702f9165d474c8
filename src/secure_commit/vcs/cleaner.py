# SPDX-License-Identifier: MIT
"""
Stop tracking sensitive files that are already committed.

Files are removed from the index with ``git rm --cached`` and stay on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from secure_commit.core.exceptions import GitError
from secure_commit.vcs.gateway import GitGateway, find_tracked_sensitive_files

logger = logging.getLogger(__name__)


@dataclass
class CleanupItem:
    file: str
    action: str  # "remove" or "skip"
    reason: str = ""


@dataclass
class CleanupResult:
    removed: List[CleanupItem] = field(default_factory=list)
    skipped: List[CleanupItem] = field(default_factory=list)
    failed: List[CleanupItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return not self.failed


@dataclass
class SafetyReport:
    safe: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    files_found: int = 0


def plan_cleanup(gateway: GitGateway, force: bool = False) -> List[CleanupItem]:
    """Decide per tracked sensitive file whether it can be untracked.

    Files with staged or unstaged changes are skipped unless *force* is set.
    """
    tracked = find_tracked_sensitive_files(gateway)
    if not tracked:
        return []
    statuses = gateway.file_status(tracked)
    plan: List[CleanupItem] = []
    for f in tracked:
        status = statuses[f]
        if status.staged and not force:
            plan.append(CleanupItem(f, "skip", "has staged changes - commit changes first or use --force"))
        elif status.unstaged and not force:
            plan.append(CleanupItem(f, "skip", "has unstaged changes - commit changes first or use --force"))
        else:
            plan.append(CleanupItem(f, "remove"))
    return plan


def remove_tracked_sensitive_files(
    gateway: GitGateway, dry_run: bool = False, force: bool = False
) -> CleanupResult:
    """
    Untrack every sensitive file the plan allows.

    Per-file ``git rm`` failures are collected in ``failed``; only a missing
    repository raises.

    Raises:
        GitError: if the project is not a git repository
    """
    if not gateway.is_repository():
        raise GitError("Not a git repository")

    result = CleanupResult(dry_run=dry_run)
    plan = plan_cleanup(gateway, force=force)
    result.skipped = [item for item in plan if item.action == "skip"]
    if result.skipped:
        result.warnings.append(f"{len(result.skipped)} files have uncommitted changes")
        result.warnings.append("Use --force to remove files with uncommitted changes")

    for item in plan:
        if item.action != "remove":
            continue
        if dry_run:
            result.removed.append(CleanupItem(item.file, "remove", "would remove"))
            continue
        try:
            gateway.remove_from_index(item.file)
        except GitError as e:
            logger.warning("Failed to untrack %s: %s", item.file, e)
            result.failed.append(CleanupItem(item.file, "remove", str(e)))
        else:
            result.removed.append(CleanupItem(item.file, "remove", "removed from tracking"))
    return result


def validate_cleanup_safety(gateway: GitGateway) -> SafetyReport:
    if not gateway.is_repository():
        return SafetyReport(safe=False, issues=["Not a git repository"])

    tracked = find_tracked_sensitive_files(gateway)
    report = SafetyReport(safe=True, files_found=len(tracked))
    if not tracked:
        return report

    statuses = gateway.file_status(tracked)
    dirty = [f for f in tracked if statuses[f].dirty]
    for f in dirty:
        report.warnings.append(f"{f} has uncommitted changes")
    if dirty:
        report.warnings.append("Consider committing changes before cleanup")

    for f in tracked:
        if not (Path(gateway.root) / f).exists():
            report.warnings.append(f"{f} is tracked but doesn't exist on disk")
    return report
