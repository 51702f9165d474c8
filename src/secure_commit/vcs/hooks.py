# SPDX-License-Identifier: MIT
"""
Install and remove the secure-commit git pre-commit hook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from secure_commit.core.exceptions import HookError

logger = logging.getLogger(__name__)

HOOK_MARKER = "secure-commit"

PRE_COMMIT_HOOK = """#!/bin/sh
# secure-commit pre-commit hook
# Blocks commits whose staged files contain secrets.
# Remove with: secure-commit uninstall

if command -v secure-commit >/dev/null 2>&1; then
    exec secure-commit check
fi
exec python3 -m secure_commit check
"""


@dataclass(frozen=True)
class HookStatus:
    installed: bool
    reason: str
    hook_path: Optional[Path] = None


def _hook_path(project_path: str) -> Path:
    git_dir = Path(project_path) / ".git"
    if not git_dir.is_dir():
        raise HookError('Not a git repository. Run "git init" first.')
    return git_dir / "hooks" / "pre-commit"


def _is_our_hook(path: Path) -> bool:
    try:
        return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def check_hook_installation(project_path: str = ".") -> HookStatus:
    try:
        hook = _hook_path(project_path)
    except HookError:
        return HookStatus(installed=False, reason="Not a git repository")

    if not hook.exists():
        return HookStatus(installed=False, reason="No pre-commit hook found")
    if _is_our_hook(hook):
        return HookStatus(installed=True, reason="Installed", hook_path=hook)
    return HookStatus(installed=False, reason="Different hook exists", hook_path=hook)


def install_hook(project_path: str = ".", force: bool = False) -> Path:
    """
    Write the pre-commit hook and make it executable.

    An existing secure-commit hook is left alone unless *force* is set; a
    foreign hook is only overwritten with *force*.

    Returns:
        Path of the hook file

    Raises:
        HookError: if the project is not a git repository, a foreign hook
            exists, or the file cannot be written
    """
    hook = _hook_path(project_path)
    if hook.exists() and not force:
        if _is_our_hook(hook):
            logger.info("Hook already installed: %s", hook)
            return hook
        raise HookError("A different pre-commit hook already exists. Use --force to overwrite.")

    try:
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text(PRE_COMMIT_HOOK, encoding="utf-8")
        hook.chmod(0o755)
    except OSError as e:
        raise HookError(f"Failed to write hook {hook}: {e}")
    logger.info("Installed pre-commit hook: %s", hook)
    return hook


def uninstall_hook(project_path: str = ".") -> bool:
    """
    Remove the hook if secure-commit installed it.

    Returns:
        True if a hook was removed, False if none was present

    Raises:
        HookError: if the hook belongs to another tool or cannot be removed
    """
    hook = _hook_path(project_path)
    if not hook.exists():
        return False
    if not _is_our_hook(hook):
        raise HookError(
            "Pre-commit hook exists but was not installed by secure-commit. Remove manually if needed."
        )
    try:
        hook.unlink()
    except OSError as e:
        raise HookError(f"Failed to remove hook {hook}: {e}")
    logger.info("Removed pre-commit hook: %s", hook)
    return True
