# SPDX-License-Identifier: MIT
"""secure-commit custom exceptions."""

from __future__ import annotations


class SecureCommitError(Exception):
    """Base class for errors that abort a whole invocation."""


class InvalidRootError(SecureCommitError):
    """Raised when a scan root does not exist or is not a directory."""

    def __init__(self, message: str, root: str = None):
        self.root = root
        super().__init__(message)


class ConfigError(SecureCommitError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, config_path: str = None, section: str = None):
        self.config_path = config_path
        self.section = section
        super().__init__(message)

    def __str__(self):
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        if self.section:
            msg += f" (section: {self.section})"
        return msg


class GitError(SecureCommitError):
    """Raised when a git command fails or git is unavailable."""

    def __init__(self, message: str, command: str = None, returncode: int = None):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class HookError(SecureCommitError):
    """Raised when the pre-commit hook cannot be installed or removed."""


class GitignoreError(SecureCommitError):
    """Raised when an existing .gitignore cannot be read."""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)
