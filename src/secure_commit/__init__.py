# SPDX-License-Identifier: MIT
"""secure-commit package metadata."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("secure-commit")
except PackageNotFoundError:
    __version__ = "0.1.0"
