# SPDX-License-Identifier: MIT
"""Secret signature catalog for secure-commit."""

from secure_commit.detectors.catalog import (
    DEFAULT_SIGNATURES,
    PatternCatalog,
    SecretKind,
    SecretSignature,
    default_catalog,
)

__all__ = [
    "DEFAULT_SIGNATURES",
    "PatternCatalog",
    "SecretKind",
    "SecretSignature",
    "default_catalog",
]
