# SPDX-License-Identifier: MIT
"""
Central redaction utilities for secure-commit.

Every place that shows a matched secret (console, JSON, SARIF, logs) goes
through :func:`preview_match` so the amount of leaked material stays bounded.
"""

from __future__ import annotations

PREVIEW_LENGTH = 12
ELLIPSIS = "..."
MAX_PREVIEW_LENGTH = PREVIEW_LENGTH + len(ELLIPSIS)


def preview_match(secret: str) -> str:
    """
    Return the first 12 characters of *secret* followed by ``...``.

    The marker is appended even for short matches so a preview can never be
    mistaken for the complete value.

    Args:
        secret: The matched text

    Returns:
        Bounded, non-reversible preview string
    """
    return secret[:PREVIEW_LENGTH] + ELLIPSIS
