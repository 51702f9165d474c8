# SPDX-License-Identifier: MIT
"""Shared value types, errors and redaction helpers."""
