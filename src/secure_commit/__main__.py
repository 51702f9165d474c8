#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Allow running secure-commit as a module: python -m secure_commit
"""

from secure_commit.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
