# SPDX-License-Identifier: MIT
"""Git integration: staged/tracked file listing, hooks, .gitignore, cleanup."""
