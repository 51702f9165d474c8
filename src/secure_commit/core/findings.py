# SPDX-License-Identifier: MIT
"""Finding data structures and utilities for secure-commit."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Iterator


class Severity(str, Enum):
    """Presentation priority of a finding. Never used to filter."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, HIGH first."""
        return _SEVERITY_RANK[self]

    @classmethod
    def ordered(cls) -> List["Severity"]:
        return sorted(cls, key=lambda s: s.rank)


_SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


@dataclass(frozen=True)
class Finding:
    """A single detected secret in a file."""

    path: str  # path as reported to the user (root-relative for tree scans)
    line: int  # 1-based line number
    kind: str  # signature kind (e.g. 'stripe_live', 'aws_access')
    description: str
    remediation: str
    preview: str  # first 12 chars of the match + '...'
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        """Convert Finding to dictionary format."""
        return {
            "id": self.kind,
            "path": self.path,
            "line": self.line,
            "match": self.preview,
            "severity": self.severity.value,
            "description": self.description,
            "remediation": self.remediation,
        }


@dataclass
class ScanResult:
    """
    Ordered findings of one scan invocation plus non-fatal warnings.

    ``findings`` keeps traversal order (file, then the order the scanner
    produced them). Severity grouping is done on demand by :meth:`by_severity`
    and never touches the underlying list.
    """

    findings: List[Finding] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    files_scanned: int = 0

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def __bool__(self) -> bool:
        return bool(self.findings)

    @property
    def total(self) -> int:
        return len(self.findings)

    @property
    def exit_code(self) -> int:
        """1 when anything was found, 0 otherwise."""
        return 1 if self.findings else 0

    def by_severity(self) -> Dict[Severity, List[Finding]]:
        """Group findings HIGH, MEDIUM, LOW; empty groups are omitted."""
        grouped: Dict[Severity, List[Finding]] = {}
        for severity in Severity.ordered():
            bucket = [f for f in self.findings if f.severity is severity]
            if bucket:
                grouped[severity] = bucket
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "files_scanned": self.files_scanned,
            "findings": [f.to_dict() for f in self.findings],
            "warnings": list(self.warnings),
        }
