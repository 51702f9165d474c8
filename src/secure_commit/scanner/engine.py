# SPDX-License-Identifier: MIT
"""
Secret detection engine.

``SecretScanner`` applies every signature of a :class:`PatternCatalog` to
text content, line by line, and turns matches into :class:`Finding` values.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from secure_commit.core.findings import Finding
from secure_commit.core.redaction import preview_match
from secure_commit.detectors.catalog import PatternCatalog, SecretSignature, default_catalog

logger = logging.getLogger(__name__)

# "\r\n" and "\n" both end a line; a lone "\r" stays part of the line so
# line numbers agree with what editors and git report.
_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class SignatureMatch:
    """A match before a file path is attached. Holds no full secret value."""

    line: int
    signature: SecretSignature
    span: Tuple[int, int]  # column offsets within the line
    preview: str

    def to_finding(self, path: str) -> Finding:
        sig = self.signature
        return Finding(
            path=path,
            line=self.line,
            kind=sig.kind,
            description=sig.description,
            remediation=sig.remediation,
            preview=self.preview,
            severity=sig.severity,
        )


@dataclass(frozen=True)
class FileScan:
    """Outcome of scanning one file: findings, or a warning if it was skipped."""

    findings: Tuple[Finding, ...] = ()
    warning: Optional[str] = None


def split_lines(content: str) -> List[str]:
    return _LINE_BREAK.split(content)


class SecretScanner:
    """Runs a pattern catalog over file content."""

    def __init__(self, catalog: Optional[PatternCatalog] = None) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()

    def scan(self, content: str) -> List[SignatureMatch]:
        """Return every non-overlapping match in *content*.

        Signatures are applied in catalog order; within a signature, lines are
        visited top to bottom and each line yields all of its matches, so two
        identical secrets on one line produce two matches.
        """
        if not content:
            return []
        lines = split_lines(content)
        matches: List[SignatureMatch] = []
        for sig in self.catalog:
            for lineno, line in enumerate(lines, start=1):
                for m in sig.pattern.finditer(line):
                    matches.append(
                        SignatureMatch(
                            line=lineno,
                            signature=sig,
                            span=m.span(),
                            preview=preview_match(m.group(0)),
                        )
                    )
        return matches

    def scan_text(self, content: str, path: str) -> List[Finding]:
        return [m.to_finding(path) for m in self.scan(content)]

    def scan_file(self, file_path: Path, display_path: Optional[str] = None) -> FileScan:
        """Read and scan one file.

        Read and decode problems are reported through ``FileScan.warning``
        instead of raising, so a single bad file never stops a run.
        """
        shown = display_path if display_path is not None else str(file_path)
        try:
            blob = Path(file_path).read_bytes()
        except OSError as e:
            msg = f"Could not read file: {shown} - {e.strerror or e}"
            logger.warning(msg)
            return FileScan(warning=msg)

        try:
            text = blob.decode("utf-8")
        except UnicodeDecodeError:
            msg = f"Skipped non-UTF-8 file: {shown}"
            logger.warning(msg)
            return FileScan(warning=msg)

        findings = tuple(self.scan_text(text, shown))
        if findings:
            logger.debug("%s: %d finding(s)", shown, len(findings))
        return FileScan(findings=findings)
