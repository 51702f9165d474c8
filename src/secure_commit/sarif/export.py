# SPDX-License-Identifier: MIT
from __future__ import annotations

from typing import Dict, Any

from secure_commit import __version__
from secure_commit.core.findings import ScanResult, Severity

INFORMATION_URI = "https://github.com/Umoren/secure-commit"

_LEVELS = {Severity.HIGH: "error", Severity.MEDIUM: "warning", Severity.LOW: "note"}


def build_sarif(result: ScanResult) -> Dict[str, Any]:
    """Render a :class:`ScanResult` as a SARIF 2.1.0 log."""
    rule_ids: Dict[str, int] = {}
    rules = []
    results = []

    for f in result.findings:
        if f.kind not in rule_ids:
            rule_ids[f.kind] = len(rules)
            rules.append(
                {
                    "id": f.kind,
                    "name": f.kind,
                    "shortDescription": {"text": f.description},
                    "help": {"text": f.remediation},
                    "defaultConfiguration": {"level": _LEVELS[f.severity]},
                }
            )

        results.append(
            {
                "ruleId": f.kind,
                "ruleIndex": rule_ids[f.kind],
                "level": _LEVELS[f.severity],
                "message": {"text": f"{f.description} ({f.preview})"},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": f.path},
                            "region": {"startLine": max(1, f.line)},
                        }
                    }
                ],
                "properties": {"severity": f.severity.value},
            }
        )

    return {
        "version": "2.1.0",
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "secure-commit",
                        "version": __version__,
                        "informationUri": INFORMATION_URI,
                        "rules": rules,
                    }
                },
                "results": results,
            }
        ],
    }
