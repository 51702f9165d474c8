# SPDX-License-Identifier: MIT
"""
Secret signature catalog.

The catalog is the single extension point for detection: adding a signature
here (or through ``extra_signatures`` in the config file) is all it takes for
the scanner to report a new kind of credential.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple, Union

from secure_commit.core.findings import Severity


class SecretKind(str, Enum):
    """Kinds of credentials shipped in the default catalog."""

    STRIPE_LIVE = "stripe_live"
    STRIPE_TEST = "stripe_test"
    OPENAI = "openai"
    AWS_ACCESS = "aws_access"
    GITHUB_TOKEN = "github_token"
    GOOGLE_API = "google_api"
    JWT_SECRET = "jwt_secret"
    DATABASE_URL = "database_url"


@dataclass(frozen=True)
class SecretSignature:
    """One named pattern plus the guidance shown when it matches."""

    kind: str
    pattern: "re.Pattern[str]"
    description: str
    remediation: str
    severity: Severity

    @classmethod
    def compile(
        cls,
        kind: Union[str, SecretKind],
        pattern: str,
        description: str,
        remediation: str,
        severity: Union[str, Severity],
        flags: int = 0,
    ) -> "SecretSignature":
        """Build a signature from a raw regex string."""
        if isinstance(kind, SecretKind):
            kind = kind.value
        return cls(
            kind=kind,
            pattern=re.compile(pattern, flags),
            description=description,
            remediation=remediation,
            severity=Severity(severity),
        )


class PatternCatalog:
    """Immutable, ordered collection of :class:`SecretSignature`.

    Iteration order is the matching order used by the scanner. It has no
    influence on how findings are grouped for display.
    """

    def __init__(self, signatures: Iterable[SecretSignature]) -> None:
        sigs = tuple(signatures)
        seen = set()
        for sig in sigs:
            if sig.kind in seen:
                raise ValueError(f"Duplicate signature kind: {sig.kind}")
            seen.add(sig.kind)
        self._signatures: Tuple[SecretSignature, ...] = sigs

    def signatures(self) -> Tuple[SecretSignature, ...]:
        return self._signatures

    def kinds(self) -> Tuple[str, ...]:
        return tuple(sig.kind for sig in self._signatures)

    def get(self, kind: Union[str, SecretKind]) -> Optional[SecretSignature]:
        if isinstance(kind, SecretKind):
            kind = kind.value
        for sig in self._signatures:
            if sig.kind == kind:
                return sig
        return None

    def extended(self, extra: Iterable[SecretSignature]) -> "PatternCatalog":
        """Return a new catalog with *extra* appended after the current ones."""
        return PatternCatalog(self._signatures + tuple(extra))

    def without(self, kinds: Iterable[str]) -> "PatternCatalog":
        """Return a new catalog minus the given kinds."""
        drop = {k.value if isinstance(k, SecretKind) else k for k in kinds}
        return PatternCatalog(s for s in self._signatures if s.kind not in drop)

    def __iter__(self) -> Iterator[SecretSignature]:
        return iter(self._signatures)

    def __len__(self) -> int:
        return len(self._signatures)

    def __contains__(self, kind) -> bool:
        return self.get(kind) is not None

    def __repr__(self) -> str:
        return f"PatternCatalog({', '.join(self.kinds())})"


# The JWT rule is a naming heuristic, not a token format: a quoted key that
# mentions both "jwt" and "secret", assigned a quoted literal of 32+ chars.
_JWT_SECRET_PATTERN = (
    r"""['"](.*jwt.*secret.*|.*secret.*jwt.*)['"]\s*[=:]\s*['"][^'"]{32,}['"]"""
)

DEFAULT_SIGNATURES: Tuple[SecretSignature, ...] = (
    SecretSignature.compile(
        SecretKind.STRIPE_LIVE,
        r"sk_live_[a-zA-Z0-9]{24}",
        "Stripe live API key",
        "Move to .env file - this exposes real payment processing!",
        Severity.HIGH,
    ),
    SecretSignature.compile(
        SecretKind.STRIPE_TEST,
        r"sk_test_[a-zA-Z0-9]{24}",
        "Stripe test API key",
        "Move to .env file for consistency",
        Severity.LOW,
    ),
    SecretSignature.compile(
        SecretKind.OPENAI,
        r"sk-[a-zA-Z0-9]{48}",
        "OpenAI API key",
        "Move to .env file - this costs money per request!",
        Severity.MEDIUM,
    ),
    SecretSignature.compile(
        SecretKind.AWS_ACCESS,
        r"AKIA[0-9A-Z]{16}",
        "AWS Access Key",
        "Move to .env file - this can access your entire AWS account!",
        Severity.HIGH,
    ),
    SecretSignature.compile(
        SecretKind.GITHUB_TOKEN,
        r"ghp_[a-zA-Z0-9]{36}",
        "GitHub Personal Access Token",
        "Move to .env file - this can access your repos!",
        Severity.MEDIUM,
    ),
    SecretSignature.compile(
        SecretKind.GOOGLE_API,
        r"AIza[0-9A-Za-z_\-]{35}",
        "Google API Key",
        "Move to .env file",
        Severity.LOW,
    ),
    SecretSignature.compile(
        SecretKind.JWT_SECRET,
        _JWT_SECRET_PATTERN,
        "JWT Secret",
        "Move to .env file - this compromises all your user sessions!",
        Severity.HIGH,
        flags=re.IGNORECASE,
    ),
    SecretSignature.compile(
        SecretKind.DATABASE_URL,
        r"""(mongodb|postgres|mysql)://[^'"\s]+""",
        "Database connection string",
        "Move to .env file - this exposes your database!",
        Severity.HIGH,
    ),
)

_DEFAULT_CATALOG = PatternCatalog(DEFAULT_SIGNATURES)


def default_catalog() -> PatternCatalog:
    """Return the built-in catalog (shared, read-only)."""
    return _DEFAULT_CATALOG
