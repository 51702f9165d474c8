# SPDX-License-Identifier: MIT
"""
Scanner configuration loader for secure-commit.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from secure_commit.core.exceptions import ConfigError
from secure_commit.core.findings import Severity
from secure_commit.detectors.catalog import PatternCatalog, SecretSignature, default_catalog
from secure_commit.scanner.classifier import FileClassifier
from secure_commit.scanner.engine import SecretScanner
from secure_commit.scanner.walker import TreeWalker

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".secure-commit.yml", ".secure-commit.yaml"]

_KNOWN_KEYS = {
    "extra_extensions",
    "extra_ignore_dirs",
    "extra_signatures",
    "disabled_signatures",
    "workers",
    "max_files",
    "follow_symlinks",
}

_SIGNATURE_FIELDS = {"kind", "pattern", "description", "remediation", "severity", "ignore_case"}


def load_scanner_config(config_path: Optional[str] = None, repo_root: str = ".") -> Dict[str, Any]:
    """
    Load scanner configuration following the search order.

    Args:
        config_path: Explicit config path from --config CLI flag
        repo_root: Project root searched for .secure-commit.yml/.secure-commit.yaml

    Returns:
        Dictionary containing scanner configuration with defaults applied

    Raises:
        ConfigError: If config file is malformed or an explicitly provided config is missing
    """
    repo_path = Path(repo_root).resolve()

    # 1. If CLI --config provided -> load it
    if config_path:
        config_abs_path = Path(config_path).resolve()
        if not config_abs_path.exists():
            raise ConfigError(
                f"Specified config file not found: {config_abs_path}",
                config_path=str(config_abs_path),
            )
        return _load_yaml_config(config_abs_path)

    # 2. Look for .secure-commit.yml or .secure-commit.yaml at project root
    for config_name in CONFIG_FILENAMES:
        config_file = repo_path / config_name
        if config_file.exists():
            return _load_yaml_config(config_file)

    # 3. Use built-in defaults
    logger.debug("Using default scanner config")
    return get_default_scanner_config()


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load and validate YAML config file."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse config file: {e}", config_path=str(config_path))

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise ConfigError("Config must be a mapping", config_path=str(config_path))

    try:
        _validate_scanner_config(config)
    except ConfigError as e:
        e.config_path = str(config_path)
        raise

    logger.info("Loaded config: %s", config_path)
    return _apply_scanner_defaults(config)


def _validate_scanner_config(config: Dict[str, Any]) -> None:
    unknown = sorted(set(config) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    for key in ("extra_extensions", "extra_ignore_dirs", "disabled_signatures"):
        value = config.get(key)
        if value is not None and (
            not isinstance(value, list) or not all(isinstance(v, str) for v in value)
        ):
            raise ConfigError(f"{key} must be a list of strings", section=key)

    workers = config.get("workers")
    if workers is not None and (not isinstance(workers, int) or isinstance(workers, bool) or workers < 1):
        raise ConfigError("workers must be a positive integer", section="workers")

    max_files = config.get("max_files")
    if max_files is not None and (not isinstance(max_files, int) or isinstance(max_files, bool) or max_files < 1):
        raise ConfigError("max_files must be a positive integer or null", section="max_files")

    if config.get("follow_symlinks") is not None and not isinstance(config["follow_symlinks"], bool):
        raise ConfigError("follow_symlinks must be true or false", section="follow_symlinks")

    signatures = config.get("extra_signatures")
    if signatures is None:
        return
    if not isinstance(signatures, list):
        raise ConfigError("extra_signatures must be a list", section="extra_signatures")
    # A built-in kind can only be redefined once it is disabled.
    disabled = set(config.get("disabled_signatures") or [])
    taken = {kind for kind in default_catalog().kinds() if kind not in disabled}
    for entry in signatures:
        _validate_signature(entry)
        kind = str(entry["kind"])
        if kind in taken:
            raise ConfigError(f"Duplicate signature kind: {kind}", section="extra_signatures")
        taken.add(kind)


def _validate_signature(entry: Any) -> None:
    """Validate a single extra_signatures entry."""
    if not isinstance(entry, dict):
        raise ConfigError("Each signature must be a mapping", section="extra_signatures")

    unknown = sorted(str(k) for k in set(entry) - _SIGNATURE_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown signature fields: {', '.join(unknown)}", section="extra_signatures")

    required_fields = ["kind", "pattern", "description", "remediation", "severity"]
    for field in required_fields:
        if field not in entry:
            raise ConfigError(f"Signature missing required field: {field}", section="extra_signatures")

    try:
        Severity(str(entry["severity"]).lower())
    except ValueError:
        raise ConfigError(f"Invalid severity: {entry['severity']}", section="extra_signatures")

    try:
        re.compile(entry["pattern"])
    except (re.error, TypeError) as e:
        raise ConfigError(f"Invalid pattern for {entry['kind']}: {e}", section="extra_signatures")

    if entry.get("ignore_case") is not None and not isinstance(entry["ignore_case"], bool):
        raise ConfigError(
            f"ignore_case for {entry['kind']} must be true or false", section="extra_signatures"
        )


def _apply_scanner_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply default values to scanner configuration."""
    defaults = get_default_scanner_config()
    for key, value in defaults.items():
        if config.get(key) is None:
            config[key] = value
    return config


def get_default_scanner_config() -> Dict[str, Any]:
    """
    Get the default scanner configuration.

    Returns:
        Dictionary with default scanner settings
    """
    return {
        "extra_extensions": [],
        "extra_ignore_dirs": [],
        "extra_signatures": [],
        "disabled_signatures": [],
        "workers": None,
        "max_files": None,
        "follow_symlinks": False,
    }


def build_catalog(config: Dict[str, Any]) -> PatternCatalog:
    """Default catalog, extended and filtered by *config*."""
    catalog = default_catalog()
    disabled = config.get("disabled_signatures") or []
    if disabled:
        catalog = catalog.without(disabled)
    extra = [
        SecretSignature.compile(
            kind=str(entry["kind"]),
            pattern=entry["pattern"],
            description=entry["description"],
            remediation=entry["remediation"],
            severity=str(entry["severity"]).lower(),
            flags=re.IGNORECASE if entry.get("ignore_case") else 0,
        )
        for entry in config.get("extra_signatures") or []
    ]
    if extra:
        try:
            catalog = catalog.extended(extra)
        except ValueError as e:
            raise ConfigError(str(e), section="extra_signatures")
    return catalog


def build_walker(config: Dict[str, Any]) -> TreeWalker:
    """Create a :class:`TreeWalker` wired according to *config*."""
    classifier = FileClassifier.with_extras(
        extra_extensions=config.get("extra_extensions") or [],
        extra_ignore_dirs=config.get("extra_ignore_dirs") or [],
    )
    return TreeWalker(
        scanner=SecretScanner(build_catalog(config)),
        classifier=classifier,
        workers=config.get("workers"),
        follow_symlinks=bool(config.get("follow_symlinks")),
        max_files=config.get("max_files"),
    )


def create_default_config_template() -> str:
    """
    Create a minimal .secure-commit.yml template with commented examples.

    Returns:
        YAML string with default configuration template
    """
    return """# secure-commit scanner configuration

# Extra file extensions to scan, on top of the built-in list
extra_extensions: []
  # - ".toml"
  # - ".ini"

# Extra directory names never descended into
extra_ignore_dirs: []
  # - "fixtures"

# Additional secret signatures
extra_signatures: []
  # - kind: "slack_webhook"
  #   pattern: "https://hooks\\\\.slack\\\\.com/services/[A-Za-z0-9/]+"
  #   description: "Slack webhook URL"
  #   remediation: "Move to .env file"
  #   severity: "medium"
  #   ignore_case: false

# Built-in signatures to disable by kind
disabled_signatures: []
  # - "stripe_test"

# Scan worker threads (default: number of CPUs)
# workers: 4

# Stop after this many files (default: no limit)
# max_files: 50000

# Follow symbolic links while walking (default: false)
follow_symlinks: false
"""
