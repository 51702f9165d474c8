"""Tests for framework detection and .gitignore editing."""

import pytest

from secure_commit.core.exceptions import GitignoreError
from secure_commit.vcs.gitignore import (
    GitignoreFile,
    detect_frameworks,
    patterns_equivalent,
    patterns_for,
    preview_gitignore_changes,
    update_gitignore,
    validate_gitignore,
)


def test_detect_frameworks(tmp_path):
    assert detect_frameworks(str(tmp_path)) == ["generic"]

    (tmp_path / "package.json").write_text("{}")
    (tmp_path / "pyproject.toml").write_text("")
    assert detect_frameworks(str(tmp_path)) == ["node", "python"]


def test_pattern_equivalence():
    assert patterns_equivalent(".env*", ".env")
    assert patterns_equivalent(".env.*", ".env*")
    assert not patterns_equivalent(".env", ".env.*")
    assert patterns_equivalent("dist/", "dist")
    assert not patterns_equivalent("dist", "build")


def test_patterns_for_adds_security_patterns_once():
    patterns = patterns_for(["node", "python"])
    assert patterns.count(".env*") == 1
    assert "node_modules/" in patterns
    assert "__pycache__/" in patterns
    assert ".DS_Store" in patterns


def test_update_creates_gitignore(tmp_path):
    result = update_gitignore(["python"], str(tmp_path))

    assert result.updated
    content = (tmp_path / ".gitignore").read_text()
    assert content.startswith("# secure-commit - python patterns\n")
    assert ".env*" in content.splitlines()
    assert "*.log" in content.splitlines()
    assert not (tmp_path / ".gitignore.tmp").exists()


def test_update_keeps_existing_and_skips_equivalents(tmp_path):
    gitignore = tmp_path / ".gitignore"
    gitignore.write_text("# mine\n./.env\n.env*\nnode_modules\n")

    result = update_gitignore(["node"], str(tmp_path))

    assert ".env*" in result.skipped
    assert "node_modules/" in result.skipped
    assert "dist/" in result.added
    lines = gitignore.read_text().splitlines()
    assert lines[:4] == ["# mine", "./.env", ".env*", "node_modules"]
    assert lines[4] == ""
    assert lines[5] == "# secure-commit - node patterns"


def test_update_is_idempotent(tmp_path):
    update_gitignore(["ruby"], str(tmp_path))
    before = (tmp_path / ".gitignore").read_text()

    again = update_gitignore(["ruby"], str(tmp_path))
    assert not again.updated
    assert again.added == []
    assert (tmp_path / ".gitignore").read_text() == before


def test_preview_does_not_write(tmp_path):
    preview = preview_gitignore_changes(["java"], str(tmp_path))
    assert "target/" in preview.added
    assert not (tmp_path / ".gitignore").exists()


def test_validate(tmp_path):
    missing = validate_gitignore(["generic"], str(tmp_path))
    assert not missing.valid
    assert missing.issues == ["No .gitignore file found"]

    (tmp_path / ".gitignore").write_text("node_modules\n")
    partial = validate_gitignore(["php"], str(tmp_path))
    assert not partial.valid
    assert "Missing pattern: .env*" in partial.issues
    assert any(issue.startswith("Missing php patterns") for issue in partial.issues)

    update_gitignore(["php"], str(tmp_path))
    assert validate_gitignore(["php"], str(tmp_path)).valid


def test_save_without_changes_is_noop(tmp_path):
    path = tmp_path / ".gitignore"
    path.write_text("*.log\n")
    gitignore = GitignoreFile(path)
    assert not gitignore.add_patterns(["*.log"])
    assert not gitignore.save()


def test_undecodable_gitignore_raises_gitignore_error(tmp_path):
    (tmp_path / ".gitignore").write_bytes(b"\xff\xfe bad\n")

    with pytest.raises(GitignoreError, match="not valid UTF-8"):
        update_gitignore(["node"], str(tmp_path))
    assert (tmp_path / ".gitignore").read_bytes() == b"\xff\xfe bad\n"
