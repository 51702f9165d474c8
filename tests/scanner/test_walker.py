"""Tests for TreeWalker traversal, pruning and aggregation."""

import os

import pytest

from secure_commit.core.exceptions import InvalidRootError
from secure_commit.scanner import TreeWalker, scan_files, scan_tree


@pytest.fixture
def project(tmp_path, lines):
    """A small project tree with secrets in scanned and ignored places."""
    (tmp_path / "a.py").write_text(lines["aws_access"] + "\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "config.js").write_text("// settings\n" + lines["stripe_live"] + "\n")
    (tmp_path / "src" / "deep").mkdir()
    (tmp_path / "src" / "deep" / "db.yml").write_text(lines["database_url"] + "\n")
    (tmp_path / "z.md").write_text("nothing here\n" + lines["github_token"] + "\n")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text(lines["openai"] + "\n")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG" + lines["aws_access"].encode())
    return tmp_path


def _summary(result):
    return [(f.path, f.line, f.kind) for f in result]


def test_walk_reports_in_traversal_order(project):
    result = scan_tree(project, TreeWalker(workers=1))

    assert _summary(result) == [
        ("a.py", 1, "aws_access"),
        ("src/config.js", 2, "stripe_live"),
        ("src/deep/db.yml", 1, "database_url"),
        ("z.md", 2, "github_token"),
    ]
    assert result.warnings == []
    assert result.files_scanned == 4
    assert result.exit_code == 1


def test_parallel_matches_sequential(project):
    sequential = TreeWalker(workers=1).walk(project)
    parallel = TreeWalker(workers=8).walk(project)
    assert parallel.findings == sequential.findings
    assert parallel.warnings == sequential.warnings


def test_parallel_keeps_warning_order(tmp_path):
    for i in range(3):
        (tmp_path / f"f{i}.py").write_bytes(b"\xff\xfe broken\n")

    sequential = TreeWalker(workers=1, max_files=2).walk(tmp_path)
    parallel = TreeWalker(workers=4, max_files=2).walk(tmp_path)

    assert sequential.warnings == [
        "Skipped non-UTF-8 file: f0.py",
        "Skipped non-UTF-8 file: f1.py",
        "Stopped after 2 files (max_files limit)",
    ]
    assert parallel.warnings == sequential.warnings
    assert parallel.files_scanned == sequential.files_scanned == 0


def test_scan_files_keeps_warnings_in_input_order(tmp_path):
    (tmp_path / "bad.py").write_bytes(b"\xff\xfe broken\n")

    for workers in (1, 4):
        result = TreeWalker(workers=workers).scan_files(["gone.py", "bad.py"], root=tmp_path)
        assert result.warnings == [
            "Could not read file: gone.py - not a regular file",
            "Skipped non-UTF-8 file: bad.py",
        ]


def test_repeated_walks_are_identical(project):
    walker = TreeWalker()
    assert walker.walk(project).findings == walker.walk(project).findings


def test_extension_boundary(tmp_path, samples):
    (tmp_path / "secret.bin").write_text(samples["aws_access"])
    assert len(scan_tree(tmp_path)) == 0

    (tmp_path / "secret.env").write_text(samples["aws_access"])
    result = scan_tree(tmp_path)
    assert _summary(result) == [("secret.env", 1, "aws_access")]


def test_ignored_directory_is_pruned(tmp_path, samples):
    cache = tmp_path / "node_modules" / "left-pad"
    cache.mkdir(parents=True)
    (cache / "index.js").write_text(samples["aws_access"])

    result = scan_tree(tmp_path)
    assert len(result) == 0
    assert result.warnings == []
    assert result.exit_code == 0


def test_invalid_root(tmp_path):
    with pytest.raises(InvalidRootError):
        scan_tree(tmp_path / "missing")

    file_root = tmp_path / "file.py"
    file_root.write_text("x = 1\n")
    with pytest.raises(InvalidRootError, match="Not a directory"):
        scan_tree(file_root)


def test_undecodable_file_is_a_warning(tmp_path, samples):
    (tmp_path / "bad.txt").write_bytes(b"\xc3\x28 " + samples["aws_access"].encode())
    (tmp_path / "good.txt").write_text(samples["aws_access"])

    result = scan_tree(tmp_path)
    assert _summary(result) == [("good.txt", 1, "aws_access")]
    assert len(result.warnings) == 1
    assert "bad.txt" in result.warnings[0]


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs a non-root POSIX user")
def test_unreadable_directory_does_not_abort(tmp_path, samples):
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "a.py").write_text(samples["aws_access"])
    (tmp_path / "open.py").write_text(samples["aws_access"])
    locked.chmod(0)
    try:
        result = scan_tree(tmp_path)
    finally:
        locked.chmod(0o755)

    assert _summary(result) == [("open.py", 1, "aws_access")]
    assert any("Could not read directory" in w for w in result.warnings)


def test_symlinks_not_followed_by_default(tmp_path, samples):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "keys.py").write_text(samples["aws_access"])
    root = tmp_path / "root"
    root.mkdir()
    try:
        os.symlink(outside, root / "linked", target_is_directory=True)
        os.symlink(outside / "keys.py", root / "keys.py")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    assert len(scan_tree(root)) == 0
    followed = TreeWalker(follow_symlinks=True).walk(root)
    assert sorted(f.path for f in followed) == ["keys.py", "linked/keys.py"]


def test_symlink_cycle_terminates(tmp_path, samples):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "k.py").write_text(samples["aws_access"])
    try:
        os.symlink(tmp_path, tmp_path / "a" / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")

    result = TreeWalker(follow_symlinks=True).walk(tmp_path)
    assert _summary(result) == [("a/k.py", 1, "aws_access")]


def test_max_files_stops_early(project):
    result = TreeWalker(workers=1, max_files=2).walk(project)
    assert result.files_scanned == 2
    assert [f.path for f in result] == ["a.py", "src/config.js"]
    assert any("max_files" in w for w in result.warnings)


def test_scan_files_empty_list():
    result = scan_files([])
    assert len(result) == 0
    assert result.warnings == []
    assert result.exit_code == 0


def test_scan_files_uses_classifier_without_pruning(tmp_path, samples):
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "x.js").write_text(samples["aws_access"])
    (tmp_path / "blob.bin").write_text(samples["aws_access"])
    (tmp_path / ".env.local").write_text("KEY=" + samples["stripe_test"])

    result = scan_files(["node_modules/x.js", "blob.bin", ".env.local"], root=tmp_path)

    assert _summary(result) == [
        ("node_modules/x.js", 1, "aws_access"),
        (".env.local", 1, "stripe_test"),
    ]


def test_scan_files_missing_file_warns(tmp_path, samples):
    (tmp_path / "ok.py").write_text(samples["aws_access"])
    result = scan_files(["gone.py", "ok.py"], root=tmp_path)

    assert _summary(result) == [("ok.py", 1, "aws_access")]
    assert len(result.warnings) == 1
    assert "gone.py" in result.warnings[0]


def test_severity_grouping_keeps_total(project):
    result = scan_tree(project)
    grouped = result.by_severity()

    assert [s.value for s in grouped] == ["high", "medium"]
    assert sum(len(v) for v in grouped.values()) == result.total
    # grouping does not reorder the underlying sequence
    assert [f.path for f in result][0] == "a.py"
