"""Test module entry point."""

import os
import subprocess
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parent.parent / "src"


def test_main_module_importable():
    """Test that the __main__ module can be imported without side effects."""
    import secure_commit.__main__ as main_module

    assert hasattr(main_module, "main")


def test_main_module_executable(tmp_path):
    """python -m secure_commit runs and reports its version."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-m", "secure_commit", "version"],
        capture_output=True,
        text=True,
        timeout=30,
        cwd=tmp_path,
        env=env,
    )
    assert "ModuleNotFoundError" not in result.stderr
    assert result.returncode == 0
    assert result.stdout.strip()
