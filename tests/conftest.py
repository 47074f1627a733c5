# pylint: disable=wrong-import-position
"""Root conftest for the code runner tests.

Sets the execution environment before any backend module is imported,
since settings are read at import time.
"""
import os
import shutil
import sys
import tempfile
import time
from pathlib import Path

os.environ.setdefault("EXECUTION_PYTHON_BIN", sys.executable)
os.environ.setdefault("EXECUTION_BACKEND", "local")
os.environ.setdefault("EXECUTION_TIMEOUT_SECONDS", "10")
os.environ.setdefault("EXECUTION_WORKSPACE_DIR", os.path.join(tempfile.gettempdir(), "code_runner_tests"))

import pytest
from fastapi.testclient import TestClient

from execution import config
from main import app

requires_gcc = pytest.mark.skipif(shutil.which("gcc") is None, reason="gcc not installed")
requires_node = pytest.mark.skipif(shutil.which("node") is None, reason="node not installed")


@pytest.fixture
def workspace_root(tmp_path, monkeypatch):
    """Point the execution workspace at a fresh temporary directory"""
    root = tmp_path / "workspace"
    monkeypatch.setattr(config, "WORKSPACE_DIR", root)
    return root


@pytest.fixture
def client(workspace_root):
    """Create a test client for the FastAPI app"""
    return TestClient(app)


def leftover_files(root):
    """Everything still present under the workspace root"""
    if not root.exists():
        return []
    return list(root.rglob("*"))


def process_alive(pid, wait_seconds=5.0):
    """True if pid is still running after wait_seconds (zombies count as gone)"""
    stat = Path(f"/proc/{pid}/stat")
    deadline = time.time() + wait_seconds
    while True:
        try:
            state = stat.read_text().rsplit(")", 1)[1].split()[0]
        except (OSError, IndexError):
            return False
        if state == "Z":
            return False
        if time.time() >= deadline:
            return True
        time.sleep(0.05)


requires_proc = pytest.mark.skipif(not Path("/proc/self/stat").exists(), reason="needs /proc")
