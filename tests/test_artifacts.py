"""
Tests for plot collection and cleanup
"""

# pylint: disable=redefined-outer-name,unused-argument

import base64
import io

import pytest
from PIL import Image

from execution.artifacts import cleanup, collect_artifact
from execution.toolchains import select_toolchain
from execution.workspace import Workspace


@pytest.fixture
def workspace(workspace_root):
    ws = Workspace.allocate()
    yield ws
    ws.release()


def png_bytes(color="red", size=(8, 6)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_no_plot_returns_none(workspace):
    assert collect_artifact(workspace) is None


def test_plot_is_encoded_and_removed(workspace):
    raw = png_bytes()
    workspace.plot_path.write_bytes(raw)

    artifact = collect_artifact(workspace)

    assert base64.b64decode(artifact.data) == raw
    assert artifact.format == "PNG"
    assert (artifact.width, artifact.height) == (8, 6)
    assert not workspace.plot_path.exists()


def test_undecodable_plot_is_returned_as_is(workspace):
    raw = b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"/>'
    workspace.plot_path.write_bytes(raw)

    artifact = collect_artifact(workspace)

    assert base64.b64decode(artifact.data) == raw
    assert artifact.format is None
    assert not workspace.plot_path.exists()


def test_read_failure_degrades_to_empty(workspace, monkeypatch, caplog):
    workspace.plot_path.write_bytes(png_bytes())

    def failing_read(self):
        raise PermissionError("denied")

    monkeypatch.setattr(type(workspace.plot_path), "read_bytes", failing_read)

    artifact = collect_artifact(workspace)

    assert artifact is not None
    assert artifact.data == ""
    assert not workspace.plot_path.exists()
    assert "artifact_read_error" in caplog.text


def test_empty_plot_is_empty_artifact(workspace):
    workspace.plot_path.write_bytes(b"")

    assert collect_artifact(workspace).data == ""


def test_cleanup_removes_everything(workspace):
    workspace.write_source("int main(){return 0;}", "c")
    workspace.binary_path.write_bytes(b"\x7fELF")
    workspace.plot_path.write_bytes(png_bytes())

    cleanup(workspace, select_toolchain("c"))

    assert not workspace.path.exists()


def test_cleanup_without_source_is_safe(workspace):
    cleanup(workspace)
    cleanup(workspace)

    assert not workspace.path.exists()
