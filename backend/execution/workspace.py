"""
Per-request scratch directories for code execution
"""

import os
import shutil
import logging
import uuid
from pathlib import Path
from typing import Optional, Union

from . import config
from .errors import WorkspaceError, CleanupError

logger = logging.getLogger(__name__)

SOURCE_STEM = 'main'
BINARY_NAME = 'program'
PYTHON_PACKAGES_DIR = 'site-packages'
NODE_MODULES_DIR = 'node_modules'


def ensure_workspace_root(root: Optional[Union[str, Path]] = None) -> Path:
    """
    Create the scratch root if needed and check that it is writable

    Args:
        root: Directory to use (defaults to EXECUTION_WORKSPACE_DIR)

    Returns:
        Path to the writable root

    Raises:
        WorkspaceError: If the directory cannot be created or written to
    """
    root_path = Path(root) if root is not None else config.WORKSPACE_DIR

    try:
        root_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating workspace directory {root_path}: {e}")
        raise WorkspaceError(f"Error creating temp directory: {e}")

    if not os.access(root_path, os.W_OK):
        logger.error(f"No write permission for directory: {root_path}")
        raise WorkspaceError('No write permission for temp directory')

    return root_path


class Workspace:
    """
    Isolated directory owned by a single execution request

    Everything a request produces (source, binary, dependencies, plot)
    lives under `path`, so releasing the directory releases the request.
    """

    def __init__(self, root: Path, request_id: str):
        self.request_id = request_id
        self.path = root / request_id
        self.source_path: Optional[Path] = None

    @classmethod
    def allocate(cls, root: Optional[Union[str, Path]] = None) -> 'Workspace':
        """Create a fresh directory named after a new request id"""
        root_path = ensure_workspace_root(root)
        workspace = cls(root_path, uuid.uuid4().hex)

        try:
            workspace.path.mkdir()
        except OSError as e:
            raise WorkspaceError(f"Error creating request directory: {e}")

        logger.debug(f"Allocated workspace {workspace.path}")
        return workspace

    @property
    def binary_path(self) -> Path:
        return self.path / BINARY_NAME

    @property
    def plot_path(self) -> Path:
        return self.path / config.PLOT_FILENAME

    @property
    def python_packages_path(self) -> Path:
        return self.path / PYTHON_PACKAGES_DIR

    @property
    def node_modules_path(self) -> Path:
        return self.path / NODE_MODULES_DIR

    def write_source(self, code: str, extension: str) -> Path:
        """
        Write the submitted code into the workspace

        Args:
            code: Source text
            extension: File extension without the dot

        Returns:
            Path to the source file
        """
        self.source_path = self.path / f"{SOURCE_STEM}.{extension}"
        try:
            with open(self.source_path, 'w', encoding='utf-8') as f:
                f.write(code)
        except OSError as e:
            raise WorkspaceError(f"Error writing source file: {e}")
        return self.source_path

    def remove_file(self, path: Optional[Path]) -> None:
        """Delete a single file, logging instead of raising on failure"""
        if path is None or not path.exists():
            return
        try:
            path.unlink()
        except OSError as e:
            error = CleanupError(f"Failed to remove {path}: {e}")
            logger.warning(f"[{self.request_id}] {error.error_type}: {error.message}")

    def release(self) -> None:
        """Remove the whole request directory"""
        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            error = CleanupError(f"Failed to cleanup workspace {self.path}: {e}")
            logger.warning(f"[{self.request_id}] {error.error_type}: {error.message}")

