"""
Output artifact collection and workspace cleanup
"""

import io
import base64
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import ArtifactReadError
from .toolchains import Toolchain
from .workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class Artifact:
    """Image produced by the executed program"""
    data: str  # base64, empty when the file could not be read
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


def _identify(raw: bytes) -> Tuple[Optional[str], Optional[int], Optional[int]]:
    """Format and size of the image, or Nones when Pillow cannot decode it"""
    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.verify()
            return image.format, image.size[0], image.size[1]
    except (UnidentifiedImageError, OSError, SyntaxError):
        return None, None, None


def _read_image(workspace: Workspace) -> Artifact:
    try:
        raw = workspace.plot_path.read_bytes()
    except OSError as e:
        raise ArtifactReadError(f"Error reading plot file: {e}")

    image_format, width, height = _identify(raw)
    if image_format is None:
        logger.warning(f"[{workspace.request_id}] Plot is not an image Pillow recognizes, returning raw bytes")

    return Artifact(
        data=base64.b64encode(raw).decode('ascii'),
        format=image_format,
        width=width,
        height=height
    )


def collect_artifact(workspace: Workspace) -> Optional[Artifact]:
    """
    Pick up the plot a program wrote into its workspace

    The file is removed whether or not it could be read.

    Returns:
        None when no plot exists, an empty Artifact when it was unreadable
    """
    if not workspace.plot_path.exists():
        return None

    try:
        artifact = _read_image(workspace)
        logger.info(
            f"[{workspace.request_id}] Collected {artifact.format} plot "
            f"{artifact.width}x{artifact.height}"
        )
    except ArtifactReadError as e:
        logger.warning(f"[{workspace.request_id}] {e.error_type}: {e.message}")
        artifact = Artifact(data='')

    workspace.remove_file(workspace.plot_path)
    return artifact


def cleanup(workspace: Workspace, toolchain: Optional[Toolchain] = None) -> None:
    """
    Remove everything the request left behind

    Individual files go first so a failure to remove the directory still
    leaves no source or binary behind. Never raises.
    """
    workspace.remove_file(workspace.source_path)
    if toolchain is not None and toolchain.requires_compilation:
        workspace.remove_file(workspace.binary_path)
    workspace.remove_file(workspace.plot_path)
    workspace.release()
