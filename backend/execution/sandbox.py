"""
Docker sandbox for isolated code execution

Each step runs in a throwaway container with no network, resource limits
and the request workspace mounted at /workspace.
"""

import os
import subprocess
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from . import config
from .runner import ProcessOutcome, run_process
from .workspace import Workspace

logger = logging.getLogger(__name__)

CONTAINER_WORKDIR = '/workspace'

# Cache docker availability
_docker_available: Optional[bool] = None
_docker_check_time: float = 0
_DOCKER_CHECK_INTERVAL = 60  # Re-check every 60 seconds


def container_name_for(workspace: Workspace) -> str:
    return f"code_runner_{workspace.request_id}"


def container_path(workspace: Workspace, path: Path) -> str:
    """Translate a host path inside the workspace to its mount point"""
    relative = Path(path).relative_to(workspace.path)
    return f"{CONTAINER_WORKDIR}/{relative.as_posix()}"


def build_docker_command(
    workspace: Workspace,
    command: str,
    env: Optional[Dict[str, str]] = None,
    interactive: bool = False
) -> List[str]:
    """
    Build the `docker run` argv for one step

    Args:
        workspace: Request workspace to mount
        command: Shell command to execute inside the container
        env: Environment variables for the program
        interactive: Keep stdin open (-i) for programs that read input

    Returns:
        Argument list for subprocess
    """
    docker_command = [
        'docker', 'run',
        '--name', container_name_for(workspace),
        '--rm',
        '--network', 'none',
        '--memory', config.MEMORY_LIMIT,
        '--cpus', config.CPU_LIMIT,
        '--pids-limit', config.PIDS_LIMIT,
        '--read-only',
        '--tmpfs', '/tmp:rw,size=64m,exec',
        '-v', f'{workspace.path}:{CONTAINER_WORKDIR}:rw',
        '-w', CONTAINER_WORKDIR,
        # Same owner as the mounted directory so the program can write its plot
        '--user', f'{os.getuid()}:{os.getgid()}',
    ]

    if interactive:
        docker_command.append('-i')

    for key, value in (env or {}).items():
        docker_command.extend(['-e', f'{key}={value}'])

    docker_command.extend([config.DOCKER_IMAGE, 'sh', '-c', command])
    return docker_command


def _remove_container(name: str) -> None:
    try:
        subprocess.run(['docker', 'kill', name], capture_output=True, timeout=5)
        subprocess.run(['docker', 'rm', '-f', name], capture_output=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Failed to kill container {name}: {e}")


def run_in_docker(
    workspace: Workspace,
    command: str,
    stdin_text: Optional[str] = None,
    timeout_seconds: float = 10,
    env: Optional[Dict[str, str]] = None
) -> ProcessOutcome:
    """
    Run a command inside a Docker container with security restrictions

    Killing the docker client does not stop the container, so on timeout
    the container is killed and removed by name.
    """
    docker_command = build_docker_command(
        workspace,
        command,
        env=env,
        interactive=stdin_text is not None
    )

    outcome = run_process(
        docker_command,
        stdin_text=stdin_text,
        timeout_seconds=timeout_seconds
    )

    if outcome.timed_out:
        _remove_container(container_name_for(workspace))

    return outcome


def is_docker_available() -> bool:
    """
    Check if Docker is available and the execution image exists.
    Results are cached to avoid repeated checks.
    """
    global _docker_available, _docker_check_time

    current_time = time.time()

    if _docker_available is not None and (current_time - _docker_check_time) < _DOCKER_CHECK_INTERVAL:
        return _docker_available

    try:
        result = subprocess.run(['docker', 'info'], capture_output=True, timeout=5)
        if result.returncode != 0:
            _docker_available = False
        else:
            result = subprocess.run(
                ['docker', 'image', 'inspect', config.DOCKER_IMAGE],
                capture_output=True,
                timeout=5
            )
            _docker_available = result.returncode == 0
    except (OSError, subprocess.SubprocessError):
        _docker_available = False

    _docker_check_time = current_time
    return _docker_available
