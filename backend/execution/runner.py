"""
Process runner: spawn a step, feed stdin, collect output, enforce a timeout
"""

import os
import signal
import subprocess
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from . import config
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Time allowed to drain pipes after the process group was killed
_DRAIN_TIMEOUT = 5


@dataclass
class ProcessOutcome:
    """Terminal result of one spawned step"""
    return_code: int
    stdout: str
    stderr: str
    timed_out: bool = False
    spawn_failed: bool = False
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.return_code == 0 and not self.timed_out and not self.spawn_failed


def _kill_process_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except OSError as e:
        logger.warning(f"Failed to kill process group {proc.pid}: {e}")
        proc.kill()


def run_process(
    command: Union[str, List[str]],
    cwd: Optional[Union[str, Path]] = None,
    stdin_text: Optional[str] = None,
    timeout_seconds: float = 10,
    env: Optional[Dict[str, str]] = None
) -> ProcessOutcome:
    """
    Run a command and wait for it to finish

    A string command is run through the shell; a list is exec'd directly.
    The child gets its own process group so a timeout kills everything it
    started, not only the shell.

    Args:
        command: Shell command or argv list
        cwd: Working directory
        stdin_text: Written to the child's stdin, which is then closed
        timeout_seconds: Wall clock budget for the step
        env: Extra environment variables layered over os.environ

    Returns:
        ProcessOutcome with the captured output
    """
    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    start_time = time.time()

    try:
        proc = subprocess.Popen(
            command,
            shell=isinstance(command, str),
            cwd=str(cwd) if cwd else None,
            env=full_env,
            stdin=subprocess.PIPE if stdin_text is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding='utf-8',
            errors='replace',
            start_new_session=True,
        )
    except OSError as e:
        logger.error(f"Failed to spawn {command!r}: {e}")
        return ProcessOutcome(-1, '', str(e), spawn_failed=True)

    try:
        # communicate() writes stdin and closes it even if the child never reads
        stdout, stderr = proc.communicate(input=stdin_text, timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        _kill_process_group(proc)
        try:
            stdout, stderr = proc.communicate(timeout=_DRAIN_TIMEOUT)
        except subprocess.TimeoutExpired:
            proc.kill()
            stdout, stderr = '', ''
        duration = (time.time() - start_time) * 1000
        message = f"Execution timed out after {timeout_seconds:g} seconds"
        return ProcessOutcome(
            -1,
            stdout or '',
            f"{stderr}\n{message}" if stderr else message,
            timed_out=True,
            duration_ms=duration
        )

    # Background children the program left behind die with the step
    _kill_process_group(proc)

    duration = (time.time() - start_time) * 1000
    return ProcessOutcome(proc.returncode, stdout, stderr, duration_ms=duration)


def workspace_path(workspace: Workspace, path: Path) -> str:
    """Path of a workspace file as the running program sees it"""
    if config.BACKEND == 'docker':
        from .sandbox import container_path
        return container_path(workspace, path)
    return str(path)


def run_step(
    workspace: Workspace,
    command: str,
    stdin_text: Optional[str] = None,
    timeout_seconds: float = 10,
    env: Optional[Dict[str, str]] = None
) -> ProcessOutcome:
    """
    Run one pipeline step inside the request workspace

    Uses the Docker sandbox when EXECUTION_BACKEND=docker, otherwise a
    local shell with the workspace as working directory.
    """
    if config.BACKEND == 'docker':
        from .sandbox import run_in_docker
        return run_in_docker(workspace, command, stdin_text, timeout_seconds, env)

    return run_process(
        command,
        cwd=workspace.path,
        stdin_text=stdin_text,
        timeout_seconds=timeout_seconds,
        env=env
    )
