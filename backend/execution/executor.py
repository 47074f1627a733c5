"""
Execution pipeline

select toolchain -> allocate workspace -> write source -> install
dependencies -> compile -> run -> collect artifact and clean up
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from . import config
from .artifacts import collect_artifact, cleanup
from .errors import (
    CompileError,
    ExecutionError,
    ExecutionTimeoutError,
    ProgramRuntimeError,
)
from .models import ExecuteRequest, ExecutionResult
from .provisioner import install_dependencies
from .runner import run_step, workspace_path
from .sandbox import is_docker_available
from .toolchains import select_toolchain
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Compilation gets at least this long regardless of the run budget
MIN_COMPILE_TIMEOUT = 5


def resolve_timeout(timeout_ms: Optional[int]) -> float:
    """Per-request timeout in seconds, capped by EXECUTION_MAX_TIMEOUT_SECONDS"""
    if not timeout_ms or timeout_ms <= 0:
        return config.DEFAULT_TIMEOUT_SECONDS
    return min(timeout_ms / 1000, config.MAX_TIMEOUT_SECONDS)


def _failure_text(stderr: str, stdout: str, return_code: int) -> str:
    return stderr or stdout or f"Process exited with code {return_code}"


def execute_code(
    request: ExecuteRequest,
    workspace_root: Optional[Union[str, Path]] = None
) -> ExecutionResult:
    """
    Execute submitted code

    Args:
        request: ExecuteRequest with language, code, optional input and libraries
        workspace_root: Override for the scratch root (defaults to EXECUTION_WORKSPACE_DIR)

    Returns:
        ExecutionResult for a program that exited zero

    Raises:
        ExecutionError: Subclass describing the failing stage. The request
            workspace has already been removed when this propagates.
    """
    # Rejected before anything touches the filesystem
    toolchain = select_toolchain(request.language)

    if config.BACKEND == 'docker' and not is_docker_available():
        raise ProgramRuntimeError('Docker sandbox is not available')

    workspace = Workspace.allocate(workspace_root)
    request_id = workspace.request_id
    timeout = resolve_timeout(request.timeout)
    start_time = time.time()
    artifact = None

    logger.info(f"[{request_id}] Executing {toolchain.language} code ({len(request.code)} chars)")

    try:
        workspace.write_source(request.code, toolchain.extension)

        env = {
            'PLOT_PATH': workspace_path(workspace, workspace.plot_path),
            'MPLBACKEND': 'Agg',
        }
        env.update(install_dependencies(toolchain, request.libraries, workspace))

        compilation_output = None
        if toolchain.requires_compilation:
            compiled = run_step(
                workspace,
                toolchain.compile_command(),
                timeout_seconds=max(MIN_COMPILE_TIMEOUT, timeout),
                env=env
            )
            compilation_output = (compiled.stdout + compiled.stderr) or None

            if compiled.timed_out:
                raise ExecutionTimeoutError('Compilation timed out', output=compiled.stderr or 'Compilation timed out')
            if not compiled.ok:
                raise CompileError(
                    'Compilation failed',
                    output=_failure_text(compiled.stderr, compiled.stdout, compiled.return_code)
                )

        outcome = run_step(
            workspace,
            toolchain.run_command(),
            stdin_text=request.input,
            timeout_seconds=timeout,
            env=env
        )

        if outcome.timed_out:
            raise ExecutionTimeoutError(
                'Execution timed out',
                output=outcome.stderr,
                exit_code=outcome.return_code,
                stdout=outcome.stdout
            )
        if not outcome.ok:
            raise ProgramRuntimeError(
                'Program failed',
                output=_failure_text(outcome.stderr, outcome.stdout, outcome.return_code),
                exit_code=outcome.return_code,
                stdout=outcome.stdout
            )

    except ExecutionError as e:
        logger.error(f"[{request_id}] {e.error_type}: {e.output.strip()}")
        raise

    finally:
        artifact = collect_artifact(workspace)
        cleanup(workspace, toolchain)

    execution_time = (time.time() - start_time) * 1000
    logger.info(f"[{request_id}] Completed in {execution_time:.0f}ms")

    return ExecutionResult(
        stdout=outcome.stdout,
        stderr=outcome.stderr,
        exitCode=outcome.return_code,
        executionTime=execution_time,
        compilationOutput=compilation_output,
        plot=artifact.data if artifact is not None else None
    )
