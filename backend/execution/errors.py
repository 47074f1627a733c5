"""
Error taxonomy for the execution pipeline

Every failure that ends a request is an ExecutionError. The HTTP layer
maps `status_code` and `error_type` onto the response; `output` is the raw
diagnostic text shown to the caller.
"""

from typing import Optional


class ExecutionError(Exception):
    """Base class for errors that terminate an execution request"""

    status_code = 500
    error_type = 'execution_error'
    status = 'error'

    def __init__(self, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.output = output if output is not None else message


class WorkspaceError(ExecutionError):
    """Scratch directory could not be created or is not writable"""

    error_type = 'workspace_error'


class InstallError(ExecutionError):
    """Dependency installation failed"""

    error_type = 'install_error'


class UnsupportedLanguageError(ExecutionError):
    """Requested language has no toolchain"""

    status_code = 400
    error_type = 'unsupported_language'


class CompileError(ExecutionError):
    """Compiler exited non-zero, the program was never run"""

    error_type = 'compile_error'


class ProgramRuntimeError(ExecutionError):
    """Program exited non-zero or could not be spawned"""

    error_type = 'runtime_error'

    def __init__(self, message: str, output: Optional[str] = None,
                 exit_code: Optional[int] = None, stdout: str = ''):
        super().__init__(message, output)
        self.exit_code = exit_code
        self.stdout = stdout


class ExecutionTimeoutError(ProgramRuntimeError):
    """Program was killed after exceeding its time budget"""

    status_code = 504
    error_type = 'timeout'
    status = 'timeout'


# Non-fatal: logged by the collector, never returned to the caller

class ArtifactReadError(ExecutionError):
    error_type = 'artifact_read_error'


class CleanupError(ExecutionError):
    error_type = 'cleanup_error'
