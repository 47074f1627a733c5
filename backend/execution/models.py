"""
Pydantic models for code execution
"""

from pydantic import BaseModel
from typing import Optional, Literal, List


class ExecuteRequest(BaseModel):
    """Request to execute code"""
    code: str
    # Checked against the toolchain table so unknown values get a 400
    language: str
    input: Optional[str] = None
    libraries: Optional[List[str]] = None
    timeout: Optional[int] = None  # milliseconds


class ExecutionResult(BaseModel):
    """Outcome of a program that ran to completion"""
    status: Literal['success'] = 'success'
    stdout: str
    stderr: str
    exitCode: int
    executionTime: float  # milliseconds
    compilationOutput: Optional[str] = None
    plot: Optional[str] = None  # base64 image, only set when the program wrote one


class ExecuteResponse(BaseModel):
    """Successful /compile response"""
    status: Literal['success'] = 'success'
    output: str
    stderr: str = ''
    exitCode: int = 0
    executionTime: float = 0
    compilationOutput: Optional[str] = None
    plot: Optional[str] = None

    @classmethod
    def from_result(cls, result: ExecutionResult) -> 'ExecuteResponse':
        return cls(
            output=result.stdout,
            stderr=result.stderr,
            exitCode=result.exitCode,
            executionTime=result.executionTime,
            compilationOutput=result.compilationOutput,
            plot=result.plot,
        )


class ErrorResponse(BaseModel):
    """Failed /compile response; `output` carries the raw diagnostics"""
    status: Literal['error', 'timeout'] = 'error'
    errorType: str
    output: str
