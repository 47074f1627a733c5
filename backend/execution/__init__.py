"""
Code execution module
"""

from .executor import execute_code
from .errors import ExecutionError
from .models import ExecuteRequest, ExecuteResponse, ErrorResponse, ExecutionResult
from .toolchains import SUPPORTED_LANGUAGES

__all__ = [
    'execute_code',
    'ExecutionError',
    'ExecuteRequest',
    'ExecuteResponse',
    'ErrorResponse',
    'ExecutionResult',
    'SUPPORTED_LANGUAGES',
]
