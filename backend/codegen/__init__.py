"""
Code suggestion via an external text generation service
"""

from .generator import generate_code, extract_code_block, GenerationError

__all__ = ['generate_code', 'extract_code_block', 'GenerationError']
