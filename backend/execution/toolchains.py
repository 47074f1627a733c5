"""
Language -> toolchain mapping

Commands are built relative to the request workspace, which is the
working directory of every step.
"""

import shlex
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from . import config
from .errors import UnsupportedLanguageError
from .workspace import SOURCE_STEM, BINARY_NAME


@dataclass(frozen=True)
class Toolchain:
    """How to build and run one language"""
    language: str
    extension: str
    run_template: str
    binary: Callable[[], str]
    compile_template: Optional[str] = None
    compiler: Optional[Callable[[], str]] = None
    package_manager: Optional[str] = None

    @property
    def source_name(self) -> str:
        return f"{SOURCE_STEM}.{self.extension}"

    @property
    def requires_compilation(self) -> bool:
        return self.compile_template is not None

    def compile_command(self) -> Optional[str]:
        if not self.requires_compilation:
            return None
        return self.compile_template.format(
            cc=shlex.quote(self.compiler()),
            source=shlex.quote(self.source_name),
            output=shlex.quote(BINARY_NAME)
        )

    def run_command(self) -> str:
        return self.run_template.format(
            bin=shlex.quote(self.binary()),
            source=shlex.quote(self.source_name),
            output=shlex.quote(BINARY_NAME)
        )


# Binaries are looked up at call time so settings can be changed at runtime
TOOLCHAINS: Dict[str, Toolchain] = {
    'javascript': Toolchain(
        language='javascript',
        extension='js',
        run_template='{bin} {source}',
        binary=lambda: config.NODE_BIN,
        package_manager='npm',
    ),
    'python': Toolchain(
        language='python',
        extension='py',
        run_template='{bin} {source}',
        binary=lambda: config.PYTHON_BIN,
        package_manager='pip',
    ),
    'c': Toolchain(
        language='c',
        extension='c',
        run_template='./{output}',
        binary=lambda: BINARY_NAME,
        compile_template='{cc} {source} -o {output} -lm',
        compiler=lambda: config.CC_BIN,
    ),
}

SUPPORTED_LANGUAGES = tuple(TOOLCHAINS)


def select_toolchain(language: str) -> Toolchain:
    """
    Resolve the toolchain for a language

    Raises:
        UnsupportedLanguageError: If the language is not supported
    """
    toolchain = TOOLCHAINS.get(language)
    if toolchain is None:
        raise UnsupportedLanguageError('Unsupported language')
    return toolchain
