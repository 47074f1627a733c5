"""
Install requested packages into the request workspace
"""

import re
import logging
from typing import Dict, List, Optional

from . import config
from .errors import InstallError
from .runner import run_process, workspace_path
from .toolchains import Toolchain
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Package specs such as numpy, numpy==1.26.4, lodash@4, @scope/pkg, requests[socks]
_PACKAGE_RE = re.compile(r'^[A-Za-z0-9@_][A-Za-z0-9@_.\-/=<>~^!\[\],]*$')


def validate_package_name(name: str) -> bool:
    """True if the package spec cannot be mistaken for an installer option"""
    return bool(name) and len(name) <= 214 and bool(_PACKAGE_RE.match(name))


def _install_argv(toolchain: Toolchain, libraries: List[str], workspace: Workspace) -> List[str]:
    if toolchain.package_manager == 'pip':
        return [
            config.PYTHON_BIN, '-m', 'pip', 'install',
            '--disable-pip-version-check',
            '--no-input',
            '--target', str(workspace.python_packages_path),
            *libraries
        ]
    if toolchain.package_manager == 'npm':
        return [
            config.NPM_BIN, 'install',
            '--no-audit',
            '--no-fund',
            '--prefix', str(workspace.path),
            *libraries
        ]
    raise InstallError(f"No package manager for {toolchain.language}")


def _environment(toolchain: Toolchain, workspace: Workspace) -> Dict[str, str]:
    if toolchain.package_manager == 'pip':
        return {'PYTHONPATH': workspace_path(workspace, workspace.python_packages_path)}
    if toolchain.package_manager == 'npm':
        return {'NODE_PATH': workspace_path(workspace, workspace.node_modules_path)}
    return {}


def install_dependencies(
    toolchain: Toolchain,
    libraries: Optional[List[str]],
    workspace: Workspace,
    timeout_seconds: Optional[float] = None
) -> Dict[str, str]:
    """
    Install libraries for one request

    Packages go into the request workspace (pip --target, npm --prefix)
    so nothing leaks into the server's environment or into other requests.

    Args:
        toolchain: Selected toolchain
        libraries: Package specs, installed with one command
        workspace: Request workspace
        timeout_seconds: Install budget (defaults to EXECUTION_INSTALL_TIMEOUT_SECONDS)

    Returns:
        Environment variables the program needs to find the packages

    Raises:
        InstallError: On invalid names, installer failure or timeout
    """
    if not libraries or toolchain.package_manager is None:
        return {}

    invalid = [name for name in libraries if not validate_package_name(name)]
    if invalid:
        raise InstallError(f"Error installing packages: invalid package name(s): {', '.join(invalid)}")

    argv = _install_argv(toolchain, libraries, workspace)
    logger.info(f"[{workspace.request_id}] Installing {toolchain.package_manager} packages: {libraries}")

    timeout = timeout_seconds if timeout_seconds is not None else config.INSTALL_TIMEOUT_SECONDS

    # Installs run on the host: the sandbox has no network
    outcome = run_process(argv, cwd=workspace.path, timeout_seconds=timeout)

    if not outcome.ok:
        detail = outcome.stderr or outcome.stdout
        logger.error(f"[{workspace.request_id}] Error installing packages: {detail.strip()}")
        raise InstallError(f"Error installing packages: {detail.strip()}")

    return _environment(toolchain, workspace)
