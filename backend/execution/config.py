"""
Execution settings read from the environment
"""

import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

# Load from backend directory (parent of execution)
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

# Root under which every request gets its own directory
WORKSPACE_DIR = Path(os.getenv(
    'EXECUTION_WORKSPACE_DIR',
    str(Path(tempfile.gettempdir()) / 'code_runner')
))

# Timeouts (seconds)
DEFAULT_TIMEOUT_SECONDS = float(os.getenv('EXECUTION_TIMEOUT_SECONDS', '10'))
MAX_TIMEOUT_SECONDS = float(os.getenv('EXECUTION_MAX_TIMEOUT_SECONDS', '60'))
INSTALL_TIMEOUT_SECONDS = float(os.getenv('EXECUTION_INSTALL_TIMEOUT_SECONDS', '300'))

# Toolchain binaries
PYTHON_BIN = os.getenv('EXECUTION_PYTHON_BIN', 'python3')
NODE_BIN = os.getenv('EXECUTION_NODE_BIN', 'node')
NPM_BIN = os.getenv('EXECUTION_NPM_BIN', 'npm')
CC_BIN = os.getenv('EXECUTION_CC_BIN', 'gcc')

# 'local' or 'docker'
BACKEND = os.getenv('EXECUTION_BACKEND', 'local').lower()

# Docker configuration
DOCKER_IMAGE = os.getenv('EXECUTION_DOCKER_IMAGE', 'code-runner-executor:latest')
MEMORY_LIMIT = os.getenv('EXECUTION_MEMORY_LIMIT', '256m')
CPU_LIMIT = os.getenv('EXECUTION_CPU_LIMIT', '1')
PIDS_LIMIT = os.getenv('EXECUTION_PIDS_LIMIT', '64')

# Conventional name of the image a program may produce
PLOT_FILENAME = 'plot.png'
