"""Filesystem-backed cross-process mutex.

Modules:
    fsmutex.mutex           - FileMutex acquire/release protocol
    fsmutex.process         - Process identity and liveness probing
    fsmutex.store           - Lock directory and lock file operations
    fsmutex.paths           - Lock key validation and path derivation
    fsmutex.config          - MutexConfig (defaults, env vars, YAML)
    fsmutex.exceptions      - Error taxonomy with error codes
    fsmutex.logging_config  - Optional logging setup for applications
"""

__version__ = "1.0.0"

from fsmutex.config import MutexConfig
from fsmutex.exceptions import (
    MutexError,
    ConfigValidationError,
    InvalidLockKeyError,
    LockTimeout,
    IOFailure,
    LockFileNotFoundError,
)
from fsmutex.mutex import FileMutex
from fsmutex.paths import sanitize_key
from fsmutex.process import LocalProcessRegistry, ProcessRegistry
from fsmutex.store import FileStore

__all__ = [
    "__version__",
    "FileMutex",
    "MutexConfig",
    "ProcessRegistry",
    "LocalProcessRegistry",
    "FileStore",
    "sanitize_key",
    "MutexError",
    "ConfigValidationError",
    "InvalidLockKeyError",
    "LockTimeout",
    "IOFailure",
    "LockFileNotFoundError",
]
