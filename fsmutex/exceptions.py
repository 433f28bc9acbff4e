"""Custom exception classes for fs-mutex.

This module provides specific exception types for better error handling and debugging.
"""

from typing import Optional, Dict, Any


class MutexError(Exception):
    """Base exception for all fs-mutex errors."""

    error_code: str = "ERR000"  # Override in subclasses

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        """
        Initialize fs-mutex exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
            error_code: Optional error code override
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def __str__(self) -> str:
        """Return string representation with error code and details."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


class ConfigValidationError(MutexError):
    """Raised when configuration validation fails.

    Examples:
        - Non-numeric wait or polling values
        - Negative wait threshold
        - Environment name that is not a safe directory name
        - Unreadable or malformed YAML file
    """

    error_code = "CFG001"

    def __init__(self, message: str, config_path: Optional[str] = None, key: Optional[str] = None):
        """
        Initialize configuration validation error.

        Args:
            message: Description of validation failure
            config_path: Path to config file that failed validation
            key: Specific configuration key that caused the error
        """
        details = {}
        if config_path:
            details['config_path'] = config_path
        if key:
            details['config_key'] = key
        super().__init__(message, details)


class InvalidLockKeyError(MutexError):
    """Raised when a lock key cannot be used as a single path segment."""

    error_code = "KEY001"

    def __init__(self, message: str, key: Optional[str] = None):
        details = {}
        if key is not None:
            details['key'] = repr(key)
        super().__init__(message, details)
        self.key = key


class LockTimeout(MutexError):
    """Raised when the wait budget is exhausted and the holder is still alive.

    The error is surfaced to the caller as-is; acquisition never retries
    on its own after raising it.
    """

    error_code = "LOCK001"

    def __init__(
        self,
        message: str,
        elapsed: float,
        key: Optional[str] = None,
        holder_pid: Optional[int] = None,
    ):
        """
        Initialize lock timeout error.

        Args:
            message: Description of the failure
            elapsed: Seconds spent waiting before giving up
            key: Lock key that could not be acquired
            holder_pid: Process id recorded in the lock file
        """
        details: Dict[str, Any] = {'elapsed': f"{elapsed:.3f}s"}
        if key:
            details['key'] = key
        if holder_pid is not None:
            details['holder_pid'] = holder_pid
        super().__init__(message, details)
        self.elapsed = elapsed
        self.key = key
        self.holder_pid = holder_pid


class IOFailure(MutexError):
    """Raised when a filesystem operation fails unexpectedly.

    Examples:
        - Permission denied on the lock directory
        - Disk full while writing the lock file
        - Lock directory cannot be created
    """

    error_code = "IO001"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize filesystem failure.

        Args:
            message: Description of the failure
            operation: Operation that failed (mkdir, read, write, create, delete)
            path: Filesystem path involved in the operation
            original_error: Original exception that caused this error
        """
        details = {}
        if operation:
            details['operation'] = operation
        if path:
            details['path'] = path
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__

        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class LockFileNotFoundError(IOFailure):
    """Raised when reading or deleting a lock file that does not exist.

    Callers decide whether absence is tolerable: release treats it as
    success, the post-timeout read treats it as a free lock.
    """

    error_code = "IO404"
