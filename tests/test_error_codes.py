"""Tests for the error taxonomy and error codes."""

from fsmutex.exceptions import (
    MutexError,
    ConfigValidationError,
    InvalidLockKeyError,
    LockTimeout,
    IOFailure,
    LockFileNotFoundError,
)


def test_base_error_code():
    """Test that base exception has error code."""
    err = MutexError("Test error")
    assert err.error_code == "ERR000"
    assert "[ERR000]" in str(err)


def test_config_validation_error_code():
    """Test ConfigValidationError has correct error code."""
    err = ConfigValidationError("Invalid config", config_path="/path/to/mutex.yaml")
    assert err.error_code == "CFG001"
    assert "[CFG001]" in str(err)
    assert "config_path=/path/to/mutex.yaml" in str(err)


def test_invalid_lock_key_error_code():
    err = InvalidLockKeyError("Bad key", key="a/b")
    assert err.error_code == "KEY001"
    assert err.key == "a/b"
    assert "key='a/b'" in str(err)


def test_lock_timeout_carries_elapsed_and_holder():
    """Test LockTimeout exposes the wait duration and holder."""
    err = LockTimeout("Failed to acquire", elapsed=2.0041, key="jobs", holder_pid=812)

    assert err.error_code == "LOCK001"
    assert err.elapsed == 2.0041
    assert err.holder_pid == 812
    error_str = str(err)
    assert "[LOCK001]" in error_str
    assert "elapsed=2.004s" in error_str
    assert "key=jobs" in error_str
    assert "holder_pid=812" in error_str


def test_io_failure_wraps_original_exception():
    """Test error wraps original exception."""
    original = PermissionError("denied")
    err = IOFailure("Cannot write lock file", operation="write", path="/tmp/x", original_error=original)

    assert err.original_error is original
    assert err.operation == "write"
    assert err.details["path"] == "/tmp/x"
    assert "PermissionError" in str(err)


def test_not_found_error_code():
    err = LockFileNotFoundError("Lock file not found", operation="read", path="/tmp/x")
    assert err.error_code == "IO404"
    assert "[IO404]" in str(err)


def test_custom_error_code_override():
    """Test that error code can be overridden."""
    err = MutexError("Test", error_code="CUSTOM001")
    assert err.error_code == "CUSTOM001"
    assert "[CUSTOM001]" in str(err)


def test_exception_inheritance():
    """Test exception hierarchy."""
    assert issubclass(ConfigValidationError, MutexError)
    assert issubclass(InvalidLockKeyError, MutexError)
    assert issubclass(LockTimeout, MutexError)
    assert issubclass(IOFailure, MutexError)
    assert issubclass(LockFileNotFoundError, IOFailure)
