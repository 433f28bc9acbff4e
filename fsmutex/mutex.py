"""Cross-process mutex backed by one file per lock key.

A lock is held while ``<lock directory>/<key>`` exists. The file contains
the decimal PID of the holder so that waiters can tell whether the holder
is still running.

Acquisition polls for the file to disappear for up to ``max_wait``
seconds. After that the waiter looks at the recorded PID: if the holder
is gone (or the file vanished / holds garbage) the waiter takes the lock
over, otherwise it gives up with ``LockTimeout``.

Known weakness: staleness is detected only through PID liveness, so a
recycled PID makes a dead holder look alive until the new process exits.
The takeover write after the wait budget is last-writer-wins; two waiters
recovering the same stale lock at the same instant can both succeed.

Example:
    mutex = FileMutex("nightly-report")
    mutex.acquire()
    try:
        build_report()
    finally:
        mutex.release()

    # or
    with FileMutex("nightly-report"):
        build_report()
"""

from __future__ import annotations

import time
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Optional, Type

import tenacity
from tenacity.wait import wait_base

from fsmutex.config import MutexConfig
from fsmutex.exceptions import LockFileNotFoundError, LockTimeout
from fsmutex.logging_config import get_logger
from fsmutex.paths import lock_file_path, validate_key
from fsmutex.process import LocalProcessRegistry, ProcessRegistry
from fsmutex.store import FileStore

__all__ = ["FileMutex"]


class _LockBusy(Exception):
    """The lock file exists; keeps the polling loop going."""


class wait_within_budget(wait_base):
    """Fixed polling interval, cut short so the last check lands on the deadline."""

    def __init__(self, interval: float, budget: float) -> None:
        self.interval = interval
        self.budget = budget

    def __call__(self, retry_state: tenacity.RetryCallState) -> float:
        remaining = self.budget - (retry_state.seconds_since_start or 0.0)
        return max(0.0, min(self.interval, remaining))


def parse_pid(text: str) -> Optional[int]:
    """Return the PID stored in a lock file, or None if it is not one."""
    try:
        pid = int(text.strip())
    except ValueError:
        return None
    return pid if pid > 0 else None


class FileMutex:
    """Filesystem mutex for one lock key.

    Instances keep no lock state of their own; two instances with the same
    key and config are interchangeable. There is no reentrancy: acquiring
    twice from the same process waits for (and times out on) itself.

    Args:
        key: Lock key, used verbatim as the lock file name
        config: Mutex settings (defaults to ``MutexConfig.from_env()``)
        registry: Process identity and liveness source
        store: Filesystem access
    """

    def __init__(
        self,
        key: str,
        config: Optional[MutexConfig] = None,
        registry: Optional[ProcessRegistry] = None,
        store: Optional[FileStore] = None,
    ) -> None:
        self._key = validate_key(key)
        self.config = config if config is not None else MutexConfig.from_env()
        self.registry = registry if registry is not None else LocalProcessRegistry()
        self.store = store if store is not None else FileStore()
        self._log = get_logger(__name__, extra={"lock_key": self._key})

    @property
    def key(self) -> str:
        return self._key

    @property
    def directory(self) -> Path:
        return self.config.lock_directory

    @property
    def path(self) -> Path:
        return lock_file_path(self.directory, self._key)

    def acquire(self) -> None:
        """Block until the lock is held by this process.

        Raises:
            LockTimeout: The wait budget ran out and the holder is alive
            IOFailure: The lock directory or file could not be written
        """
        self.store.ensure_directory(self.directory)
        path = self.path
        pid = self.registry.current_process_id()
        start = time.monotonic()

        try:
            tenacity.Retrying(**self._retry_options())(self._claim, path, pid)
            return
        except _LockBusy:
            pass

        self._take_over_or_fail(path, pid, time.monotonic() - start)

    async def acquire_async(self) -> None:
        """Same protocol as ``acquire`` but waits with ``asyncio.sleep``.

        Cancelling the awaiting task abandons the wait without touching
        the lock file.
        """
        self.store.ensure_directory(self.directory)
        path = self.path
        pid = self.registry.current_process_id()
        start = time.monotonic()

        try:
            await tenacity.AsyncRetrying(**self._retry_options())(self._claim_async, path, pid)
            return
        except _LockBusy:
            pass

        self._take_over_or_fail(path, pid, time.monotonic() - start)

    def release(self) -> None:
        """Delete the lock file.

        Ownership is not checked. Releasing a lock that is not held is a no-op.

        Raises:
            IOFailure: The lock file exists but could not be removed
        """
        try:
            self.store.delete(self.path)
        except LockFileNotFoundError:
            self._log.debug("Mutex %s was not held; nothing to release", self._key)
            return
        self._log.debug("Released mutex %s (%s)", self._key, self.path)

    def holder(self) -> Optional[int]:
        """PID recorded in the lock file, or None if the lock is free or unreadable."""
        try:
            return parse_pid(self.store.read_text(self.path))
        except LockFileNotFoundError:
            return None

    def is_locked(self) -> bool:
        return self.store.exists(self.path)

    def _retry_options(self) -> Dict[str, Any]:
        return {
            "stop": tenacity.stop_after_delay(self.config.max_wait),
            "wait": wait_within_budget(self.config.poll_interval, self.config.max_wait),
            "retry": tenacity.retry_if_exception_type(_LockBusy),
            "before_sleep": self._log_wait,
            "reraise": True,
        }

    def _log_wait(self, retry_state: tenacity.RetryCallState) -> None:
        self._log.debug(
            "Mutex %s is held; waiting %.2fs (attempt %d, %.2fs elapsed)",
            self._key,
            retry_state.next_action.sleep if retry_state.next_action else 0,
            retry_state.attempt_number,
            retry_state.seconds_since_start or 0,
        )

    def _claim(self, path: Path, pid: int) -> None:
        if not self.store.create_exclusive(path, str(pid)):
            raise _LockBusy(str(path))
        self._log.debug("Acquired mutex %s by pid %s", self._key, pid)

    async def _claim_async(self, path: Path, pid: int) -> None:
        self._claim(path, pid)

    def _take_over_or_fail(self, path: Path, pid: int, elapsed: float) -> None:
        try:
            holder = parse_pid(self.store.read_text(path))
        except LockFileNotFoundError:
            # Released between our last check and this read
            self._log.info("No mutex found for key %s; setting to %s", self._key, pid)
            self.store.write_text(path, str(pid))
            return

        if holder is None:
            self._log.info("Mutex file %s holds no valid PID; overwriting with %s", path, pid)
            self.store.write_text(path, str(pid))
            return

        if not self.registry.process_exists(holder):
            self._log.info("No process found for mutex %s holder %s; overwriting with %s", self._key, holder, pid)
            self.store.write_text(path, str(pid))
            return

        self._log.warning(
            "Failed to acquire mutex %s after %.2fs; held by running pid %s", self._key, elapsed, holder
        )
        raise LockTimeout(
            f"Failed to acquire mutex {self._key!r} after {elapsed:.2f}s",
            elapsed=elapsed,
            key=self._key,
            holder_pid=holder,
        )

    def __enter__(self) -> "FileMutex":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.release()

    async def __aenter__(self) -> "FileMutex":
        await self.acquire_async()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"FileMutex({self._key!r}, path={str(self.path)!r})"
