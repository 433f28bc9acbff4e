"""Process identity and liveness probing."""

from __future__ import annotations

import errno
import logging
import os
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ProcessRegistry(ABC):
    """Answers who the current process is and whether another one is running."""

    @abstractmethod
    def current_process_id(self) -> int:
        """Return the id written into lock files claimed by this process."""

    @abstractmethod
    def process_exists(self, pid: int) -> bool:
        """Return True iff a process with ``pid`` is running on this host.

        Implementations must not have any effect visible to the probed process.
        """


class LocalProcessRegistry(ProcessRegistry):
    """Registry for the local host based on ``os.getpid`` and ``os.kill(pid, 0)``.

    Signal 0 performs the existence and permission checks without
    delivering anything to the target.
    """

    def current_process_id(self) -> int:
        return os.getpid()

    def process_exists(self, pid: int) -> bool:
        # kill(0, 0) and kill(-n, 0) address process groups, not a single pid
        if pid <= 0:
            return False
        if os.name == "nt":
            return _pid_exists_windows(pid)
        try:
            os.kill(pid, 0)
        except OSError as exc:
            # Only ESRCH means the process is gone. EPERM and platform specific
            # errors mean something is there that we may not signal.
            if getattr(exc, "errno", None) == errno.ESRCH:
                return False
            logger.debug("Liveness probe for PID %s raised %s; treating as alive", pid, exc)
            return True
        return True


def _pid_exists_windows(pid: int) -> bool:
    """Check a PID via OpenProcess; os.kill on Windows would terminate the target."""
    import ctypes

    synchronize = 0x100000
    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    handle = kernel32.OpenProcess(synchronize, False, pid)
    if handle:
        kernel32.CloseHandle(handle)
        return True
    return False
