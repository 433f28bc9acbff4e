"""Pytest configuration and fixtures."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Iterable, Optional

import pytest

from fsmutex import FileMutex, MutexConfig
from fsmutex.process import ProcessRegistry

PROJECT_ROOT = Path(__file__).resolve().parents[1]
LOCK_HOLDER_SCRIPT = PROJECT_ROOT / "scripts" / "lock_holder.py"

# Short timings keep the suite fast; the cross-process tests use the defaults.
TEST_MAX_WAIT = 0.4
TEST_POLL_INTERVAL = 0.2


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: spawns real helper processes")


class FakeProcessRegistry(ProcessRegistry):
    """Registry with a fixed own PID and an explicit set of live PIDs."""

    def __init__(self, pid: int = 4242, alive: Optional[Iterable[int]] = None) -> None:
        self.pid = pid
        self.alive = set(alive) if alive is not None else {pid}
        self.probed: list = []

    def current_process_id(self) -> int:
        return self.pid

    def process_exists(self, pid: int) -> bool:
        self.probed.append(pid)
        return pid in self.alive


@pytest.fixture
def lock_root(tmp_path: Path) -> Path:
    return tmp_path / "locks-root"


@pytest.fixture
def config(lock_root: Path) -> MutexConfig:
    return MutexConfig(
        environment="test",
        root_dir=lock_root,
        max_wait=TEST_MAX_WAIT,
        poll_interval=TEST_POLL_INTERVAL,
    )


@pytest.fixture
def registry() -> FakeProcessRegistry:
    return FakeProcessRegistry()


@pytest.fixture
def make_mutex(config: MutexConfig, registry: FakeProcessRegistry):
    def _make(key: str = "resource", **overrides) -> FileMutex:
        overrides.setdefault("config", config)
        overrides.setdefault("registry", registry)
        return FileMutex(key, **overrides)

    return _make


@pytest.fixture
def dead_pid() -> int:
    """PID of a child process that has already exited and been reaped."""
    child = subprocess.Popen([sys.executable, "-c", "pass"])
    child.wait()
    return child.pid
