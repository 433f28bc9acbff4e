"""Hold a FileMutex from a separate process.

Usage:
    python scripts/lock_holder.py <root_dir> <key> [hold_seconds] [environment]

Prints "acquired <pid>" once the lock is held, sleeps, then releases it.
Used by the cross-process tests.
"""

import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fsmutex import FileMutex, MutexConfig  # noqa: E402
from fsmutex.logging_config import setup_logging  # noqa: E402


def main(argv: list) -> int:
    root_dir = Path(argv[1])
    key = argv[2]
    hold_seconds = float(argv[3]) if len(argv) > 3 else 5.0
    environment = argv[4] if len(argv) > 4 else "test"

    setup_logging()
    config = MutexConfig(environment=environment, root_dir=root_dir)
    with FileMutex(key, config=config) as mutex:
        print(f"acquired {mutex.registry.current_process_id()}", flush=True)
        time.sleep(hold_seconds)
        print("releasing", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
