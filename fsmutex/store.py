"""Filesystem operations used by the mutex.

Every unexpected ``OSError`` is wrapped into ``IOFailure`` so lock
corruption never goes unnoticed. Missing files raise the narrower
``LockFileNotFoundError`` and the caller decides whether that is fine.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from fsmutex.exceptions import IOFailure, LockFileNotFoundError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Mode for every lock file, whichever path wrote it
LOCK_FILE_MODE = 0o644


class FileStore:
    """Local filesystem access for lock directories and lock files."""

    encoding = "utf-8"

    def ensure_directory(self, path: PathLike) -> None:
        """Create ``path`` and missing parents; no-op if it already exists."""
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(
                "Cannot create lock directory", operation="mkdir", path=str(path), original_error=exc
            ) from exc

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def read_text(self, path: PathLike) -> str:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except FileNotFoundError as exc:
            raise LockFileNotFoundError(
                "Lock file not found", operation="read", path=str(path), original_error=exc
            ) from exc
        except OSError as exc:
            raise IOFailure(
                "Cannot read lock file", operation="read", path=str(path), original_error=exc
            ) from exc

    def write_text(self, path: PathLike, content: str) -> None:
        """Create or replace ``path`` so readers see either old or new content.

        The content goes to a temp file in the same directory first and is
        then moved over the target with ``os.replace``.
        """
        target = Path(path)
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(content)
            os.chmod(tmp, LOCK_FILE_MODE)
            os.replace(tmp, str(target))
            tmp = None
        except OSError as exc:
            raise IOFailure(
                "Cannot write lock file", operation="write", path=str(target), original_error=exc
            ) from exc
        finally:
            if tmp is not None:
                try:
                    os.unlink(tmp)
                except OSError as cleanup_err:
                    logger.debug("Failed to remove temp file %s: %s", tmp, cleanup_err)

    def create_exclusive(self, path: PathLike, content: str) -> bool:
        """Atomically create ``path`` holding ``content`` if it does not exist.

        Returns:
            True if this call created the file, False if it already existed.
        """
        target = Path(path)
        try:
            fd = os.open(str(target), os.O_CREAT | os.O_EXCL | os.O_WRONLY, LOCK_FILE_MODE)
        except FileExistsError:
            return False
        except OSError as exc:
            raise IOFailure(
                "Cannot create lock file", operation="create", path=str(target), original_error=exc
            ) from exc

        try:
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(content)
            os.chmod(str(target), LOCK_FILE_MODE)
        except OSError as exc:
            # Do not leave an empty file behind that others would take for a held lock
            try:
                target.unlink()
            except OSError as cleanup_err:
                logger.debug("Failed to remove partial lock file %s: %s", target, cleanup_err)
            raise IOFailure(
                "Cannot write lock file", operation="create", path=str(target), original_error=exc
            ) from exc
        return True

    def delete(self, path: PathLike) -> None:
        try:
            Path(path).unlink()
        except FileNotFoundError as exc:
            raise LockFileNotFoundError(
                "Lock file not found", operation="delete", path=str(path), original_error=exc
            ) from exc
        except OSError as exc:
            raise IOFailure(
                "Cannot delete lock file", operation="delete", path=str(path), original_error=exc
            ) from exc
