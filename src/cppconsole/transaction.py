"""
Backup-by-rename transactions for generated files.

A ``FileTransaction`` pairs a path with its ``.bak`` sibling. Entering the
transaction moves the current file into the backup slot (``BACKED_UP``);
leaving it either restores the backup or discards it (``OWNED`` again).
Exactly one of the two slots holds the truth at any instant.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from .errors import BackupConflictError

log = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


class TransactionState(str, Enum):
    OWNED = "owned"
    BACKED_UP = "backed_up"


class FileTransaction:
    """
    Scoped backup of a single file.

    Usage::

        with FileTransaction(source) as txn:
            source.write_text(new_text)
            if ok:
                txn.commit()

    Without ``commit()`` the previous content is restored on exit, including
    when the block raises. If the file did not exist when the transaction
    started, restoring removes whatever was created at the path.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.backup_path = backup_path_for(self.path)
        self.state = TransactionState.OWNED
        self._had_original = False
        self._committed = False

    def backup(self) -> "FileTransaction":
        if self.state is TransactionState.BACKED_UP or self.backup_path.exists():
            raise BackupConflictError(
                "Refusing to back up a file that already has a live backup",
                path=self.path,
                backup_path=self.backup_path,
            )
        self._had_original = self.path.exists()
        if self._had_original:
            os.replace(self.path, self.backup_path)
        self.state = TransactionState.BACKED_UP
        self._committed = False
        log.debug("Backed up %s (existed=%s)", self.path, self._had_original)
        return self

    def commit(self) -> None:
        """Keep the new content; the backup is dropped when the scope ends."""
        self._committed = True

    def rollback(self) -> None:
        if self.state is not TransactionState.BACKED_UP:
            return
        if self._had_original:
            os.replace(self.backup_path, self.path)
        elif self.path.exists():
            self.path.unlink()
        self.state = TransactionState.OWNED
        log.debug("Rolled back %s", self.path)

    def discard_backup(self) -> None:
        if self.state is not TransactionState.BACKED_UP:
            return
        if self._had_original and self.backup_path.exists():
            self.backup_path.unlink()
        self.state = TransactionState.OWNED
        log.debug("Committed %s", self.path)

    def close(self) -> None:
        if self._committed:
            self.discard_backup()
        else:
            self.rollback()

    def __enter__(self) -> "FileTransaction":
        return self.backup()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc_type is not None:
            self._committed = False
        self.close()
