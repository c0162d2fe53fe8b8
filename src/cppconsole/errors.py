"""
Custom error types for the cppconsole session engine.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class ConsoleError(Exception):
    """Base error with optional file metadata."""

    message: str
    path: Optional[Path] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class StartupConfigError(ConsoleError):
    """Invalid command-line configuration; the console never starts."""


class BootstrapCompileError(ConsoleError):
    """The template failed its verification build."""


class TemplateError(ConsoleError):
    """The scaffold template could not be read or written."""


@dataclass
class BackupConflictError(ConsoleError):
    """Raised when a file already has a live backup slot."""

    backup_path: Optional[Path] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.backup_path is not None:
            return f"{self.message} (backup already exists at {self.backup_path})"
        return super().__str__()
