"""
Fixed file locations for a console session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .transaction import backup_path_for
from .version import APP_NAME

log = logging.getLogger(__name__)


@dataclass
class SessionPaths:
    """
    Generated files live in ``workdir`` and are named after ``APP_NAME``.

    In project mode ``project_main`` is the user's real entry file that gets
    temporarily replaced during a build, and ``artifact`` points at the
    project's own executable instead of the generated one.
    """

    workdir: Path
    source: Path
    template: Path
    artifact: Path
    project_main: Optional[Path] = None
    make_path: Optional[Path] = None

    @classmethod
    def standalone(cls, workdir: Path) -> "SessionPaths":
        workdir = Path(workdir)
        return cls(
            workdir=workdir,
            source=workdir / f"{APP_NAME}.cpp",
            template=workdir / f"{APP_NAME}.config",
            artifact=workdir / f"{APP_NAME}.exe",
        )

    @classmethod
    def project(
        cls,
        workdir: Path,
        project_main: Path,
        project_artifact: Path,
        make_path: Optional[Path] = None,
    ) -> "SessionPaths":
        paths = cls.standalone(workdir)
        paths.project_main = Path(project_main)
        paths.artifact = Path(project_artifact)
        paths.make_path = Path(make_path) if make_path is not None else Path(workdir)
        return paths

    @property
    def project_mode(self) -> bool:
        return self.project_main is not None

    @property
    def source_backup(self) -> Path:
        return backup_path_for(self.source)

    def clean(self) -> None:
        """
        Remove generated files. The template always survives; the artifact is
        removed only when it is the console's own (standalone mode).
        """
        targets = [self.source, self.source_backup]
        if not self.project_mode:
            targets.append(self.artifact)
        for target in targets:
            if target.exists():
                target.unlink()
                log.debug("Removed %s", target)
