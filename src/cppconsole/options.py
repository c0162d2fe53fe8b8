"""
Validated launch options for a console session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import StartupConfigError


class LaunchOptions(BaseModel):
    """
    Project files are optional, but they come as a pair: the project's entry
    file (temporarily replaced during builds) and the executable its build
    produces. ``make_path`` may name the makefile directory or the makefile.
    """

    model_config = ConfigDict(frozen=True)

    project_main: Optional[Path] = Field(None, description="Project entry file replaced during builds")
    project_artifact: Optional[Path] = Field(None, description="Executable produced by the project build")
    make_path: Optional[Path] = Field(None, description="Makefile directory or makefile")

    @model_validator(mode="after")
    def _check_paths(self) -> "LaunchOptions":
        if self.project_main is not None and self.project_artifact is None:
            raise ValueError("The Project executable file was not provided.")
        if self.project_main is not None and not self.project_main.is_file():
            raise ValueError(f"Could not find project main file: {self.project_main}")
        if self.project_artifact is not None and not self.project_artifact.exists():
            raise ValueError(f"Could not find project executable file: {self.project_artifact}")
        if self.make_path is not None:
            if self.project_main is None:
                raise ValueError("The -m option requires a project main file and executable.")
            if not self.make_path.exists():
                raise ValueError(f"Could not find makefile directory: {self.make_path}")
        return self

    @property
    def project_mode(self) -> bool:
        return self.project_main is not None


def _first_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    ctx_error = (errors[0].get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return str(errors[0].get("msg", exc))


def parse_launch_options(
    project_main: Optional[Path] = None,
    project_artifact: Optional[Path] = None,
    make_path: Optional[Path] = None,
) -> LaunchOptions:
    try:
        return LaunchOptions(
            project_main=project_main,
            project_artifact=project_artifact,
            make_path=make_path,
        )
    except ValidationError as exc:
        raise StartupConfigError(_first_message(exc)) from exc
