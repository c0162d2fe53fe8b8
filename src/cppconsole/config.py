"""
Environment-driven settings for the compiler, build tool and logging.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_STATIC_PREFIX = "static "
DEFAULT_ERROR_PATTERN = "error:"


@dataclass
class ConsoleConfig:
    compiler: str = "g++"
    compiler_flags: List[str] = field(default_factory=list)
    make_tool: str = "make"
    static_prefix: str = DEFAULT_STATIC_PREFIX
    error_pattern: str = DEFAULT_ERROR_PATTERN
    log_level: str = "WARNING"


def _split_flags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        return shlex.split(raw)
    except ValueError:
        return raw.split()


def load_config(env: Optional[dict] = None) -> ConsoleConfig:
    environ = env if env is not None else os.environ
    return ConsoleConfig(
        compiler=environ.get("CPPCONSOLE_CXX") or environ.get("CXX") or "g++",
        compiler_flags=_split_flags(environ.get("CPPCONSOLE_CXXFLAGS")),
        make_tool=environ.get("CPPCONSOLE_MAKE") or "make",
        # An explicitly empty prefix disables static routing.
        static_prefix=environ.get("CPPCONSOLE_STATIC_PREFIX", DEFAULT_STATIC_PREFIX),
        error_pattern=environ.get("CPPCONSOLE_ERROR_PATTERN") or DEFAULT_ERROR_PATTERN,
        log_level=(environ.get("CPPCONSOLE_LOG_LEVEL") or "WARNING").upper(),
    )
