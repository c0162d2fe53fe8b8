"""
cppconsole core package.
"""

from .version import __version__, APP_NAME  # noqa: F401

__all__ = [
    "braces",
    "build",
    "session",
    "splicer",
    "templates",
    "transaction",
    "__version__",
    "APP_NAME",
]
