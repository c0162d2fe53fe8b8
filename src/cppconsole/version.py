"""
Central version constant for cppconsole.
"""

__version__ = "0.1.0"

# Name used to derive every generated file (source, artifact, template).
APP_NAME = "cpp_console"
