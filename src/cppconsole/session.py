"""
Interactive session engine.

The engine accumulates user fragments until their braces balance, splices the
completed construct into the persisted program at a marker line, and hands the
candidate program to the build runner. Whatever the outcome, it returns to the
idle state and re-reads the persisted source when the next round starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TextIO

from . import braces
from .build import BuildResult, BuildRunner
from .config import ConsoleConfig
from .errors import BootstrapCompileError
from .paths import SessionPaths
from .splicer import (
    DISPLAY_CALL_PREFIX,
    ENTRY_MARKER,
    EXIT_MARKER,
    HELPER_MARKER,
    find_marker,
    join_lines,
    splice_postamble,
    splice_preamble,
    strip_display_calls,
)
from .templates import TemplateStore

log = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
RELOAD_COMMAND = "reload!"
INCLUDE_PREFIXES = ("#include", "using namespace")
PROMPT_NAME = "CppConsole"

# Tail appended when the persisted source has no exit marker to splice against.
DEFAULT_ENTRY_TAIL = ["  return EXIT_SUCCESS;", "}"]


class FragmentKind(str, Enum):
    INCLUDE_OR_NAMESPACE = "include_or_namespace"
    STATIC_DECLARATION = "static_declaration"
    STATEMENT = "statement"


class SessionPhase(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    DISPATCHING = "dispatching"


@dataclass
class SessionState:
    depth: int = 0
    kind: Optional[FragmentKind] = None
    # Splice prefix followed by the round's fragments so far.
    buffer: List[str] = field(default_factory=list)
    postamble: List[str] = field(default_factory=list)
    fragments: List[str] = field(default_factory=list)
    dispatching: bool = False
    last_expression: Optional[str] = None

    @property
    def phase(self) -> SessionPhase:
        if self.dispatching:
            return SessionPhase.DISPATCHING
        if self.depth > 0 or self.fragments:
            return SessionPhase.ACCUMULATING
        return SessionPhase.IDLE

    def reset(self) -> None:
        self.depth = 0
        self.kind = None
        self.buffer = []
        self.postamble = []
        self.fragments = []
        self.dispatching = False


def classify(text: str, static_prefix: str = "static ") -> FragmentKind:
    if text.startswith(INCLUDE_PREFIXES):
        return FragmentKind.INCLUDE_OR_NAMESPACE
    if static_prefix and text.startswith(static_prefix):
        return FragmentKind.STATIC_DECLARATION
    return FragmentKind.STATEMENT


def apply_trailing_transform(fragment: str) -> tuple[str, bool]:
    """
    Rewrite a completing statement by its last character.

    ``x = f()!`` runs once as ``x = f();`` without being kept; ``x@`` prints
    ``x`` through the display helper without being kept. Returns the text and
    whether the round is ephemeral.
    """
    stripped = fragment.rstrip()
    if stripped.endswith("!"):
        return stripped[:-1] + ";", True
    if stripped.endswith("@"):
        return f"{DISPLAY_CALL_PREFIX}{stripped[:-1]} );", True
    return fragment, False


def display_call(expression: str) -> str:
    return f"{DISPLAY_CALL_PREFIX}{expression.replace(';', ' ')});"


class SessionEngine:
    def __init__(
        self,
        paths: SessionPaths,
        runner: BuildRunner,
        templates: Optional[TemplateStore] = None,
        config: Optional[ConsoleConfig] = None,
        out: Optional[TextIO] = None,
    ) -> None:
        self.paths = paths
        self.runner = runner
        self.templates = templates or TemplateStore(paths.template)
        self.config = config or runner.config
        self.out = out
        self.state = SessionState()

    # ------------------------------------------------------------------ #
    # Front-end dispatch
    # ------------------------------------------------------------------ #
    def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        if line == EXIT_COMMAND:
            return False
        if line == RELOAD_COMMAND:
            self.reload()
            return True
        if line == "":
            self.repeat_last()
            return True
        self.submit(line)
        return True

    def prompt(self) -> str:
        if self.state.depth == 0:
            return f"{PROMPT_NAME}:>"
        return f"{PROMPT_NAME}{'{' * self.state.depth}>"

    # ------------------------------------------------------------------ #
    # Rounds
    # ------------------------------------------------------------------ #
    def start(self) -> BuildResult:
        """Bootstrap the template and verify it compiles before accepting input."""
        result = self.reload()
        if not result.ok:
            raise BootstrapCompileError(
                f"Compile failed. Ensure {self.paths.template.name} has no syntax errors.",
                path=self.paths.template,
            )
        return result

    def reload(self) -> BuildResult:
        print("Reloading...", file=self.out)
        self.templates.ensure_template()
        text = self.templates.load_template()
        self.state.reset()
        self.state.last_expression = None
        return self._dispatch(text, ephemeral=False)

    def submit(self, text: str) -> Optional[BuildResult]:
        """
        Feed one fragment. Returns the build result when the fragment completed
        a round, or None while the construct is still open.
        """
        state = self.state
        if classify(text, self.config.static_prefix) is FragmentKind.INCLUDE_OR_NAMESPACE:
            return self.submit_include(text)

        if not state.fragments:
            state.kind = classify(text, self.config.static_prefix)
            self._seed(state.kind)

        state.depth = braces.update(state.depth, text)
        if not braces.is_complete(state.depth):
            state.buffer.append(text)
            state.fragments.append(text)
            log.debug("Accumulating %s fragment at depth %s", state.kind.value, state.depth)
            return None

        kind = state.kind
        single_line = not state.fragments
        fragment, ephemeral = text, False
        if kind is FragmentKind.STATEMENT:
            fragment, ephemeral = apply_trailing_transform(text)
        full_text = join_lines(state.buffer + [fragment] + state.postamble)
        result = self._dispatch(full_text, ephemeral=ephemeral)
        if kind is FragmentKind.STATEMENT and single_line:
            state.last_expression = _expression_of(text)
        return result

    def submit_include(self, text: str) -> BuildResult:
        """
        Splice an include or namespace line at the very top of the persisted
        program. A round that is still accumulating is left open; on success
        the line is also prepended to its buffer so the pending program keeps it.
        """
        state = self.state
        pending = state.phase is SessionPhase.ACCUMULATING
        full_text = join_lines([text]) + self._persisted_source()
        if not pending:
            return self._dispatch(full_text, ephemeral=False)

        state.dispatching = True
        try:
            result = self.runner.run(full_text, ephemeral=False)
        finally:
            state.dispatching = False
        if result.persisted:
            state.buffer.insert(0, text)
        return result

    def repeat_last(self) -> Optional[BuildResult]:
        """Display the value of the last single-line statement, without keeping it."""
        state = self.state
        if state.phase is not SessionPhase.IDLE or not state.last_expression:
            return None
        self._seed(FragmentKind.STATEMENT)
        full_text = join_lines(state.buffer + [display_call(state.last_expression)] + state.postamble)
        return self._dispatch(full_text, ephemeral=True)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _persisted_source(self) -> str:
        if not self.paths.source.exists():
            return ""
        return self.paths.source.read_text(encoding="utf-8")

    def _seed(self, kind: FragmentKind) -> None:
        source = self._persisted_source()
        if kind is FragmentKind.STATIC_DECLARATION:
            marker = HELPER_MARKER if find_marker(source, HELPER_MARKER) is not None else ENTRY_MARKER
            self.state.buffer = splice_preamble(source, marker)
            self.state.postamble = splice_postamble(source, marker)
            return
        self.state.buffer = strip_display_calls(splice_preamble(source, EXIT_MARKER))
        self.state.postamble = splice_postamble(source, EXIT_MARKER) or list(DEFAULT_ENTRY_TAIL)

    def _dispatch(self, full_text: str, ephemeral: bool) -> BuildResult:
        self.state.dispatching = True
        try:
            return self.runner.run(full_text, ephemeral=ephemeral)
        finally:
            last_expression = self.state.last_expression
            self.state.reset()
            self.state.last_expression = last_expression


def _expression_of(text: str) -> str:
    return text.rstrip().rstrip("!@").rstrip()
