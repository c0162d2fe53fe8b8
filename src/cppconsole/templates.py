"""
Scaffold template management.

The template is the program every session starts from: a display helper and an
empty entry point carrying the structural markers the splicer relies on.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .errors import TemplateError
from .splicer import STRUCTURAL_MARKERS, find_marker

log = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """//<Add additional includes and namespaces here.>
#include <stdlib.h>
#include <iostream>
#include <sstream>
using namespace std;

//This method is required to allow the CppConsole to print.
// *** Do not remove this method.
template <typename T> void cpp_console_print(T value) {
  stringstream ss;
  ss << value << "\\n";
  cout << ss.str();
}

int main(int argc, char** argv) {
//<Add custom initialization logic here.>
  return EXIT_SUCCESS;
}
"""


def missing_markers(text: str) -> List[str]:
    return [marker for marker in STRUCTURAL_MARKERS if find_marker(text, marker) is None]


class TemplateStore:
    def __init__(self, path: Path, default_text: str = DEFAULT_TEMPLATE) -> None:
        self.path = Path(path)
        self.default_text = default_text

    def ensure_template(self) -> bool:
        """Write the default scaffold if none exists. Returns True when written."""
        if self.path.exists():
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self.default_text, encoding="utf-8")
        except OSError as exc:
            raise TemplateError(f"Cannot write template: {exc}", path=self.path) from exc
        log.info("Created template %s", self.path)
        return True

    def load_template(self) -> str:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TemplateError(f"Cannot read template: {exc}", path=self.path) from exc
        missing = missing_markers(text)
        if missing:
            log.warning("Template %s is missing marker line(s): %s", self.path, ", ".join(missing))
        return text
