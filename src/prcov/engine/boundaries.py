"""Best-effort function/method boundary detection.

Boundaries only refine how uncovered ranges are *displayed*; a locator that finds
nothing (or fails to parse) simply leaves the display ranges ungrouped.
"""

from __future__ import annotations

import ast
import re
from pathlib import PurePath
from typing import TYPE_CHECKING, Protocol

from prcov import logger as _package_logger
from prcov.model.coverage import MethodBoundary

if TYPE_CHECKING:
    import logging


class BoundaryLocator(Protocol):
    def locate(self, source: str) -> list[MethodBoundary]: ...


class NullBoundaryLocator:
    """Locator for languages without boundary support."""

    def locate(self, source: str) -> list[MethodBoundary]:  # noqa: ARG002
        return []


class PythonBoundaryLocator:
    """Locate ``def``/``async def`` blocks using the :mod:`ast` tree.

    The boundary starts at the ``def`` line itself (decorators are not part of it) and
    ends at the last line of the body.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _package_logger.getChild("boundaries")

    def locate(self, source: str) -> list[MethodBoundary]:
        try:
            tree = ast.parse(source)
        except (SyntaxError, ValueError, RecursionError) as exc:
            self._logger.debug("cannot parse source for method boundaries: %s", exc)
            return []

        boundaries = [
            MethodBoundary(node.lineno, node.end_lineno or node.lineno)
            for node in ast.walk(tree)
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        return sorted(boundaries, key=lambda b: (b.start_line, b.end_line))


_RUBY_DEF = re.compile(r"^\s*(?:(?:private|protected|public|module_function)\s+)?def\s")
# def name(args) = expr / def self.name = expr
_RUBY_ENDLESS_DEF = re.compile(r"^\s*(?:\w+\s+)?def\s+[^\s(=]+[=?!]?(?:\([^)]*\))?\s*=(?![=~>])")
_RUBY_COMMENT = re.compile(r"(?:^|\s)#(?!\{).*$")
_RUBY_OPENERS = (
    re.compile(r"\bdef\s"),
    re.compile(r"^\s*(?:class|module)\b"),
    re.compile(r"(?:^|[=(;]|\|\||&&)\s*(?:if|unless|while|until|case|begin|for)\b"),
)
_RUBY_DO = re.compile(r"\bdo\b")
_RUBY_LOOP_DO = re.compile(r"^\s*(?:while|until|for)\b.*\bdo\b")
_RUBY_END = re.compile(r"(?<![.\w:])end\b(?![?!])")


class RubyBoundaryLocator:
    """Locate Ruby ``def ... end`` blocks with a keyword depth counter.

    This is a textual heuristic, not a parser: block keywords that appear inside string
    literals or heredocs are counted as well. When no matching ``end`` is found the
    boundary extends to the last line of the file.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _package_logger.getChild("boundaries")

    def locate(self, source: str) -> list[MethodBoundary]:
        lines = source.splitlines()
        boundaries: list[MethodBoundary] = []
        in_doc = False
        for idx, line in enumerate(lines):
            if line.startswith("=begin"):
                in_doc = True
            if in_doc:
                in_doc = not line.startswith("=end")
                continue
            if not _RUBY_DEF.match(line):
                continue
            if _RUBY_ENDLESS_DEF.match(line):
                boundaries.append(MethodBoundary(idx + 1, idx + 1))
                continue
            boundaries.append(MethodBoundary(idx + 1, self._find_matching_end(lines, idx)))
        self._logger.debug("found %d ruby method boundaries", len(boundaries))
        return boundaries

    @staticmethod
    def _find_matching_end(lines: list[str], start_idx: int) -> int:
        depth = 0
        for idx in range(start_idx, len(lines)):
            code = _RUBY_COMMENT.sub("", lines[idx])
            depth += sum(len(pattern.findall(code)) for pattern in _RUBY_OPENERS)
            if not _RUBY_LOOP_DO.match(code):
                depth += len(_RUBY_DO.findall(code))
            depth -= len(_RUBY_END.findall(code))
            if depth <= 0:
                return idx + 1
        return len(lines)


_NULL_LOCATOR = NullBoundaryLocator()

_LOCATORS: dict[str, type[PythonBoundaryLocator] | type[RubyBoundaryLocator]] = {
    ".py": PythonBoundaryLocator,
    ".pyi": PythonBoundaryLocator,
    ".rb": RubyBoundaryLocator,
    ".rake": RubyBoundaryLocator,
}


def locator_for(path: str | PurePath, *, logger: logging.Logger | None = None) -> BoundaryLocator:
    """Return the boundary locator registered for the suffix of *path*."""
    locator_cls = _LOCATORS.get(PurePath(path).suffix.lower())
    if locator_cls is None:
        return _NULL_LOCATOR
    return locator_cls(logger=logger)


__all__ = [
    "BoundaryLocator",
    "NullBoundaryLocator",
    "PythonBoundaryLocator",
    "RubyBoundaryLocator",
    "locator_for",
]
