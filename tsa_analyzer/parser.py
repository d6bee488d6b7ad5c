"""TypeScript syntax trees via Tree-sitter.

Detectors never touch tree-sitter directly. They work against
:class:`SyntaxNode`, a read-only view exposing the node kind, position,
children and text, so another parser backend only has to implement
:class:`Parser` and produce ``SyntaxNode`` trees.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Parser as TSParser

from .errors import ParseError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# File-extension <-> grammar mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
}


class NodeKind(str, Enum):
    """Closed set of node categories the detectors care about."""

    LOOP = "loop"
    CALL = "call"
    ARRAY_LITERAL = "array_literal"
    FUNCTION_DECLARATION = "function_declaration"
    METHOD = "method"
    ARROW_FUNCTION = "arrow_function"
    FUNCTION_EXPRESSION = "function_expression"
    CONDITIONAL = "conditional"
    SWITCH_CASE = "switch_case"
    CATCH_CLAUSE = "catch_clause"
    TERNARY = "ternary"
    BINARY = "binary"
    PROPERTY_ACCESS = "property_access"
    IMPORT = "import"
    OTHER = "other"


_KIND_BY_TYPE: Dict[str, NodeKind] = {
    "for_statement": NodeKind.LOOP,
    "for_in_statement": NodeKind.LOOP,
    "while_statement": NodeKind.LOOP,
    "do_statement": NodeKind.LOOP,
    "call_expression": NodeKind.CALL,
    "array": NodeKind.ARRAY_LITERAL,
    "function_declaration": NodeKind.FUNCTION_DECLARATION,
    "generator_function_declaration": NodeKind.FUNCTION_DECLARATION,
    "method_definition": NodeKind.METHOD,
    "arrow_function": NodeKind.ARROW_FUNCTION,
    "function_expression": NodeKind.FUNCTION_EXPRESSION,
    "function": NodeKind.FUNCTION_EXPRESSION,
    "generator_function": NodeKind.FUNCTION_EXPRESSION,
    "if_statement": NodeKind.CONDITIONAL,
    "switch_case": NodeKind.SWITCH_CASE,
    "catch_clause": NodeKind.CATCH_CLAUSE,
    "ternary_expression": NodeKind.TERNARY,
    "binary_expression": NodeKind.BINARY,
    "member_expression": NodeKind.PROPERTY_ACCESS,
    "import_statement": NodeKind.IMPORT,
}


# ===================================================================
# Read-only syntax node view
# ===================================================================

class SyntaxNode:
    """Read-only wrapper around a tree-sitter node."""

    __slots__ = ("_node",)

    def __init__(self, ts_node: Any) -> None:
        self._node = ts_node

    def __repr__(self) -> str:
        return f"SyntaxNode({self.type!r}, line={self.line})"

    @property
    def kind(self) -> NodeKind:
        return _KIND_BY_TYPE.get(self._node.type, NodeKind.OTHER)

    @property
    def type(self) -> str:
        """Raw grammar type, e.g. ``for_in_statement``."""
        return self._node.type

    @property
    def line(self) -> int:
        """1-based start line."""
        return self._node.start_point[0] + 1

    @property
    def text(self) -> str:
        raw = self._node.text
        return raw.decode("utf-8", errors="replace") if raw is not None else ""

    @property
    def has_error(self) -> bool:
        return self._node.has_error

    @property
    def parent(self) -> Optional["SyntaxNode"]:
        parent = self._node.parent
        return SyntaxNode(parent) if parent is not None else None

    @property
    def children(self) -> List["SyntaxNode"]:
        return [SyntaxNode(c) for c in self._node.children]

    @property
    def named_children(self) -> List["SyntaxNode"]:
        """Children that are grammar nodes rather than punctuation/comments."""
        return [SyntaxNode(c) for c in self._node.named_children if c.type != "comment"]

    def field(self, name: str) -> Optional["SyntaxNode"]:
        child = self._node.child_by_field_name(name)
        return SyntaxNode(child) if child is not None else None

    def ancestors(self) -> Iterator["SyntaxNode"]:
        current = self._node.parent
        while current is not None:
            yield SyntaxNode(current)
            current = current.parent

    def descendants(self) -> Iterator["SyntaxNode"]:
        """Yield every node below this one in pre-order (self excluded)."""
        stack = list(reversed(self._node.children))
        while stack:
            node = stack.pop()
            yield SyntaxNode(node)
            stack.extend(reversed(node.children))


# ===================================================================
# Abstract Parser Interface
# ===================================================================

class Parser(ABC):
    """Abstract base class for source parsers."""

    @abstractmethod
    def supports(self, file_path: Path) -> bool:
        """Return True if this parser can handle *file_path*."""
        ...

    @abstractmethod
    def parse_source(self, file_path: Path, source: str) -> SyntaxNode:
        """Parse *source* (the contents of *file_path*) into a tree."""
        ...

    @staticmethod
    def read_source(file_path: Path) -> str:
        """Read *file_path* as UTF-8, raising :class:`ParseError` on failure."""
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(file_path, str(exc)) from exc

    def parse_file(self, file_path: Path) -> SyntaxNode:
        """Read and parse a single file."""
        return self.parse_source(file_path, self.read_source(file_path))


# ===================================================================
# Tree-sitter Parser
# ===================================================================

class TreeSitterParser(Parser):
    """Error-tolerant TypeScript/TSX parser built on Tree-sitter.

    Tree-sitter recovers from syntax errors and still yields a tree, so by
    default broken files are analysed as far as they parse. With
    ``strict=True`` any tree containing error nodes raises
    :class:`ParseError` instead.
    """

    _GRAMMARS = {
        "typescript": tree_sitter_typescript.language_typescript,
        "tsx": tree_sitter_typescript.language_tsx,
    }

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._parsers: Dict[str, TSParser] = {}
        for lang, factory in self._GRAMMARS.items():
            self._parsers[lang] = TSParser(Language(factory()))
            logger.debug("Loaded tree-sitter grammar for %s", lang)

    def supports(self, file_path: Path) -> bool:
        return LANGUAGE_MAP.get(file_path.suffix) in self._parsers

    def parse_source(self, file_path: Path, source: str) -> SyntaxNode:
        lang = LANGUAGE_MAP.get(file_path.suffix)
        if lang is None:
            raise ParseError(file_path, f"unsupported file type '{file_path.suffix}'")

        tree = self._parsers[lang].parse(source.encode("utf-8"))
        root = SyntaxNode(tree.root_node)
        if root.has_error:
            if self.strict:
                raise ParseError(file_path, "syntax errors in source")
            logger.debug("Syntax errors in %s; analysing recovered tree", file_path)
        return root
