"""Naive per-document symbol index.

Declarations are found line by line with a small ordered list of regular
expression shapes. There is no tokenizer: a shape matches inside comments and
string literals just as well as in code.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple

from ..lsp.types import Range, line_range
from ..utils.text import split_lines

logger = logging.getLogger(__name__)

IDENTIFIER = r"[a-zA-Z0-9_$]+"


class DeclarationKind(str, Enum):
    Variable = "variable"
    Function = "function"


@dataclass(frozen=True)
class Symbol:
    name: str
    kind: DeclarationKind
    range: Range
    # The document the symbol was declared in. Not an owning reference.
    uri: str


class DeclarationMatch(NamedTuple):
    name: str
    start: int
    end: int


@dataclass(frozen=True)
class DeclarationShape:
    """A single-line declaration pattern whose first group is the declared name."""

    kind: DeclarationKind
    pattern: re.Pattern

    def match(self, line: str) -> DeclarationMatch | None:
        m = self.pattern.search(line)
        if not m or not m.group(1):
            return None
        name = m.group(1)
        # The span is the first occurrence of the name text on the line, which
        # is not necessarily where the declaration matched.
        start = line.find(name)
        return DeclarationMatch(name, start, start + len(name))


BINDING_SHAPE = DeclarationShape(
    DeclarationKind.Variable,
    re.compile(rf"\b(?:let|const)\s+({IDENTIFIER})\s*=", re.ASCII),
)
FUNCTION_SHAPE = DeclarationShape(
    DeclarationKind.Function,
    re.compile(rf"\bfunction\s+({IDENTIFIER})\s*\(", re.ASCII),
)

DEFAULT_SHAPES: tuple[DeclarationShape, ...] = (BINDING_SHAPE, FUNCTION_SHAPE)


def scan_symbols(uri: str, text: str, shapes: Iterable[DeclarationShape] = DEFAULT_SHAPES) -> list[Symbol]:
    shapes = tuple(shapes)
    symbols: list[Symbol] = []
    for line_number, line in enumerate(split_lines(text)):
        for shape in shapes:
            match = shape.match(line)
            if match is None:
                continue
            symbols.append(
                Symbol(
                    name=match.name,
                    kind=shape.kind,
                    range=line_range(line_number, match.start, match.end),
                    uri=uri,
                )
            )
    return symbols


class SymbolIndex:
    """Symbol lists keyed by document URI.

    Each call to index() replaces the document's list wholesale. Entries are
    never evicted, so closing a document leaves its symbols in place.
    """

    def __init__(self, shapes: Iterable[DeclarationShape] = DEFAULT_SHAPES):
        self.shapes = tuple(shapes)
        self._symbols: dict[str, list[Symbol]] = {}

    def index(self, uri: str, text: str) -> list[Symbol]:
        symbols = scan_symbols(uri, text, self.shapes)
        self._symbols[uri] = symbols
        logger.debug(f"Indexed {len(symbols)} symbols for {uri}: {[s.name for s in symbols]}")
        return symbols

    def symbols(self, uri: str) -> list[Symbol]:
        return list(self._symbols.get(uri, []))

    def find(self, uri: str, name: str) -> Symbol | None:
        for symbol in self._symbols.get(uri, []):
            if symbol.name == name:
                return symbol
        return None

    def uris(self) -> list[str]:
        return list(self._symbols)

    def __contains__(self, uri: str) -> bool:
        return uri in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)
