"""Position queries over the symbol index and the raw document text.

All queries are name based and confined to a single document. Nothing here
raises for an unknown document, an out-of-range position or an unknown name:
the result is simply None or an empty list.
"""

import logging

from ..documents import DocumentProvider
from ..lsp.types import (
    CompletionItem,
    CompletionItemKind,
    Hover,
    Location,
    MarkupContent,
    MarkupKind,
    Position,
    TextEdit,
    WorkspaceEdit,
    line_range,
)
from ..utils.text import split_lines
from .symbols import Symbol, SymbolIndex
from .words import word_at

logger = logging.getLogger(__name__)

STATIC_COMPLETIONS = (
    CompletionItem(
        label="HelloWorld",
        kind=CompletionItemKind.Text,
        detail="Example Completion",
        documentation="A static completion item.",
    ),
    CompletionItem(
        label="Print",
        kind=CompletionItemKind.Function,
        detail="Example Function",
        documentation="Another static completion item.",
    ),
)


def format_hover(symbol: Symbol) -> str:
    return f"**Symbol**: `{symbol.name}`\n**Type**: `{symbol.kind.value}`"


def find_first_occurrences(uri: str, text: str, word: str) -> list[Location]:
    """One location per line: the first plain substring match of word.

    This is not token aware; "count" also matches inside "counter".
    """
    locations = []
    for i, line in enumerate(split_lines(text)):
        idx = line.find(word)
        if idx != -1:
            locations.append(Location(uri=uri, range=line_range(i, idx, idx + len(word))))
    return locations


class QueryEngine:
    def __init__(self, index: SymbolIndex, documents: DocumentProvider):
        self.index = index
        self.documents = documents

    def word_at(self, uri: str, line: int, character: int) -> str | None:
        doc = self.documents.get(uri)
        if doc is None:
            logger.debug(f"No open document for {uri}")
            return None
        return word_at(doc.get_text(), line, character)

    def hover(self, uri: str, position: Position) -> Hover | None:
        for symbol in self.index.symbols(uri):
            if symbol.range.contains(position):
                return Hover(contents=MarkupContent(kind=MarkupKind.Markdown, value=format_hover(symbol)))
        return None

    def definition(self, uri: str, position: Position) -> Location | None:
        word = self.word_at(uri, position.line, position.character)
        if not word:
            return None
        symbol = self.index.find(uri, word)
        if symbol is None:
            logger.debug(f"No declaration of {word!r} in {uri}")
            return None
        return Location(uri=symbol.uri, range=symbol.range)

    def references(self, uri: str, position: Position, include_declaration: bool = True) -> list[Location]:
        # include_declaration is accepted for protocol compatibility; the
        # declaration line is reported like any other line containing the word.
        doc = self.documents.get(uri)
        if doc is None:
            return []
        word = self.word_at(uri, position.line, position.character)
        if not word:
            return []
        return find_first_occurrences(uri, doc.get_text(), word)

    def rename(self, uri: str, position: Position, new_name: str) -> WorkspaceEdit | None:
        doc = self.documents.get(uri)
        if doc is None:
            return None
        old_name = self.word_at(uri, position.line, position.character)
        if not old_name or not new_name:
            return None
        edits = [
            TextEdit(range=location.range, new_text=new_name)
            for location in find_first_occurrences(uri, doc.get_text(), old_name)
        ]
        logger.debug(f"Rename {old_name!r} -> {new_name!r} in {uri}: {len(edits)} edits")
        return WorkspaceEdit(changes={uri: edits})

    def completion(self) -> list[CompletionItem]:
        return [item.model_copy() for item in STATIC_COMPLETIONS]
