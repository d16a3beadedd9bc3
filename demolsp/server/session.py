import logging
from dataclasses import dataclass, field

from ..analysis.diagnostics import DiagnosticsChecker, Publisher
from ..analysis.queries import QueryEngine
from ..analysis.symbols import SymbolIndex
from ..documents import DocumentStore, OpenDocument
from ..lsp.types import (
    Location,
    Position,
    PositionEncodingKind,
    Range,
    TextDocumentContentChangeEvent,
    TextDocumentItem,
)
from ..utils.config import get_diagnostic_source, get_max_line_length
from ..utils.text import from_str_index, split_lines, to_str_index

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything one client connection needs: open documents, their symbols
    and the diagnostics and query services built on them.

    The query engine works in Python string indices. position_from_client and
    locations_to_client translate at the protocol boundary when the client
    counts columns in another unit.
    """

    documents: DocumentStore = field(default_factory=DocumentStore)
    index: SymbolIndex = field(default_factory=SymbolIndex)
    checker: DiagnosticsChecker = field(default_factory=DiagnosticsChecker)
    position_encoding: str = PositionEncodingKind.UTF32
    queries: QueryEngine = field(init=False)

    def __post_init__(self) -> None:
        self.queries = QueryEngine(self.index, self.documents)
        self.set_position_encoding(self.position_encoding)

    @classmethod
    def from_config(
        cls,
        config: dict,
        publish: Publisher | None = None,
        position_encoding: str = PositionEncodingKind.UTF32,
    ) -> "Session":
        checker = DiagnosticsChecker(
            publish=publish,
            max_line_length=get_max_line_length(config),
            source=get_diagnostic_source(config),
        )
        return cls(checker=checker, position_encoding=position_encoding)

    def set_position_encoding(self, encoding: str) -> None:
        self.position_encoding = encoding
        self.documents.position_encoding = encoding
        self.checker.position_encoding = encoding
        logger.debug(f"Position encoding: {encoding}")

    def open_document(self, item: TextDocumentItem) -> OpenDocument:
        doc = self.documents.open(item)
        self._content_changed(doc)
        return doc

    def change_document(
        self,
        uri: str,
        changes: list[TextDocumentContentChangeEvent],
        version: int | None = None,
    ) -> OpenDocument | None:
        doc = self.documents.change(uri, changes, version)
        if doc is not None:
            self._content_changed(doc)
        return doc

    def close_document(self, uri: str) -> None:
        self.documents.close(uri)
        # Symbols of closed documents stay in the index.
        if uri in self.index:
            logger.debug(f"Keeping {len(self.index.symbols(uri))} indexed symbols for closed {uri}")

    def position_from_client(self, uri: str, position: Position) -> Position:
        lines = self._client_lines(uri)
        if lines is None or position.line >= len(lines):
            return position
        character = to_str_index(lines[position.line], position.character, self.position_encoding)
        return Position(line=position.line, character=character)

    def locations_to_client(self, locations: list[Location]) -> list[Location]:
        lines_by_uri: dict[str, list[str] | None] = {}
        converted = []
        for location in locations:
            if location.uri not in lines_by_uri:
                lines_by_uri[location.uri] = self._client_lines(location.uri)
            lines = lines_by_uri[location.uri]
            if lines is None:
                converted.append(location)
                continue
            converted.append(
                Location(
                    uri=location.uri,
                    range=Range(
                        start=self._position_to_client(lines, location.range.start),
                        end=self._position_to_client(lines, location.range.end),
                    ),
                )
            )
        return converted

    def _position_to_client(self, lines: list[str], position: Position) -> Position:
        if position.line >= len(lines):
            return position
        character = from_str_index(lines[position.line], position.character, self.position_encoding)
        return Position(line=position.line, character=character)

    def _client_lines(self, uri: str) -> list[str] | None:
        # None means positions pass through unchanged.
        if self.position_encoding == PositionEncodingKind.UTF32:
            return None
        doc = self.documents.get(uri)
        if doc is None:
            return None
        return split_lines(doc.get_text())

    def _content_changed(self, doc: OpenDocument) -> None:
        text = doc.get_text()
        self.checker.check(doc.uri, text, doc.version)
        self.index.index(doc.uri, text)
