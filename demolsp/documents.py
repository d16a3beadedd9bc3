import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from .lsp.types import PositionEncodingKind, Range, TextDocumentContentChangeEvent, TextDocumentItem, TextEdit
from .utils.text import position_to_offset

logger = logging.getLogger(__name__)


class TextDocument(Protocol):
    uri: str

    def get_text(self) -> str: ...


class DocumentProvider(Protocol):
    def get(self, uri: str) -> TextDocument | None: ...


@dataclass
class OpenDocument:
    uri: str
    version: int
    content: str
    language_id: str = "plaintext"

    def get_text(self) -> str:
        return self.content

    def apply_changes(
        self,
        changes: Iterable[TextDocumentContentChangeEvent],
        version: int | None = None,
        encoding: str = PositionEncodingKind.UTF32,
    ) -> None:
        for change in changes:
            if change.range is None:
                self.content = change.text
            else:
                self.content = replace_range(self.content, change.range, change.text, encoding)
        if version is not None:
            self.version = version
        else:
            self.version += 1


def replace_range(content: str, edit_range: Range, text: str, encoding: str = PositionEncodingKind.UTF32) -> str:
    start = position_to_offset(content, edit_range.start.line, edit_range.start.character, encoding)
    end = position_to_offset(content, edit_range.end.line, edit_range.end.character, encoding)
    if end < start:
        start, end = end, start
    return content[:start] + text + content[end:]


def apply_text_edits(content: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping edits that all refer to the original content."""
    ordered = sorted(
        edits,
        key=lambda e: (e.range.start.line, e.range.start.character),
        reverse=True,
    )
    for edit in ordered:
        content = replace_range(content, edit.range, edit.new_text)
    return content


class DocumentStore:
    """The current text of every open document, keyed by URI.

    Ranged changes count columns in position_encoding code units.
    """

    def __init__(self, position_encoding: str = PositionEncodingKind.UTF32):
        self.position_encoding = position_encoding
        self._documents: dict[str, OpenDocument] = {}

    def open(self, item: TextDocumentItem) -> OpenDocument:
        doc = OpenDocument(
            uri=item.uri,
            version=item.version,
            content=item.text,
            language_id=item.language_id,
        )
        self._documents[item.uri] = doc
        logger.debug(f"Opened {item.uri} (version {item.version}, {len(item.text)} chars)")
        return doc

    def change(
        self,
        uri: str,
        changes: Iterable[TextDocumentContentChangeEvent],
        version: int | None = None,
    ) -> OpenDocument | None:
        doc = self._documents.get(uri)
        if doc is None:
            logger.warning(f"Received change for unknown document: {uri}")
            return None
        doc.apply_changes(changes, version, self.position_encoding)
        logger.debug(f"Changed {uri} (version {doc.version})")
        return doc

    def close(self, uri: str) -> None:
        if self._documents.pop(uri, None) is None:
            logger.warning(f"Received close for unknown document: {uri}")
        else:
            logger.debug(f"Closed {uri}")

    def get(self, uri: str) -> OpenDocument | None:
        return self._documents.get(uri)

    def uris(self) -> list[str]:
        return list(self._documents)

    def __contains__(self, uri: str) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)
