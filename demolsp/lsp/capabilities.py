from typing import Any

from .types import PositionEncodingKind, TextDocumentSyncKind

COMPLETION_TRIGGER_CHARACTERS = ["."]


def choose_position_encoding(client_encodings: list[str] | None) -> str:
    """Pick UTF-32 when the client offers it, else the protocol default UTF-16.

    UTF-32 columns are Python string indices, so they need no conversion.
    """
    if client_encodings and PositionEncodingKind.UTF32 in client_encodings:
        return PositionEncodingKind.UTF32
    return PositionEncodingKind.UTF16


def get_server_capabilities(position_encoding: str = PositionEncodingKind.UTF16) -> dict[str, Any]:
    return {
        "positionEncoding": position_encoding,
        "textDocumentSync": int(TextDocumentSyncKind.Incremental),
        "completionProvider": {"triggerCharacters": list(COMPLETION_TRIGGER_CHARACTERS)},
        "hoverProvider": True,
        "definitionProvider": True,
        "referencesProvider": True,
        "renameProvider": True,
    }
