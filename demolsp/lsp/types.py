from enum import IntEnum
from typing import Any
from pydantic import BaseModel, Field, ConfigDict


class LSPModel(BaseModel):
    """Base model: validates camelCase LSP JSON, accepts snake_case field names."""
    model_config = ConfigDict(populate_by_name=True)

    def to_lsp(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Position(LSPModel):
    line: int = Field(ge=0)
    character: int = Field(ge=0)


class Range(LSPModel):
    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        """True if position lies in the range, both ends inclusive."""
        if position.line < self.start.line or position.line > self.end.line:
            return False
        if position.line == self.start.line and position.character < self.start.character:
            return False
        if position.line == self.end.line and position.character > self.end.character:
            return False
        return True


def line_range(line: int, start: int, end: int) -> Range:
    return Range(
        start=Position(line=line, character=start),
        end=Position(line=line, character=end),
    )


class Location(LSPModel):
    uri: str
    range: Range


class TextDocumentIdentifier(LSPModel):
    uri: str


class VersionedTextDocumentIdentifier(TextDocumentIdentifier):
    version: int | None = None


class TextDocumentItem(LSPModel):
    uri: str
    language_id: str = Field(default="plaintext", alias="languageId")
    version: int = 0
    text: str


class TextDocumentPositionParams(LSPModel):
    text_document: TextDocumentIdentifier = Field(alias="textDocument")
    position: Position


class TextEdit(LSPModel):
    range: Range
    new_text: str = Field(alias="newText")


class WorkspaceEdit(LSPModel):
    changes: dict[str, list[TextEdit]] | None = None


class DiagnosticSeverity(IntEnum):
    Error = 1
    Warning = 2
    Information = 3
    Hint = 4


class Diagnostic(LSPModel):
    range: Range
    message: str
    severity: DiagnosticSeverity | None = None
    code: str | int | None = None
    source: str | None = None


class MarkupKind:
    PlainText = "plaintext"
    Markdown = "markdown"


class MarkupContent(LSPModel):
    kind: str
    value: str


class Hover(LSPModel):
    contents: MarkupContent
    range: Range | None = None


class CompletionItemKind(IntEnum):
    Text = 1
    Method = 2
    Function = 3
    Constructor = 4
    Field = 5
    Variable = 6
    Class = 7
    Interface = 8
    Module = 9
    Property = 10
    Unit = 11
    Value = 12
    Enum = 13
    Keyword = 14
    Snippet = 15
    Color = 16
    File = 17
    Reference = 18
    Folder = 19
    EnumMember = 20
    Constant = 21
    Struct = 22
    Event = 23
    Operator = 24
    TypeParameter = 25


class CompletionItem(LSPModel):
    label: str
    kind: CompletionItemKind | None = None
    detail: str | None = None
    documentation: MarkupContent | str | None = None


class PositionEncodingKind:
    UTF8 = "utf-8"
    UTF16 = "utf-16"
    UTF32 = "utf-32"


class TextDocumentSyncKind(IntEnum):
    None_ = 0
    Full = 1
    Incremental = 2


class ServerCapabilities(LSPModel, extra="allow"):
    pass


class ServerInfo(LSPModel):
    name: str
    version: str | None = None


class InitializeResult(LSPModel):
    capabilities: ServerCapabilities
    server_info: ServerInfo | None = Field(default=None, alias="serverInfo")


# =============================================================================
# LSP Request / Notification Params
# =============================================================================


class GeneralClientCapabilities(LSPModel, extra="allow"):
    position_encodings: list[str] | None = Field(default=None, alias="positionEncodings")


class ClientCapabilities(LSPModel, extra="allow"):
    general: GeneralClientCapabilities | None = None


class InitializeParams(LSPModel):
    process_id: int | None = Field(default=None, alias="processId")
    root_uri: str | None = Field(default=None, alias="rootUri")
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    initialization_options: Any | None = Field(default=None, alias="initializationOptions")
    trace: str | None = None


class DidOpenTextDocumentParams(LSPModel):
    text_document: TextDocumentItem = Field(alias="textDocument")


class TextDocumentContentChangeEvent(LSPModel):
    range: Range | None = None
    text: str


class DidChangeTextDocumentParams(LSPModel):
    text_document: VersionedTextDocumentIdentifier = Field(alias="textDocument")
    content_changes: list[TextDocumentContentChangeEvent] = Field(alias="contentChanges")


class DidCloseTextDocumentParams(LSPModel):
    text_document: TextDocumentIdentifier = Field(alias="textDocument")


class ReferenceContext(LSPModel):
    include_declaration: bool = Field(default=True, alias="includeDeclaration")


class ReferenceParams(TextDocumentPositionParams):
    context: ReferenceContext = Field(default_factory=ReferenceContext)


class RenameParams(TextDocumentPositionParams):
    new_name: str = Field(alias="newName")


class PublishDiagnosticsParams(LSPModel):
    uri: str
    diagnostics: list[Diagnostic]
    version: int | None = None
