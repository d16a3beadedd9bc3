import logging
from typing import Callable

from ..lsp.types import Diagnostic, DiagnosticSeverity, PositionEncodingKind, PublishDiagnosticsParams, line_range
from ..utils.text import encoded_length, split_lines

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 80
DIAGNOSTIC_SOURCE = "demo-lsp"

Publisher = Callable[[PublishDiagnosticsParams], None]


class DiagnosticsChecker:
    """Warns about lines longer than max_line_length.

    Lengths and columns are counted in position_encoding code units, the same
    unit the client uses for positions. Every check re-derives the full
    diagnostic list from the given text and hands it to the publisher, even
    when it is empty, so that warnings from an earlier version of the document
    are cleared.
    """

    def __init__(
        self,
        publish: Publisher | None = None,
        max_line_length: int = MAX_LINE_LENGTH,
        source: str = DIAGNOSTIC_SOURCE,
        position_encoding: str = PositionEncodingKind.UTF32,
    ):
        self.publish = publish
        self.max_line_length = max_line_length
        self.source = source
        self.position_encoding = position_encoding

    @property
    def message(self) -> str:
        return f"Line exceeds {self.max_line_length} characters."

    def check(self, uri: str, text: str, version: int | None = None) -> list[Diagnostic]:
        diagnostics = []
        for i, line in enumerate(split_lines(text)):
            length = encoded_length(line, self.position_encoding)
            if length > self.max_line_length:
                diagnostics.append(
                    Diagnostic(
                        range=line_range(i, self.max_line_length, length),
                        severity=DiagnosticSeverity.Warning,
                        message=self.message,
                        source=self.source,
                    )
                )

        logger.debug(f"{len(diagnostics)} diagnostics for {uri}")
        if self.publish is not None:
            self.publish(PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics, version=version))
        return diagnostics
