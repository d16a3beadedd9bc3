import re
from pathlib import Path

from ..lsp.types import PositionEncodingKind

LANGUAGE_IDS = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".svelte": "svelte",
    ".md": "markdown",
}

# A bare "\n" or a "\r\n" pair is one line break. A lone "\r" is not.
LINE_BREAK = re.compile(r"\r?\n")


def get_language_id(path: str | Path) -> str:
    path = Path(path)
    return LANGUAGE_IDS.get(path.suffix, "plaintext")


def read_file_content(path: str | Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_file_content(path: str | Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def split_lines(content: str) -> list[str]:
    """Split content into lines without their terminators.

    Unlike str.splitlines(), a trailing newline produces a final empty line and
    form feeds, lone carriage returns etc. are kept as ordinary characters, so
    line numbers agree with what an LSP client counts.
    """
    return LINE_BREAK.split(content)


def get_line_at(content: str, line: int) -> str:
    lines = split_lines(content)
    if 0 <= line < len(lines):
        return lines[line]
    return ""


def encoded_length(text: str, encoding: str = PositionEncodingKind.UTF32) -> int:
    """Length of text in the code units of a position encoding."""
    if encoding == PositionEncodingKind.UTF16:
        return len(text.encode("utf-16-le")) // 2
    if encoding == PositionEncodingKind.UTF8:
        return len(text.encode("utf-8"))
    return len(text)


def to_str_index(line: str, offset: int, encoding: str = PositionEncodingKind.UTF32) -> int:
    """Convert a column in encoding code units to an index into line.

    An offset that falls inside a multi-unit character maps to that character.
    Offsets past the end of the line stay past the end by the same amount, so
    a cursor beyond the line is still beyond it after conversion.
    """
    if offset <= 0 or encoding == PositionEncodingKind.UTF32:
        return offset

    if encoding == PositionEncodingKind.UTF16:
        codec, width = "utf-16-le", 2
    else:
        codec, width = "utf-8", 1
    b = line.encode(codec)
    if offset * width >= len(b):
        return len(line) + offset - len(b) // width
    return len(b[: offset * width].decode(codec, errors="ignore"))


def from_str_index(line: str, index: int, encoding: str = PositionEncodingKind.UTF32) -> int:
    """Convert an index into line to a column in encoding code units."""
    if index <= 0 or encoding == PositionEncodingKind.UTF32:
        return index
    if index >= len(line):
        return encoded_length(line, encoding) + index - len(line)
    return encoded_length(line[:index], encoding)


def position_to_offset(
    content: str,
    line: int,
    character: int,
    encoding: str = PositionEncodingKind.UTF32,
) -> int:
    """Convert a (line, character) position to an index into content.

    character is counted in the code units of encoding. Positions past the end
    of a line are clamped to the line end; positions past the last line are
    clamped to the end of the content.
    """
    if line < 0:
        return 0

    offset = 0
    for i, (start, end, next_start) in enumerate(_line_spans(content)):
        if i == line:
            column = to_str_index(content[start:end], max(character, 0), encoding)
            return start + min(column, end - start)
        offset = next_start
    return offset


def _line_spans(content: str):
    # Yields (line start, line end excluding terminator, next line start).
    start = 0
    for m in LINE_BREAK.finditer(content):
        yield start, m.start(), m.end()
        start = m.end()
    yield start, len(content), len(content)
