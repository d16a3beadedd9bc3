import logging
import re

from ..utils.text import split_lines

logger = logging.getLogger(__name__)

IDENTIFIER_CHAR = re.compile(r"[a-zA-Z0-9_$]")


def is_identifier_char(char: str) -> bool:
    return IDENTIFIER_CHAR.fullmatch(char) is not None


def word_at(text: str, line: int, character: int) -> str | None:
    """Return the identifier touching (line, character) in text.

    Returns None when the position is outside the text. A cursor at the very
    end of a line (character == len(line)) counts as outside. Returns "" when
    neither the character at the position nor the one before it belongs to an
    identifier; callers must treat that as "no word" too.
    """
    lines = split_lines(text)

    if line < 0 or line >= len(lines):
        logger.debug(f"Requested line {line} is out of bounds. Total lines: {len(lines)}")
        return None
    line_text = lines[line]
    if character < 0 or character >= len(line_text):
        logger.debug(f"Requested character {character} is out of bounds for line {line}: {line_text!r}")
        return None

    start = character
    while start > 0 and is_identifier_char(line_text[start - 1]):
        start -= 1
    end = character
    while end < len(line_text) and is_identifier_char(line_text[end]):
        end += 1

    word = line_text[start:end]
    logger.debug(f"Word at {line}:{character} is {word!r} (start: {start}, end: {end})")
    return word
