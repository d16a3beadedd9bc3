import pytest

from demolsp.analysis.words import is_identifier_char, word_at

from .conftest import SAMPLE_TEXT


class TestIsIdentifierChar:
    @pytest.mark.parametrize("char", ["a", "Z", "0", "_", "$"])
    def test_identifier_chars(self, char):
        assert is_identifier_char(char)

    @pytest.mark.parametrize("char", [" ", ".", "(", "=", "-", "é"])
    def test_other_chars(self, char):
        assert not is_identifier_char(char)


class TestWordAt:
    def test_middle_of_word(self):
        assert word_at("let myVar = 10;", 0, 6) == "myVar"

    def test_start_of_word(self):
        assert word_at("let myVar = 10;", 0, 4) == "myVar"

    def test_character_just_after_word(self):
        # The space after "myVar" still touches the word on its left.
        assert word_at("let myVar = 10;", 0, 9) == "myVar"

    def test_dollar_and_underscore(self):
        assert word_at("x = $_el.value", 0, 5) == "$_el"

    def test_usage_on_later_line(self):
        assert word_at(SAMPLE_TEXT, 2, 16) == "myVar"

    def test_no_identifier_returns_empty_string(self):
        assert word_at("a  = b", 0, 2) == ""

    def test_line_out_of_bounds(self):
        assert word_at("let myVar = 10;", 1, 0) is None
        assert word_at("let myVar = 10;", -1, 0) is None

    def test_character_out_of_bounds(self):
        assert word_at("let myVar = 10;", 0, 100) is None
        assert word_at("let myVar = 10;", 0, -1) is None

    def test_end_of_line_is_out_of_bounds(self):
        text = "let myVar"
        assert word_at(text, 0, len(text)) is None

    def test_empty_line(self):
        assert word_at("let a = 1;\n\nlet b = 2;", 1, 0) is None

    def test_crlf(self):
        assert word_at("let a = 1;\r\nfoo(bar);", 1, 5) == "bar"

    def test_idempotent(self):
        assert word_at(SAMPLE_TEXT, 1, 12) == word_at(SAMPLE_TEXT, 1, 12) == "myFunc"
