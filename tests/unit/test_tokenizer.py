"""Tests for the Azalea tokenizer."""

import pytest

from azalea.core.errors import AzaleaLexError
from azalea.core.tokenizer import TokenKind, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(source)]


def lexemes(source: str) -> list[str]:
    return [t.lexeme for t in tokenize(source) if t.kind != TokenKind.END]


class TestTokenClasses:
    """Classification of lexemes into token kinds."""

    def test_keyword_and_string(self) -> None:
        assert kinds('say "hi"') == [TokenKind.KEYWORD, TokenKind.STRING, TokenKind.END]

    def test_keywords_are_case_insensitive(self) -> None:
        assert kinds("SAY Print") == [TokenKind.KEYWORD, TokenKind.KEYWORD, TokenKind.END]

    def test_unknown_word_is_identifier(self) -> None:
        tokens = tokenize("counter")
        assert tokens[0].kind == TokenKind.IDENTIFIER
        assert tokens[0].lexeme == "counter"

    def test_number_then_identifier(self) -> None:
        """``10px`` splits into a number and an identifier."""
        tokens = tokenize("10px")
        assert [(t.kind, t.lexeme) for t in tokens[:2]] == [
            (TokenKind.NUMBER, "10"),
            (TokenKind.IDENTIFIER, "px"),
        ]

    def test_decimal_number(self) -> None:
        assert lexemes("3.25") == ["3.25"]

    def test_second_decimal_point_is_a_symbol(self) -> None:
        assert lexemes("1.5.2") == ["1.5", ".", "2"]

    def test_keyword_followed_by_paren(self) -> None:
        assert kinds("say(") == [TokenKind.KEYWORD, TokenKind.SYMBOL, TokenKind.END]

    def test_two_char_symbols(self) -> None:
        assert lexemes("a >= b && c != d || e == f <= g") == [
            "a", ">=", "b", "&&", "c", "!=", "d", "||", "e", "==", "f", "<=", "g",
        ]

    def test_single_char_symbols(self) -> None:
        assert lexemes("( ) { } [ ] , ; : . = + - * / % < > !") == list("(){}[],;:.=+-*/%<>!")

    def test_always_ends_with_end_token(self) -> None:
        assert kinds("") == [TokenKind.END]
        assert kinds("   \n\t ") == [TokenKind.END]


class TestStrings:
    """Quoted string literals."""

    def test_single_quotes(self) -> None:
        assert lexemes("'hello'") == ["hello"]

    def test_escapes(self) -> None:
        tokens = tokenize('"a\\"b\\n\\tc\\\\"')
        assert tokens[0].lexeme == 'a"b\n\tc\\'

    def test_unknown_escape_stands_for_itself(self) -> None:
        assert tokenize('"\\q"')[0].lexeme == "q"

    def test_unterminated_string_runs_to_end(self) -> None:
        tokens = tokenize('say "abc')
        assert tokens[1].kind == TokenKind.STRING
        assert tokens[1].lexeme == "abc"
        assert tokens[-1].kind == TokenKind.END

    def test_string_keeps_keywords_verbatim(self) -> None:
        assert tokenize('"if then else"')[0].kind == TokenKind.STRING


class TestComments:
    """Line and block comments are stripped."""

    def test_line_comment(self) -> None:
        assert lexemes("1 // ignored\n2") == ["1", "2"]

    def test_block_comment(self) -> None:
        assert lexemes("1 /* ignored\nstill */ 2") == ["1", "2"]

    def test_unterminated_block_comment_runs_to_end(self) -> None:
        assert lexemes("1 /* never closed 2") == ["1"]


class TestPositions:
    """Line/column tracking."""

    def test_line_and_column(self) -> None:
        tokens = tokenize("a\n  b")
        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (2, 3)

    def test_positions_after_block_comment(self) -> None:
        tokens = tokenize("/* x\ny */ z")
        assert (tokens[0].line, tokens[0].column) == (2, 6)

    def test_end_offsets(self) -> None:
        tokens = tokenize("xs[0]")
        assert tokens[0].end == tokens[1].pos.offset


class TestUnknownCharacters:
    """Characters outside every token class."""

    def test_discarded_by_default(self) -> None:
        assert lexemes("1 @ 2 # 3") == ["1", "2", "3"]

    def test_non_ascii_discarded(self) -> None:
        assert lexemes("é 5") == ["5"]

    def test_strict_mode_raises(self) -> None:
        with pytest.raises(AzaleaLexError) as exc_info:
            tokenize("say @", strict=True)
        assert exc_info.value.context is not None
        assert exc_info.value.context.column == 5
