"""Test token classification: markers, delimiters, words, newlines."""

from ctiw.lexer import tokenize
from ctiw.tokens import TokenType

from .conftest import assert_types, find_tokens


class TestDocMarkers:
    def test_first_marker_is_start(self, lex):
        tokens = lex("==CTIW==")
        assert_types(tokens, [TokenType.DOC_START])
        assert tokens[0].value == "==CTIW=="
        assert tokens[0].line == 1
        assert tokens[0].column == 1

    def test_second_marker_is_end(self, lex):
        tokens = lex("==CTIW==\n==CTIW==")
        assert_types(tokens, [TokenType.DOC_START, TokenType.NEWLINE, TokenType.DOC_END])

    def test_every_later_marker_is_end(self, lex):
        tokens = lex("==CTIW==\n==CTIW==\n==CTIW==")
        assert len(find_tokens(tokens, TokenType.DOC_START)) == 1
        assert len(find_tokens(tokens, TokenType.DOC_END)) == 2


class TestMarkers:
    def test_single_equals(self, lex):
        tokens = lex("=")
        assert_types(tokens, [TokenType.EQUALS])
        assert tokens[0].value == "="

    def test_double_equals(self, lex):
        tokens = lex("==")
        assert_types(tokens, [TokenType.DOUBLE_EQUALS])
        assert tokens[0].value == "=="

    def test_triple_equals(self, lex):
        tokens = lex("===")
        assert_types(tokens, [TokenType.DOUBLE_EQUALS, TokenType.EQUALS])


class TestDelimiters:
    def test_colon(self, lex):
        assert_types(lex(":"), [TokenType.COLON])

    def test_parens(self, lex):
        assert_types(lex("()"), [TokenType.LPAREN, TokenType.RPAREN])

    def test_special_statement(self, lex):
        tokens = lex("=(time)=")
        assert_types(
            tokens,
            [
                TokenType.EQUALS,
                TokenType.LPAREN,
                TokenType.IDENTIFIER,
                TokenType.RPAREN,
                TokenType.EQUALS,
            ],
        )
        assert tokens[2].value == "time"


class TestIndentation:
    def test_one_level_is_one_token(self, lex):
        tokens = lex("....")
        assert_types(tokens, [TokenType.DOT])
        assert tokens[0].value == "...."

    def test_two_levels(self, lex):
        tokens = lex("........")
        assert [t.value for t in tokens] == ["....", "...."]

    def test_partial_level_is_its_own_token(self, lex):
        tokens = lex("......")
        assert [t.value for t in tokens] == ["....", ".."]

    def test_dots_inside_statement_are_single(self, lex):
        tokens = lex("a..b")
        assert_types(
            tokens,
            [TokenType.IDENTIFIER, TokenType.DOT, TokenType.DOT, TokenType.IDENTIFIER],
        )
        assert [t.value for t in find_tokens(tokens, TokenType.DOT)] == [".", "."]

    def test_indented_statement(self, lex):
        tokens = lex("....=text=Hello=")
        assert_types(
            tokens,
            [
                TokenType.DOT,
                TokenType.EQUALS,
                TokenType.IDENTIFIER,
                TokenType.EQUALS,
                TokenType.STRING,
                TokenType.EQUALS,
            ],
        )


class TestWords:
    def test_identifier(self, lex):
        tokens = lex("title")
        assert_types(tokens, [TokenType.IDENTIFIER])
        assert tokens[0].value == "title"

    def test_identifier_with_hyphen_and_underscore(self, lex):
        tokens = lex("font-size my_var")
        assert [t.value for t in tokens] == ["font-size", "my_var"]
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.IDENTIFIER])

    def test_digits_in_identifier(self, lex):
        tokens = lex("div2 header1")
        assert_types(tokens, [TokenType.IDENTIFIER, TokenType.IDENTIFIER])

    def test_number(self, lex):
        tokens = lex("123")
        assert_types(tokens, [TokenType.NUMBER])
        assert tokens[0].value == "123"

    def test_long_number(self, lex):
        assert_types(lex("1234567"), [TokenType.NUMBER])


class TestHexColors:
    def test_upper_case(self, lex):
        assert_types(lex("FF0000"), [TokenType.HEX_COLOR])

    def test_lower_case(self, lex):
        assert_types(lex("ff00aa"), [TokenType.HEX_COLOR])

    def test_mixed_case(self, lex):
        assert_types(lex("AbCdEf"), [TokenType.HEX_COLOR])

    def test_six_digits_is_hex(self, lex):
        tokens = lex("123456")
        assert_types(tokens, [TokenType.HEX_COLOR])
        assert tokens[0].value == "123456"

    def test_non_hex_letter_upper(self, lex):
        tokens = lex("BAF2Y9")
        assert_types(tokens, [TokenType.IDENTIFIER])

    def test_non_hex_letter_lower(self, lex):
        assert_types(lex("baf2y9"), [TokenType.IDENTIFIER])

    def test_five_hex_digits(self, lex):
        assert_types(lex("FF000"), [TokenType.IDENTIFIER])

    def test_seven_hex_digits(self, lex):
        assert_types(lex("FF00000"), [TokenType.IDENTIFIER])

    def test_attribute_value(self, lex):
        tokens = lex("=divide= color=FF0000=")
        hex_tokens = find_tokens(tokens, TokenType.HEX_COLOR)
        assert [t.value for t in hex_tokens] == ["FF0000"]


class TestWhitespace:
    def test_spaces_skipped(self, lex):
        tokens = lex("title   button")
        assert [t.value for t in tokens] == ["title", "button"]

    def test_tabs_skipped(self, lex):
        assert len(lex("title\t\tbutton")) == 2

    def test_only_whitespace(self):
        tokens, errors = tokenize("   \t  ")
        assert_types(tokens, [TokenType.EOF])
        assert errors == []

    def test_empty_input(self):
        tokens, errors = tokenize("")
        assert_types(tokens, [TokenType.EOF])
        assert tokens[0].line == 1
        assert tokens[0].column == 1
        assert errors == []


class TestNewline:
    def test_lf(self, lex):
        tokens = lex("\n")
        assert_types(tokens, [TokenType.NEWLINE])
        assert tokens[0].value == "\n"

    def test_crlf_is_one_newline(self, lex):
        tokens = lex("\r\n")
        assert_types(tokens, [TokenType.NEWLINE])

    def test_multiple_newlines(self, lex):
        assert len(find_tokens(lex("\n\n\n"), TokenType.NEWLINE)) == 3

    def test_line_numbers(self, lex):
        tokens = lex("title\nbutton\ntext")
        assert [t.line for t in tokens if t.type == TokenType.IDENTIFIER] == [1, 2, 3]

    def test_column_resets(self, lex):
        tokens = lex("abc\nxyz")
        assert tokens[0].column == 1
        assert tokens[2].column == 1

    def test_columns(self, lex):
        tokens = lex("ab cd")
        assert tokens[0].column == 1
        assert tokens[1].column == 4

    def test_crlf_line_numbers(self, lex):
        tokens = lex("a\r\nb")
        assert tokens[2].line == 2
        assert tokens[2].column == 1
