import pytest

from naptr_regexp.core.scanner import TokenKind, split_fields, tokenize

BANG = ord("!")


def kinds(data: bytes):
    return [token.kind if token else None for token in tokenize(data, BANG)]


def test_split_simple():
    fields = split_fields(b"a(b)!x!i", BANG)

    assert fields.find.raw == b"a(b)"
    assert fields.replace.raw == b"x"
    assert fields.flags.raw == b"i"


def test_split_empty_flags():
    fields = split_fields(b"abc!def!", BANG)

    assert fields.find.raw == b"abc"
    assert fields.replace.raw == b"def"
    assert fields.flags.raw == b""


def test_escaped_delimiter_is_not_a_boundary():
    fields = split_fields(rb"a\!b!c!", BANG)

    assert fields.find.raw == rb"a\!b"
    assert fields.replace.raw == b"c"


def test_doubled_backslash_does_not_escape_delimiter():
    fields = split_fields(rb"a\\!b!", BANG)

    assert fields.find.raw == rb"a\\"
    assert fields.replace.raw == b"b"


@pytest.mark.parametrize("data", [b"", b"abc", b"abc!", rb"abc\!def!"])
def test_missing_delimiters(data):
    assert split_fields(data, BANG) is None


def test_extra_delimiters_stay_in_find():
    fields = split_fields(b"a!b!c!d", BANG)

    assert fields.find.extra_delimiters == 1
    assert fields.replace.raw == b"c"
    assert fields.flags.raw == b"d"
    assert fields.replace.extra_delimiters == 0


def test_token_kinds():
    assert kinds(rb"a\\\.\065!") == [
        TokenKind.LITERAL,
        TokenKind.BACKSLASH,
        TokenKind.ESCAPED,
        TokenKind.DECIMAL,
        None,
    ]


def test_trailing_backslash_is_literal():
    tokens = tokenize(b"ab\\", BANG)

    assert tokens[-1].kind is TokenKind.LITERAL
    assert tokens[-1].raw == b"\\"


def test_decimal_escape_takes_at_most_three_digits():
    tokens = tokenize(rb"\1234", BANG)

    assert tokens[0].kind is TokenKind.DECIMAL
    assert tokens[0].digits == "123"
    assert tokens[1].raw == b"4"


def test_decimal_escapes_in_order():
    fields = split_fields(rb"\065\12!x!", BANG)

    assert [token.digits for token in fields.find.decimal_escapes()] == ["065", "12"]


def test_non_ascii_digit_is_not_a_decimal_escape():
    tokens = tokenize(b"\\\xb2", BANG)

    assert tokens[0].kind is TokenKind.ESCAPED


@pytest.mark.parametrize(
    "replace, expected",
    [
        (rb"\\1", {1}),
        (rb"\\1\\3\\1", {1, 3}),
        (rb"\\\\1", set()),
        (rb"\\\\\\2", {2}),
        (rb"\049", set()),
        (rb"\\a1", set()),
        (rb"sip:\\1@example.com", {1}),
        (b"plain", set()),
    ],
)
def test_backrefs(replace, expected):
    fields = split_fields(b"x!" + replace + b"!", BANG)

    assert fields.replace.backrefs() == expected


def test_raw_text_round_trip():
    data = rb"a\\\\b\!c\\!\\\\1\065!i"
    fields = split_fields(data, BANG)

    assert b"!".join([fields.find.raw, fields.replace.raw, fields.flags.raw]) == data


def test_newline_inside_fields_fails_split():
    assert split_fields(b"a\nb!c!", BANG) is None
    assert split_fields(b"a!b!\ni", BANG) is None


def test_trailing_newline_is_dropped():
    fields = split_fields(b"a!b!i\n", BANG)

    assert fields.flags.raw == b"i"


def test_newline_as_delimiter():
    fields = split_fields(b"a\nb\n", ord("\n"))

    assert fields.find.raw == b"a"
    assert fields.replace.raw == b"b"
    assert fields.flags.raw == b""
