"""Модуль разбора поля Regexp записи NAPTR в формате master-файла."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

BACKSLASH = ord("\\")
DIGITS = b"0123456789"
NEWLINE = ord("\n")


class TokenKind(Enum):
    """Виды лексем поля."""

    LITERAL = "literal"  # обычный байт
    BACKSLASH = "backslash"  # экранированный обратный слэш: \\
    ESCAPED = "escaped"  # \X, где X не цифра
    DECIMAL = "decimal"  # \DDD


@dataclass
class Token:
    """Лексема поля вместе с исходным текстом."""

    kind: TokenKind
    raw: bytes

    @property
    def digits(self) -> str:
        """Цифры десятичной escape-последовательности."""
        return self.raw[1:].decode("ascii")


@dataclass
class Field:
    """Одно из трех полей: find, replace или flags."""

    tokens: List[Token] = field(default_factory=list)
    extra_delimiters: int = 0

    @property
    def raw(self) -> bytes:
        """Текст поля в том виде, в котором он был во входной строке."""
        return b"".join(token.raw for token in self.tokens)

    def decimal_escapes(self) -> List[Token]:
        """Десятичные escape-последовательности в порядке следования."""
        return [token for token in self.tokens if token.kind is TokenKind.DECIMAL]

    def backrefs(self) -> Set[int]:
        """
        Номера обратных ссылок вида \\\\N.

        В master-файле обратная ссылка записывается как "\\\\" и цифра.
        Две пары "\\\\" подряд дают литеральный обратный слэш в замене
        и обратной ссылкой не считаются.

        Returns:
            Set[int]: Множество номеров ссылок
        """
        refs = set()
        tokens = self.tokens
        i = 0
        while i < len(tokens):
            if tokens[i].kind is not TokenKind.BACKSLASH or i + 1 >= len(tokens):
                i += 1
                continue

            following = tokens[i + 1]
            if following.kind is TokenKind.BACKSLASH:
                i += 2
            elif following.kind is TokenKind.LITERAL and following.raw.isdigit():
                refs.add(int(following.raw))
                i += 2
            else:
                i += 1

        return refs


@dataclass
class SplitResult:
    """Результат разбора строки на поля."""

    find: Field
    replace: Field
    flags: Field


def tokenize(data: bytes, delimiter: int) -> List[Optional[Token]]:
    """
    Разбиение строки на лексемы.

    Конечный автомат с состояниями: обычный текст, после обратного слэша,
    внутри десятичной последовательности. Неэкранированный разделитель
    возвращается как None.

    Args:
        data: Строка без ведущего разделителя
        delimiter: Байт разделителя

    Returns:
        List[Optional[Token]]: Лексемы и границы полей
    """
    tokens: List[Optional[Token]] = []
    i = 0
    length = len(data)

    while i < length:
        byte = data[i]

        if byte == delimiter:
            tokens.append(None)
            i += 1
            continue

        if byte != BACKSLASH or i + 1 >= length:
            # Одиночный слэш в конце строки остается обычным байтом
            tokens.append(Token(TokenKind.LITERAL, data[i:i + 1]))
            i += 1
            continue

        following = data[i + 1]
        if following == BACKSLASH:
            tokens.append(Token(TokenKind.BACKSLASH, data[i:i + 2]))
            i += 2
        elif following in DIGITS:
            end = i + 1
            while end < length and end - i <= 3 and data[end] in DIGITS:
                end += 1
            tokens.append(Token(TokenKind.DECIMAL, data[i:end]))
            i = end
        else:
            tokens.append(Token(TokenKind.ESCAPED, data[i:i + 2]))
            i += 2

    return tokens


def split_fields(data: bytes, delimiter: int) -> Optional[SplitResult]:
    """
    Разделение строки на поля find, replace и flags.

    Разбиение жадное: replace и flags берутся после двух последних
    неэкранированных разделителей, все предыдущие остаются в find.
    Перевод строки внутри полей не допускается, один перевод строки
    в конце строки отбрасывается.

    Args:
        data: Строка без ведущего разделителя
        delimiter: Байт разделителя

    Returns:
        Optional[SplitResult]: Поля или None, если разделителей меньше двух
            или поле содержит перевод строки
    """
    if delimiter != NEWLINE and data.endswith(b"\n"):
        data = data[:-1]

    tokens = tokenize(data, delimiter)
    if any(token is not None and b"\n" in token.raw for token in tokens):
        return None

    boundaries = [i for i, token in enumerate(tokens) if token is None]

    if len(boundaries) < 2:
        return None

    second_last, last = boundaries[-2], boundaries[-1]

    find = Field(
        tokens=[token for token in tokens[:second_last] if token is not None],
        extra_delimiters=len(boundaries) - 2,
    )
    replace = Field(tokens=tokens[second_last + 1:last])
    flags = Field(tokens=tokens[last + 1:])

    return SplitResult(find=find, replace=replace, flags=flags)
