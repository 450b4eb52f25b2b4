"""Модуль проверки поля Regexp записи NAPTR (RFC 2915).

Строка проверяется в формате master-файла, как она записывается в файле
зоны BIND. Выражение не применяется, проверяется только его корректность.

Доступны два способа вызова:

* через объект ``NaptrRegexpValidator``: ошибка хранится в самом объекте,
  такой вариант можно использовать из нескольких потоков, если у каждого
  потока свой объект;
* через функции ``is_naptr_regexp`` и ``naptr_regexp_error``: ошибка хранится
  в глобальной переменной модуля, вариант не потокобезопасен.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Set, Union

from naptr_regexp.core.regex_engine import PosixRegexEngine, RegexEngine
from naptr_regexp.core.scanner import split_fields

logger = logging.getLogger(__name__)

MAX_LENGTH = 255
FORBIDDEN_DELIMITERS = b"0123456789\\i\0"
CASE_INSENSITIVE_FLAG = ord("i")


class ValidationStatus(IntEnum):
    """Результат проверки. Значения совпадают с прежними кодами возврата."""

    INVALID = 0
    ABSENT = 1  # поле отсутствует, это допустимо
    MALFORMED = 2  # пустая строка, нет разделителя
    VALID = 3


@dataclass
class ValidationResult:
    """Результат проверки поля Regexp."""

    status: ValidationStatus
    error: Optional[str] = None
    find: Optional[bytes] = None
    replace: Optional[bytes] = None
    flags: Optional[bytes] = None
    backrefs: Set[int] = field(default_factory=set)
    nsub: Optional[int] = None

    def __bool__(self) -> bool:
        return bool(self.status)


def _display(byte: int) -> str:
    """Печатное представление байта для сообщений об ошибках."""
    if 0x20 <= byte < 0x7F:
        return chr(byte)
    return f"\\{byte:03d}"


class NaptrRegexpValidator:
    """Проверка поля Regexp записи NAPTR."""

    def __init__(self, engine: Optional[RegexEngine] = None) -> None:
        """
        Инициализация валидатора.

        Args:
            engine: Движок POSIX ERE, по умолчанию regcomp(3) из libc
        """
        self.engine = engine or PosixRegexEngine()
        self.error: Optional[str] = None

    def validate(self, value: Union[str, bytes, None]) -> ValidationResult:
        """
        Проверка строки без изменения состояния объекта.

        Args:
            value: Поле Regexp в формате master-файла или None

        Returns:
            ValidationResult: Статус и причина отказа
        """
        if value is None:
            return ValidationResult(ValidationStatus.ABSENT)

        if isinstance(value, str):
            value = value.encode("utf-8", errors="surrogateescape")

        if len(value) > MAX_LENGTH:
            return self._reject("Must be less than 256 bytes")

        if not value:
            return ValidationResult(ValidationStatus.MALFORMED)

        delimiter, rest = value[0], value[1:]

        if b"\0" in rest:
            return self._reject("Contains null bytes")

        if delimiter in FORBIDDEN_DELIMITERS:
            return self._reject(
                f"Delimiter ({_display(delimiter)}) cannot be a flag, digit or null"
            )

        fields = split_fields(rest, delimiter)
        if fields is None:
            return self._reject("Bad syntax, missing replace/end delimiter")

        for part in (fields.find, fields.replace, fields.flags):
            if part.extra_delimiters:
                return self._reject("Extra delimiters")

            for escape in part.decimal_escapes():
                if len(escape.digits) != 3:
                    return self._reject(f"Bad escape sequence '\\{escape.digits}'")
                if int(escape.digits) > 255:
                    return self._reject(f"Escape sequence out of range '\\{escape.digits}'")

        backrefs = fields.replace.backrefs()
        find, replace, flags = fields.find.raw, fields.replace.raw, fields.flags.raw

        case_insensitive = False
        for flag in flags:
            if flag != CASE_INSENSITIVE_FLAG:
                return self._reject(f"Bad flag: {_display(flag)}")
            case_insensitive = True

        compiled = self.engine.compile(find, case_insensitive=case_insensitive)
        if not compiled.ok:
            return self._reject(f"Bad regex: {compiled.error}")

        if 0 in backrefs:
            return self._reject("Bad backref '0'")

        highest = max(backrefs, default=0)
        if highest > compiled.nsub:
            return self._reject("More backrefs in replacement than captures in match")

        return ValidationResult(
            ValidationStatus.VALID,
            find=find,
            replace=replace,
            flags=flags,
            backrefs=backrefs,
            nsub=compiled.nsub,
        )

    def is_naptr_regexp(self, value: Union[str, bytes, None]) -> ValidationStatus:
        """
        Проверка строки с сохранением причины отказа в объекте.

        Успешная проверка не сбрасывает предыдущую ошибку.

        Args:
            value: Поле Regexp в формате master-файла или None

        Returns:
            ValidationStatus: Статус проверки
        """
        result = self.validate(value)
        if result.status is ValidationStatus.INVALID:
            self.error = result.error
        return result.status

    def naptr_regexp_error(self) -> Optional[str]:
        """Причина последнего отказа."""
        return self.error

    @staticmethod
    def _reject(reason: str) -> ValidationResult:
        logger.debug(f"Поле Regexp отклонено: {reason}")
        return ValidationResult(ValidationStatus.INVALID, error=reason)


# Глобальное состояние для функционального API
_default_validator: Optional[NaptrRegexpValidator] = None
_last_error: Optional[str] = None


def is_naptr_regexp(value: Union[str, bytes, None]) -> ValidationStatus:
    """
    Проверка строки с сохранением ошибки в глобальной переменной.

    Не потокобезопасно: используйте NaptrRegexpValidator, если проверки
    выполняются из нескольких потоков.

    Args:
        value: Поле Regexp в формате master-файла или None

    Returns:
        ValidationStatus: Статус проверки
    """
    global _default_validator, _last_error

    if _default_validator is None:
        _default_validator = NaptrRegexpValidator()

    _last_error = None
    result = _default_validator.validate(value)
    if result.status is ValidationStatus.INVALID:
        _last_error = result.error
    return result.status


def naptr_regexp_error() -> Optional[str]:
    """Причина отказа последнего вызова is_naptr_regexp."""
    return _last_error
