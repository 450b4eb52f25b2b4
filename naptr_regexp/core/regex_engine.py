"""Модуль компиляции регулярных выражений POSIX ERE."""

import ctypes
import ctypes.util
import logging
import platform
import sys
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

# Значения одинаковы для glibc, musl и BSD
REG_EXTENDED = 0o1
REG_ICASE = 0o2

ERROR_BUFFER_SIZE = 512


class RegexEngineError(Exception):
    """Движок регулярных выражений недоступен."""


@dataclass
class CompileResult:
    """Результат компиляции выражения."""

    nsub: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RegexEngine(Protocol):
    """Интерфейс движка, который умеет компилировать POSIX ERE."""

    def compile(self, pattern: bytes, *, case_insensitive: bool = False) -> CompileResult:
        ...


class _GlibcRegex(ctypes.Structure):
    _fields_ = [
        ("buffer", ctypes.c_void_p),
        ("allocated", ctypes.c_size_t),
        ("used", ctypes.c_size_t),
        ("syntax", ctypes.c_ulong),
        ("fastmap", ctypes.c_void_p),
        ("translate", ctypes.c_void_p),
        ("re_nsub", ctypes.c_size_t),
        ("bits", ctypes.c_uint),
    ]


class _MuslRegex(ctypes.Structure):
    _fields_ = [
        ("re_nsub", ctypes.c_size_t),
        ("opaque", ctypes.c_void_p),
        ("padding", ctypes.c_void_p * 4),
        ("nsub2", ctypes.c_size_t),
        ("padding2", ctypes.c_char),
    ]


class _BsdRegex(ctypes.Structure):
    _fields_ = [
        ("re_magic", ctypes.c_int),
        ("re_nsub", ctypes.c_size_t),
        ("re_endp", ctypes.c_void_p),
        ("re_g", ctypes.c_void_p),
    ]


def _regex_struct() -> type:
    """
    Выбор раскладки regex_t для текущей libc.

    Returns:
        type: Класс структуры ctypes
    """
    if sys.platform == "darwin" or "bsd" in sys.platform:
        return _BsdRegex

    libc_name, _ = platform.libc_ver()
    if libc_name == "glibc":
        return _GlibcRegex

    return _MuslRegex


class PosixRegexEngine:
    """Компиляция выражений через regcomp(3) из системной libc."""

    def __init__(self, library: Optional[str] = None) -> None:
        """
        Инициализация движка.

        Args:
            library: Путь к libc, по умолчанию ищется автоматически
        """
        library = library or ctypes.util.find_library("c")
        if not library:
            raise RegexEngineError("Не удалось найти системную библиотеку libc")

        try:
            self._libc = ctypes.CDLL(library)
        except OSError as e:
            raise RegexEngineError(f"Не удалось загрузить {library}: {e}") from e

        self._regex_t = _regex_struct()
        regex_p = ctypes.POINTER(self._regex_t)

        self._regcomp = self._libc.regcomp
        self._regcomp.argtypes = [regex_p, ctypes.c_char_p, ctypes.c_int]
        self._regcomp.restype = ctypes.c_int

        self._regerror = self._libc.regerror
        self._regerror.argtypes = [ctypes.c_int, regex_p, ctypes.c_char_p, ctypes.c_size_t]
        self._regerror.restype = ctypes.c_size_t

        self._regfree = self._libc.regfree
        self._regfree.argtypes = [regex_p]
        self._regfree.restype = None

        logger.debug(f"Загружен движок POSIX ERE: {library} ({self._regex_t.__name__})")

    def compile(self, pattern: bytes, *, case_insensitive: bool = False) -> CompileResult:
        """
        Компиляция выражения.

        Args:
            pattern: Выражение без нулевых байтов
            case_insensitive: Игнорировать регистр

        Returns:
            CompileResult: Число групп захвата или текст ошибки
        """
        cflags = REG_EXTENDED
        if case_insensitive:
            cflags |= REG_ICASE

        regex = self._regex_t()
        code = self._regcomp(ctypes.byref(regex), pattern, cflags)

        if code != 0:
            buffer = ctypes.create_string_buffer(ERROR_BUFFER_SIZE)
            self._regerror(code, ctypes.byref(regex), buffer, ERROR_BUFFER_SIZE)
            return CompileResult(error=buffer.value.decode("utf-8", errors="replace"))

        try:
            return CompileResult(nsub=regex.re_nsub)
        finally:
            self._regfree(ctypes.byref(regex))
