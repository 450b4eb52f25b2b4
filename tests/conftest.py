import sys
from pathlib import Path
from typing import List, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from naptr_regexp.core.regex_engine import CompileResult, PosixRegexEngine
from naptr_regexp.core.validator import NaptrRegexpValidator

ZONE = r'''$ORIGIN example.com.
$TTL 3600
@ IN SOA ns1 hostmaster 1 7200 3600 1209600 3600
@ IN NS ns1
ns1 IN A 192.0.2.1
sip IN NAPTR 100 10 "u" "E2U+sip" "!^.*$!sip:info@example.com!" .
bad IN NAPTR 100 20 "u" "E2U+sip" "!^(.*)$!sip:\\2@example.com!" .
srv IN NAPTR 100 30 "s" "SIP+D2U" "" _sip._udp.example.com.
'''


class FakeEngine:
    """Считает открывающие скобки и запоминает вызовы."""

    def __init__(self, error: str = None):
        self.error = error
        self.calls: List[Tuple[bytes, bool]] = []

    def compile(self, pattern: bytes, *, case_insensitive: bool = False) -> CompileResult:
        self.calls.append((pattern, case_insensitive))
        if self.error:
            return CompileResult(error=self.error)
        return CompileResult(nsub=pattern.count(b"("))


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_validator(fake_engine) -> NaptrRegexpValidator:
    return NaptrRegexpValidator(engine=fake_engine)


@pytest.fixture(scope="session")
def posix_engine() -> PosixRegexEngine:
    return PosixRegexEngine()


@pytest.fixture
def validator(posix_engine) -> NaptrRegexpValidator:
    return NaptrRegexpValidator(engine=posix_engine)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Тесты не должны зависеть от окружения и config/config.yml."""
    for name in ("LOG_LEVEL", "LOG_FORMAT", "DNS_NAMESERVERS", "DNS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "naptr_regexp.utils.config.CONFIG_PATH", tmp_path / "missing.yml"
    )
