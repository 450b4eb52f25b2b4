"""Модуль для валидации входных данных."""

import re
from typing import Tuple

DOMAIN_PATTERN = re.compile(
    r"^(?:[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9])?\.)+[a-z0-9][a-z0-9-]{0,61}[a-z0-9]\.?$"
)


def validate_domain_name(domain: str) -> Tuple[bool, str]:
    """
    Валидация доменного имени.

    Допускаются метки с подчеркиванием (_sip._udp) и завершающая точка.

    Args:
        domain: Доменное имя для проверки

    Returns:
        Tuple[bool, str]: (результат валидации, сообщение об ошибке)
    """
    domain = domain.strip().lower()

    if len(domain.rstrip(".")) > 253:
        return False, "Доменное имя слишком длинное (максимум 253 символа)"
    if len(domain) < 3:
        return False, "Доменное имя слишком короткое (минимум 3 символа)"

    for label in domain.rstrip(".").split("."):
        if len(label) > 63:
            return False, f"Метка '{label}' слишком длинная (максимум 63 символа)"
        if label.startswith("-") or label.endswith("-"):
            return False, f"Метка '{label}' не может начинаться или заканчиваться дефисом"

    if not DOMAIN_PATTERN.match(domain):
        return False, "Неверный формат доменного имени"

    return True, ""
