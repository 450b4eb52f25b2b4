"""Модуль для работы с конфигурацией."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Загружаем .env файл, если он существует
load_dotenv()

# Путь к конфигурационному файлу
CONFIG_PATH = Path(os.environ.get("CONFIG_PATH", "config/config.yml"))

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "dns": {
        "nameservers": [],
        "timeout": 10,
    },
}


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Загрузка конфигурации из файла с поддержкой переменных окружения.

    Если путь не передан и файл по умолчанию отсутствует, используются
    значения по умолчанию. Явно указанный файл обязан существовать.

    Args:
        path: Путь к конфигурационному файлу

    Returns:
        Dict[str, Any]: Словарь с конфигурацией
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = Path(path) if path else CONFIG_PATH

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Ошибка при чтении конфигурационного файла: {e}") from e

        if not isinstance(loaded, dict):
            raise ValueError(f"Конфигурационный файл {config_path} должен содержать словарь")

        for section, values in loaded.items():
            if section not in config:
                logger.warning(f"Неизвестная секция конфигурации: {section}")
                continue
            if not isinstance(values, dict):
                raise ValueError(f"Секция {section} должна быть словарем")
            config[section].update(values)
    elif path:
        raise FileNotFoundError(
            f"Конфигурационный файл не найден: {config_path}. "
            "Скопируйте config.example.yml в config.yml и настройте его."
        )

    # Применяем переменные окружения
    if log_level := os.environ.get("LOG_LEVEL"):
        config["logging"]["level"] = log_level

    if log_format := os.environ.get("LOG_FORMAT"):
        config["logging"]["format"] = log_format

    # Список DNS-серверов (разделенных запятыми)
    if nameservers := os.environ.get("DNS_NAMESERVERS"):
        config["dns"]["nameservers"] = [
            server.strip() for server in nameservers.split(",") if server.strip()
        ]

    if timeout := os.environ.get("DNS_TIMEOUT"):
        try:
            config["dns"]["timeout"] = float(timeout)
        except ValueError:
            raise ValueError(f"Некорректное значение DNS_TIMEOUT: {timeout}")

    return config
