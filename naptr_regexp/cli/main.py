"""CLI интерфейс для проверки полей Regexp записей NAPTR."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import dns.exception
from tabulate import tabulate

from naptr_regexp.core.naptr_checker import NaptrChecker, NaptrInfo
from naptr_regexp.core.validator import NaptrRegexpValidator, ValidationStatus
from naptr_regexp.utils.config import load_config
from naptr_regexp.utils.validators import validate_domain_name

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2

# Пустая строка: разделителя нет, поле требует ручной проверки
NO_DELIMITER_MESSAGE = "No delimiter, empty Regexp field"


def _text(value: Optional[bytes]) -> str:
    if value is None:
        return ""
    return value.decode("utf-8", errors="backslashreplace")


def _printable(value: str) -> str:
    """Аргументы с байтами не из UTF-8 приходят с суррогатами."""
    return _text(value.encode("utf-8", errors="surrogateescape"))


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


class NaptrRegexpCli:
    """Класс команд командной строки."""

    def __init__(self, config: Dict[str, Any], as_json: bool = False):
        """
        Инициализация.

        Args:
            config: Загруженная конфигурация
            as_json: Выводить результаты в JSON вместо таблиц
        """
        self.config = config
        self.as_json = as_json
        self.validator = NaptrRegexpValidator()
        self.checker = NaptrChecker(
            nameservers=config["dns"]["nameservers"],
            timeout=config["dns"]["timeout"],
            validator=self.validator,
        )

    def show_check(self, values: List[str]) -> int:
        """
        Проверка строк, переданных в командной строке.

        Args:
            values: Поля Regexp в формате master-файла

        Returns:
            int: Код завершения
        """
        results = []
        exit_code = EXIT_OK

        for value in values:
            result = self.validator.validate(value)
            error = result.error
            if result.status is ValidationStatus.MALFORMED:
                error = NO_DELIMITER_MESSAGE
            if result.status in (ValidationStatus.INVALID, ValidationStatus.MALFORMED):
                exit_code = EXIT_INVALID
            results.append({
                "regexp": _printable(value),
                "status": result.status.name,
                "find": _text(result.find),
                "replace": _text(result.replace),
                "flags": _text(result.flags),
                "groups": result.nsub,
                "error": error,
            })

        if self.as_json:
            _print_json(results)
            return exit_code

        rows = [
            [
                item["regexp"],
                item["status"],
                item["find"],
                item["replace"],
                item["flags"],
                "" if item["groups"] is None else item["groups"],
                item["error"] or "",
            ]
            for item in results
        ]
        print(tabulate(
            rows,
            headers=["Regexp", "Status", "Find", "Replace", "Flags", "Groups", "Error"],
            tablefmt="grid",
        ))
        return exit_code

    def show_naptr_info(self, naptr_info: NaptrInfo) -> int:
        """
        Вывод результатов проверки NAPTR-записей.

        Args:
            naptr_info: Результаты проверки

        Returns:
            int: Код завершения
        """
        invalid = len(naptr_info.invalid_records)
        exit_code = EXIT_INVALID if invalid else EXIT_OK

        if self.as_json:
            _print_json(naptr_info.to_dict())
            return exit_code

        print(f"\n=== {naptr_info.domain} ===")

        if not naptr_info.records:
            print("NAPTR-записи не найдены")
            return EXIT_OK

        rows = [
            [
                record.owner,
                record.order,
                record.preference,
                record.service,
                record.regexp or "",
                record.result.status.name,
                record.result.error or "",
            ]
            for record in naptr_info.records
        ]
        print(tabulate(
            rows,
            headers=["Owner", "Order", "Pref", "Service", "Regexp", "Status", "Error"],
            tablefmt="grid",
        ))

        print(f"Всего записей: {len(naptr_info.records)}, некорректных: {invalid}")
        return exit_code

    def show_zone(self, path: str, origin: Optional[str] = None) -> int:
        """Проверка файла зоны."""
        try:
            naptr_info = self.checker.check_zone_file(path, origin=origin)
        except (OSError, dns.exception.DNSException) as e:
            logger.error(f"Не удалось загрузить зону {path}: {e}")
            return EXIT_ERROR

        return self.show_naptr_info(naptr_info)

    async def show_lookup(self, domains: List[str]) -> int:
        """
        Проверка NAPTR-записей доменов в DNS.

        Args:
            domains: Список доменных имен

        Returns:
            int: Код завершения
        """
        exit_code = EXIT_OK

        for domain in domains:
            valid, message = validate_domain_name(domain)
            if not valid:
                logger.error(f"{domain}: {message}")
                exit_code = EXIT_ERROR
                continue

            naptr_info = await self.checker.get_naptr_info(domain)
            exit_code = max(exit_code, self.show_naptr_info(naptr_info))

        return exit_code


def build_parser() -> argparse.ArgumentParser:
    """Создание парсера аргументов."""
    parser = argparse.ArgumentParser(
        prog="naptr-regexp",
        description="Проверка поля Regexp записей NAPTR (RFC 2915)",
    )
    parser.add_argument(
        "--config",
        help="Путь к конфигурационному файлу",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Вывод результатов в формате JSON",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Проверить строки Regexp")
    check.add_argument("regexps", nargs="+", metavar="REGEXP")

    zone = subparsers.add_parser("zone", help="Проверить NAPTR-записи файла зоны")
    zone.add_argument("path", metavar="FILE")
    zone.add_argument("--origin", help="Имя зоны, если в файле нет $ORIGIN")

    lookup = subparsers.add_parser("lookup", help="Проверить NAPTR-записи доменов в DNS")
    lookup.add_argument("domains", nargs="+", metavar="DOMAIN")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=str(config["logging"]["level"]).upper(),
        format=config["logging"]["format"],
    )

    cli = NaptrRegexpCli(config, as_json=args.json)

    if args.command == "check":
        return cli.show_check(args.regexps)
    elif args.command == "zone":
        return cli.show_zone(args.path, origin=args.origin)
    elif args.command == "lookup":
        return await cli.show_lookup(args.domains)

    return EXIT_ERROR


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
