"""Модуль проверки полей Regexp в NAPTR-записях зон и DNS."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import dns.exception
import dns.rdatatype
import dns.resolver
import dns.tokenizer
import dns.zone
from dns.rdtypes.IN.NAPTR import NAPTR
from dns.resolver import Answer, NoAnswer, NXDOMAIN

from naptr_regexp.core.validator import NaptrRegexpValidator, ValidationResult

logger = logging.getLogger(__name__)

# Позиция поля Regexp в текстовом представлении NAPTR:
# order preference "flags" "services" "regexp" replacement
REGEXP_TOKEN_INDEX = 4


def regexp_text(rdata: NAPTR) -> Optional[str]:
    """
    Получение поля Regexp в формате master-файла.

    dnspython хранит поле в раскодированном виде, поэтому текст берется
    из представления записи, где escape-последовательности сохраняются.

    Args:
        rdata: NAPTR-запись

    Returns:
        Optional[str]: Текст поля или None для пустого поля
    """
    tokenizer = dns.tokenizer.Tokenizer(rdata.to_text())
    for _ in range(REGEXP_TOKEN_INDEX):
        tokenizer.get()
    token = tokenizer.get()

    # Пустой Regexp означает, что используется поле replacement
    return token.value or None


@dataclass
class NaptrRegexpRecord:
    """Результат проверки одной NAPTR-записи."""

    owner: str
    order: int
    preference: int
    service: str
    regexp: Optional[str]
    result: ValidationResult

    @property
    def valid(self) -> bool:
        return bool(self.result)


class NaptrInfo:
    """Класс для хранения NAPTR-записей домена или зоны."""

    def __init__(self, domain: str) -> None:
        """
        Инициализация объекта.

        Args:
            domain: Доменное имя или имя зоны
        """
        self.domain = domain
        self.records: List[NaptrRegexpRecord] = []

    def add_record(self, record: NaptrRegexpRecord) -> None:
        self.records.append(record)

    @property
    def invalid_records(self) -> List[NaptrRegexpRecord]:
        return [record for record in self.records if not record.valid]

    def to_dict(self) -> Dict[str, Any]:
        """
        Преобразование объекта в словарь.

        Returns:
            Dict[str, Any]: Словарь с результатами проверки
        """
        return {
            "domain": self.domain,
            "records": [
                {
                    "owner": record.owner,
                    "order": record.order,
                    "preference": record.preference,
                    "service": record.service,
                    "regexp": record.regexp,
                    "status": record.result.status.name,
                    "error": record.result.error,
                }
                for record in self.records
            ],
        }


class NaptrChecker:
    """Класс для проверки полей Regexp в NAPTR-записях."""

    def __init__(
        self,
        nameservers: Optional[List[str]] = None,
        timeout: float = 10,
        validator: Optional[NaptrRegexpValidator] = None,
    ) -> None:
        """
        Инициализация checker'а.

        Args:
            nameservers: Список DNS-серверов
            timeout: Таймаут запросов в секундах
            validator: Валидатор поля Regexp
        """
        self.nameservers = nameservers
        self.timeout = timeout
        self.validator = validator or NaptrRegexpValidator()
        self._resolver: Optional[dns.resolver.Resolver] = None

    @property
    def resolver(self) -> dns.resolver.Resolver:
        """Резолвер создается при первом DNS-запросе."""
        if self._resolver is None:
            # resolv.conf нужен только если серверы не заданы явно
            resolver = dns.resolver.Resolver(configure=not self.nameservers)
            if self.nameservers:
                resolver.nameservers = self.nameservers
            resolver.timeout = self.timeout
            resolver.lifetime = self.timeout
            self._resolver = resolver
        return self._resolver

    def check_rdata(self, owner: str, rdata: NAPTR) -> NaptrRegexpRecord:
        """
        Проверка одной NAPTR-записи.

        Args:
            owner: Имя владельца записи
            rdata: NAPTR-запись

        Returns:
            NaptrRegexpRecord: Результат проверки
        """
        regexp = regexp_text(rdata)
        result = self.validator.validate(regexp)

        if not result:
            logger.info(f"Некорректный Regexp у {owner}: {regexp!r} ({result.error})")

        return NaptrRegexpRecord(
            owner=owner,
            order=rdata.order,
            preference=rdata.preference,
            service=rdata.service.decode("utf-8", errors="backslashreplace"),
            regexp=regexp,
            result=result,
        )

    def check_zone(self, zone: dns.zone.Zone) -> NaptrInfo:
        """
        Проверка всех NAPTR-записей зоны.

        Args:
            zone: Загруженная зона

        Returns:
            NaptrInfo: Результаты проверки
        """
        naptr_info = NaptrInfo(zone.origin.to_text())

        for name, _ttl, rdata in zone.iterate_rdatas(dns.rdatatype.NAPTR):
            owner = name.derelativize(zone.origin).to_text()
            naptr_info.add_record(self.check_rdata(owner, rdata))

        logger.debug(
            f"Зона {naptr_info.domain}: проверено {len(naptr_info.records)} NAPTR-записей"
        )
        return naptr_info

    def check_zone_file(
        self, path: Union[str, Path], origin: Optional[str] = None
    ) -> NaptrInfo:
        """
        Проверка NAPTR-записей в файле зоны.

        Args:
            path: Путь к файлу зоны
            origin: Имя зоны, если в файле нет $ORIGIN

        Returns:
            NaptrInfo: Результаты проверки
        """
        zone = dns.zone.from_file(str(path), origin=origin, relativize=False)
        return self.check_zone(zone)

    def check_zone_text(self, text: str, origin: Optional[str] = None) -> NaptrInfo:
        """
        Проверка NAPTR-записей в тексте зоны.

        Args:
            text: Текст зоны в формате master-файла
            origin: Имя зоны, если в тексте нет $ORIGIN

        Returns:
            NaptrInfo: Результаты проверки
        """
        zone = dns.zone.from_text(text, origin=origin, relativize=False)
        return self.check_zone(zone)

    async def _query_naptr(self, domain: str) -> Optional[Answer]:
        """
        Выполнение DNS-запроса NAPTR.

        Args:
            domain: Доменное имя

        Returns:
            Optional[Answer]: Ответ или None
        """
        try:
            # Выполняем DNS-запрос в отдельном потоке
            return await asyncio.get_running_loop().run_in_executor(
                None, lambda: self.resolver.resolve(domain, "NAPTR")
            )
        except (NoAnswer, NXDOMAIN):
            return None
        except dns.exception.DNSException as e:
            logger.warning(f"Ошибка DNS-запроса NAPTR для {domain}: {e}")
            return None

    async def get_naptr_info(self, domain: str) -> NaptrInfo:
        """
        Получение и проверка NAPTR-записей домена.

        Args:
            domain: Доменное имя

        Returns:
            NaptrInfo: Результаты проверки
        """
        naptr_info = NaptrInfo(domain)

        answer = await self._query_naptr(domain)
        if answer:
            owner = answer.qname.to_text()
            for rdata in answer:
                naptr_info.add_record(self.check_rdata(owner, rdata))

        return naptr_info
