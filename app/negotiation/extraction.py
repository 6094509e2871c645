"""Numeric amount extraction from free-text debtor messages."""

from __future__ import annotations

import re
from typing import Protocol

DISCOUNT_PATTERN = re.compile(r"(\d+)\s*%")
MONTHS_PATTERN = re.compile(r"(\d+)\s*mes(?:es)?", re.IGNORECASE)


class AmountExtractor(Protocol):
    """Pulls requested discount percent and month count out of a message.

    Implementations return 0 when nothing is found; 0 never triggers an
    escalation threshold.
    """

    def extract_discount(self, message: str) -> int: ...

    def extract_months(self, message: str) -> int: ...


class RegexAmountExtractor:
    def extract_discount(self, message: str) -> int:
        return _first_int(DISCOUNT_PATTERN, message)

    def extract_months(self, message: str) -> int:
        return _first_int(MONTHS_PATTERN, message)


def _first_int(pattern: re.Pattern[str], message: str | None) -> int:
    if not message:
        return 0
    match = pattern.search(message)
    return int(match.group(1)) if match else 0


_default = RegexAmountExtractor()


def extract_discount_amount(message: str | None) -> int:
    return _default.extract_discount(message or "")


def extract_time_amount(message: str | None) -> int:
    return _default.extract_months(message or "")
