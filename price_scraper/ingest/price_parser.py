"""Shared price and image URL parsing used by every tier.

Prices are returned in integer minor units (cents) together with an ISO 4217
currency code. Amounts without a recognisable currency are rejected.
"""

import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import NamedTuple, Optional, Union
from urllib.parse import urljoin, urlparse

logger = logging.getLogger(__name__)

# Checked in order, so multi-character symbols come before "$"
CURRENCY_SYMBOLS = [
    ("NZ$", "NZD"),
    ("HK$", "HKD"),
    ("US$", "USD"),
    ("CA$", "CAD"),
    ("A$", "AUD"),
    ("C$", "CAD"),
    ("S$", "SGD"),
    ("R$", "BRL"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₹", "INR"),
    ("₽", "RUB"),
    ("₩", "KRW"),
    ("฿", "THB"),
    ("₺", "TRY"),
    ("₪", "ILS"),
    ("₫", "VND"),
    ("₱", "PHP"),
    ("₴", "UAH"),
    ("₦", "NGN"),
    ("$", "USD"),
]

KNOWN_CURRENCY_CODES = frozenset({
    "AED", "AUD", "BGN", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK", "EUR",
    "GBP", "HKD", "HUF", "IDR", "ILS", "INR", "JPY", "KRW", "MXN", "MYR",
    "NGN", "NOK", "NZD", "PHP", "PLN", "RON", "RUB", "SAR", "SEK", "SGD",
    "THB", "TRY", "TWD", "UAH", "USD", "VND", "ZAR",
})

DANGEROUS_URL_SCHEMES = ("javascript:", "data:", "file:", "vbscript:", "about:")

# Digits with optional separators, or a bare fraction like ".99". Apostrophes and
# (narrow) no-break spaces only group; a plain space groups only before exactly 3 digits
_AMOUNT_RE = re.compile(r"(?:\d+|(?=[.,]\d))(?:[.,'\u00a0\u202f]\d+| \d{3}(?!\d))*")
_GROUPING_RE = re.compile(r"['\u00a0\u202f ]")
_SEPARATOR_RE = re.compile(r"[.,]")
_LEADING_CODE_RE = re.compile(r"(?<![A-Za-z])([A-Za-z]{3})[^\w]*$")
_TRAILING_CODE_RE = re.compile(r"^[^\w]*([A-Za-z]{3})(?![A-Za-z])")

_CENT = Decimal("1")


class ParsedPrice(NamedTuple):
    """Price in minor units plus ISO 4217 code."""

    price: int
    currency: str


def to_minor_units(value: Union[Decimal, float, int, str, None]) -> Optional[int]:
    """
    Convert a major-unit amount (e.g. 19.99) to minor units (1999).

    Rounds half-up to the nearest cent. Returns None for missing, negative or
    non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return int((amount * 100).quantize(_CENT, rounding=ROUND_HALF_UP))


def _normalize_amount(raw: str) -> Optional[Decimal]:
    """Turn a matched amount like "1.234,56" into Decimal("1234.56")."""
    cleaned = _GROUPING_RE.sub("", raw)
    separators = list(_SEPARATOR_RE.finditer(cleaned))
    if not separators:
        return Decimal(cleaned)

    last = separators[-1]
    fraction = cleaned[last.end():]
    head = cleaned[:last.start()]
    mixed = last.group() != separators[0].group()

    # 1-2 trailing digits is a decimal fraction whatever the separator;
    # 3 trailing digits is a thousands group unless separators are mixed
    if len(fraction) <= 2 or mixed:
        integer_part = _SEPARATOR_RE.sub("", head) or "0"
        try:
            return Decimal(f"{integer_part}.{fraction}")
        except InvalidOperation:
            return None

    try:
        return Decimal(_SEPARATOR_RE.sub("", cleaned))
    except InvalidOperation:
        return None


def _detect_currency(text: str, amount_start: int, amount_end: int) -> Optional[str]:
    """Find a currency code next to the amount, falling back to a known symbol."""
    prefix = text[:amount_start]
    suffix = text[amount_end:]

    for match in (_TRAILING_CODE_RE.search(suffix), _LEADING_CODE_RE.search(prefix)):
        if match and match.group(1).upper() in KNOWN_CURRENCY_CODES:
            return match.group(1).upper()

    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code

    return None


def parse_price(price_text: Optional[str]) -> Optional[ParsedPrice]:
    """
    Parse price text into minor units and currency.

    Handles "$19.99", "£1,234.56", "1.234,56 €", "EUR 12,50" and ranges such
    as "$10 - $20" (first amount wins).

    Args:
        price_text: Raw price text

    Returns:
        ParsedPrice, or None if no amount or no currency signal was found
    """
    if not price_text:
        return None

    text = price_text.strip()
    match = _AMOUNT_RE.search(text)
    if not match:
        return None

    amount = _normalize_amount(match.group())
    price = to_minor_units(amount)
    if price is None:
        return None

    currency = _detect_currency(text, match.start(), match.end())
    if currency is None:
        logger.debug(f"No currency signal in price text: {text[:50]!r}")
        return None

    return ParsedPrice(price=price, currency=currency)


def resolve_image_url(image_url: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve a possibly relative image URL against the page URL.

    Args:
        image_url: Raw src/data-src value
        base_url: URL of the page the image was found on

    Returns:
        Absolute http(s) URL, or None if empty, unsafe or unresolvable
    """
    if not image_url:
        return None

    trimmed = image_url.strip()
    if not trimmed:
        return None

    if trimmed.lower().startswith(DANGEROUS_URL_SCHEMES):
        logger.warning(f"Blocked dangerous image URL: {trimmed[:80]}")
        return None

    lowered = trimmed.lower()
    if lowered.startswith(("http://", "https://")):
        resolved = trimmed
    elif trimmed.startswith("//"):
        resolved = "https:" + trimmed
    else:
        base = urlparse(base_url or "")
        if base.scheme not in ("http", "https") or not base.netloc:
            logger.debug(f"Cannot resolve {trimmed[:80]} against base URL {base_url!r}")
            return None
        resolved = urljoin(base_url, trimmed)

    parsed = urlparse(resolved)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        logger.debug(f"Resolved image URL has invalid scheme or host: {resolved[:80]}")
        return None

    return resolved
