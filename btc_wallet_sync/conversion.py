"""
Sats converter and display formatting.

Everything here is pure: the same input and price always produce the same
strings. Empty output means "no valid input", which is different from a
valid input that converts to "0.00".
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, localcontext
from typing import Optional, Union

from .core.errors import ParseError
from .providers.base import SATS_PER_BTC, PriceSnapshot

MIN_FRACTION_DIGITS = 2
MAX_FRACTION_DIGITS = 8
HIDDEN_VALUE = "********"

_NON_SATS_CHARS = re.compile(r"[^\d,]")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Conversion:
    usd: str = ""
    eur: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.usd and not self.eur


EMPTY_CONVERSION = Conversion()


def sanitize_sats_input(text: str) -> str:
    """Input-field filter: keep digits and grouping commas only."""
    return _NON_SATS_CHARS.sub("", text or "")


def parse_sats(text: str) -> Decimal:
    """Strip grouping separators and parse. Raises ParseError on anything else."""
    cleaned = (text or "").replace(",", "").strip()
    if not _NUMBER.match(cleaned):
        raise ParseError(f"not a number: {text!r}")
    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise ParseError(f"not a number: {text!r}") from exc


def format_number(
    value: Union[Decimal, int, float, str],
    min_fraction_digits: int = MIN_FRACTION_DIGITS,
    max_fraction_digits: int = MAX_FRACTION_DIGITS,
) -> str:
    """en-US grouping, rounded half-up to max digits, zero-padded to min digits."""
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return "0"
    if not d.is_finite():
        return "0"
    max_fraction_digits = min(max_fraction_digits, 20)
    with localcontext() as ctx:
        # Room for the whole integer part plus the kept fraction.
        ctx.prec = max(28, d.adjusted() + max_fraction_digits + 2)
        d = d.quantize(Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_HALF_UP)
    text = f"{d:,f}"
    if "." in text:
        whole, frac = text.split(".")
        frac = frac.rstrip("0")
        if len(frac) < min_fraction_digits:
            frac = frac.ljust(min_fraction_digits, "0")
        text = f"{whole}.{frac}" if frac else whole
    elif min_fraction_digits > 0:
        text = f"{text}.{'0' * min_fraction_digits}"
    if text.startswith("-") and set(text[1:]) <= set("0.,"):
        text = text[1:]
    return text


def format_percentage(value: Union[Decimal, float]) -> str:
    d = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"+{d}" if d >= 0 else str(d)


def format_btc(value: Decimal) -> str:
    """Sub-1 BTC amounts keep all 8 decimals."""
    return format_number(value, MAX_FRACTION_DIGITS if value < 1 else MIN_FRACTION_DIGITS)


def mask_value(text: str, hide: bool) -> str:
    return HIDDEN_VALUE if hide else text


def convert_sats(text: str, price: Optional[PriceSnapshot]) -> Conversion:
    """
    Recompute USD/EUR for a free-form sats amount at the given price.

    Call again whenever either input changes.
    """
    if price is None or not text:
        return EMPTY_CONVERSION
    try:
        sats = parse_sats(text)
    except ParseError:
        return EMPTY_CONVERSION
    try:
        with localcontext() as ctx:
            # Exact products: coefficient digits of both operands plus headroom.
            ctx.prec = 28 + _digits(sats) + max(_digits(price.btc_price_usd), _digits(price.btc_price_eur))
            btc = sats / SATS_PER_BTC
            usd = btc * price.btc_price_usd
            eur = btc * price.btc_price_eur
    except (InvalidOperation, Overflow):
        return EMPTY_CONVERSION
    return Conversion(usd=format_number(usd), eur=format_number(eur))


def _digits(value: Decimal) -> int:
    return len(value.as_tuple().digits)
