"""BTC address format checks. Pure predicates; no checksum or network lookups."""
from __future__ import annotations

import re

from .core.errors import ValidationError

INVALID_ADDRESS_MESSAGE = "Invalid BTC address format"

_ADDRESS_PATTERNS = (
    re.compile(r"^[13][a-km-zA-HJ-NP-Z1-9]{25,34}$"),  # legacy P2PKH / P2SH
    re.compile(r"^bc1[ac-hj-np-z02-9]{11,71}$"),  # segwit
    re.compile(r"^bc1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{11,71}$"),  # native segwit
    re.compile(r"^bc1p[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{11,71}$"),  # taproot
)


def is_valid_btc_address(address: str) -> bool:
    if not address:
        return False
    return any(p.match(address) for p in _ADDRESS_PATTERNS)


def require_valid_address(address: str) -> str:
    """Return the stripped address or raise ValidationError."""
    candidate = (address or "").strip()
    if not is_valid_btc_address(candidate):
        raise ValidationError(INVALID_ADDRESS_MESSAGE)
    return candidate
