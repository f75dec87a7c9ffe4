"""Blockchain explorer providers (balance + recent transactions per address)."""
from __future__ import annotations

from .blockcypher import BlockCypherLedgerProvider
from .esplora import EsploraLedgerProvider

__all__ = ["BlockCypherLedgerProvider", "EsploraLedgerProvider"]
