"""
Ledger 모듈

거래 기록 저장 및 조회
"""

from core.ledger.interfaces import IBalanceKeeper, ILedgerStore
from core.ledger.memory_store import InMemoryLedgerStore
from core.ledger.models import (
    ListFilter,
    TransactionDraft,
    TransactionRecord,
    clamp_limit,
    merge_changes,
    parse_kind_filter,
    validate_draft,
)
from core.ledger.store import LedgerStore

__all__ = [
    "IBalanceKeeper",
    "ILedgerStore",
    "InMemoryLedgerStore",
    "LedgerStore",
    "ListFilter",
    "TransactionDraft",
    "TransactionRecord",
    "clamp_limit",
    "merge_changes",
    "parse_kind_filter",
    "validate_draft",
]
