"""
메모리 Balance Keeper

원자적 증감 연산을 제공하는 저장소가 없으므로
프로세스 단위 asyncio.Lock으로 모든 쓰기를 직렬화.
"""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

from core.capital.keeper import signed_cents
from core.ledger.interfaces import ILedgerStore
from core.ledger.models import from_cents
from core.types import TransactionKind

logger = logging.getLogger(__name__)


class InMemoryBalanceKeeper:
    """메모리 Balance Keeper

    Args:
        ledger: 재계산 시 사용할 Ledger 저장소
    """

    def __init__(self, ledger: ILedgerStore):
        self.ledger = ledger
        self._value_cents: int | None = None
        self._applied_ops: dict[str, datetime] = {}
        self._lock = asyncio.Lock()

    async def get(self) -> Decimal:
        async with self._lock:
            if self._value_cents is None:
                self._value_cents = 0
            return from_cents(self._value_cents)

    async def apply_delta(
        self,
        kind: TransactionKind,
        amount: Decimal,
        reverse: bool = False,
        op_id: str | None = None,
    ) -> None:
        delta = signed_cents(kind, amount)
        if reverse:
            delta = -delta
        await self._apply_cents(delta, op_id)

    async def reconcile_edit(
        self,
        old_kind: TransactionKind,
        old_amount: Decimal,
        new_kind: TransactionKind,
        new_amount: Decimal,
        op_id: str | None = None,
    ) -> None:
        delta = signed_cents(new_kind, new_amount) - signed_cents(old_kind, old_amount)
        await self._apply_cents(delta, op_id)

    async def recompute(self) -> Decimal:
        _, recomputed = await self.recompute_with_previous()
        return recomputed

    async def recompute_with_previous(self) -> tuple[Decimal, Decimal]:
        async with self._lock:
            records = await self.ledger.list_all(None)
            total = sum((signed_cents(r.kind, r.amount) for r in records), 0)
            previous = self._value_cents or 0

            if previous != total:
                logger.warning(
                    "자본 재계산: 저장값 보정",
                    extra={
                        "previous": str(from_cents(previous)),
                        "recomputed": str(from_cents(total)),
                    },
                )
            self._value_cents = total
            return from_cents(previous), from_cents(total)

    async def prune_journal(self, before: datetime) -> int:
        async with self._lock:
            expired = [op_id for op_id, applied_at in self._applied_ops.items() if applied_at < before]
            for op_id in expired:
                del self._applied_ops[op_id]
            return len(expired)

    async def _apply_cents(self, delta_cents: int, op_id: str | None) -> None:
        async with self._lock:
            if op_id is not None:
                if op_id in self._applied_ops:
                    logger.info(f"이미 반영된 op_id, 건너뜀: {op_id}")
                    return
                self._applied_ops[op_id] = datetime.now(timezone.utc)

            self._value_cents = (self._value_cents or 0) + delta_cents
