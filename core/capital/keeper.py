"""
Balance Keeper (SQLite)

단일 capital 행을 관리.
증감은 저장소 수준의 원자적 UPSERT(value_cents = value_cents + ?)로 반영.
op_id가 주어지면 capital_delta에 기록하여 같은 op_id의 중복 반영을 차단.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from core.ledger.models import from_cents, to_cents
from core.types import TransactionKind

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.ledger.interfaces import ILedgerStore

logger = logging.getLogger(__name__)


CAPITAL_ROW_ID = 1


def signed_cents(kind: TransactionKind | str, amount: Decimal) -> int:
    """부호가 적용된 센트 금액"""
    return TransactionKind(kind).sign * to_cents(amount)


class BalanceKeeper:
    """SQLite Balance Keeper

    Args:
        db: SQLite 어댑터
        ledger: 재계산(recompute) 시 사용할 Ledger 저장소 (같은 연결 공유)
    """

    def __init__(self, db: SQLiteAdapter, ledger: ILedgerStore):
        self.db = db
        self.ledger = ledger

    async def get(self) -> Decimal:
        """현재 자본 조회 (행이 없으면 0으로 생성)"""
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT OR IGNORE INTO capital (id, value_cents, updated_at)
                VALUES (?, 0, ?)
                """,
                (CAPITAL_ROW_ID, _utc_now_iso()),
            )

        row = await self.db.fetchone(
            "SELECT value_cents FROM capital WHERE id = ?",
            (CAPITAL_ROW_ID,),
        )
        return from_cents(row[0] if row else 0)

    async def apply_delta(
        self,
        kind: TransactionKind,
        amount: Decimal,
        reverse: bool = False,
        op_id: str | None = None,
    ) -> None:
        """거래 1건의 자본 반영

        effective = (reverse ? -1 : 1) * sign(kind) * amount
        """
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
        """수정 반영

        취소 후 재반영을 단일 순증감으로 적용하여
        취소만 반영된 중간 상태가 관측되지 않도록 함.
        """
        delta = signed_cents(new_kind, new_amount) - signed_cents(old_kind, old_amount)
        await self._apply_cents(delta, op_id)

    async def recompute(self) -> Decimal:
        """전체 거래 합계로 자본 재계산"""
        _, recomputed = await self.recompute_with_previous()
        return recomputed

    async def recompute_with_previous(self) -> tuple[Decimal, Decimal]:
        """전체 거래 합계로 자본 재계산

        BEGIN IMMEDIATE로 쓰기 잠금을 잡은 뒤 이전 값과 합계를 읽고 덮어씀.
        다른 연결의 쓰기가 중간에 끼어들 수 없음.

        Returns:
            (보정 전 자본, 보정 후 자본)
        """
        async with self.db.transaction(immediate=True):
            records = await self.ledger.list_all(None)
            total = sum((signed_cents(r.kind, r.amount) for r in records), 0)

            row = await self.db.fetchone(
                "SELECT value_cents FROM capital WHERE id = ?",
                (CAPITAL_ROW_ID,),
            )
            previous = row[0] if row else 0

            await self.db.execute(
                """
                INSERT INTO capital (id, value_cents, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    value_cents = excluded.value_cents,
                    updated_at = excluded.updated_at
                """,
                (CAPITAL_ROW_ID, total, _utc_now_iso()),
            )

        if previous != total:
            logger.warning(
                "자본 재계산: 저장값 보정",
                extra={
                    "previous": str(from_cents(previous)),
                    "recomputed": str(from_cents(total)),
                    "transaction_count": len(records),
                },
            )
        else:
            logger.info(f"자본 재계산: 일치 ({from_cents(total)})")

        return from_cents(previous), from_cents(total)

    async def prune_journal(self, before: datetime) -> int:
        """before 이전에 기록된 op_id 삭제

        op_id는 재시도 구간 동안만 필요.

        Returns:
            삭제된 op_id 수
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM capital_delta WHERE applied_at < ?",
                (_to_utc_iso(before),),
            )
        return cursor.rowcount

    async def _apply_cents(self, delta_cents: int, op_id: str | None) -> None:
        """원자적 증감

        op_id 기록과 capital 갱신을 같은 트랜잭션에서 수행.
        이미 기록된 op_id면 아무것도 하지 않음 (재시도 멱등성).
        """
        if delta_cents == 0 and op_id is None:
            return

        now = _utc_now_iso()

        async with self.db.transaction():
            if op_id is not None:
                cursor = await self.db.execute(
                    """
                    INSERT OR IGNORE INTO capital_delta (op_id, delta_cents, applied_at)
                    VALUES (?, ?, ?)
                    """,
                    (op_id, delta_cents, now),
                )
                if cursor.rowcount == 0:
                    logger.info(f"이미 반영된 op_id, 건너뜀: {op_id}")
                    return

            await self.db.execute(
                """
                INSERT INTO capital (id, value_cents, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    value_cents = capital.value_cents + excluded.value_cents,
                    updated_at = excluded.updated_at
                """,
                (CAPITAL_ROW_ID, delta_cents, now),
            )

        logger.debug(
            "자본 반영",
            extra={"delta": str(from_cents(delta_cents)), "op_id": op_id},
        )


def _utc_now_iso() -> str:
    return _to_utc_iso(datetime.now(timezone.utc))


def _to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")
