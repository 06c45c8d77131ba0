"""
Ledger 저장소

거래 기록 저장 및 조회 (SQLite)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.errors import ConcurrentModificationError, TransactionNotFoundError
from core.ledger.models import ListFilter, TransactionRecord, format_amount
from core.types import TransactionKind

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_SELECT_COLUMNS = "id, type, amount, description, date, created_at, version"

# 레코드 필드 → 컬럼
_FIELD_COLUMNS: dict[str, str] = {
    "kind": "type",
    "amount": "amount",
    "description": "description",
    "occurred_at": "date",
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column_value(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field == "kind":
        return TransactionKind(value).value
    if field == "amount":
        return format_amount(value)
    if field == "occurred_at":
        return _to_iso(value)
    return value


def _row_to_record(row: tuple[Any, ...]) -> TransactionRecord:
    return TransactionRecord(
        id=row[0],
        kind=TransactionKind(row[1]),
        amount=Decimal(row[2]),
        description=row[3],
        occurred_at=datetime.fromisoformat(row[4]) if row[4] else None,
        created_at=datetime.fromisoformat(row[5]),
        version=int(row[6]),
    )


class LedgerStore:
    """Ledger 저장소

    transactions 테이블을 읽고 쓰는 클래스.
    금액은 소수점 2자리 문자열로 저장 (부동소수점 오차 방지).

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(self, record: TransactionRecord) -> str:
        """거래 저장

        Args:
            record: 저장할 거래

        Returns:
            저장된 거래 ID
        """
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO transactions (
                    id, type, amount, description, date,
                    version, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.kind.value,
                    format_amount(record.amount),
                    record.description,
                    _to_iso(record.occurred_at),
                    record.version,
                    _to_iso(record.created_at),
                    _to_iso(record.created_at),
                ),
            )

        logger.debug(f"Saved transaction: {record.id}")
        return record.id

    async def get(self, transaction_id: str) -> TransactionRecord:
        """거래 조회

        Raises:
            TransactionNotFoundError: 거래 없음
        """
        row = await self.db.fetchone(
            f"SELECT {_SELECT_COLUMNS} FROM transactions WHERE id = ?",
            (transaction_id,),
        )
        if row is None:
            raise TransactionNotFoundError(transaction_id)
        return _row_to_record(row)

    async def replace(
        self,
        transaction_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> TransactionRecord:
        """거래 필드 교체

        버전 비교와 갱신을 단일 UPDATE로 수행.

        Raises:
            TransactionNotFoundError: 거래 없음
            ConcurrentModificationError: 버전 불일치
            ValueError: 수정 불가 필드
        """
        unknown = set(fields) - set(_FIELD_COLUMNS)
        if unknown:
            raise ValueError(f"Immutable or unknown fields: {sorted(unknown)}")

        assignments = [f"{_FIELD_COLUMNS[name]} = ?" for name in fields]
        params: list[Any] = [_column_value(name, value) for name, value in fields.items()]

        assignments.append("version = version + 1")
        assignments.append("updated_at = ?")
        params.append(_utc_now_iso())

        sql = f"UPDATE transactions SET {', '.join(assignments)} WHERE id = ?"
        params.append(transaction_id)

        if expected_version is not None:
            sql += " AND version = ?"
            params.append(expected_version)

        async with self.db.transaction(immediate=True):
            cursor = await self.db.execute(sql, tuple(params))
            if cursor.rowcount == 0:
                await self._raise_missing_or_conflict(transaction_id)

            row = await self.db.fetchone(
                f"SELECT {_SELECT_COLUMNS} FROM transactions WHERE id = ?",
                (transaction_id,),
            )

        assert row is not None
        return _row_to_record(row)

    async def remove(
        self,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None:
        """거래 삭제

        Raises:
            TransactionNotFoundError: 거래 없음
            ConcurrentModificationError: 버전 불일치
        """
        sql = "DELETE FROM transactions WHERE id = ?"
        params: list[Any] = [transaction_id]

        if expected_version is not None:
            sql += " AND version = ?"
            params.append(expected_version)

        async with self.db.transaction(immediate=True):
            cursor = await self.db.execute(sql, tuple(params))
            if cursor.rowcount == 0:
                await self._raise_missing_or_conflict(transaction_id)

        logger.debug(f"Removed transaction: {transaction_id}")

    async def list_all(self, filter: ListFilter | None = None) -> list[TransactionRecord]:
        """거래 목록 조회 (생성 시간 내림차순)

        Args:
            filter: 조회 조건 (None이면 전체)
        """
        filter = filter or ListFilter(limit=None)

        sql = f"SELECT {_SELECT_COLUMNS} FROM transactions"
        conditions: list[str] = []
        params: list[Any] = []

        if filter.kind is not None:
            conditions.append("type = ?")
            params.append(filter.kind.value)

        if filter.search:
            pattern = f"%{_escape_like(filter.search.casefold())}%"
            conditions.append(
                "(casefold(COALESCE(description, '')) LIKE ? ESCAPE '\\' "
                "OR amount LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern])

        if conditions:
            sql += " WHERE " + " AND ".join(conditions)

        sql += " ORDER BY created_at DESC, seq DESC"

        if filter.limit is not None:
            sql += " LIMIT ?"
            params.append(filter.limit)

        rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_record(row) for row in rows]

    async def _raise_missing_or_conflict(self, transaction_id: str) -> None:
        row = await self.db.fetchone(
            "SELECT 1 FROM transactions WHERE id = ?",
            (transaction_id,),
        )
        if row is None:
            raise TransactionNotFoundError(transaction_id)
        raise ConcurrentModificationError(transaction_id)
