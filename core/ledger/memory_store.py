"""
메모리 Ledger 저장소

비영속 저장소. 개발/테스트용으로 명시적으로 설정했을 때만 사용.
각 연산은 await 지점 없이 수행되므로 이벤트 루프 내에서 원자적.
"""

import logging
from dataclasses import replace as dataclass_replace
from typing import Any

from core.errors import ConcurrentModificationError, TransactionNotFoundError
from core.ledger.models import MUTABLE_FIELDS, ListFilter, TransactionRecord

logger = logging.getLogger(__name__)


class InMemoryLedgerStore:
    """메모리 Ledger 저장소

    삽입 순서를 기록하여 생성 시간이 같은 경우에도 최신순 정렬 보장.
    """

    def __init__(self) -> None:
        self._records: dict[str, TransactionRecord] = {}
        self._seq: dict[str, int] = {}
        self._next_seq = 0

    async def insert(self, record: TransactionRecord) -> str:
        if record.id in self._records:
            raise ValueError(f"Duplicate transaction id: {record.id}")

        self._next_seq += 1
        self._records[record.id] = record
        self._seq[record.id] = self._next_seq
        return record.id

    async def get(self, transaction_id: str) -> TransactionRecord:
        record = self._records.get(transaction_id)
        if record is None:
            raise TransactionNotFoundError(transaction_id)
        return record

    async def replace(
        self,
        transaction_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> TransactionRecord:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Immutable or unknown fields: {sorted(unknown)}")

        current = self._check_version(transaction_id, expected_version)
        updated = dataclass_replace(current, version=current.version + 1, **fields)
        self._records[transaction_id] = updated
        return updated

    async def remove(
        self,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> None:
        self._check_version(transaction_id, expected_version)
        del self._records[transaction_id]
        del self._seq[transaction_id]

    async def list_all(self, filter: ListFilter | None = None) -> list[TransactionRecord]:
        filter = filter or ListFilter(limit=None)

        records = sorted(
            (r for r in self._records.values() if filter.matches(r)),
            key=lambda r: (r.created_at, self._seq[r.id]),
            reverse=True,
        )

        if filter.limit is not None:
            records = records[: filter.limit]
        return records

    def _check_version(self, transaction_id: str, expected_version: int | None) -> TransactionRecord:
        current = self._records.get(transaction_id)
        if current is None:
            raise TransactionNotFoundError(transaction_id)
        if expected_version is not None and current.version != expected_version:
            raise ConcurrentModificationError(transaction_id)
        return current
