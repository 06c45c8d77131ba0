"""
저장소 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
SQLite 구현체와 메모리 구현체 모두 이 Protocol을 준수해야 함.
금액은 반드시 Decimal 타입 사용.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from core.ledger.models import ListFilter, TransactionRecord
from core.types import TransactionKind


@runtime_checkable
class ILedgerStore(Protocol):
    """거래 기록 저장소 인터페이스

    거래 존재 여부에 대한 유일한 기준.
    찾을 수 없으면 TransactionNotFoundError, 저장소 오류는 StoreFailureError.
    """

    async def insert(self, record: TransactionRecord) -> str:
        """거래 저장

        Returns:
            저장된 거래 ID
        """
        ...

    async def get(self, transaction_id: str) -> TransactionRecord:
        """거래 조회

        Raises:
            TransactionNotFoundError: 거래 없음
        """
        ...

    async def replace(
        self,
        transaction_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> TransactionRecord:
        """거래 필드 교체

        Args:
            transaction_id: 거래 ID
            fields: 교체할 필드 (kind, amount, description, occurred_at)
            expected_version: 지정 시 해당 버전일 때만 교체

        Returns:
            교체 후 거래 (version + 1)

        Raises:
            TransactionNotFoundError: 거래 없음
            ConcurrentModificationError: 버전 불일치
        """
        ...

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
        ...

    async def list_all(self, filter: ListFilter | None = None) -> list[TransactionRecord]:
        """거래 목록 조회 (생성 시간 내림차순)

        Args:
            filter: 조회 조건 (None이면 전체)
        """
        ...


@runtime_checkable
class IBalanceKeeper(Protocol):
    """자본(순잔액) 관리 인터페이스

    자본 값의 유일한 소유자. 증감은 저장소 수준에서 원자적으로 반영.
    op_id가 주어지면 같은 op_id의 반영은 최대 1회만 적용 (재시도 안전).
    """

    async def get(self) -> Decimal:
        """현재 자본 (없으면 0으로 초기화 후 반환)"""
        ...

    async def apply_delta(
        self,
        kind: TransactionKind,
        amount: Decimal,
        reverse: bool = False,
        op_id: str | None = None,
    ) -> None:
        """거래 1건의 자본 반영 (reverse=True면 취소 반영)"""
        ...

    async def reconcile_edit(
        self,
        old_kind: TransactionKind,
        old_amount: Decimal,
        new_kind: TransactionKind,
        new_amount: Decimal,
        op_id: str | None = None,
    ) -> None:
        """수정 반영 (이전 값 취소 + 새 값 반영을 단일 순증감으로 적용)"""
        ...

    async def recompute(self) -> Decimal:
        """전체 거래 합계로 자본 재계산 후 덮어쓰기

        Returns:
            재계산된 자본
        """
        ...

    async def recompute_with_previous(self) -> tuple[Decimal, Decimal]:
        """recompute와 같은 잠금 안에서 이전 값도 함께 반환

        Returns:
            (보정 전 자본, 보정 후 자본)
        """
        ...

    async def prune_journal(self, before: datetime) -> int:
        """before 이전에 기록된 op_id 삭제

        Returns:
            삭제된 op_id 수
        """
        ...
