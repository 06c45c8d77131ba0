"""
거래 서비스 (Transaction Coordinator)

거래 생성/수정/삭제 시 Ledger 저장소와 Balance Keeper를 순서대로 호출.

처리 순서:
1. 입력 검증 (위반 사항 전체 수집)
2. Ledger 기록 (실패 시 자본 변경 없음)
3. 자본 반영 (같은 op_id로 재시도, 최종 실패 시 CapitalUpdateFailedError)

3단계 실패 시 거래 기록은 커밋된 상태로 남음.
CapitalReconciler가 drift를 감지하여 복구.
"""

import asyncio
import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable

from core.constants import Defaults
from core.errors import (
    CapitalUpdateFailedError,
    ConcurrentModificationError,
    StoreFailureError,
)
from core.ledger.interfaces import IBalanceKeeper, ILedgerStore
from core.ledger.models import (
    ListFilter,
    TransactionRecord,
    clamp_limit,
    merge_changes,
    parse_kind_filter,
    validate_draft,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """거래 서비스

    Args:
        ledger: Ledger 저장소
        capital: Balance Keeper
        balance_retry_attempts: 자본 반영 최대 시도 횟수
        retry_backoff_sec: 재시도 간 대기 시간 (시도마다 증가)
    """

    def __init__(
        self,
        ledger: ILedgerStore,
        capital: IBalanceKeeper,
        balance_retry_attempts: int = Defaults.BALANCE_RETRY_ATTEMPTS,
        retry_backoff_sec: float = Defaults.BALANCE_RETRY_BACKOFF_SEC,
    ):
        self.ledger = ledger
        self.capital = capital
        self.balance_retry_attempts = max(1, balance_retry_attempts)
        self.retry_backoff_sec = retry_backoff_sec

    async def create(
        self,
        kind: Any,
        amount: Any,
        description: Any = None,
        occurred_at: Any = None,
    ) -> TransactionRecord:
        """거래 생성

        Returns:
            생성된 거래

        Raises:
            InvalidInputError: 입력 검증 실패 (기록/자본 변경 없음)
            StoreFailureError: Ledger 기록 실패 (자본 변경 없음)
            CapitalUpdateFailedError: 기록 후 자본 반영 실패
        """
        draft = validate_draft(kind, amount, description, occurred_at)

        record = TransactionRecord(
            id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            **asdict(draft),
        )
        await self.ledger.insert(record)

        op_id = _new_op_id()
        await self._apply_with_retry(
            record.id,
            op_id,
            lambda: self.capital.apply_delta(record.kind, record.amount, op_id=op_id),
        )

        logger.info(
            "거래 생성",
            extra={"transaction_id": record.id, "kind": record.kind.value, "amount": str(record.amount)},
        )
        return record

    async def update(
        self,
        transaction_id: str,
        changes: dict[str, Any],
        unknown_fields: Iterable[str] = (),
    ) -> TransactionRecord:
        """거래 부분 수정

        changes에 포함된 필드만 반영. unknown_fields가 있으면 검증 실패.
        버전 충돌 시 다시 읽어서 재시도하며, 자본 보정에는
        실제로 덮어쓴 이전 값(kind, amount)을 사용.

        Raises:
            TransactionNotFoundError: 거래 없음 (자본 변경 없음)
            InvalidInputError: 입력 검증 실패 (자본 변경 없음)
            ConcurrentModificationError: 재시도 후에도 버전 충돌
            CapitalUpdateFailedError: 수정 후 자본 반영 실패
        """
        for attempt in range(1, Defaults.CONFLICT_RETRY_ATTEMPTS + 1):
            existing = await self.ledger.get(transaction_id)
            draft = merge_changes(existing, changes, unknown_fields)

            try:
                updated = await self.ledger.replace(
                    transaction_id,
                    asdict(draft),
                    expected_version=existing.version,
                )
                break
            except ConcurrentModificationError:
                logger.info(f"버전 충돌, 재시도 ({attempt}/{Defaults.CONFLICT_RETRY_ATTEMPTS}): {transaction_id}")
                if attempt == Defaults.CONFLICT_RETRY_ATTEMPTS:
                    raise

        op_id = _new_op_id()
        await self._apply_with_retry(
            transaction_id,
            op_id,
            lambda: self.capital.reconcile_edit(
                existing.kind,
                existing.amount,
                updated.kind,
                updated.amount,
                op_id=op_id,
            ),
        )

        logger.info(
            "거래 수정",
            extra={
                "transaction_id": transaction_id,
                "old": f"{existing.kind.value}:{existing.amount}",
                "new": f"{updated.kind.value}:{updated.amount}",
            },
        )
        return updated

    async def delete(self, transaction_id: str) -> None:
        """거래 삭제

        Raises:
            TransactionNotFoundError: 거래 없음 (자본 변경 없음)
            ConcurrentModificationError: 재시도 후에도 버전 충돌
            CapitalUpdateFailedError: 삭제 후 자본 반영 실패
        """
        for attempt in range(1, Defaults.CONFLICT_RETRY_ATTEMPTS + 1):
            existing = await self.ledger.get(transaction_id)
            try:
                await self.ledger.remove(transaction_id, expected_version=existing.version)
                break
            except ConcurrentModificationError:
                logger.info(f"버전 충돌, 재시도 ({attempt}/{Defaults.CONFLICT_RETRY_ATTEMPTS}): {transaction_id}")
                if attempt == Defaults.CONFLICT_RETRY_ATTEMPTS:
                    raise

        op_id = _new_op_id()
        await self._apply_with_retry(
            transaction_id,
            op_id,
            lambda: self.capital.apply_delta(existing.kind, existing.amount, reverse=True, op_id=op_id),
        )

        logger.info("거래 삭제", extra={"transaction_id": transaction_id})

    async def list_transactions(
        self,
        search: str | None = None,
        kind: str | None = None,
        limit: Any = Defaults.LIST_LIMIT,
    ) -> list[TransactionRecord]:
        """거래 목록 조회 (자본과 무관한 단순 조회)

        Args:
            search: 설명 또는 금액 부분 일치 (대소문자 무시)
            kind: income / expense (그 외 값은 무시)
            limit: 최대 개수 (잘못된 값은 기본값)
        """
        filter = ListFilter(
            kind=parse_kind_filter(kind),
            search=search or None,
            limit=clamp_limit(limit),
        )
        return await self.ledger.list_all(filter)

    async def _apply_with_retry(
        self,
        transaction_id: str,
        op_id: str,
        apply: Callable[[], Awaitable[None]],
    ) -> None:
        """자본 반영 재시도

        같은 op_id로 재시도하므로 이전 시도가 실제로 커밋된 경우에도
        중복 반영되지 않음.

        Raises:
            CapitalUpdateFailedError: 모든 시도 실패
        """
        for attempt in range(1, self.balance_retry_attempts + 1):
            try:
                await apply()
                return
            except StoreFailureError as e:
                logger.warning(
                    f"자본 반영 실패 ({attempt}/{self.balance_retry_attempts})",
                    extra={"transaction_id": transaction_id, "op_id": op_id, "error": str(e)},
                )
                if attempt < self.balance_retry_attempts:
                    await asyncio.sleep(self.retry_backoff_sec * attempt)

        logger.error(
            "자본 반영 최종 실패: 거래 기록은 유지됨 (drift 발생)",
            extra={"transaction_id": transaction_id, "op_id": op_id},
        )
        raise CapitalUpdateFailedError(transaction_id, op_id)


def _new_op_id() -> str:
    return uuid.uuid4().hex
