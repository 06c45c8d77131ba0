"""
Capital Reconciler

저장된 자본과 거래 합계를 주기적으로 비교하여 drift 복구.

거래 기록 후 자본 반영이 실패하면 (CapitalUpdateFailedError)
거래는 남고 자본에는 빠진 상태가 됨. 이 상태를 감지하고
recompute로 보정하는 것이 이 컴포넌트의 역할.

진행 중인 요청(거래 기록 완료, 자본 반영 전)을 drift로 오인하지 않도록
confirm_delay_sec 후 재확인하여 같은 차이가 유지될 때만 보정.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.capital.drift import CapitalSnapshot, DriftDetector, DriftInfo
from core.constants import Defaults

if TYPE_CHECKING:
    from adapters.storage import Storage

logger = logging.getLogger(__name__)


class CapitalReconciler:
    """Capital Reconciler

    Args:
        storage: 저장소 제공자
        interval_sec: 검증 주기 (초, 0이면 주기 실행 안 함)
        auto_repair: drift 감지 시 자동 보정 여부
        confirm_delay_sec: 보정 전 재확인 대기 시간
        journal_retention_sec: op_id 기록 보관 시간 (실행마다 오래된 기록 삭제)
    """

    def __init__(
        self,
        storage: Storage,
        interval_sec: float = Defaults.RECONCILE_INTERVAL_SEC,
        auto_repair: bool = True,
        confirm_delay_sec: float = Defaults.RECONCILE_CONFIRM_DELAY_SEC,
        journal_retention_sec: float = Defaults.OP_JOURNAL_RETENTION_SEC,
    ):
        self.storage = storage
        self.interval_sec = interval_sec
        self.auto_repair = auto_repair
        self.confirm_delay_sec = confirm_delay_sec
        self.journal_retention_sec = journal_retention_sec

        self.drift_detector = DriftDetector()

        self._task: asyncio.Task[None] | None = None
        self._is_running = False
        self._last_check_time: datetime | None = None

        # 통계
        self._check_count = 0
        self._drift_count = 0
        self._repair_count = 0

    @property
    def stats(self) -> dict[str, Any]:
        """실행 통계"""
        return {
            "check_count": self._check_count,
            "drift_count": self._drift_count,
            "repair_count": self._repair_count,
            "last_check_time": self._last_check_time,
        }

    async def snapshot(self) -> CapitalSnapshot:
        """현재 저장값과 거래 합계 비교"""
        async with self.storage.session() as session:
            stored = await session.capital.get()
            records = await session.ledger.list_all(None)
        return self.drift_detector.snapshot(stored, records)

    async def check(self) -> DriftInfo | None:
        """drift 감지

        Returns:
            DriftInfo 또는 None (일치 시)
        """
        async with self.storage.session() as session:
            stored = await session.capital.get()
            records = await session.ledger.list_all(None)

        self._check_count += 1
        self._last_check_time = datetime.now(timezone.utc)
        return self.drift_detector.detect(stored, records)

    async def verify(self) -> None:
        """일치하지 않으면 예외 발생 (보정하지 않음)

        Raises:
            InconsistencyDriftError: drift 감지 시
        """
        async with self.storage.session() as session:
            stored = await session.capital.get()
            records = await session.ledger.list_all(None)
        self.drift_detector.ensure_consistent(stored, records)

    async def repair(self) -> tuple[Decimal, Decimal]:
        """거래 합계로 자본 재계산

        기록은 끝났지만 자본 반영이 아직 안 된 요청(재시도 대기 포함)도
        합계에 포함됨. 그 반영이 나중에 도착하면 다음 점검까지
        drift가 다시 보일 수 있음 (POST /capital/recompute도 동일).

        Returns:
            (보정 전 자본, 보정 후 자본)
        """
        async with self.storage.session() as session:
            previous, recomputed = await session.capital.recompute_with_previous()

        if previous != recomputed:
            self._repair_count += 1
            logger.warning(
                "자본 drift 보정 완료",
                extra={"previous": str(previous), "recomputed": str(recomputed)},
            )
        return previous, recomputed

    async def prune_journal(self) -> int:
        """보관 시간이 지난 op_id 기록 삭제

        Returns:
            삭제된 op_id 수
        """
        before = datetime.now(timezone.utc) - timedelta(seconds=self.journal_retention_sec)
        async with self.storage.session() as session:
            pruned = await session.capital.prune_journal(before)

        if pruned:
            logger.info(f"op_id 기록 정리: {pruned}건")
        return pruned

    async def run_once(self) -> dict[str, Any]:
        """1회 검증 (필요 시 보정)

        Returns:
            {
                "drift_detected": bool,
                "repaired": bool,
                "difference": str | None,
                "capital": str | None,
            }
        """
        if self._is_running:
            logger.warning("Reconciler가 이미 실행 중입니다")
            return {"drift_detected": False, "repaired": False, "skipped": True}

        self._is_running = True
        try:
            await self.prune_journal()

            drift = await self.check()
            if drift is None:
                logger.debug("자본 정합 확인: 일치")
                return {"drift_detected": False, "repaired": False, "difference": None, "capital": None}

            self._drift_count += 1
            logger.warning(drift.description)

            if not self.auto_repair:
                return {
                    "drift_detected": True,
                    "repaired": False,
                    "difference": str(drift.difference),
                    "capital": str(drift.snapshot.stored),
                }

            # 진행 중인 요청 배제: 같은 차이가 유지될 때만 보정
            if self.confirm_delay_sec > 0:
                await asyncio.sleep(self.confirm_delay_sec)

            confirmed = await self.check()
            if confirmed is None or confirmed.difference != drift.difference:
                logger.info("drift 해소 또는 변동, 보정 보류")
                return {
                    "drift_detected": True,
                    "repaired": False,
                    "difference": str(drift.difference),
                    "capital": None,
                }

            _, recomputed = await self.repair()
            return {
                "drift_detected": True,
                "repaired": True,
                "difference": str(drift.difference),
                "capital": str(recomputed),
            }

        except Exception as e:
            logger.error(
                "자본 정합 검증 실패",
                extra={"error": str(e)},
                exc_info=True,
            )
            return {"drift_detected": False, "repaired": False, "error": str(e)}

        finally:
            self._is_running = False

    async def run_forever(self) -> None:
        """주기 실행 루프 (취소될 때까지)"""
        logger.info(f"Capital Reconciler 시작 (interval={self.interval_sec}s, auto_repair={self.auto_repair})")
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_sec)

    def start(self) -> None:
        """백그라운드 태스크로 주기 실행 시작"""
        if self.interval_sec <= 0:
            logger.info("Capital Reconciler 비활성화 (interval_sec=0)")
            return
        if self._task is None:
            self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        """주기 실행 정지"""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Capital Reconciler 정지")
