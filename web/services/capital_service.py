"""
자본 서비스

자본 조회, drift 점검, 재계산
"""

import logging
from decimal import Decimal
from typing import Any

from core.capital.drift import CapitalSnapshot, DriftDetector
from core.ledger.interfaces import IBalanceKeeper, ILedgerStore

logger = logging.getLogger(__name__)


class CapitalService:
    """자본 서비스

    Args:
        ledger: Ledger 저장소
        capital: Balance Keeper
    """

    def __init__(self, ledger: ILedgerStore, capital: IBalanceKeeper):
        self.ledger = ledger
        self.capital = capital
        self.drift_detector = DriftDetector()

    async def get_capital(self) -> Decimal:
        """현재 자본 (최초 조회 시 0으로 초기화)"""
        return await self.capital.get()

    async def check_drift(self) -> CapitalSnapshot:
        """저장된 자본과 거래 합계 비교 (보정하지 않음)"""
        stored = await self.capital.get()
        records = await self.ledger.list_all(None)
        return self.drift_detector.snapshot(stored, records)

    async def recompute(self) -> dict[str, Any]:
        """거래 합계로 자본 재계산

        이전 값은 재계산과 같은 잠금 안에서 읽음.

        Returns:
            {"capital": 재계산 값, "previous": 이전 값, "corrected": 보정 여부}
        """
        previous, capital = await self.capital.recompute_with_previous()

        if previous != capital:
            logger.warning(
                "수동 재계산으로 자본 보정",
                extra={"previous": str(previous), "recomputed": str(capital)},
            )

        return {
            "capital": capital,
            "previous": previous,
            "corrected": previous != capital,
        }
