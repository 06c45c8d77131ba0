"""
Drift Detector

저장된 자본과 거래 합계를 비교하여 불일치 감지
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from core.errors import InconsistencyDriftError
from core.ledger.models import TransactionRecord, signed_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapitalSnapshot:
    """자본 비교 결과

    Attributes:
        stored: 저장된 자본
        expected: 거래 합계로 재계산한 자본
        transaction_count: 비교에 사용한 거래 수
        checked_at: 비교 시간 (UTC)
    """

    stored: Decimal
    expected: Decimal
    transaction_count: int
    checked_at: datetime

    @property
    def difference(self) -> Decimal:
        """저장값 - 기대값"""
        return self.stored - self.expected

    @property
    def is_consistent(self) -> bool:
        return self.difference == 0


@dataclass(frozen=True)
class DriftInfo:
    """Drift 정보"""

    snapshot: CapitalSnapshot
    description: str

    @property
    def difference(self) -> Decimal:
        return self.snapshot.difference


class DriftDetector:
    """Drift 감지기

    금액이 소수점 2자리로 정규화되어 있으므로 허용 오차 없이 정확히 비교.
    """

    @staticmethod
    def expected_capital(records: Iterable[TransactionRecord]) -> Decimal:
        """거래 합계 (수입 +, 지출 -)"""
        return sum((signed_amount(r.kind, r.amount) for r in records), Decimal("0.00"))

    def snapshot(
        self,
        stored: Decimal,
        records: list[TransactionRecord],
    ) -> CapitalSnapshot:
        """저장값과 거래 합계 비교"""
        return CapitalSnapshot(
            stored=stored,
            expected=self.expected_capital(records),
            transaction_count=len(records),
            checked_at=datetime.now(timezone.utc),
        )

    def detect(
        self,
        stored: Decimal,
        records: list[TransactionRecord],
    ) -> DriftInfo | None:
        """자본 drift 감지

        Returns:
            DriftInfo 또는 None (일치 시)
        """
        snapshot = self.snapshot(stored, records)
        if snapshot.is_consistent:
            return None

        return DriftInfo(
            snapshot=snapshot,
            description=(
                f"Capital mismatch: stored {snapshot.stored}, "
                f"expected {snapshot.expected} (diff={snapshot.difference})"
            ),
        )

    def ensure_consistent(
        self,
        stored: Decimal,
        records: list[TransactionRecord],
    ) -> None:
        """일치하지 않으면 예외 발생

        Raises:
            InconsistencyDriftError: drift 감지 시
        """
        drift = self.detect(stored, records)
        if drift is not None:
            raise InconsistencyDriftError(drift.snapshot.stored, drift.snapshot.expected)
