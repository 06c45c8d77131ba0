"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.capital.drift import CapitalSnapshot
from core.ledger.models import TransactionRecord


class TransactionResponse(BaseModel):
    """거래 응답

    description/date는 값이 없으면 응답에서 생략.
    """

    id: str = Field(..., description="거래 ID")
    type: str = Field(..., description="거래 유형 (income / expense)")
    amount: float = Field(..., description="금액")
    description: str | None = Field(default=None, description="설명")
    date: datetime | None = Field(default=None, description="거래일")
    created_at: datetime = Field(..., serialization_alias="createdAt", description="생성 시간 (UTC)")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionResponse":
        return cls(
            id=record.id,
            type=record.kind.value,
            amount=float(record.amount),
            description=record.description,
            date=record.occurred_at,
            created_at=record.created_at,
        )


class CapitalResponse(BaseModel):
    """자본 응답"""

    capital: float = Field(..., description="현재 자본 (수입 합계 - 지출 합계)")


class DriftResponse(BaseModel):
    """자본 정합 점검 응답"""

    capital: float = Field(..., description="저장된 자본")
    expected: float = Field(..., description="거래 합계로 계산한 자본")
    difference: float = Field(..., description="저장값 - 계산값")
    consistent: bool = Field(..., description="일치 여부")
    transaction_count: int = Field(..., serialization_alias="transactionCount", description="거래 수")
    checked_at: datetime = Field(..., serialization_alias="checkedAt", description="점검 시간 (UTC)")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_snapshot(cls, snapshot: CapitalSnapshot) -> "DriftResponse":
        return cls(
            capital=float(snapshot.stored),
            expected=float(snapshot.expected),
            difference=float(snapshot.difference),
            consistent=snapshot.is_consistent,
            transaction_count=snapshot.transaction_count,
            checked_at=snapshot.checked_at,
        )


class RecomputeResponse(BaseModel):
    """자본 재계산 응답"""

    capital: float = Field(..., description="재계산된 자본")
    previous: float = Field(..., description="재계산 전 자본")
    corrected: bool = Field(..., description="보정 발생 여부")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    storage: str = Field(..., description="저장소 백엔드 (sqlite / memory)")
    version: str = Field(..., description="애플리케이션 버전")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class ErrorResponse(BaseModel):
    """오류 응답 (4xx는 details 포함, 5xx는 생략)"""

    error: str = Field(..., description="오류 종류")
    details: list[str] | None = Field(default=None, description="오류 상세")
