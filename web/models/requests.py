"""
요청 스키마 (Pydantic)

Web API 요청 데이터 수신

필드 값의 검증(유형, 금액 범위, 날짜 형식)은 core.ledger.models에서 수행.
여기서는 JSON 객체 형태만 보장하고, 위반 사항은 한 번에 모아서 보고하도록
원본 값을 그대로 전달.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# 요청 필드명 → 내부 필드명
WIRE_TO_FIELD: dict[str, str] = {
    "type": "kind",
    "amount": "amount",
    "description": "description",
    "date": "occurred_at",
}


class TransactionCreateRequest(BaseModel):
    """거래 생성 요청"""

    type: Any = Field(default=None, description="거래 유형 (income / expense)")
    amount: Any = Field(default=None, description="금액 (0 이상, 소수점 2자리로 반올림)")
    description: Any = Field(default=None, description="설명")
    date: Any = Field(default=None, description="거래일 (ISO-8601, 없으면 생성 시간으로 표시)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"type": "income", "amount": 500, "description": "Salary"},
                {"type": "expense", "amount": "120.50", "date": "2026-03-01"},
            ]
        }
    }


class TransactionUpdateRequest(BaseModel):
    """거래 부분 수정 요청

    포함된 필드만 반영. 필드 생략과 명시적 null을 구분
    (description/date의 null은 값 삭제).
    알 수 없는 필드는 검증 단계에서 오류로 보고.
    """

    type: Any = Field(default=None, description="거래 유형 (income / expense)")
    amount: Any = Field(default=None, description="금액")
    description: Any = Field(default=None, description="설명 (null이면 삭제)")
    date: Any = Field(default=None, description="거래일 (null이면 삭제)")

    model_config = ConfigDict(extra="allow")

    def to_changes(self) -> dict[str, Any]:
        """요청에 포함된 필드만 내부 필드명으로 변환"""
        return {
            WIRE_TO_FIELD[name]: getattr(self, name)
            for name in self.model_fields_set
            if name in WIRE_TO_FIELD
        }

    def unknown_fields(self) -> list[str]:
        """요청 필드명 외의 키 (내부 필드명과 같아도 알 수 없는 필드)"""
        return sorted(self.model_extra or {})
