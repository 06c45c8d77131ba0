"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import (
    CapitalResponse,
    DriftResponse,
    ErrorResponse,
    HealthResponse,
    RecomputeResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    # Responses
    "CapitalResponse",
    "DriftResponse",
    "ErrorResponse",
    "HealthResponse",
    "RecomputeResponse",
    "TransactionResponse",
]
