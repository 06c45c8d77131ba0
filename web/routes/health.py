"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from core.config.loader import AppConfig
from core.constants import APP_VERSION
from web.dependencies import get_app_config
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    config: AppConfig = Depends(get_app_config),
) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, storage, version, timestamp 정보
    """
    return HealthResponse(
        status="ok",
        storage=config.storage_backend.value,
        version=APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
