"""
자본 라우트

GET  /capital            - 현재 자본
GET  /capital/drift      - 저장값과 거래 합계 비교
POST /capital/recompute  - 거래 합계로 자본 재계산
"""

from fastapi import APIRouter, Depends

from web.dependencies import get_capital_service
from web.models.responses import CapitalResponse, DriftResponse, ErrorResponse, RecomputeResponse
from web.services.capital_service import CapitalService

router = APIRouter(
    prefix="/capital",
    tags=["Capital"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("", response_model=CapitalResponse)
async def get_capital(
    service: CapitalService = Depends(get_capital_service),
) -> CapitalResponse:
    """현재 자본 조회"""
    capital = await service.get_capital()
    return CapitalResponse(capital=float(capital))


@router.get("/drift", response_model=DriftResponse)
async def get_drift(
    service: CapitalService = Depends(get_capital_service),
) -> DriftResponse:
    """자본 정합 점검 (보정하지 않음)"""
    snapshot = await service.check_drift()
    return DriftResponse.from_snapshot(snapshot)


@router.post("/recompute", response_model=RecomputeResponse)
async def recompute_capital(
    service: CapitalService = Depends(get_capital_service),
) -> RecomputeResponse:
    """거래 합계로 자본 재계산"""
    result = await service.recompute()
    return RecomputeResponse(
        capital=float(result["capital"]),
        previous=float(result["previous"]),
        corrected=result["corrected"],
    )
