"""
거래 라우트

GET    /transactions       - 거래 목록 (search, type, limit)
POST   /transactions       - 거래 생성
PATCH  /transactions/{id}  - 거래 부분 수정
DELETE /transactions/{id}  - 거래 삭제
"""

from fastapi import APIRouter, Depends, Path, Query, Response

from web.dependencies import get_transaction_service
from web.models.requests import TransactionCreateRequest, TransactionUpdateRequest
from web.models.responses import ErrorResponse, TransactionResponse
from web.services.transaction_service import TransactionService

router = APIRouter(
    tags=["Transactions"],
    responses={500: {"model": ErrorResponse}},
)


@router.get(
    "/transactions",
    response_model=list[TransactionResponse],
    response_model_exclude_none=True,
)
async def list_transactions(
    search: str | None = Query(default=None, description="설명/금액 검색어"),
    type: str | None = Query(default=None, description="유형 필터 (income / expense)"),
    limit: str | None = Query(default=None, description="최대 개수 (기본 50)"),
    service: TransactionService = Depends(get_transaction_service),
) -> list[TransactionResponse]:
    """거래 목록 조회 (최신순)

    잘못된 type 값은 무시, 잘못된 limit은 기본값 사용.
    """
    records = await service.list_transactions(search=search, kind=type, limit=limit)
    return [TransactionResponse.from_record(r) for r in records]


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def create_transaction(
    request: TransactionCreateRequest,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """거래 생성"""
    record = await service.create(
        kind=request.type,
        amount=request.amount,
        description=request.description,
        occurred_at=request.date,
    )
    return TransactionResponse.from_record(record)


@router.patch(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_transaction(
    request: TransactionUpdateRequest,
    transaction_id: str = Path(..., description="거래 ID"),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """거래 부분 수정 (포함된 필드만 반영)"""
    record = await service.update(
        transaction_id,
        request.to_changes(),
        unknown_fields=request.unknown_fields(),
    )
    return TransactionResponse.from_record(record)


@router.delete(
    "/transactions/{transaction_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_transaction(
    transaction_id: str = Path(..., description="거래 ID"),
    service: TransactionService = Depends(get_transaction_service),
) -> Response:
    """거래 삭제"""
    await service.delete(transaction_id)
    return Response(status_code=204)
