"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
저장소와 설정은 lifespan에서 app.state에 등록.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request

from adapters.storage import Storage, StorageSession
from core.config.loader import AppConfig
from web.services.capital_service import CapitalService
from web.services.transaction_service import TransactionService


def get_app_config(request: Request) -> AppConfig:
    """애플리케이션 설정 반환"""
    return request.app.state.config


def get_storage(request: Request) -> Storage:
    """저장소 제공자 반환"""
    return request.app.state.storage


async def get_session(
    storage: Storage = Depends(get_storage),
) -> AsyncGenerator[StorageSession, None]:
    """요청 단위 저장소 세션

    SQLite 백엔드는 요청마다 새 연결을 사용하고 응답 후 닫음.
    """
    async with storage.session() as session:
        yield session


def get_transaction_service(
    session: StorageSession = Depends(get_session),
    config: AppConfig = Depends(get_app_config),
) -> TransactionService:
    """거래 서비스 반환"""
    return TransactionService(
        session.ledger,
        session.capital,
        balance_retry_attempts=config.balance_retry_attempts,
    )


def get_capital_service(
    session: StorageSession = Depends(get_session),
) -> CapitalService:
    """자본 서비스 반환"""
    return CapitalService(session.ledger, session.capital)
