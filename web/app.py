"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.storage import create_storage
from core.capital.reconciler import CapitalReconciler
from core.config.loader import AppConfig, get_settings
from core.constants import APP_VERSION
from web.errors import register_exception_handlers
from web.routes import capital, health, transactions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    시작 시:
    1. 저장소 초기화 (SQLite 실패 시 기동 실패, 메모리로 전환하지 않음)
    2. 기존 거래 대비 자본 정합 확인 (불일치 시 재계산)
    3. Capital Reconciler 시작 (reconcile.interval_sec > 0일 때)
    """
    config: AppConfig = app.state.config

    storage = create_storage(config.storage_backend, config.db_path)
    await storage.initialize()
    app.state.storage = storage

    reconciler = CapitalReconciler(
        storage,
        interval_sec=config.reconcile_interval_sec,
        auto_repair=config.reconcile_auto_repair,
        confirm_delay_sec=config.reconcile_confirm_delay_sec,
    )
    app.state.reconciler = reconciler

    await reconciler.prune_journal()

    # 시작 시점에는 진행 중인 요청이 없으므로 재확인 없이 보정
    drift = await reconciler.check()
    if drift is not None:
        logger.warning(f"시작 시 자본 불일치 감지: {drift.description}")
        if config.reconcile_auto_repair:
            await reconciler.repair()

    reconciler.start()

    yield

    # 종료 시 - 리소스 정리
    await reconciler.stop()
    await storage.close()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        config: 애플리케이션 설정 (None이면 settings.yaml 로드)
    """
    if config is None:
        config = get_settings().config

    app = FastAPI(
        title="Capital Ledger",
        description="수입/지출 거래 기록 및 자본(순잔액) 관리 API",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.config = config

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # 라우터 등록
    app.include_router(health.router)
    app.include_router(transactions.router)
    app.include_router(capital.router)

    return app


app = create_app()
