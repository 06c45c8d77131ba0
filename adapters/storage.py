"""
저장소 제공자

설정된 백엔드(sqlite / memory)에 따라 요청 단위 세션 생성.
세션 = Ledger 저장소 + Balance Keeper (같은 연결 공유)

메모리 백엔드로의 자동 전환은 하지 않음.
SQLite 초기화 실패는 기동 실패로 처리.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.capital.keeper import BalanceKeeper
from core.capital.memory_keeper import InMemoryBalanceKeeper
from core.ledger.interfaces import IBalanceKeeper, ILedgerStore
from core.ledger.memory_store import InMemoryLedgerStore
from core.ledger.store import LedgerStore
from core.types import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageSession:
    """요청 단위 저장소 세션"""

    ledger: ILedgerStore
    capital: IBalanceKeeper


class SQLiteStorage:
    """SQLite 저장소 제공자

    세션마다 새 연결 생성 (WAL 모드, busy_timeout).

    Args:
        db_path: DB 파일 경로
    """

    backend = StorageBackend.SQLITE

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    async def initialize(self) -> None:
        """스키마 생성 (실패 시 StoreFailureError 전파)"""
        async with SQLiteAdapter(self.db_path) as db:
            await init_schema(db)
        logger.info(f"SQLite 저장소 사용: {self.db_path}")

    async def close(self) -> None:
        pass

    @asynccontextmanager
    async def session(self) -> AsyncIterator[StorageSession]:
        async with SQLiteAdapter(self.db_path) as db:
            ledger = LedgerStore(db)
            yield StorageSession(ledger=ledger, capital=BalanceKeeper(db, ledger))


class MemoryStorage:
    """메모리 저장소 제공자

    프로세스 종료 시 모든 데이터 소실.
    모든 세션이 같은 저장소 인스턴스를 공유.
    """

    backend = StorageBackend.MEMORY

    def __init__(self) -> None:
        self.ledger = InMemoryLedgerStore()
        self.capital = InMemoryBalanceKeeper(self.ledger)

    async def initialize(self) -> None:
        logger.warning("메모리 저장소 사용: 데이터가 영속되지 않습니다")

    async def close(self) -> None:
        pass

    @asynccontextmanager
    async def session(self) -> AsyncIterator[StorageSession]:
        yield StorageSession(ledger=self.ledger, capital=self.capital)


Storage = SQLiteStorage | MemoryStorage


def create_storage(backend: StorageBackend, db_path: Path | str) -> Storage:
    """백엔드 설정에 따른 저장소 생성

    Args:
        backend: 저장소 백엔드
        db_path: SQLite DB 경로 (memory 백엔드에서는 무시)
    """
    if backend == StorageBackend.MEMORY:
        return MemoryStorage()
    return SQLiteStorage(db_path)
