"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
요청마다 별도 연결을 사용해도 동시 접근 가능하도록 설정.
드라이버 예외(aiosqlite.Error)는 StoreFailureError로 변환.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.errors import StoreFailureError

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # LOWER()는 ASCII만 변환하므로 검색용 유니코드 casefold 등록
    await conn.create_function("casefold", 1, _casefold, deterministic=True)

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction() as conn:
        await conn.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        try:
            self._conn = await create_connection(self.db_path, self.readonly)
        except (aiosqlite.Error, OSError) as e:
            logger.error(f"SQLite 연결 실패: {e}", extra={"db_path": str(self.db_path)})
            raise StoreFailureError(f"Cannot open database: {self.db_path}") from e

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        try:
            if parameters:
                return await conn.execute(sql, parameters)
            return await conn.execute(sql)
        except aiosqlite.Error as e:
            raise StoreFailureError(str(e)) from e

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()

        try:
            return await conn.executemany(sql, parameters)
        except aiosqlite.Error as e:
            raise StoreFailureError(str(e)) from e

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreFailureError(str(e)) from e

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StoreFailureError(str(e)) from e

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            try:
                await self._conn.commit()
            except aiosqlite.Error as e:
                raise StoreFailureError(str(e)) from e

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.

        Args:
            immediate: True면 BEGIN IMMEDIATE로 쓰기 잠금을 먼저 획득
                       (읽은 값을 기준으로 덮어쓰는 경우 사용)

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        if immediate:
            await self.execute("BEGIN IMMEDIATE")

        try:
            yield conn
            await self.commit()
        except BaseException:
            await conn.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter

    주의: 앱 시작 시 lifespan에서 호출. 실패하면 기동 중단.
    """
    # transactions (거래 기록)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            id               TEXT NOT NULL UNIQUE,
            type             TEXT NOT NULL CHECK (type IN ('income', 'expense')),
            amount           TEXT NOT NULL,
            description      TEXT,
            date             TEXT,
            version          INTEGER NOT NULL DEFAULT 1,

            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL
        )
    """)

    # capital (단일 행, 센트 단위 정수로 원자적 증감)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS capital (
            id               INTEGER PRIMARY KEY CHECK (id = 1),
            value_cents      INTEGER NOT NULL DEFAULT 0,
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # capital_delta (반영된 증감 기록 - 재시도 멱등성)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS capital_delta (
            op_id            TEXT PRIMARY KEY,
            delta_cents      INTEGER NOT NULL,
            applied_at       TEXT NOT NULL
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_created_at
        ON transactions(created_at DESC, seq DESC)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_type
        ON transactions(type)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
