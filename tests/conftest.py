"""
pytest 공통 fixture 정의

임시 설정 파일 및 저장소 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.storage import MemoryStorage, SQLiteStorage, StorageSession
from core.config.loader import Settings


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
storage:
  backend: memory
  db_path: data/test.db

web:
  host: 0.0.0.0
  port: 8080
  cors_origins:
    - http://localhost:5173

capital:
  balance_retry_attempts: 5

reconcile:
  interval_sec: 60
  auto_repair: false
  confirm_delay_sec: 0.5
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def storage(request, tmp_path: Path):
    """저장소 제공자 (메모리 / SQLite 각각 실행)"""
    if request.param == "memory":
        provider = MemoryStorage()
    else:
        provider = SQLiteStorage(tmp_path / "ledger.db")

    await provider.initialize()
    yield provider
    await provider.close()


@pytest_asyncio.fixture
async def session(storage) -> StorageSession:
    """저장소 세션 (Ledger + Balance Keeper)"""
    async with storage.session() as s:
        yield s
