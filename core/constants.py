"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

APP_VERSION: str = "1.0.0"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 3000

    LOG_LEVEL: str = "INFO"

    # 거래 목록 조회
    LIST_LIMIT: int = 50
    MAX_LIST_LIMIT: int = 500

    # 잔액 반영 재시도 (동일 op_id로 재시도하므로 중복 반영 없음)
    BALANCE_RETRY_ATTEMPTS: int = 3
    BALANCE_RETRY_BACKOFF_SEC: float = 0.05

    # 낙관적 락 충돌 시 재시도 횟수
    CONFLICT_RETRY_ATTEMPTS: int = 3

    # 정합 검증 주기 (0이면 비활성화)
    RECONCILE_INTERVAL_SEC: int = 0
    RECONCILE_CONFIRM_DELAY_SEC: float = 1.0
    OP_JOURNAL_RETENTION_SEC: float = 3600.0  # op_id 보관 시간 (재시도 구간 이상)


class Money:
    """금액 관련 상수

    DB 스키마 DECIMAL(10,2) 기준
    """

    QUANTUM: Decimal = Decimal("0.01")
    MAX_AMOUNT: Decimal = Decimal("99999999.99")
    CENTS_PER_UNIT: int = 100


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DB_FILE: Path = DATA_DIR / "capital_ledger.db"
