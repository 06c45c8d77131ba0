"""
로깅 설정 유틸리티

Web 서버와 점검 스크립트에서 사용하는 공통 로깅 설정.
- 콘솔: 설정 레벨 (기본 INFO)
- 파일: 설정 레벨 (TimedRotatingFileHandler, daily)

extra로 전달한 필드(transaction_id, op_id 등)는 메시지 뒤에 key=value로 출력.

사용법:
    from core.logging import setup_logging
    setup_logging("web", level="DEBUG")
    setup_logging("scripts", to_file=False)
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Defaults, Paths


# 로그 설정 상수
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# 불필요한 로그를 생성하는 로거 목록 (레벨 조정 대상)
NOISY_LOGGERS = [
    "aiosqlite",       # DB 쿼리마다 executing/completed 로그 (매우 많음)
    "httpcore",        # HTTP 연결 상세 로그
    "httpx",           # 테스트 클라이언트 요청 로그
    "asyncio",         # 비동기 이벤트 루프 로그
    "uvicorn.access",  # 요청마다 접근 로그
]

# LogRecord 기본 속성 (이외의 속성은 extra 필드)
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class ExtraFieldsFormatter(logging.Formatter):
    """extra 필드를 메시지 뒤에 덧붙이는 Formatter

    예: 자본 반영 실패 | op_id=3f2a... transaction_id=9c1e...
    """

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if not extras:
            return message

        fields = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{message} | {fields}"


def get_log_dir(process_name: str) -> Path:
    """프로세스별 로그 디렉토리"""
    if process_name == "web":
        return Paths.WEB_LOGS_DIR
    return Paths.LOGS_DIR / process_name


def setup_logging(
    process_name: str,
    level: str | int = Defaults.LOG_LEVEL,
    to_file: bool = True,
    log_dir: Path | None = None,
) -> logging.Logger:
    """로깅 설정 초기화

    Args:
        process_name: 프로세스 이름 ("web", "scripts")
        level: 로그 레벨 (이름 또는 숫자)
        to_file: 파일 로그 사용 여부
        log_dir: 로그 디렉토리 (None이면 프로세스별 기본 경로)

    Returns:
        설정된 루트 Logger
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 기존 핸들러 제거 (중복 방지)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = ExtraFieldsFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file: Path | None = None
    if to_file:
        log_dir = log_dir or get_log_dir(process_name)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{process_name}.log"

        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"  # 백업 파일 형식: web.log.2026-02-21
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        f"로깅 초기화 완료: {process_name}",
        extra={"level": logging.getLevelName(level), "file": log_file},
    )
    return root_logger
