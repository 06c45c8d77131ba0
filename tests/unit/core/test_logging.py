"""
core/logging.py 테스트

로깅 초기화 및 extra 필드 출력 확인
"""

import logging
from pathlib import Path

import pytest

from core.constants import Paths
from core.logging import ExtraFieldsFormatter, get_log_dir, setup_logging


@pytest.fixture
def restore_root_logger():
    """테스트 후 루트 로거 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def make_record(**extra) -> logging.LogRecord:
    record = logging.makeLogRecord({"name": "test", "levelname": "INFO", "msg": "자본 반영"})
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFieldsFormatter:
    """ExtraFieldsFormatter 테스트"""

    def test_without_extra(self) -> None:
        """extra 없으면 메시지 그대로"""
        formatter = ExtraFieldsFormatter("%(message)s")

        assert formatter.format(make_record()) == "자본 반영"

    def test_with_extra_sorted(self) -> None:
        """extra 필드는 이름순 key=value"""
        formatter = ExtraFieldsFormatter("%(levelname)s %(message)s")

        output = formatter.format(make_record(transaction_id="tx-1", op_id="op-9"))

        assert output == "INFO 자본 반영 | op_id=op-9 transaction_id=tx-1"


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_log_dir(self) -> None:
        """프로세스별 로그 디렉토리"""
        assert get_log_dir("web") == Paths.WEB_LOGS_DIR
        assert get_log_dir("scripts") == Paths.LOGS_DIR / "scripts"

    def test_creates_log_file(self, tmp_path: Path, restore_root_logger) -> None:
        """파일 로그 생성"""
        root = setup_logging("web", level="debug", log_dir=tmp_path)

        logging.getLogger("core.test").warning("기록 확인", extra={"op_id": "op-1"})
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        content = (tmp_path / "web.log").read_text(encoding="utf-8")
        assert "기록 확인 | op_id=op-1" in content

    def test_console_only(self, tmp_path: Path, restore_root_logger) -> None:
        """파일 로그 비활성화"""
        root = setup_logging("scripts", to_file=False, log_dir=tmp_path)

        assert len(root.handlers) == 1
        assert not any(tmp_path.iterdir())

    def test_noisy_loggers_lowered(self, tmp_path: Path, restore_root_logger) -> None:
        """불필요한 로거 레벨 조정"""
        setup_logging("web", to_file=False)

        assert logging.getLogger("aiosqlite").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
