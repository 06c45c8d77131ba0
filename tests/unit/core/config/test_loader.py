"""
core/config/loader.py 테스트

settings.yaml 로드, 검증, Settings 싱글턴 테스트
"""

from pathlib import Path

import pytest

from core.config.loader import (
    AppConfig,
    ConfigLoadError,
    Settings,
    get_settings,
    load_config,
)
from core.constants import PROJECT_ROOT, Defaults, Paths
from core.types import StorageBackend


class TestAppConfig:
    """AppConfig 데이터클래스 테스트"""

    def test_defaults(self) -> None:
        """기본값"""
        config = AppConfig()

        assert config.storage_backend == StorageBackend.SQLITE
        assert config.db_path == Paths.DB_FILE
        assert config.web_port == Defaults.WEB_PORT
        assert config.balance_retry_attempts == Defaults.BALANCE_RETRY_ATTEMPTS
        assert config.reconcile_interval_sec == 0

    def test_frozen(self) -> None:
        """불변성 확인"""
        config = AppConfig()

        with pytest.raises(AttributeError):
            config.web_port = 1234  # type: ignore


class TestLoadConfig:
    """load_config 함수 테스트"""

    def test_load_valid_file(self, temp_settings_file: Path) -> None:
        """정상 파일 로드"""
        config = load_config(temp_settings_file)

        assert config.storage_backend == StorageBackend.MEMORY
        assert config.db_path == PROJECT_ROOT / "data" / "test.db"
        assert config.web_host == "0.0.0.0"
        assert config.web_port == 8080
        assert config.cors_origins == ("http://localhost:5173",)
        assert config.balance_retry_attempts == 5
        assert config.reconcile_interval_sec == 60.0
        assert config.reconcile_auto_repair is False
        assert config.reconcile_confirm_delay_sec == 0.5

    def test_missing_file_uses_defaults(self, temp_dir: Path) -> None:
        """파일 없으면 기본값"""
        config = load_config(temp_dir / "nonexistent.yaml")

        assert config == AppConfig()

    def test_empty_file_uses_defaults(self, temp_dir: Path) -> None:
        """빈 파일은 기본값"""
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == AppConfig()

    def test_absolute_db_path_kept(self, temp_dir: Path) -> None:
        """절대 경로는 그대로 사용"""
        db_path = temp_dir / "ledger.db"
        path = temp_dir / "settings.yaml"
        path.write_text(f"storage:\n  db_path: {db_path.as_posix()}\n", encoding="utf-8")

        assert load_config(path).db_path == Path(db_path.as_posix())

    def test_invalid_backend(self, temp_dir: Path) -> None:
        """잘못된 저장소 백엔드"""
        path = temp_dir / "settings.yaml"
        path.write_text("storage:\n  backend: postgres\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="storage.backend"):
            load_config(path)

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """YAML 파싱 실패"""
        path = temp_dir / "settings.yaml"
        path.write_text("storage: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="파싱 실패"):
            load_config(path)

    def test_section_must_be_mapping(self, temp_dir: Path) -> None:
        """섹션은 매핑이어야 함"""
        path = temp_dir / "settings.yaml"
        path.write_text("web: 3000\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="web"):
            load_config(path)

    def test_negative_interval_rejected(self, temp_dir: Path) -> None:
        """음수 주기 거부"""
        path = temp_dir / "settings.yaml"
        path.write_text("reconcile:\n  interval_sec: -1\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="reconcile.interval_sec"):
            load_config(path)

    def test_zero_retry_attempts_rejected(self, temp_dir: Path) -> None:
        """재시도 횟수 0 거부"""
        path = temp_dir / "settings.yaml"
        path.write_text("capital:\n  balance_retry_attempts: 0\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="balance_retry_attempts"):
            load_config(path)

    def test_logging_section(self, temp_dir: Path) -> None:
        """로깅 설정"""
        path = temp_dir / "settings.yaml"
        path.write_text("logging:\n  level: debug\n  file: false\n", encoding="utf-8")

        config = load_config(path)

        assert config.log_level == "DEBUG"
        assert config.log_to_file is False

    def test_invalid_log_level(self, temp_dir: Path) -> None:
        """잘못된 로그 레벨"""
        path = temp_dir / "settings.yaml"
        path.write_text("logging:\n  level: loud\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="logging.level"):
            load_config(path)

    def test_single_cors_origin_string(self, temp_dir: Path) -> None:
        """CORS origin 단일 문자열"""
        path = temp_dir / "settings.yaml"
        path.write_text("web:\n  cors_origins: http://example.com\n", encoding="utf-8")

        assert load_config(path).cors_origins == ("http://example.com",)


class TestSettings:
    """Settings 싱글턴 테스트"""

    def test_singleton(self, temp_settings_file: Path) -> None:
        """같은 인스턴스 반환"""
        first = get_settings(temp_settings_file)
        second = get_settings()

        assert first is second
        assert second.storage_backend == StorageBackend.MEMORY

    def test_reset(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """reset 후 다시 로드"""
        settings = get_settings(temp_settings_file)
        assert settings.storage_backend == StorageBackend.MEMORY

        Settings.reset()

        settings = get_settings(temp_dir / "missing.yaml")
        assert settings.storage_backend == StorageBackend.SQLITE
        assert settings.db_path == Paths.DB_FILE
