"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths
from core.types import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    storage_backend: StorageBackend = StorageBackend.SQLITE
    db_path: Path = Paths.DB_FILE

    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    cors_origins: tuple[str, ...] = ("*",)

    balance_retry_attempts: int = Defaults.BALANCE_RETRY_ATTEMPTS

    reconcile_interval_sec: float = Defaults.RECONCILE_INTERVAL_SEC
    reconcile_auto_repair: bool = True
    reconcile_confirm_delay_sec: float = Defaults.RECONCILE_CONFIRM_DELAY_SEC

    log_level: str = Defaults.LOG_LEVEL
    log_to_file: bool = True


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return value


def _non_negative(value: Any, key: str, cast: type) -> Any:
    try:
        result = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigLoadError(f"'{key}' 값이 올바르지 않습니다: {value!r}") from e
    if result < 0:
        raise ConfigLoadError(f"'{key}' 값은 0 이상이어야 합니다: {value!r}")
    return result


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    파일이 없으면 기본값 사용.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        logger.info(f"settings.yaml 없음, 기본 설정 사용: {path}")
        return AppConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppConfig()

    if not isinstance(data, dict):
        raise ConfigLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    storage = _section(data, "storage")
    web = _section(data, "web")
    capital = _section(data, "capital")
    reconcile = _section(data, "reconcile")
    log = _section(data, "logging")

    # 저장소 백엔드 검증
    backend_str = storage.get("backend", StorageBackend.SQLITE.value)
    try:
        backend = StorageBackend(backend_str)
    except ValueError as e:
        valid = [b.value for b in StorageBackend]
        raise ConfigLoadError(
            f"유효하지 않은 storage.backend입니다: '{backend_str}'. "
            f"유효한 값: {valid}"
        ) from e

    db_path = Path(storage.get("db_path", Paths.DB_FILE))
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    cors_origins = web.get("cors_origins", ["*"])
    if isinstance(cors_origins, str):
        cors_origins = [cors_origins]

    retry_attempts = _non_negative(
        capital.get("balance_retry_attempts", Defaults.BALANCE_RETRY_ATTEMPTS),
        "capital.balance_retry_attempts",
        int,
    )
    if retry_attempts < 1:
        raise ConfigLoadError("'capital.balance_retry_attempts' 값은 1 이상이어야 합니다")

    log_level = str(log.get("level", Defaults.LOG_LEVEL)).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ConfigLoadError(f"유효하지 않은 logging.level입니다: '{log_level}'")

    return AppConfig(
        storage_backend=backend,
        db_path=db_path,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=_non_negative(web.get("port", Defaults.WEB_PORT), "web.port", int),
        cors_origins=tuple(str(o) for o in cors_origins),
        balance_retry_attempts=retry_attempts,
        reconcile_interval_sec=_non_negative(
            reconcile.get("interval_sec", Defaults.RECONCILE_INTERVAL_SEC),
            "reconcile.interval_sec",
            float,
        ),
        reconcile_auto_repair=bool(reconcile.get("auto_repair", True)),
        reconcile_confirm_delay_sec=_non_negative(
            reconcile.get("confirm_delay_sec", Defaults.RECONCILE_CONFIRM_DELAY_SEC),
            "reconcile.confirm_delay_sec",
            float,
        ),
        log_level=log_level,
        log_to_file=bool(log.get("file", True)),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def storage_backend(self) -> StorageBackend:
        """저장소 백엔드"""
        return self.config.storage_backend

    @property
    def db_path(self) -> Path:
        """SQLite DB 경로"""
        return self.config.db_path

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
