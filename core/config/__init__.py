"""
설정 모듈

settings.yaml 로드
"""

from core.config.loader import AppConfig, ConfigLoadError, Settings, get_settings, load_config

__all__ = [
    "AppConfig",
    "ConfigLoadError",
    "Settings",
    "get_settings",
    "load_config",
]
