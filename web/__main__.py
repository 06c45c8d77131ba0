"""
Web 진입점

실행 방법:
    python -m web
"""

import uvicorn

from core.config.loader import get_settings
from core.logging import setup_logging

if __name__ == "__main__":
    config = get_settings().config

    # 로깅 설정 (콘솔 + 파일)
    setup_logging("web", level=config.log_level, to_file=config.log_to_file)

    uvicorn.run(
        "web.app:app",
        host=config.web_host,
        port=config.web_port,
        reload=False,
        log_config=None,
    )
