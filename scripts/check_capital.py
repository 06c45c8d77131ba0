"""
자본 정합 점검 스크립트

저장된 자본과 거래 합계를 비교하고, 필요 시 재계산으로 보정.

사용법:
    python -m scripts.check_capital
    python -m scripts.check_capital --repair
    python -m scripts.check_capital --repair --strict
    python -m scripts.check_capital --db data/capital_ledger.db
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.storage import SQLiteStorage
from core.capital.reconciler import CapitalReconciler
from core.config.loader import ConfigLoadError, load_config
from core.errors import InconsistencyDriftError, StoreFailureError
from core.logging import setup_logging
from core.types import StorageBackend

logger = logging.getLogger(__name__)


async def main(db_path: Path, repair: bool, strict: bool = False) -> int:
    """점검 실행

    Args:
        db_path: SQLite DB 경로
        repair: 불일치 시 재계산으로 보정
        strict: 보정 후 재검증 (불일치가 남아 있으면 실패)

    Returns:
        종료 코드 (0: 일치 또는 보정 완료, 1: 불일치, 2: 저장소 오류)
    """
    storage = SQLiteStorage(db_path)
    reconciler = CapitalReconciler(storage, auto_repair=repair)

    try:
        await storage.initialize()
        snapshot = await reconciler.snapshot()
    except StoreFailureError as e:
        logger.error(f"저장소 접근 실패: {e}")
        return 2

    print("=" * 60)
    print("=== 자본 정합 점검 ===")
    print("=" * 60)
    print(f"  DB        : {db_path}")
    print(f"  거래 수   : {snapshot.transaction_count}")
    print(f"  저장 자본 : {snapshot.stored}")
    print(f"  계산 자본 : {snapshot.expected}")
    print(f"  차이      : {snapshot.difference}")

    if snapshot.is_consistent:
        print("\n일치 ✓")
        return 0

    if not repair:
        print("\n불일치! --repair 옵션으로 보정할 수 있습니다")
        return 1

    try:
        previous, recomputed = await reconciler.repair()
    except StoreFailureError as e:
        logger.error(f"보정 실패: {e}")
        return 2

    print(f"\n보정 완료: {previous} → {recomputed}")

    if strict:
        try:
            await reconciler.verify()
        except InconsistencyDriftError as e:
            print(f"\n재검증 실패: {e}")
            return 1
        except StoreFailureError as e:
            logger.error(f"재검증 실패: {e}")
            return 2
        print("재검증 일치 ✓")

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="자본 정합 점검")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="settings.yaml 경로 (기본: config/settings.yaml)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite DB 경로 (지정 시 설정 파일보다 우선)",
    )
    parser.add_argument(
        "--repair",
        action="store_true",
        help="불일치 시 거래 합계로 자본 재계산",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="보정 후 재검증 (다른 쓰기로 불일치가 남으면 종료 코드 1)",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigLoadError as e:
        print(f"설정 오류: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging("scripts", level=config.log_level, to_file=config.log_to_file)

    if args.db is None and config.storage_backend == StorageBackend.MEMORY:
        logger.error("메모리 저장소는 외부에서 점검할 수 없습니다 (--db 지정 필요)")
        sys.exit(2)

    sys.exit(asyncio.run(main(args.db or config.db_path, args.repair, args.strict)))
