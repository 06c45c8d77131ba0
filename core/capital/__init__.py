"""
Capital 모듈

자본(순잔액) 관리 및 정합 복구
"""

from core.capital.drift import CapitalSnapshot, DriftDetector, DriftInfo
from core.capital.keeper import BalanceKeeper
from core.capital.memory_keeper import InMemoryBalanceKeeper
from core.capital.reconciler import CapitalReconciler

__all__ = [
    "BalanceKeeper",
    "CapitalReconciler",
    "CapitalSnapshot",
    "DriftDetector",
    "DriftInfo",
    "InMemoryBalanceKeeper",
]
