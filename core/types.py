"""
타입 정의 모듈

핵심 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class TransactionKind(str, Enum):
    """거래 유형 (수입 / 지출)"""

    INCOME = "income"
    EXPENSE = "expense"

    @property
    def sign(self) -> int:
        """자본 반영 부호 (수입 +1, 지출 -1)"""
        return 1 if self is TransactionKind.INCOME else -1

    @classmethod
    def values(cls) -> list[str]:
        """유효한 문자열 값 목록"""
        return [k.value for k in cls]


class StorageBackend(str, Enum):
    """저장소 백엔드

    MEMORY는 비영속 저장소. 명시적으로 설정했을 때만 사용.
    """

    SQLITE = "sqlite"
    MEMORY = "memory"
