"""
도메인 예외 정의

Web 계층에서 HTTP 상태 코드로 매핑됨 (web/errors.py).
- InvalidInputError → 400
- TransactionNotFoundError → 404
- ConcurrentModificationError → 409
- StoreFailureError → 500 (상세 정보 비노출)
"""


class LedgerError(Exception):
    """모든 도메인 예외의 베이스"""

    kind: str = "LedgerError"


class InvalidInputError(LedgerError):
    """입력 검증 실패

    위반된 규칙을 모두 모아서 한 번에 보고.

    Args:
        details: 위반 내용 목록
    """

    kind = "InvalidInput"

    def __init__(self, details: list[str]):
        self.details = list(details)
        super().__init__("; ".join(self.details))


class TransactionNotFoundError(LedgerError):
    """거래를 찾을 수 없음"""

    kind = "NotFound"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class ConcurrentModificationError(LedgerError):
    """낙관적 락 충돌 (재시도 횟수 초과)"""

    kind = "ConcurrentModification"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction modified concurrently: {transaction_id}")


class StoreFailureError(LedgerError):
    """저장소 접근 실패"""

    kind = "StoreFailure"


class CapitalUpdateFailedError(StoreFailureError):
    """거래 기록 후 자본 반영 실패

    거래 기록은 커밋된 상태로 남음 (복구 가능한 불일치 상태).
    CapitalReconciler의 recompute로 복구.
    """

    def __init__(self, transaction_id: str, op_id: str):
        self.transaction_id = transaction_id
        self.op_id = op_id
        super().__init__(
            f"Capital update failed after ledger write: "
            f"transaction={transaction_id}, op_id={op_id}"
        )


class InconsistencyDriftError(LedgerError):
    """저장된 자본과 재계산 값 불일치

    일반 연산에서는 발생하지 않음. 명시적 검증(strict) 시에만 발생.
    """

    kind = "InconsistencyDrift"

    def __init__(self, stored, expected):
        self.stored = stored
        self.expected = expected
        super().__init__(f"Capital drift: stored={stored}, expected={expected}")
