"""
거래 모델 및 입력 검증

TransactionRecord: 저장소에 기록된 거래 (불변)
TransactionDraft: 검증 완료된 거래 입력값
ListFilter: 목록 조회 조건

금액 정책:
- Decimal로 파싱 후 소수점 2자리로 반올림 (ROUND_HALF_UP)
- 음수, 무한대, NaN, MAX_AMOUNT 초과는 거부
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from core.constants import Defaults, Money
from core.errors import InvalidInputError
from core.types import TransactionKind


# 수정 가능한 필드 (created_at, id는 불변)
MUTABLE_FIELDS: frozenset[str] = frozenset({"kind", "amount", "description", "occurred_at"})


@dataclass(frozen=True)
class TransactionRecord:
    """저장된 거래

    Attributes:
        id: 거래 ID (생성 시 할당)
        kind: 수입/지출
        amount: 금액 (0 이상, 소수점 2자리)
        created_at: 생성 시간 (UTC, 불변)
        description: 설명
        occurred_at: 사용자 지정 거래일 (없으면 표시할 때 created_at 사용)
        version: 낙관적 락 버전 (수정/삭제 시 비교)
    """

    id: str
    kind: TransactionKind
    amount: Decimal
    created_at: datetime
    description: str | None = None
    occurred_at: datetime | None = None
    version: int = 1

    @property
    def signed_amount(self) -> Decimal:
        """자본 기여분 (수입 +, 지출 -)"""
        return signed_amount(self.kind, self.amount)

    @property
    def display_date(self) -> datetime:
        """화면 표시용 날짜"""
        return self.occurred_at or self.created_at


@dataclass(frozen=True)
class TransactionDraft:
    """검증 완료된 거래 입력값"""

    kind: TransactionKind
    amount: Decimal
    description: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class ListFilter:
    """목록 조회 조건

    limit이 None이면 전체 조회 (recompute용).
    """

    kind: TransactionKind | None = None
    search: str | None = None
    limit: int | None = Defaults.LIST_LIMIT

    def matches(self, record: TransactionRecord) -> bool:
        """조건 일치 여부 (메모리 저장소용)"""
        if self.kind is not None and record.kind != self.kind:
            return False

        if self.search:
            needle = self.search.casefold()
            description = (record.description or "").casefold()
            if needle not in description and needle not in format_amount(record.amount):
                return False

        return True


@dataclass
class _Errors:
    messages: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.messages.append(message)

    def raise_if_any(self) -> None:
        if self.messages:
            raise InvalidInputError(self.messages)


# =========================================================================
# 금액 유틸리티
# =========================================================================


def signed_amount(kind: TransactionKind, amount: Decimal) -> Decimal:
    """부호가 적용된 금액"""
    return amount if kind is TransactionKind.INCOME else -amount


def format_amount(amount: Decimal) -> str:
    """소수점 2자리 문자열 (검색, 저장용)"""
    return f"{amount.quantize(Money.QUANTUM, rounding=ROUND_HALF_UP):f}"


def to_cents(amount: Decimal) -> int:
    """Decimal → 정수 센트"""
    quantized = amount.quantize(Money.QUANTUM, rounding=ROUND_HALF_UP)
    return int(quantized * Money.CENTS_PER_UNIT)


def from_cents(cents: int) -> Decimal:
    """정수 센트 → Decimal (소수점 2자리)"""
    return Decimal(int(cents)).scaleb(-2)


# =========================================================================
# 필드 파싱
# =========================================================================


def parse_kind(value: Any, errors: _Errors) -> TransactionKind | None:
    if isinstance(value, TransactionKind):
        return value
    try:
        return TransactionKind(value)
    except ValueError:
        errors.add('Type must be either "income" or "expense"')
        return None


def parse_amount(value: Any, errors: _Errors) -> Decimal | None:
    """금액 파싱 및 정규화

    bool은 int의 하위 타입이므로 별도 거부.
    float은 문자열 표현을 거쳐 Decimal로 변환 (0.1 → Decimal("0.1")).
    """
    if value is None or isinstance(value, bool):
        errors.add("Amount must be a non-negative number")
        return None

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float)):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            raise TypeError(type(value).__name__)
    except (InvalidOperation, TypeError):
        errors.add("Amount must be a non-negative number")
        return None

    if not amount.is_finite() or amount < 0:
        errors.add("Amount must be a non-negative number")
        return None

    if amount > Money.MAX_AMOUNT:
        errors.add(f"Amount must not exceed {Money.MAX_AMOUNT}")
        return None

    amount = amount.quantize(Money.QUANTUM, rounding=ROUND_HALF_UP)
    if amount == 0:
        # -0.00 방지
        amount = Decimal("0.00")
    return amount


def parse_description(value: Any, errors: _Errors) -> str | None:
    if value is None or isinstance(value, str):
        return value
    errors.add("Description must be a string")
    return None


def parse_occurred_at(value: Any, errors: _Errors) -> datetime | None:
    """거래일 파싱

    빈 문자열은 미지정으로 처리.
    timezone 정보가 없으면 UTC로 간주.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            errors.add("Date must be a valid ISO-8601 date")
            return None
    else:
        errors.add("Date must be a valid ISO-8601 date")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =========================================================================
# 검증
# =========================================================================


def validate_draft(
    kind: Any,
    amount: Any,
    description: Any = None,
    occurred_at: Any = None,
) -> TransactionDraft:
    """신규 거래 입력 검증

    Raises:
        InvalidInputError: 위반 사항 전체 목록 포함
    """
    errors = _Errors()

    parsed_kind = parse_kind(kind, errors)
    parsed_amount = parse_amount(amount, errors)
    parsed_description = parse_description(description, errors)
    parsed_occurred_at = parse_occurred_at(occurred_at, errors)

    errors.raise_if_any()

    assert parsed_kind is not None and parsed_amount is not None
    return TransactionDraft(
        kind=parsed_kind,
        amount=parsed_amount,
        description=parsed_description,
        occurred_at=parsed_occurred_at,
    )


def merge_changes(
    existing: TransactionRecord,
    changes: dict[str, Any],
    unknown_fields: Iterable[str] = (),
) -> TransactionDraft:
    """부분 수정 내용을 기존 거래에 병합 후 검증

    changes에 포함된 키만 반영. description/occurred_at의 None은 값 삭제.
    kind/amount의 None은 허용하지 않음.
    unknown_fields는 요청에서 받은 알 수 없는 필드명 (그대로 오류 보고).

    Raises:
        InvalidInputError: 알 수 없는 필드 또는 검증 실패
    """
    errors = _Errors()

    for key in sorted((set(changes) - MUTABLE_FIELDS) | set(unknown_fields)):
        errors.add(f"Unknown field: {key}")

    kind: TransactionKind | None = existing.kind
    amount: Decimal | None = existing.amount
    description = existing.description
    occurred_at = existing.occurred_at

    if "kind" in changes:
        if changes["kind"] is None:
            errors.add("Type cannot be null")
        else:
            kind = parse_kind(changes["kind"], errors)

    if "amount" in changes:
        if changes["amount"] is None:
            errors.add("Amount cannot be null")
        else:
            amount = parse_amount(changes["amount"], errors)

    if "description" in changes:
        description = parse_description(changes["description"], errors)

    if "occurred_at" in changes:
        occurred_at = parse_occurred_at(changes["occurred_at"], errors)

    errors.raise_if_any()

    assert kind is not None and amount is not None
    return TransactionDraft(
        kind=kind,
        amount=amount,
        description=description,
        occurred_at=occurred_at,
    )


def clamp_limit(limit: Any) -> int:
    """조회 개수 정규화

    파싱 불가 또는 0 이하 → 기본값, 최대값 초과 → 최대값
    """
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return Defaults.LIST_LIMIT

    if value <= 0:
        return Defaults.LIST_LIMIT
    return min(value, Defaults.MAX_LIST_LIMIT)


def parse_kind_filter(value: Any) -> TransactionKind | None:
    """목록 조회용 유형 필터 (알 수 없는 값은 무시)"""
    if value is None:
        return None
    try:
        return TransactionKind(value)
    except ValueError:
        return None
