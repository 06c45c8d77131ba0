"""
core/ledger/models.py 테스트

입력 검증, 금액 정규화, 부분 수정 병합, 목록 조건 테스트
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.errors import InvalidInputError
from core.ledger.models import (
    ListFilter,
    TransactionRecord,
    clamp_limit,
    format_amount,
    from_cents,
    merge_changes,
    parse_kind_filter,
    to_cents,
    validate_draft,
)
from core.types import TransactionKind


def make_record(**overrides) -> TransactionRecord:
    values = {
        "id": "tx-1",
        "kind": TransactionKind.INCOME,
        "amount": Decimal("100.00"),
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "description": "Salary",
    }
    values.update(overrides)
    return TransactionRecord(**values)


class TestValidateDraft:
    """validate_draft 테스트"""

    def test_valid_income(self) -> None:
        """정상 수입"""
        draft = validate_draft("income", 500)

        assert draft.kind == TransactionKind.INCOME
        assert draft.amount == Decimal("500.00")
        assert draft.description is None
        assert draft.occurred_at is None

    def test_amount_from_string(self) -> None:
        """문자열 금액"""
        draft = validate_draft("expense", "120.5")

        assert draft.amount == Decimal("120.50")

    def test_float_amount_is_exact(self) -> None:
        """float 금액은 표시값 그대로 변환"""
        draft = validate_draft("income", 0.1)

        assert draft.amount == Decimal("0.10")

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("10.005", Decimal("10.01")),
            ("10.004", Decimal("10.00")),
            ("0.125", Decimal("0.13")),
        ],
    )
    def test_rounds_half_up(self, raw: str, expected: Decimal) -> None:
        """소수점 2자리 반올림"""
        assert validate_draft("income", raw).amount == expected

    def test_zero_amount_allowed(self) -> None:
        """0원 허용"""
        assert validate_draft("income", 0).amount == Decimal("0.00")

    def test_negative_amount_rejected(self) -> None:
        """음수 금액 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_draft("income", -5)

        assert exc_info.value.details == ["Amount must be a non-negative number"]

    @pytest.mark.parametrize("amount", [None, "abc", True, float("nan"), float("inf"), [1]])
    def test_non_numeric_amount_rejected(self, amount) -> None:
        """숫자가 아닌 금액 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_draft("income", amount)

        assert "Amount must be a non-negative number" in exc_info.value.details

    def test_amount_over_max_rejected(self) -> None:
        """최대 금액 초과 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_draft("income", "100000000")

        assert exc_info.value.details == ["Amount must not exceed 99999999.99"]

    def test_collects_all_violations(self) -> None:
        """모든 위반 사항을 한 번에 보고"""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_draft("transfer", -1, description=123, occurred_at="not-a-date")

        assert exc_info.value.details == [
            'Type must be either "income" or "expense"',
            "Amount must be a non-negative number",
            "Description must be a string",
            "Date must be a valid ISO-8601 date",
        ]
        assert exc_info.value.kind == "InvalidInput"

    def test_date_with_z_suffix(self) -> None:
        """UTC 'Z' 표기"""
        draft = validate_draft("income", 1, occurred_at="2026-03-01T10:00:00Z")

        assert draft.occurred_at == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_date_only(self) -> None:
        """날짜만 지정하면 UTC 자정"""
        draft = validate_draft("income", 1, occurred_at="2026-03-01")

        assert draft.occurred_at == datetime(2026, 3, 1, tzinfo=timezone.utc)

    def test_date_object(self) -> None:
        """date 객체"""
        draft = validate_draft("income", 1, occurred_at=date(2026, 3, 1))

        assert draft.occurred_at == datetime(2026, 3, 1, tzinfo=timezone.utc)

    def test_empty_date_is_absent(self) -> None:
        """빈 문자열 날짜는 미지정"""
        assert validate_draft("income", 1, occurred_at="").occurred_at is None


class TestMergeChanges:
    """merge_changes 테스트"""

    def test_only_present_fields_applied(self) -> None:
        """포함된 필드만 반영"""
        existing = make_record()

        draft = merge_changes(existing, {"amount": 150})

        assert draft.amount == Decimal("150.00")
        assert draft.kind == TransactionKind.INCOME
        assert draft.description == "Salary"

    def test_kind_change(self) -> None:
        """유형 변경"""
        draft = merge_changes(make_record(), {"kind": "expense"})

        assert draft.kind == TransactionKind.EXPENSE
        assert draft.amount == Decimal("100.00")

    def test_null_description_clears(self) -> None:
        """description null은 삭제"""
        draft = merge_changes(make_record(), {"description": None})

        assert draft.description is None

    def test_null_date_clears(self) -> None:
        """date null은 삭제"""
        existing = make_record(occurred_at=datetime(2026, 2, 1, tzinfo=timezone.utc))

        draft = merge_changes(existing, {"occurred_at": None})

        assert draft.occurred_at is None

    def test_null_kind_and_amount_rejected(self) -> None:
        """유형/금액 null 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            merge_changes(make_record(), {"kind": None, "amount": None})

        assert exc_info.value.details == ["Type cannot be null", "Amount cannot be null"]

    def test_unknown_field_rejected(self) -> None:
        """알 수 없는 필드 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            merge_changes(make_record(), {"createdAt": "2020-01-01", "amount": 5})

        assert exc_info.value.details == ["Unknown field: createdAt"]

    def test_unknown_fields_reported_even_if_internal_name(self) -> None:
        """요청의 알 수 없는 필드는 내부 필드명과 같아도 거부"""
        with pytest.raises(InvalidInputError) as exc_info:
            merge_changes(make_record(), {"amount": 5}, unknown_fields=["occurred_at", "kind"])

        assert exc_info.value.details == ["Unknown field: kind", "Unknown field: occurred_at"]

    def test_invalid_amount_rejected(self) -> None:
        """잘못된 금액 거부"""
        with pytest.raises(InvalidInputError):
            merge_changes(make_record(), {"amount": -1})


class TestMoney:
    """금액 유틸리티 테스트"""

    def test_cents_conversion(self) -> None:
        """센트 변환"""
        assert to_cents(Decimal("123.45")) == 12345
        assert from_cents(-12345) == Decimal("-123.45")
        assert from_cents(0) == Decimal("0.00")

    def test_format_amount(self) -> None:
        """소수점 2자리 문자열"""
        assert format_amount(Decimal("5")) == "5.00"
        assert format_amount(Decimal("1234.5")) == "1234.50"

    def test_signed_amount(self) -> None:
        """부호 적용 금액"""
        assert make_record().signed_amount == Decimal("100.00")
        assert make_record(kind=TransactionKind.EXPENSE).signed_amount == Decimal("-100.00")

    def test_display_date_falls_back_to_created_at(self) -> None:
        """거래일이 없으면 생성 시간 표시"""
        record = make_record()

        assert record.display_date == record.created_at


class TestListOptions:
    """목록 조회 조건 테스트"""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, 50),
            ("abc", 50),
            (0, 50),
            (-3, 50),
            ("10", 10),
            (10000, 500),
        ],
    )
    def test_clamp_limit(self, raw, expected: int) -> None:
        """limit 정규화"""
        assert clamp_limit(raw) == expected

    def test_parse_kind_filter(self) -> None:
        """유형 필터 (잘못된 값은 무시)"""
        assert parse_kind_filter("income") == TransactionKind.INCOME
        assert parse_kind_filter("bogus") is None
        assert parse_kind_filter(None) is None

    def test_filter_matches_description_case_insensitive(self) -> None:
        """설명 검색 (대소문자 무시)"""
        assert ListFilter(search="SAL").matches(make_record())
        assert not ListFilter(search="rent").matches(make_record())

    def test_filter_matches_amount(self) -> None:
        """금액 문자열 검색"""
        record = make_record(amount=Decimal("1234.50"))

        assert ListFilter(search="34.5").matches(record)

    def test_filter_kind(self) -> None:
        """유형 필터"""
        assert not ListFilter(kind=TransactionKind.EXPENSE).matches(make_record())
