"""
Ledger 저장소 통합 테스트

SQLite / 메모리 저장소 모두 같은 동작을 보장하는지 확인.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from adapters.storage import StorageSession
from core.errors import ConcurrentModificationError, TransactionNotFoundError
from core.ledger.models import ListFilter, TransactionRecord
from core.types import TransactionKind

BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_record(
    record_id: str,
    kind: TransactionKind = TransactionKind.INCOME,
    amount: str = "100.00",
    description: str | None = None,
    minutes: int = 0,
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id,
        kind=kind,
        amount=Decimal(amount),
        description=description,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


class TestLedgerStoreCrud:
    """저장/조회/교체/삭제 테스트"""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, session: StorageSession) -> None:
        """저장 후 조회"""
        occurred = datetime(2025, 12, 31, tzinfo=timezone.utc)
        record = TransactionRecord(
            id="tx-1",
            kind=TransactionKind.EXPENSE,
            amount=Decimal("12.34"),
            created_at=BASE_TIME,
            description="Coffee",
            occurred_at=occurred,
        )

        assert await session.ledger.insert(record) == "tx-1"
        loaded = await session.ledger.get("tx-1")

        assert loaded == record
        assert loaded.version == 1

    @pytest.mark.asyncio
    async def test_get_missing(self, session: StorageSession) -> None:
        """없는 거래 조회"""
        with pytest.raises(TransactionNotFoundError):
            await session.ledger.get("missing")

    @pytest.mark.asyncio
    async def test_replace_bumps_version(self, session: StorageSession) -> None:
        """교체 시 버전 증가, created_at 불변"""
        await session.ledger.insert(make_record("tx-1", description="Old"))

        updated = await session.ledger.replace(
            "tx-1",
            {"amount": Decimal("150.00"), "description": None},
            expected_version=1,
        )

        assert updated.amount == Decimal("150.00")
        assert updated.description is None
        assert updated.version == 2
        assert updated.created_at == BASE_TIME
        assert await session.ledger.get("tx-1") == updated

    @pytest.mark.asyncio
    async def test_replace_version_conflict(self, session: StorageSession) -> None:
        """버전 불일치 시 충돌"""
        await session.ledger.insert(make_record("tx-1"))
        await session.ledger.replace("tx-1", {"amount": Decimal("1.00")}, expected_version=1)

        with pytest.raises(ConcurrentModificationError):
            await session.ledger.replace("tx-1", {"amount": Decimal("2.00")}, expected_version=1)

        assert (await session.ledger.get("tx-1")).amount == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_replace_missing(self, session: StorageSession) -> None:
        """없는 거래 교체"""
        with pytest.raises(TransactionNotFoundError):
            await session.ledger.replace("missing", {"amount": Decimal("1.00")})

    @pytest.mark.asyncio
    async def test_replace_rejects_immutable_field(self, session: StorageSession) -> None:
        """created_at 등 불변 필드 교체 거부"""
        await session.ledger.insert(make_record("tx-1"))

        with pytest.raises(ValueError):
            await session.ledger.replace("tx-1", {"created_at": BASE_TIME})

    @pytest.mark.asyncio
    async def test_remove(self, session: StorageSession) -> None:
        """삭제"""
        await session.ledger.insert(make_record("tx-1"))

        await session.ledger.remove("tx-1", expected_version=1)

        with pytest.raises(TransactionNotFoundError):
            await session.ledger.get("tx-1")

    @pytest.mark.asyncio
    async def test_remove_missing(self, session: StorageSession) -> None:
        """없는 거래 삭제"""
        with pytest.raises(TransactionNotFoundError):
            await session.ledger.remove("missing")

    @pytest.mark.asyncio
    async def test_remove_version_conflict(self, session: StorageSession) -> None:
        """버전 불일치 시 삭제 거부"""
        await session.ledger.insert(make_record("tx-1"))

        with pytest.raises(ConcurrentModificationError):
            await session.ledger.remove("tx-1", expected_version=7)

        assert await session.ledger.get("tx-1")


class TestLedgerStoreList:
    """목록 조회 테스트"""

    @pytest.mark.asyncio
    async def test_newest_first(self, session: StorageSession) -> None:
        """생성 시간 내림차순"""
        await session.ledger.insert(make_record("old", minutes=0))
        await session.ledger.insert(make_record("new", minutes=10))
        await session.ledger.insert(make_record("mid", minutes=5))

        records = await session.ledger.list_all(None)

        assert [r.id for r in records] == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_same_created_at_uses_insert_order(self, session: StorageSession) -> None:
        """생성 시간이 같으면 나중에 저장한 거래가 먼저"""
        await session.ledger.insert(make_record("first"))
        await session.ledger.insert(make_record("second"))

        records = await session.ledger.list_all(None)

        assert [r.id for r in records] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_filter_kind(self, session: StorageSession) -> None:
        """유형 필터"""
        await session.ledger.insert(make_record("in", TransactionKind.INCOME))
        await session.ledger.insert(make_record("out", TransactionKind.EXPENSE, minutes=1))

        records = await session.ledger.list_all(ListFilter(kind=TransactionKind.EXPENSE))

        assert [r.id for r in records] == ["out"]

    @pytest.mark.asyncio
    async def test_search_description_case_insensitive(self, session: StorageSession) -> None:
        """설명 검색 (대소문자 무시)"""
        await session.ledger.insert(make_record("a", description="Monthly SALARY"))
        await session.ledger.insert(make_record("b", description="Rent", minutes=1))
        await session.ledger.insert(make_record("c", minutes=2))

        records = await session.ledger.list_all(ListFilter(search="salary"))

        assert [r.id for r in records] == ["a"]

    @pytest.mark.asyncio
    async def test_search_description_non_ascii(self, session: StorageSession) -> None:
        """설명 검색 (ASCII 외 문자도 대소문자 무시)"""
        await session.ledger.insert(make_record("a", description="Été café"))
        await session.ledger.insert(make_record("b", description="STRASSE", minutes=1))
        await session.ledger.insert(make_record("c", description="Rent", minutes=2))

        records = await session.ledger.list_all(ListFilter(search="été"))
        assert [r.id for r in records] == ["a"]

        records = await session.ledger.list_all(ListFilter(search="CAFÉ"))
        assert [r.id for r in records] == ["a"]

        records = await session.ledger.list_all(ListFilter(search="straße"))
        assert [r.id for r in records] == ["b"]

    @pytest.mark.asyncio
    async def test_search_amount(self, session: StorageSession) -> None:
        """금액 문자열 검색"""
        await session.ledger.insert(make_record("a", amount="1234.50"))
        await session.ledger.insert(make_record("b", amount="99.00", minutes=1))

        records = await session.ledger.list_all(ListFilter(search="234.5"))

        assert [r.id for r in records] == ["a"]

    @pytest.mark.asyncio
    async def test_search_like_wildcards_are_literal(self, session: StorageSession) -> None:
        """검색어의 %, _ 는 문자 그대로 비교"""
        await session.ledger.insert(make_record("a", description="50% off"))
        await session.ledger.insert(make_record("b", description="full price", minutes=1))

        records = await session.ledger.list_all(ListFilter(search="%"))

        assert [r.id for r in records] == ["a"]

    @pytest.mark.asyncio
    async def test_limit(self, session: StorageSession) -> None:
        """개수 제한"""
        for i in range(5):
            await session.ledger.insert(make_record(f"tx-{i}", minutes=i))

        records = await session.ledger.list_all(ListFilter(limit=2))

        assert [r.id for r in records] == ["tx-4", "tx-3"]
