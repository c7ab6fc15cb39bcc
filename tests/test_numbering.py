import asyncio

import pytest

from workshop.db.repositories import counter_repo
from workshop.exceptions import StorageError, ValidationError
from workshop.services import numbering


def test_format_pads_to_three_digits():
    assert numbering.format_order_number(2025, 7) == "ЗК-2025-007"
    assert numbering.format_order_number(2025, 42) == "ЗК-2025-042"
    assert numbering.format_order_number(2025, 999) == "ЗК-2025-999"


def test_format_never_truncates_large_sequences():
    assert numbering.format_order_number(2025, 1042) == "ЗК-2025-1042"
    assert numbering.format_order_number(2025, 1000) == "ЗК-2025-1000"


@pytest.mark.parametrize("number, expected", [
    ("ЗК-2025-007", (2025, 7)),
    ("ЗК-2026-1042", (2026, 1042)),
])
def test_parse_order_number(number, expected):
    assert numbering.parse_order_number(number) == expected


@pytest.mark.parametrize("bad", ["", "ЗК-25-007", "ZK-2025-007", "ЗК-2025-07", "ЗК-2025-abc"])
def test_parse_rejects_malformed_numbers(bad):
    with pytest.raises(ValidationError):
        numbering.parse_order_number(bad)


async def test_sequences_start_at_one_per_year():
    assert await numbering.next_sequence(2025) == 1
    assert await numbering.next_sequence(2025) == 2
    assert await numbering.next_sequence(2026) == 1
    assert await counter_repo.get_year_counter(2025) == 2


async def test_concurrent_sequences_are_distinct_and_consecutive():
    await numbering.next_sequence(2025)
    prior = await counter_repo.get_year_counter(2025)

    results = await asyncio.gather(*(numbering.next_sequence(2025) for _ in range(50)))

    assert len(set(results)) == 50
    assert sorted(results) == list(range(prior + 1, prior + 51))


async def test_storage_failure_becomes_storage_error(monkeypatch):
    async def _broken(year):
        raise ConnectionRefusedError("database is down")

    monkeypatch.setattr(counter_repo, "increment_year_counter", _broken)
    with pytest.raises(StorageError):
        await numbering.next_order_number(2025)
