import pytest
from pydantic import ValidationError

from core.services.capacity import memory_gib, summarize_capacity


def test_summarize_is_pure_projection():
    record = summarize_capacity("fd-a", 32, 137438953472)

    assert record.name == "fd-a"
    assert record.vcpu_count == 32
    assert record.total_memory_bytes == 137438953472


def test_summarize_serializes_with_downstream_keys():
    record = summarize_capacity("fd-a", 32, 137438953472)

    assert record.model_dump(by_alias=True) == {
        "name": "fd-a",
        "vCPUCount": 32,
        "totalMemoryBytes": 137438953472,
    }


def test_negative_capacity_rejected():
    with pytest.raises(ValidationError):
        summarize_capacity("fd-a", -1, 0)


def test_memory_gib_uses_integer_division():
    record = summarize_capacity("fd-a", 8, 137438953472 + 1024)

    assert memory_gib(record) == 128
