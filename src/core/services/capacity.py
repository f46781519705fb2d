"""Resumen de capacidad por failure domain."""

from __future__ import annotations

from core.domain.models import CapacityRecord


def summarize_capacity(name: str, cpu_cores: int, memory_bytes: int) -> CapacityRecord:
    """Proyección pura de las cifras del cluster a un `CapacityRecord`.

    No normaliza unidades: la memoria queda en bytes.
    """

    return CapacityRecord(
        name=name,
        vcpu_count=cpu_cores,
        total_memory_bytes=memory_bytes,
    )


def memory_gib(record: CapacityRecord) -> int:
    """Memoria en GiB (división entera), solo para presentación."""

    return record.total_memory_bytes // 1024 // 1024 // 1024
