"""
Tests for the Classifier threshold functions.

Test Strategy
-------------
- Boundary values for every threshold
- Totality and monotonicity over a range of inputs
- The performance decision table, including its fall-through cases

Organization
------------
- TestCpuClass
- TestMemoryClass
- TestStoragePrimaryType
- TestPerformanceProfile
"""

import pytest

from hwprofile.detection.classifier import (
    cpu_class,
    memory_class,
    performance_profile,
    storage_primary_type,
)
from hwprofile.detection.models import (
    CpuClass,
    MemoryClass,
    PerformanceProfile,
    StorageType,
)

CLASS_ORDER = ["minimal", "low", "medium", "high"]


def _rank(value) -> int:
    return CLASS_ORDER.index(value.value)


class TestCpuClass:
    """Tests for cpu_class."""

    @pytest.mark.parametrize(
        "cores,expected",
        [
            (1, CpuClass.MINIMAL),
            (3, CpuClass.MINIMAL),
            (4, CpuClass.LOW),
            (7, CpuClass.LOW),
            (8, CpuClass.MEDIUM),
            (15, CpuClass.MEDIUM),
            (16, CpuClass.HIGH),
            (128, CpuClass.HIGH),
        ],
    )
    def test_boundaries(self, cores, expected):
        assert cpu_class(cores) is expected

    def test_monotonic(self):
        ranks = [_rank(cpu_class(cores)) for cores in range(0, 65)]

        assert ranks == sorted(ranks)


class TestMemoryClass:
    """Tests for memory_class (4 / 8 / 32 GB table)."""

    @pytest.mark.parametrize(
        "total_gb,expected",
        [
            (0, MemoryClass.MINIMAL),
            (3, MemoryClass.MINIMAL),
            (4, MemoryClass.LOW),
            (7, MemoryClass.LOW),
            (8, MemoryClass.MEDIUM),
            (31, MemoryClass.MEDIUM),
            (32, MemoryClass.HIGH),
            (1024, MemoryClass.HIGH),
        ],
    )
    def test_boundaries(self, total_gb, expected):
        assert memory_class(total_gb) is expected

    def test_total_and_monotonic(self):
        classes = [memory_class(gb) for gb in range(0, 129)]

        assert all(isinstance(c, MemoryClass) for c in classes)
        ranks = [_rank(c) for c in classes]
        assert ranks == sorted(ranks)


class TestStoragePrimaryType:
    """Tests for storage_primary_type priority."""

    def test_nvme_wins(self):
        assert storage_primary_type(True, True, True, True) is StorageType.NVME

    def test_ssd_before_virtio(self):
        assert storage_primary_type(False, True, has_virtio=True) is StorageType.SSD

    def test_virtio_before_mmc(self):
        assert (
            storage_primary_type(False, False, has_virtio=True, has_mmc=True)
            is StorageType.VIRTIO
        )

    def test_nothing_is_hdd(self):
        assert storage_primary_type(False, False) is StorageType.HDD


class TestPerformanceProfile:
    """Tests for the performance decision table."""

    def test_high_performance(self):
        assert (
            performance_profile(MemoryClass.HIGH, 16, StorageType.NVME)
            is PerformanceProfile.HIGH_PERFORMANCE
        )

    def test_high_performance_needs_eight_cores(self):
        assert (
            performance_profile(MemoryClass.HIGH, 7, StorageType.NVME)
            is PerformanceProfile.MINIMAL
        )

    def test_balanced_with_ssd(self):
        assert (
            performance_profile(MemoryClass.MEDIUM, 4, StorageType.SSD)
            is PerformanceProfile.BALANCED
        )

    def test_balanced_with_nvme(self):
        assert (
            performance_profile(MemoryClass.MEDIUM, 8, StorageType.NVME)
            is PerformanceProfile.BALANCED
        )

    def test_medium_memory_on_hdd_is_minimal(self):
        assert (
            performance_profile(MemoryClass.MEDIUM, 8, StorageType.HDD)
            is PerformanceProfile.MINIMAL
        )

    def test_low_memory_is_resource_constrained(self):
        for storage in StorageType:
            assert (
                performance_profile(MemoryClass.LOW, 32, storage)
                is PerformanceProfile.RESOURCE_CONSTRAINED
            )

    def test_high_memory_without_nvme_falls_through(self):
        assert (
            performance_profile(MemoryClass.HIGH, 32, StorageType.SSD)
            is PerformanceProfile.MINIMAL
        )

    def test_minimal_memory_is_minimal(self):
        assert (
            performance_profile(MemoryClass.MINIMAL, 64, StorageType.NVME)
            is PerformanceProfile.MINIMAL
        )

    def test_total(self):
        for mem in MemoryClass:
            for storage in StorageType:
                for cores in (1, 4, 8, 16):
                    assert isinstance(
                        performance_profile(mem, cores, storage), PerformanceProfile
                    )
