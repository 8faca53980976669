"""Classifier - pure threshold functions mapping raw facts to ordinal classes.

Every function here is total and deterministic. Thresholds are module
constants so downstream layers and tests share one table.
"""

from __future__ import annotations

from hwprofile.detection.models import (
    CpuClass,
    MemoryClass,
    PerformanceProfile,
    StorageType,
)

# Core-count thresholds (inclusive lower bounds)
CPU_HIGH_CORES: int = 16
CPU_MEDIUM_CORES: int = 8
CPU_LOW_CORES: int = 4

# Memory thresholds in whole GB (inclusive lower bounds).
# Canonical table: 4 / 8 / 32.
MEMORY_HIGH_GB: int = 32
MEMORY_MEDIUM_GB: int = 8
MEMORY_LOW_GB: int = 4

# Minimum cores for the two upper performance tiers
HIGH_PERFORMANCE_MIN_CORES: int = 8
BALANCED_MIN_CORES: int = 4

_BALANCED_STORAGE = frozenset({StorageType.SSD, StorageType.NVME})


def cpu_class(cores: int) -> CpuClass:
    """Classify a core count: high >=16, medium >=8, low >=4, else minimal."""
    if cores >= CPU_HIGH_CORES:
        return CpuClass.HIGH
    if cores >= CPU_MEDIUM_CORES:
        return CpuClass.MEDIUM
    if cores >= CPU_LOW_CORES:
        return CpuClass.LOW
    return CpuClass.MINIMAL


def memory_class(total_gb: int) -> MemoryClass:
    """Classify installed memory: high >=32, medium >=8, low >=4, else minimal."""
    if total_gb >= MEMORY_HIGH_GB:
        return MemoryClass.HIGH
    if total_gb >= MEMORY_MEDIUM_GB:
        return MemoryClass.MEDIUM
    if total_gb >= MEMORY_LOW_GB:
        return MemoryClass.LOW
    return MemoryClass.MINIMAL


def storage_primary_type(
    has_nvme: bool,
    has_ssd: bool,
    has_virtio: bool = False,
    has_mmc: bool = False,
) -> StorageType:
    """Pick the primary storage type; first matching flag wins.

    Priority: nvme > ssd > virtio > mmc > hdd.
    """
    if has_nvme:
        return StorageType.NVME
    if has_ssd:
        return StorageType.SSD
    if has_virtio:
        return StorageType.VIRTIO
    if has_mmc:
        return StorageType.MMC
    return StorageType.HDD


def performance_profile(
    mem_class: MemoryClass,
    core_count: int,
    storage_type: StorageType,
) -> PerformanceProfile:
    """Derive the overall performance profile.

    Rules are evaluated in order:

    1. high-performance: memory high, >=8 cores, NVMe storage
    2. balanced: memory medium, >=4 cores, SSD or NVMe storage
    3. resource-constrained: memory low
    4. minimal: everything else

    High memory without NVMe storage falls through to minimal.
    """
    if (
        mem_class == MemoryClass.HIGH
        and core_count >= HIGH_PERFORMANCE_MIN_CORES
        and storage_type == StorageType.NVME
    ):
        return PerformanceProfile.HIGH_PERFORMANCE
    if (
        mem_class == MemoryClass.MEDIUM
        and core_count >= BALANCED_MIN_CORES
        and storage_type in _BALANCED_STORAGE
    ):
        return PerformanceProfile.BALANCED
    if mem_class == MemoryClass.LOW:
        return PerformanceProfile.RESOURCE_CONSTRAINED
    return PerformanceProfile.MINIMAL
