"""
Typed hardware facts and the aggregate HardwareProfile.

Every record is a frozen dataclass; collections inside them are tuples or
frozensets so a published profile cannot be mutated by consumers.
Categorical values are str-valued enums and serialize as plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple

KB_PER_GB: int = 1024 * 1024


class CpuVendor(str, Enum):
    """CPU vendor derived from cpuinfo signature tokens."""

    INTEL = "intel"
    AMD = "amd"
    ARM = "arm"
    UNKNOWN = "unknown"


class CpuFeature(str, Enum):
    """Instruction-set features tracked by the profile."""

    AVX = "avx"
    AVX2 = "avx2"
    AVX512 = "avx512"
    SSE4 = "sse4"
    AES = "aes"


class CpuClass(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MemoryClass(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StorageType(str, Enum):
    """Primary storage type, listed in priority order."""

    NVME = "nvme"
    SSD = "ssd"
    VIRTIO = "virtio"
    MMC = "mmc"
    HDD = "hdd"


class VirtualizationKind(str, Enum):
    BARE_METAL = "bare-metal"
    QEMU = "qemu"
    VMWARE = "vmware"
    VIRTUALBOX = "virtualbox"
    HYPERV = "hyperv"
    WSL = "wsl"
    CONTAINER = "container"
    UNKNOWN_VIRTUALIZED = "unknown-virtualized"


# Kinds that imply a hypervisor underneath the kernel
HYPERVISOR_KINDS: FrozenSet[VirtualizationKind] = frozenset(
    {
        VirtualizationKind.QEMU,
        VirtualizationKind.VMWARE,
        VirtualizationKind.VIRTUALBOX,
        VirtualizationKind.HYPERV,
        VirtualizationKind.UNKNOWN_VIRTUALIZED,
    }
)


class PerformanceProfile(str, Enum):
    """Overall capability tier consumed by downstream tuning layers."""

    MINIMAL = "minimal"
    RESOURCE_CONSTRAINED = "resource-constrained"
    BALANCED = "balanced"
    HIGH_PERFORMANCE = "high-performance"


class FormFactor(str, Enum):
    LAPTOP = "laptop"
    DESKTOP = "desktop"
    WORKSTATION = "workstation"
    SERVER = "server"
    UNKNOWN = "unknown"


class Confidence(str, Enum):
    """How strongly the evidence supports the detected form factor."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RawSample:
    """Result of one probe: the text read from a source path."""

    source_path: str
    content: str
    available: bool


@dataclass(frozen=True)
class CpuFacts:
    """CPU facts. core_count is always >= 1."""

    vendor: CpuVendor
    core_count: int
    model_name: str
    features: FrozenSet[CpuFeature] = frozenset()

    @property
    def cpu_class(self) -> CpuClass:
        from hwprofile.detection.classifier import cpu_class

        return cpu_class(self.core_count)

    def has_feature(self, feature: CpuFeature) -> bool:
        return feature in self.features


@dataclass(frozen=True)
class MemoryFacts:
    """Installed memory and its classification."""

    total_kb: int
    memory_class: MemoryClass

    @property
    def total_gb(self) -> int:
        """Whole gigabytes, truncated (integer division by 1,048,576 kB)."""
        return self.total_kb // KB_PER_GB


@dataclass(frozen=True)
class StorageDevice:
    name: str
    rotational: bool
    is_nvme: bool


@dataclass(frozen=True)
class StorageFacts:
    devices: Tuple[StorageDevice, ...]
    has_ssd: bool
    has_nvme: bool
    primary_type: StorageType


@dataclass(frozen=True)
class GpuFacts:
    has_nvidia: bool = False
    has_amd: bool = False
    has_intel: bool = False
    has_virtio: bool = False
    has_nouveau: bool = False

    @property
    def has_discrete(self) -> bool:
        return self.has_nvidia or self.has_amd


@dataclass(frozen=True)
class VirtualizationFacts:
    kind: VirtualizationKind
    is_vm: bool
    is_wsl: bool
    is_container: bool


@dataclass(frozen=True)
class PlatformFacts:
    """Machine architecture and chassis form factor.

    Attributes:
        form_factor_score: Evidence points of the winning form factor
        confidence: high >= 60 points, medium >= 30, else low
    """

    machine: str
    form_factor: FormFactor = FormFactor.UNKNOWN
    has_battery: bool = False
    form_factor_score: int = 0
    confidence: Confidence = Confidence.LOW


@dataclass(frozen=True)
class DetectedFacts:
    """Classified facts of one detection run, before aggregation.

    Attributes:
        defaulted: Names of facts that came from a fallback value
            rather than from the OS (e.g. "cpu.core_count").
    """

    cpu: CpuFacts
    memory: MemoryFacts
    storage: StorageFacts
    gpu: GpuFacts
    virtualization: VirtualizationFacts
    platform: PlatformFacts
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HardwareProfile:
    """Aggregate root: the published snapshot of one detection run.

    A fresh run always yields a new instance; there is no update-in-place.
    """

    cpu: CpuFacts
    memory: MemoryFacts
    storage: StorageFacts
    gpu: GpuFacts
    virtualization: VirtualizationFacts
    platform: PlatformFacts
    performance_profile: PerformanceProfile
    forced_profile: bool = False
    defaulted: Tuple[str, ...] = field(default=())
