"""
Hardware detection pipeline.

Probe -> Parse/Classify -> Override -> Aggregate -> Publish.
"""

from hwprofile.detection.aggregator import aggregate
from hwprofile.detection.detector import (
    HardwareDetector,
    build_detector,
    detect_profile,
)
from hwprofile.detection.models import (
    CpuClass,
    CpuFacts,
    CpuFeature,
    CpuVendor,
    DetectedFacts,
    FormFactor,
    GpuFacts,
    HardwareProfile,
    MemoryClass,
    MemoryFacts,
    PerformanceProfile,
    PlatformFacts,
    RawSample,
    StorageDevice,
    StorageFacts,
    StorageType,
    VirtualizationFacts,
    VirtualizationKind,
)
from hwprofile.detection.overrides import OverrideSet, apply_overrides
from hwprofile.detection.probe import Prober
from hwprofile.detection.publisher import ProfilePublisher

__all__ = [
    "CpuClass",
    "CpuFacts",
    "CpuFeature",
    "CpuVendor",
    "DetectedFacts",
    "FormFactor",
    "GpuFacts",
    "HardwareDetector",
    "HardwareProfile",
    "MemoryClass",
    "MemoryFacts",
    "OverrideSet",
    "PerformanceProfile",
    "PlatformFacts",
    "Prober",
    "ProfilePublisher",
    "RawSample",
    "StorageDevice",
    "StorageFacts",
    "StorageType",
    "VirtualizationFacts",
    "VirtualizationKind",
    "aggregate",
    "apply_overrides",
    "build_detector",
    "detect_profile",
]
