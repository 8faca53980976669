"""
Shared pytest fixtures and configuration for hwprofile tests.

This file is automatically discovered by pytest and provides fixtures
that can be used across all test files.

Fixture Organization
--------------------
- **fake_root**: Builder for a synthetic /proc + /sys tree under tmp_path
- **workstation_root**: A fully populated bare-metal workstation tree
- **make_profile**: Factory for HardwareProfile objects without any OS access

All detection tests run against a fake root; nothing reads the host's
real /proc or /sys.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

import pytest

from hwprofile.core.logging import configure_logging
from hwprofile.detection.detector import HardwareDetector
from hwprofile.detection.models import (
    KB_PER_GB,
    CpuFacts,
    CpuFeature,
    CpuVendor,
    Confidence,
    FormFactor,
    GpuFacts,
    HardwareProfile,
    MemoryClass,
    MemoryFacts,
    PerformanceProfile,
    PlatformFacts,
    StorageDevice,
    StorageFacts,
    StorageType,
    VirtualizationFacts,
    VirtualizationKind,
)
from hwprofile.detection.probe import Prober


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove host variables that would leak into detection or config."""
    for name in list(os.environ):
        if name.startswith("HWPROFILE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("container", raising=False)

    yield

    # CLI tests lower console verbosity; restore it for the next test
    configure_logging(level="INFO")
    logging.getLogger().setLevel(logging.WARNING)


# ============================================================================
# Fake Root Builder
# ============================================================================


class FakeRoot:
    """Builds a synthetic OS introspection tree.

    Example:
        def test_nvme(fake_root):
            fake_root.cpuinfo(cores=8).meminfo(total_gb=16).block("nvme0n1")
            profile = fake_root.detector().run()
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path(self, os_path: str) -> Path:
        return self.root / os_path.lstrip("/")

    def write(self, os_path: str, content: str) -> "FakeRoot":
        target = self.path(os_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return self

    def mkdir(self, os_path: str) -> "FakeRoot":
        self.path(os_path).mkdir(parents=True, exist_ok=True)
        return self

    def cpuinfo(
        self,
        cores: int = 4,
        vendor_id: str = "GenuineIntel",
        model_name: str = "Intel(R) Core(TM) i7-9700 CPU @ 3.00GHz",
        flags: str = "fpu vme sse4_1 sse4_2 avx avx2 aes",
    ) -> "FakeRoot":
        blocks = []
        for index in range(cores):
            blocks.append(
                f"processor\t: {index}\n"
                f"vendor_id\t: {vendor_id}\n"
                f"model name\t: {model_name}\n"
                f"flags\t\t: {flags}\n"
            )
        return self.write("/proc/cpuinfo", "\n".join(blocks))

    def cpu_online(self, text: str) -> "FakeRoot":
        return self.write("/sys/devices/system/cpu/online", f"{text}\n")

    def meminfo(self, total_gb: int = 16, total_kb: Optional[int] = None) -> "FakeRoot":
        kb = total_kb if total_kb is not None else total_gb * KB_PER_GB
        return self.write(
            "/proc/meminfo",
            f"MemTotal:       {kb} kB\nMemFree:         1024000 kB\n",
        )

    def block(self, name: str, rotational: Optional[str] = "0") -> "FakeRoot":
        self.mkdir(f"/sys/block/{name}")
        if rotational is not None:
            self.write(f"/sys/block/{name}/queue/rotational", f"{rotational}\n")
        return self

    def drm(self, name: str, driver: Optional[str] = None) -> "FakeRoot":
        self.mkdir(f"/sys/class/drm/{name}")
        if driver:
            device = self.path(f"/sys/class/drm/{name}/device")
            device.mkdir(parents=True, exist_ok=True)
            driver_dir = self.path(f"/sys/bus/pci/drivers/{driver}")
            driver_dir.mkdir(parents=True, exist_ok=True)
            os.symlink(driver_dir, device / "driver")
        return self

    def modules(self, *names: str) -> "FakeRoot":
        lines = [f"{name} 16384 0 - Live 0x0000000000000000" for name in names]
        return self.write("/proc/modules", "\n".join(lines) + "\n")

    def dmi(
        self,
        product_name: str = "",
        sys_vendor: str = "",
        chassis_type: Optional[str] = None,
    ) -> "FakeRoot":
        self.write("/sys/class/dmi/id/product_name", f"{product_name}\n")
        self.write("/sys/class/dmi/id/sys_vendor", f"{sys_vendor}\n")
        if chassis_type is not None:
            self.write("/sys/class/dmi/id/chassis_type", f"{chassis_type}\n")
        return self

    def power_supply(self, name: str, supply_type: str) -> "FakeRoot":
        return self.write(f"/sys/class/power_supply/{name}/type", f"{supply_type}\n")

    def touch(self, os_path: str) -> "FakeRoot":
        return self.write(os_path, "")

    def prober(self, environ: Optional[Dict[str, str]] = None) -> Prober:
        return Prober(root=self.root, environ=environ or {})

    def detector(
        self,
        machine: str = "x86_64",
        parallel: bool = False,
        environ: Optional[Dict[str, str]] = None,
    ) -> HardwareDetector:
        return HardwareDetector(self.prober(environ), machine=machine, parallel=parallel)


@pytest.fixture
def fake_root(tmp_path: Path) -> FakeRoot:
    """Empty fake root; populate it with the builder methods."""
    return FakeRoot(tmp_path / "root")


@pytest.fixture
def workstation_root(fake_root: FakeRoot) -> FakeRoot:
    """Bare-metal desktop: 16 Intel cores, 64 GB, NVMe, Intel graphics."""
    (
        fake_root.cpuinfo(cores=16, flags="fpu sse4_2 avx avx2 avx512f aes")
        .cpu_online("0-15")
        .meminfo(total_gb=64)
        .block("nvme0n1")
        .block("loop0")
        .mkdir("/sys/class/nvme/nvme0")
        .drm("card0", driver="i915")
        .drm("renderD128")
        .modules("i915", "kvm_intel", "snd_hda_intel")
        .dmi("OptiPlex 7070", "Dell Inc.", chassis_type="3")
    )
    return fake_root


# ============================================================================
# Profile Factory
# ============================================================================


@pytest.fixture
def make_profile() -> Callable[..., HardwareProfile]:
    """Factory for HardwareProfile objects built without detection.

    Example:
        profile = make_profile(cores=2, performance=PerformanceProfile.MINIMAL)
    """

    def _make(
        cores: int = 8,
        total_gb: int = 16,
        memory_class: MemoryClass = MemoryClass.MEDIUM,
        storage_type: StorageType = StorageType.SSD,
        kind: VirtualizationKind = VirtualizationKind.BARE_METAL,
        performance: PerformanceProfile = PerformanceProfile.BALANCED,
        forced: bool = False,
        defaulted: tuple = (),
    ) -> HardwareProfile:
        return HardwareProfile(
            cpu=CpuFacts(
                vendor=CpuVendor.AMD,
                core_count=cores,
                model_name="AMD Ryzen 7 5800X 8-Core Processor",
                features=frozenset({CpuFeature.AVX, CpuFeature.AVX2}),
            ),
            memory=MemoryFacts(total_kb=total_gb * KB_PER_GB, memory_class=memory_class),
            storage=StorageFacts(
                devices=(StorageDevice(name="sda", rotational=False, is_nvme=False),),
                has_ssd=storage_type in (StorageType.SSD, StorageType.NVME),
                has_nvme=storage_type is StorageType.NVME,
                primary_type=storage_type,
            ),
            gpu=GpuFacts(has_amd=True),
            virtualization=VirtualizationFacts(
                kind=kind,
                is_vm=kind not in (
                    VirtualizationKind.BARE_METAL,
                    VirtualizationKind.WSL,
                    VirtualizationKind.CONTAINER,
                ),
                is_wsl=kind is VirtualizationKind.WSL,
                is_container=kind is VirtualizationKind.CONTAINER,
            ),
            platform=PlatformFacts(
                machine="x86_64",
                form_factor=FormFactor.DESKTOP,
                form_factor_score=45,
                confidence=Confidence.MEDIUM,
            ),
            performance_profile=performance,
            forced_profile=forced,
            defaulted=defaulted,
        )

    return _make
