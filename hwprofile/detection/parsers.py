"""Parser/Extractor - turns raw probe text into typed facts.

Every extractor is total: unmatched or ambiguous input degrades to
"unknown" or a category fallback and never raises. Each returns the
facts together with the names of facts that had to be defaulted, so
the detector can report detection blind spots.

Missing sources reach the parsers as empty strings; a missing file and
an unparseable one get the same fallback treatment.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from hwprofile.detection.classifier import memory_class, storage_primary_type
from hwprofile.detection.models import (
    KB_PER_GB,
    CpuFacts,
    CpuFeature,
    CpuVendor,
    Confidence,
    FormFactor,
    GpuFacts,
    MemoryFacts,
    PlatformFacts,
    StorageDevice,
    StorageFacts,
    VirtualizationFacts,
    VirtualizationKind,
)

MACHINE_X86_64 = "x86_64"
MACHINE_AARCH64 = "aarch64"

# Platform fallbacks when the OS gives us nothing usable
DEFAULT_CORES = {MACHINE_X86_64: 4, MACHINE_AARCH64: 4}
DEFAULT_CORES_OTHER = 2
DEFAULT_MEMORY_GB = {MACHINE_X86_64: 8, MACHINE_AARCH64: 4}
DEFAULT_MEMORY_GB_OTHER = 2

UNKNOWN_CPU_MODEL = "Unknown CPU"

_PROCESSOR_LINE = re.compile(r"^processor\b", re.MULTILINE)
_MODEL_NAME_LINE = re.compile(r"^model name\s*:\s*(.*)$", re.MULTILINE)
_FLAGS_LINE = re.compile(r"^(?:flags|Features)\s*:\s*(.*)$", re.MULTILINE)
_MEMTOTAL_LINE = re.compile(r"^MemTotal:\s*(\d+)\s*kB", re.MULTILINE)

_ARM_MARKERS = ("ARM", "CPU implementer")

# Block devices that never represent persistent storage
PSEUDO_BLOCK_PREFIXES = ("loop", "ram", "zram")
# Disk name prefixes that count as SSD when non-rotational
SSD_DISK_PREFIXES = ("sd", "hd", "xvd")
NVME_PREFIX = "nvme"
VIRTIO_PREFIX = "vd"
MMC_PREFIX = "mmcblk"

# DRM device/driver names are matched by substring
_DRM_AMD = ("amd", "radeon")
_DRM_INTEL = ("intel", "i915")
_DRM_VIRTIO = ("virtio",)
# Kernel modules need GPU-specific names: "amd" alone also hits kvm_amd
_MODULE_AMD = ("amdgpu", "radeon")
_MODULE_INTEL = ("i915",)
_MODULE_VIRTIO = ("virtio_gpu", "virtio-gpu")

# (signature, kind) pairs in priority order, matched against DMI strings
_HYPERVISOR_SIGNATURES: Tuple[Tuple[str, VirtualizationKind], ...] = (
    ("QEMU", VirtualizationKind.QEMU),
    ("VMware", VirtualizationKind.VMWARE),
    ("VirtualBox", VirtualizationKind.VIRTUALBOX),
    ("Hyper-V", VirtualizationKind.HYPERV),
    ("Microsoft Corporation", VirtualizationKind.HYPERV),
)
_OTHER_HYPERVISOR_MARKERS = ("KVM", "Xen", "Bochs", "BHYVE", "Parallels", "Virtual Machine")

# SMBIOS chassis type code -> (form factor, evidence points)
_CHASSIS_SCORES = {
    **{code: (FormFactor.LAPTOP, 30) for code in (8, 9, 10, 14)},
    **{code: (FormFactor.DESKTOP, 30) for code in (3, 4, 6, 7)},
    **{code: (FormFactor.SERVER, 30) for code in (17, 23)},
    13: (FormFactor.DESKTOP, 25),  # all-in-one
}

# Product name hints, first match wins
_PRODUCT_HINTS: Tuple[Tuple["re.Pattern[str]", FormFactor, int], ...] = (
    (
        re.compile(r"laptop|notebook|thinkpad|elitebook|pavilion.*laptop|inspiron.*laptop"),
        FormFactor.LAPTOP,
        20,
    ),
    (re.compile(r"server|poweredge|proliant|system.*x"), FormFactor.SERVER, 25),
    (re.compile(r"workstation|precision"), FormFactor.WORKSTATION, 25),
    (
        re.compile(r"desktop|optiplex|vostro.*desktop|inspiron.*desktop"),
        FormFactor.DESKTOP,
        20,
    ),
)

# More batteries than this look like a UPS rather than a laptop
_LAPTOP_MAX_BATTERIES = 2

# Ties keep the earlier form factor; desktop is the fallback
_FORM_FACTOR_ORDER = (
    FormFactor.DESKTOP,
    FormFactor.LAPTOP,
    FormFactor.WORKSTATION,
    FormFactor.SERVER,
)
_HIGH_CONFIDENCE_POINTS = 60
_MEDIUM_CONFIDENCE_POINTS = 30


def normalize_machine(raw: str) -> str:
    """Normalize architecture names (amd64 -> x86_64, arm64 -> aarch64)."""
    machine = raw.strip().lower()
    if machine in ("x86_64", "amd64", "x64"):
        return MACHINE_X86_64
    if machine in ("aarch64", "arm64"):
        return MACHINE_AARCH64
    return machine or "unknown"


def default_core_count(machine: str) -> int:
    return DEFAULT_CORES.get(machine, DEFAULT_CORES_OTHER)


def default_memory_kb(machine: str) -> int:
    return DEFAULT_MEMORY_GB.get(machine, DEFAULT_MEMORY_GB_OTHER) * KB_PER_GB


# ============================================================================
# CPU
# ============================================================================


def parse_cpu_range(text: str) -> int:
    """Count CPUs in a kernel range list ("0-7" -> 8, "0-3,8-11" -> 8).

    Returns 0 for empty or malformed input.
    """
    total = 0
    for part in text.strip().split(","):
        part = part.strip()
        if not part:
            continue
        low, sep, high = part.partition("-")
        try:
            if sep:
                start, end = int(low), int(high)
                if end < start:
                    return 0
                total += end - start + 1
            else:
                int(low)
                total += 1
        except ValueError:
            return 0
    return total


def _cpu_vendor(cpuinfo: str, machine: str) -> CpuVendor:
    if "GenuineIntel" in cpuinfo:
        return CpuVendor.INTEL
    if "AuthenticAMD" in cpuinfo:
        return CpuVendor.AMD
    if any(marker in cpuinfo for marker in _ARM_MARKERS) or machine == MACHINE_AARCH64:
        return CpuVendor.ARM
    return CpuVendor.UNKNOWN


def parse_cpu_features(cpuinfo: str) -> frozenset:
    """Extract tracked features from the first flags/Features line."""
    match = _FLAGS_LINE.search(cpuinfo)
    if not match:
        return frozenset()

    tokens = set(match.group(1).lower().split())
    features = set()
    if "avx" in tokens:
        features.add(CpuFeature.AVX)
    if "avx2" in tokens:
        features.add(CpuFeature.AVX2)
    if any(token.startswith("avx512") for token in tokens):
        features.add(CpuFeature.AVX512)
    if any(token.startswith("sse4") for token in tokens):
        features.add(CpuFeature.SSE4)
    if "aes" in tokens:
        features.add(CpuFeature.AES)
    return frozenset(features)


def parse_cpu(
    cpuinfo: str, online: str, machine: str
) -> Tuple[CpuFacts, List[str]]:
    """Build CpuFacts from /proc/cpuinfo and the CPU-online range.

    Core count falls back from processor lines, to the online range,
    to a platform default, so it is always >= 1.
    """
    defaulted: List[str] = []

    cores = len(_PROCESSOR_LINE.findall(cpuinfo))
    if cores == 0:
        cores = parse_cpu_range(online)
    if cores <= 0:
        cores = default_core_count(machine)
        defaulted.append("cpu.core_count")

    vendor = _cpu_vendor(cpuinfo, machine)
    if vendor is CpuVendor.UNKNOWN:
        defaulted.append("cpu.vendor")

    model_match = _MODEL_NAME_LINE.search(cpuinfo)
    model_name = model_match.group(1).strip() if model_match else ""
    if not model_name:
        model_name = UNKNOWN_CPU_MODEL
        defaulted.append("cpu.model_name")

    facts = CpuFacts(
        vendor=vendor,
        core_count=cores,
        model_name=model_name,
        features=parse_cpu_features(cpuinfo),
    )
    return facts, defaulted


# ============================================================================
# Memory
# ============================================================================


def parse_memory(meminfo: str, machine: str) -> Tuple[MemoryFacts, List[str]]:
    """Extract MemTotal (kB) and classify it."""
    defaulted: List[str] = []

    match = _MEMTOTAL_LINE.search(meminfo)
    if match:
        total_kb = int(match.group(1))
    else:
        total_kb = default_memory_kb(machine)
        defaulted.append("memory.total")

    facts = MemoryFacts(
        total_kb=total_kb,
        memory_class=memory_class(total_kb // KB_PER_GB),
    )
    return facts, defaulted


# ============================================================================
# Storage
# ============================================================================


def is_pseudo_block_device(name: str) -> bool:
    return name.startswith(PSEUDO_BLOCK_PREFIXES)


def _is_rotational(flag: Optional[str]) -> bool:
    # Unreadable or unexpected flags count as spinning media
    return (flag or "").strip() != "0"


def parse_storage(
    rotational_flags: Mapping[str, Optional[str]],
    nvme_controllers: Sequence[str] = (),
) -> Tuple[StorageFacts, List[str]]:
    """Classify block devices.

    Args:
        rotational_flags: Block device name -> content of its
            queue/rotational file (None when unreadable).
        nvme_controllers: Entries of /sys/class/nvme.
    """
    defaulted: List[str] = []
    devices: List[StorageDevice] = []
    ssd_found = False

    for name in sorted(rotational_flags):
        if is_pseudo_block_device(name):
            continue
        is_nvme = name.startswith(NVME_PREFIX)
        rotational = False if is_nvme else _is_rotational(rotational_flags[name])
        devices.append(StorageDevice(name=name, rotational=rotational, is_nvme=is_nvme))
        if is_nvme or (not rotational and name.startswith(SSD_DISK_PREFIXES)):
            ssd_found = True

    if not devices:
        defaulted.append("storage.devices")

    has_nvme = any(d.is_nvme for d in devices) or bool(nvme_controllers)
    has_ssd = ssd_found or has_nvme
    primary = storage_primary_type(
        has_nvme=has_nvme,
        has_ssd=has_ssd,
        has_virtio=any(d.name.startswith(VIRTIO_PREFIX) for d in devices),
        has_mmc=any(d.name.startswith(MMC_PREFIX) for d in devices),
    )

    facts = StorageFacts(
        devices=tuple(devices),
        has_ssd=has_ssd,
        has_nvme=has_nvme,
        primary_type=primary,
    )
    return facts, defaulted


# ============================================================================
# GPU
# ============================================================================


def _matches(names: Iterable[str], needles: Sequence[str]) -> bool:
    return any(needle in name for name in names for needle in needles)


def _matches_xe(names: Iterable[str]) -> bool:
    # "xe" is only meaningful as a whole driver name
    return any(name == "xe" or name.startswith("xe_") for name in names)


def parse_module_names(modules: str) -> List[str]:
    """First column of /proc/modules."""
    return [line.split()[0] for line in modules.splitlines() if line.strip()]


def parse_gpu(
    drm_names: Iterable[str],
    module_names: Iterable[str],
    nvidia_driver_present: bool = False,
) -> Tuple[GpuFacts, List[str]]:
    """Detect GPU vendors from DRM device/driver names and kernel modules."""
    drm = [name.lower() for name in drm_names if name]
    modules = [name.lower() for name in module_names if name]

    has_nouveau = _matches(drm, ("nouveau",)) or _matches(modules, ("nouveau",))
    facts = GpuFacts(
        has_nvidia=nvidia_driver_present
        or _matches(drm, ("nvidia",))
        or _matches(modules, ("nvidia",)),
        has_amd=_matches(drm, _DRM_AMD) or _matches(modules, _MODULE_AMD),
        has_intel=_matches(drm, _DRM_INTEL)
        or _matches(modules, _MODULE_INTEL)
        or _matches_xe(drm)
        or _matches_xe(modules),
        has_virtio=_matches(drm, _DRM_VIRTIO) or _matches(modules, _MODULE_VIRTIO),
        has_nouveau=has_nouveau,
    )
    return facts, []


# ============================================================================
# Virtualization
# ============================================================================


def _hypervisor_kind(product_name: str, sys_vendor: str) -> Optional[VirtualizationKind]:
    dmi = f"{product_name} {sys_vendor}"
    for signature, kind in _HYPERVISOR_SIGNATURES:
        if signature in dmi:
            return kind
    if any(marker in dmi for marker in _OTHER_HYPERVISOR_MARKERS):
        return VirtualizationKind.UNKNOWN_VIRTUALIZED
    return None


def parse_virtualization(
    product_name: str,
    sys_vendor: str,
    wsl_interop: bool = False,
    container_marker: bool = False,
    container_env: str = "",
) -> Tuple[VirtualizationFacts, List[str]]:
    """Classify the execution environment.

    Kind priority: hypervisor signature, then WSL, then container,
    then bare metal.
    """
    defaulted: List[str] = []
    product_name = product_name.strip()
    sys_vendor = sys_vendor.strip()
    if not product_name and not sys_vendor:
        defaulted.append("virtualization.dmi")

    hypervisor = _hypervisor_kind(product_name, sys_vendor)
    is_container = container_marker or bool(container_env.strip())

    if hypervisor is not None:
        kind = hypervisor
    elif wsl_interop:
        kind = VirtualizationKind.WSL
    elif is_container:
        kind = VirtualizationKind.CONTAINER
    else:
        kind = VirtualizationKind.BARE_METAL

    facts = VirtualizationFacts(
        kind=kind,
        is_vm=hypervisor is not None,
        is_wsl=wsl_interop,
        is_container=is_container,
    )
    return facts, defaulted


# ============================================================================
# Platform
# ============================================================================


def _chassis_code(chassis_type: str) -> int:
    try:
        return int(chassis_type.strip())
    except ValueError:
        return 0


def _sizing_points(
    core_count: Optional[int], total_gb: Optional[int]
) -> Mapping[FormFactor, int]:
    """Evidence from CPU and memory size; big machines lean workstation/server."""
    if core_count is None or total_gb is None:
        return {}
    if core_count >= 16 or total_gb >= 32:
        return {FormFactor.SERVER: 15, FormFactor.WORKSTATION: 20}
    if core_count >= 8 or total_gb >= 16:
        return {FormFactor.DESKTOP: 10, FormFactor.WORKSTATION: 15}
    if core_count <= 4 and total_gb <= 8:
        return {FormFactor.LAPTOP: 5}
    return {}


def score_form_factors(
    chassis_type: str = "",
    product_name: str = "",
    battery_count: int = 0,
    core_count: Optional[int] = None,
    total_gb: Optional[int] = None,
) -> Dict[FormFactor, int]:
    """Add up evidence points per form factor.

    Sources: DMI chassis code, product name hints, battery count and,
    when given, CPU/memory size.

    Rule #4: Function < 60 lines.
    """
    scores = {form_factor: 0 for form_factor in _FORM_FACTOR_ORDER}

    chassis = _CHASSIS_SCORES.get(_chassis_code(chassis_type))
    if chassis is not None:
        scores[chassis[0]] += chassis[1]

    product = product_name.strip().lower()
    for pattern, form_factor, points in _PRODUCT_HINTS:
        if product and pattern.search(product):
            scores[form_factor] += points
            break

    if battery_count == 0:
        scores[FormFactor.DESKTOP] += 15
        scores[FormFactor.SERVER] += 10
    elif battery_count <= _LAPTOP_MAX_BATTERIES:
        scores[FormFactor.LAPTOP] += 25
    else:
        scores[FormFactor.SERVER] += 10

    for form_factor, points in _sizing_points(core_count, total_gb).items():
        scores[form_factor] += points
    return scores


def _confidence(points: int) -> Confidence:
    if points >= _HIGH_CONFIDENCE_POINTS:
        return Confidence.HIGH
    if points >= _MEDIUM_CONFIDENCE_POINTS:
        return Confidence.MEDIUM
    return Confidence.LOW


def parse_platform(
    machine: str,
    chassis_type: str = "",
    power_supply_types: Iterable[str] = (),
    product_name: str = "",
    core_count: Optional[int] = None,
    total_gb: Optional[int] = None,
) -> Tuple[PlatformFacts, List[str]]:
    """Derive the form factor from scored hardware evidence.

    The form factor with the most points wins; ties keep the earlier
    entry of desktop, laptop, workstation, server.
    """
    battery_count = sum(1 for t in power_supply_types if t.strip() == "Battery")
    scores = score_form_factors(
        chassis_type, product_name, battery_count, core_count, total_gb
    )

    form_factor = _FORM_FACTOR_ORDER[0]
    for candidate in _FORM_FACTOR_ORDER[1:]:
        if scores[candidate] > scores[form_factor]:
            form_factor = candidate

    facts = PlatformFacts(
        machine=machine,
        form_factor=form_factor,
        has_battery=battery_count > 0,
        form_factor_score=scores[form_factor],
        confidence=_confidence(scores[form_factor]),
    )
    return facts, []
