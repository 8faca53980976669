"""Override Resolver - operator-declared values take precedence over detection.

OverrideSet is a pydantic model: every field is optional and validated
strictly at configuration time. A value of the wrong type or out of
range raises OverrideValidationError; nothing is coerced.

apply_overrides() replaces each present field and keeps detection for
absent ones. Fields are independent: contradictory flags are accepted
verbatim. Dependent values the operator did not set are re-derived from
overridden leaves: memory class from total_gb, has_ssd and the primary
storage type from storage flags, is_* flags from virtualization kind.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from hwprofile.core.exceptions import OverrideValidationError
from hwprofile.core.logging import get_logger
from hwprofile.detection.classifier import memory_class, storage_primary_type
from hwprofile.detection.models import (
    HYPERVISOR_KINDS,
    KB_PER_GB,
    CpuFacts,
    CpuFeature,
    CpuVendor,
    DetectedFacts,
    FormFactor,
    GpuFacts,
    MemoryClass,
    MemoryFacts,
    PerformanceProfile,
    PlatformFacts,
    StorageFacts,
    StorageType,
    VirtualizationFacts,
    VirtualizationKind,
)
from hwprofile.detection.parsers import MMC_PREFIX, VIRTIO_PREFIX

logger = get_logger(__name__)

# Override field -> defaulted-fact name it supersedes
_DEFAULTED_BY_OVERRIDE = {
    "cpu.cores": "cpu.core_count",
    "memory.total_gb": "memory.total",
}


class _OverrideModel(BaseModel):
    """Common settings: unknown keys rejected, instances immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class CpuOverride(_OverrideModel):
    vendor: Optional[CpuVendor] = None
    cores: Optional[int] = Field(default=None, strict=True, ge=1)
    model_name: Optional[str] = Field(default=None, strict=True, min_length=1)
    features: Optional[FrozenSet[CpuFeature]] = None


class MemoryOverride(_OverrideModel):
    total_gb: Optional[int] = Field(default=None, strict=True, ge=0)
    memory_class: Optional[MemoryClass] = None


class StorageOverride(_OverrideModel):
    has_nvme: Optional[bool] = Field(default=None, strict=True)
    has_ssd: Optional[bool] = Field(default=None, strict=True)
    primary_type: Optional[StorageType] = None


class GpuOverride(_OverrideModel):
    has_nvidia: Optional[bool] = Field(default=None, strict=True)
    has_amd: Optional[bool] = Field(default=None, strict=True)
    has_intel: Optional[bool] = Field(default=None, strict=True)
    has_virtio: Optional[bool] = Field(default=None, strict=True)
    has_nouveau: Optional[bool] = Field(default=None, strict=True)


class VirtualizationOverride(_OverrideModel):
    kind: Optional[VirtualizationKind] = None
    is_vm: Optional[bool] = Field(default=None, strict=True)
    is_wsl: Optional[bool] = Field(default=None, strict=True)
    is_container: Optional[bool] = Field(default=None, strict=True)


class PlatformOverride(_OverrideModel):
    form_factor: Optional[FormFactor] = None


class OverrideSet(_OverrideModel):
    """Operator overrides, one optional field per leaf fact.

    Example:
        overrides = OverrideSet.from_mapping(
            {"cpu": {"cores": 2}, "performance_profile": "balanced"}
        )
    """

    cpu: CpuOverride = Field(default_factory=CpuOverride)
    memory: MemoryOverride = Field(default_factory=MemoryOverride)
    storage: StorageOverride = Field(default_factory=StorageOverride)
    gpu: GpuOverride = Field(default_factory=GpuOverride)
    virtualization: VirtualizationOverride = Field(
        default_factory=VirtualizationOverride
    )
    platform: PlatformOverride = Field(default_factory=PlatformOverride)
    performance_profile: Optional[PerformanceProfile] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "OverrideSet":
        """Validate plain data (YAML, env, CLI) into an OverrideSet.

        Raises:
            OverrideValidationError: On the first invalid field.
        """
        try:
            return cls.model_validate(dict(data or {}))
        except PydanticValidationError as e:
            raise _to_override_error(e) from e

    def set_fields(self) -> Dict[str, Any]:
        """Present overrides as a flat {"cpu.cores": 2, ...} mapping."""
        flat: Dict[str, Any] = {}
        for key, value in self.model_dump(exclude_none=True, mode="json").items():
            if isinstance(value, dict):
                for leaf, leaf_value in value.items():
                    flat[f"{key}.{leaf}"] = leaf_value
            else:
                flat[key] = value
        return flat

    @property
    def is_empty(self) -> bool:
        return not self.set_fields()


def _to_override_error(error: PydanticValidationError) -> OverrideValidationError:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    value = first.get("input")
    return OverrideValidationError(
        f"Invalid override '{field}': {first.get('msg', 'invalid value')} "
        f"(got {value!r})",
        field=field,
        value=value,
    )


# ============================================================================
# Resolution
# ============================================================================


def _apply_cpu(cpu: CpuFacts, o: CpuOverride) -> CpuFacts:
    return replace(
        cpu,
        vendor=o.vendor if o.vendor is not None else cpu.vendor,
        core_count=o.cores if o.cores is not None else cpu.core_count,
        model_name=o.model_name if o.model_name is not None else cpu.model_name,
        features=o.features if o.features is not None else cpu.features,
    )


def _apply_memory(memory: MemoryFacts, o: MemoryOverride) -> MemoryFacts:
    total_kb = memory.total_kb
    mem_class = memory.memory_class
    if o.total_gb is not None:
        total_kb = o.total_gb * KB_PER_GB
        mem_class = memory_class(o.total_gb)
    if o.memory_class is not None:
        mem_class = o.memory_class
    return MemoryFacts(total_kb=total_kb, memory_class=mem_class)


def _apply_storage(storage: StorageFacts, o: StorageOverride) -> StorageFacts:
    has_nvme = o.has_nvme if o.has_nvme is not None else storage.has_nvme
    # NVMe implies SSD unless the operator set has_ssd explicitly
    has_ssd = o.has_ssd if o.has_ssd is not None else storage.has_ssd or has_nvme

    primary = storage.primary_type
    if o.primary_type is not None:
        primary = o.primary_type
    elif o.has_nvme is not None or o.has_ssd is not None:
        primary = storage_primary_type(
            has_nvme=has_nvme,
            has_ssd=has_ssd,
            has_virtio=any(d.name.startswith(VIRTIO_PREFIX) for d in storage.devices),
            has_mmc=any(d.name.startswith(MMC_PREFIX) for d in storage.devices),
        )

    return replace(storage, has_nvme=has_nvme, has_ssd=has_ssd, primary_type=primary)


def _apply_gpu(gpu: GpuFacts, o: GpuOverride) -> GpuFacts:
    values = {
        name: getattr(o, name)
        for name in ("has_nvidia", "has_amd", "has_intel", "has_virtio", "has_nouveau")
        if getattr(o, name) is not None
    }
    return replace(gpu, **values)


def _apply_virtualization(
    virt: VirtualizationFacts, o: VirtualizationOverride
) -> VirtualizationFacts:
    result = virt
    if o.kind is not None:
        result = VirtualizationFacts(
            kind=o.kind,
            is_vm=o.kind in HYPERVISOR_KINDS,
            is_wsl=o.kind is VirtualizationKind.WSL,
            is_container=o.kind is VirtualizationKind.CONTAINER,
        )
    return replace(
        result,
        is_vm=o.is_vm if o.is_vm is not None else result.is_vm,
        is_wsl=o.is_wsl if o.is_wsl is not None else result.is_wsl,
        is_container=o.is_container if o.is_container is not None else result.is_container,
    )


def _apply_platform(platform: PlatformFacts, o: PlatformOverride) -> PlatformFacts:
    if o.form_factor is None:
        return platform
    return replace(platform, form_factor=o.form_factor)


def apply_overrides(
    detected: DetectedFacts, overrides: Optional[OverrideSet]
) -> DetectedFacts:
    """Merge operator overrides over detected facts; override always wins.

    The forced performance profile is not handled here; the aggregator
    applies it after the decision table would have run.
    """
    if overrides is None or overrides.is_empty:
        return detected

    applied: List[str] = sorted(overrides.set_fields())
    logger.info("Applying overrides", fields=",".join(applied))

    # An overridden fact is no longer a defaulted one
    replaced = {_DEFAULTED_BY_OVERRIDE.get(name, name) for name in applied}
    defaulted = tuple(name for name in detected.defaulted if name not in replaced)

    return replace(
        detected,
        defaulted=defaulted,
        cpu=_apply_cpu(detected.cpu, overrides.cpu),
        memory=_apply_memory(detected.memory, overrides.memory),
        storage=_apply_storage(detected.storage, overrides.storage),
        gpu=_apply_gpu(detected.gpu, overrides.gpu),
        virtualization=_apply_virtualization(
            detected.virtualization, overrides.virtualization
        ),
        platform=_apply_platform(detected.platform, overrides.platform),
    )
