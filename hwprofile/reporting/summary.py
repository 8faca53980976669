"""Detection Report Rendering.

Turns a HardwareProfile into the text block written to logs, a rich
table for the CLI, a JSON diagnostic dump, and exported environment
variables. Every function here is pure: no OS access and no logging,
so the output depends on the profile alone.

JPL Power of Ten Compliance:
- Rule #1: No recursion
- Rule #4: All functions < 60 lines
- Rule #9: Complete type hints
"""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List

from rich.table import Table

from hwprofile.detection.models import CpuFeature, HardwareProfile

REPORT_HEADER = "=== Hardware Detection Report ==="
DEBUG_HEADER = "=== Debug Information ==="

ENV_PREFIX = "HWPROFILE_"

_GPU_FLAGS = ("has_nvidia", "has_amd", "has_intel", "has_virtio", "has_nouveau")


def _yes_no(value: bool) -> str:
    return "true" if value else "false"


def _debug_lines(profile: HardwareProfile) -> List[str]:
    """Detail lines shown only at debug level.

    Rule #4: Function < 60 lines.
    """
    features = " ".join(
        f"{feature.value.upper()}={_yes_no(profile.cpu.has_feature(feature))}"
        for feature in CpuFeature
    )
    gpu = " ".join(
        f"{flag[4:]}={_yes_no(getattr(profile.gpu, flag))}" for flag in _GPU_FLAGS
    )
    devices = ", ".join(
        f"{d.name}({'nvme' if d.is_nvme else 'rotational' if d.rotational else 'solid-state'})"
        for d in profile.storage.devices
    )

    lines = [
        DEBUG_HEADER,
        f"CPU Features: {features}",
        f"GPU: {gpu}",
        f"Storage Flags: nvme={_yes_no(profile.storage.has_nvme)} "
        f"ssd={_yes_no(profile.storage.has_ssd)}",
        f"Block Devices: {devices or 'none'}",
        f"Form Factor: {profile.platform.form_factor.value} "
        f"(battery={_yes_no(profile.platform.has_battery)})",
    ]
    if profile.defaulted:
        lines.append(f"Defaulted: {', '.join(profile.defaulted)}")
    return lines


def render_summary(profile: HardwareProfile, debug: bool = False) -> str:
    """Render the human-readable detection report.

    Args:
        profile: Profile to describe
        debug: Also include CPU features, GPU flags and device details

    Returns:
        Multi-line text, one fact per line
    """
    cpu = profile.cpu
    memory = profile.memory
    platform = profile.platform
    forced = " (forced)" if profile.forced_profile else ""

    lines = [
        REPORT_HEADER,
        f"CPU: {cpu.vendor.value} {cpu.model_name} ({cpu.core_count} cores)",
        f"Memory: {memory.total_gb}GB ({memory.memory_class.value})",
        f"Storage: {profile.storage.primary_type.value}",
        f"Virtualization: {profile.virtualization.kind.value}",
        f"Architecture: {platform.machine}",
        f"Hardware Type: {platform.form_factor.value} "
        f"(confidence: {platform.confidence.value}, {platform.form_factor_score} points)",
        f"Performance Profile: {profile.performance_profile.value}{forced}",
    ]
    if debug:
        lines.extend(_debug_lines(profile))
    return "\n".join(lines)


def _plain(value: Any) -> Any:
    """Convert enums, tuples and frozensets into JSON-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, frozenset):
        return sorted(_plain(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def profile_to_dict(profile: HardwareProfile) -> Dict[str, Any]:
    """Structured diagnostic dump. Not a stable format."""
    data = _plain(asdict(profile))
    data["cpu"]["cpu_class"] = profile.cpu.cpu_class.value
    data["memory"]["total_gb"] = profile.memory.total_gb
    return data


def profile_to_json(profile: HardwareProfile, indent: int = 2) -> str:
    return json.dumps(profile_to_dict(profile), indent=indent, sort_keys=True)


def profile_to_environment(profile: HardwareProfile) -> Dict[str, str]:
    """Variables exported for shells and service units."""
    return {
        f"{ENV_PREFIX}PERFORMANCE_PROFILE": profile.performance_profile.value,
        f"{ENV_PREFIX}CPU_VENDOR": profile.cpu.vendor.value,
        f"{ENV_PREFIX}VIRTUALIZATION": profile.virtualization.kind.value,
        f"{ENV_PREFIX}MEMORY_CLASS": profile.memory.memory_class.value,
        f"{ENV_PREFIX}STORAGE_TYPE": profile.storage.primary_type.value,
    }


def render_table(profile: HardwareProfile) -> Table:
    """Build a rich Table for terminal display.

    Rule #4: Function < 60 lines.
    """
    table = Table(title="Hardware Profile", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Class", style="yellow")

    cpu = profile.cpu
    table.add_row(
        "CPU",
        f"{cpu.vendor.value} {cpu.model_name} ({cpu.core_count} cores)",
        cpu.cpu_class.value,
    )
    table.add_row(
        "Memory",
        f"{profile.memory.total_gb} GB",
        profile.memory.memory_class.value,
    )
    table.add_row(
        "Storage",
        ", ".join(d.name for d in profile.storage.devices) or "none",
        profile.storage.primary_type.value,
    )
    gpus = [flag[4:] for flag in _GPU_FLAGS if getattr(profile.gpu, flag)]
    table.add_row("GPU", ", ".join(gpus) or "none", "")
    table.add_row(
        "Virtualization",
        profile.virtualization.kind.value,
        "vm" if profile.virtualization.is_vm else "",
    )
    table.add_row(
        "Platform",
        profile.platform.machine,
        f"{profile.platform.form_factor.value} ({profile.platform.confidence.value})",
    )

    label = profile.performance_profile.value
    if profile.forced_profile:
        label += " (forced)"
    table.add_row("Profile", label, "", style="bold")
    return table
