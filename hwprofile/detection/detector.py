"""
Hardware Detector - orchestrates Probe -> Parse/Classify -> Override -> Aggregate.

Each category probe reads its own disjoint set of sources and produces
its own key of the raw-input mapping, so the probes can run in a thread
pool without locking. Detection never raises on missing or malformed OS
sources; such facts fall back to defaults and are reported in one
non-fatal warning.

Usage
-----
    detector = HardwareDetector()
    profile = detector.run()

    # Against a fixture tree, with overrides
    detector = HardwareDetector(Prober(root=tmp_path), machine="x86_64")
    profile = detector.run(OverrideSet.from_mapping({"cpu": {"cores": 2}}))
"""

from __future__ import annotations

import platform
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from hwprofile.core.logging import DetectionLogger, get_logger
from hwprofile.detection import probe as paths
from hwprofile.detection.aggregator import aggregate
from hwprofile.detection.models import DetectedFacts, HardwareProfile
from hwprofile.detection.overrides import OverrideSet
from hwprofile.detection.parsers import (
    normalize_machine,
    parse_cpu,
    parse_gpu,
    parse_memory,
    parse_module_names,
    parse_platform,
    parse_storage,
    parse_virtualization,
)
from hwprofile.detection.probe import Prober

if TYPE_CHECKING:
    from hwprofile.core.config import Config

logger = get_logger(__name__)

RawInputs = Dict[str, Dict[str, Any]]


class HardwareDetector:
    """Runs the detection pipeline against one probe root."""

    def __init__(
        self,
        prober: Optional[Prober] = None,
        machine: Optional[str] = None,
        parallel: bool = False,
    ) -> None:
        self.prober = prober or Prober()
        self.machine = normalize_machine(machine or platform.machine())
        self.parallel = parallel

    # ------------------------------------------------------------------
    # Probes (one per category, disjoint sources)
    # ------------------------------------------------------------------

    def _probe_cpu(self) -> Dict[str, Any]:
        return {
            "cpuinfo": self.prober.read(paths.CPUINFO_PATH).content,
            "online": self.prober.read(paths.CPU_ONLINE_PATH).content,
        }

    def _probe_memory(self) -> Dict[str, Any]:
        return {"meminfo": self.prober.read(paths.MEMINFO_PATH).content}

    def _probe_storage(self) -> Dict[str, Any]:
        rotational: Dict[str, Optional[str]] = {}
        for name in self.prober.list_dir(paths.BLOCK_DIR):
            sample = self.prober.read(f"{paths.BLOCK_DIR}/{name}/queue/rotational")
            rotational[name] = sample.content if sample.available else None
        return {
            "rotational": rotational,
            "nvme_controllers": self.prober.list_dir(paths.NVME_CLASS_DIR),
        }

    def _probe_gpu(self) -> Dict[str, Any]:
        entries = list(self.prober.list_dir(paths.DRM_CLASS_DIR))
        drivers = [
            self.prober.link_name(f"{paths.DRM_CLASS_DIR}/{entry}/device/driver")
            for entry in entries
            if entry.startswith("card") and "-" not in entry
        ]
        return {
            "drm_names": entries + [d for d in drivers if d],
            "modules": self.prober.read(paths.MODULES_PATH).content,
            "nvidia_driver": self.prober.exists(paths.NVIDIA_DRIVER_DIR),
        }

    def _probe_virtualization(self) -> Dict[str, Any]:
        return {
            "product_name": self.prober.read(paths.DMI_PRODUCT_NAME_PATH).content,
            "sys_vendor": self.prober.read(paths.DMI_SYS_VENDOR_PATH).content,
            "wsl_interop": self.prober.exists(paths.WSL_INTEROP_PATH)
            or self.prober.exists(f"{paths.WSL_INTEROP_PATH}-late"),
            "container_marker": self.prober.exists(paths.DOCKERENV_PATH)
            or self.prober.exists(paths.CONTAINERENV_PATH),
            "container_env": self.prober.getenv(paths.CONTAINER_ENV_VAR),
        }

    def _probe_platform(self) -> Dict[str, Any]:
        supplies = [
            self.prober.read(f"{paths.POWER_SUPPLY_DIR}/{name}/type").content
            for name in self.prober.list_dir(paths.POWER_SUPPLY_DIR)
        ]
        return {
            "chassis_type": self.prober.read(paths.DMI_CHASSIS_TYPE_PATH).content,
            "power_supply_types": supplies,
        }

    def _category_probes(self) -> Dict[str, Callable[[], Dict[str, Any]]]:
        return {
            "cpu": self._probe_cpu,
            "memory": self._probe_memory,
            "storage": self._probe_storage,
            "gpu": self._probe_gpu,
            "virtualization": self._probe_virtualization,
            "platform": self._probe_platform,
        }

    def probe_all(self) -> RawInputs:
        """Run every category probe and collect the raw inputs."""
        probes = self._category_probes()
        if not self.parallel:
            return {name: run() for name, run in probes.items()}

        with ThreadPoolExecutor(max_workers=len(probes)) as pool:
            futures = {name: pool.submit(run) for name, run in probes.items()}
            return {name: future.result() for name, future in futures.items()}

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _parse(self, raw: RawInputs) -> DetectedFacts:
        defaulted: List[str] = []

        cpu, missing = parse_cpu(raw["cpu"]["cpuinfo"], raw["cpu"]["online"], self.machine)
        defaulted += missing
        memory, missing = parse_memory(raw["memory"]["meminfo"], self.machine)
        defaulted += missing
        storage, missing = parse_storage(
            raw["storage"]["rotational"], raw["storage"]["nvme_controllers"]
        )
        defaulted += missing
        gpu, missing = parse_gpu(
            raw["gpu"]["drm_names"],
            parse_module_names(raw["gpu"]["modules"]),
            raw["gpu"]["nvidia_driver"],
        )
        defaulted += missing
        virt, missing = parse_virtualization(**raw["virtualization"])
        defaulted += missing
        plat, missing = parse_platform(
            self.machine,
            product_name=raw["virtualization"]["product_name"],
            core_count=cpu.core_count,
            total_gb=memory.total_gb,
            **raw["platform"],
        )
        defaulted += missing

        return DetectedFacts(
            cpu=cpu,
            memory=memory,
            storage=storage,
            gpu=gpu,
            virtualization=virt,
            platform=plat,
            defaulted=tuple(defaulted),
        )

    def detect(self, dlog: Optional[DetectionLogger] = None) -> DetectedFacts:
        """Probe and parse; returns classified facts without overrides."""
        dlog = dlog or DetectionLogger(_new_run_id())

        dlog.start_stage("probe")
        raw = self.probe_all()

        dlog.start_stage("parse")
        facts = self._parse(raw)

        if facts.defaulted:
            logger.warning(
                "Detection fell back to defaults",
                run_id=dlog.run_id,
                facts=",".join(facts.defaulted),
            )
        return facts

    def run(self, overrides: Optional[OverrideSet] = None) -> HardwareProfile:
        """Full pipeline: detect, apply overrides, aggregate."""
        dlog = DetectionLogger(_new_run_id())
        try:
            facts = self.detect(dlog)

            dlog.start_stage("aggregate")
            profile = aggregate(facts, overrides)
        except Exception as e:
            dlog.finish(success=False, error=str(e))
            raise

        dlog.finish(success=True, profile=profile.performance_profile.value)
        return profile


def _new_run_id() -> str:
    return uuid.uuid4().hex[:8]


def build_detector(config: "Config") -> HardwareDetector:
    """Create a detector from the detection section of a Config."""
    return HardwareDetector(
        prober=Prober(root=config.detection.root),
        machine=config.detection.machine,
        parallel=config.detection.parallel,
    )


def detect_profile(config: Optional["Config"] = None) -> HardwareProfile:
    """Convenience entry point: configure, detect and report once.

    Raises:
        OverrideValidationError: If the configured overrides are invalid.
    """
    from hwprofile.core.config import Config
    from hwprofile.reporting.summary import render_summary

    config = config or Config()
    overrides = config.override_set()
    profile = build_detector(config).run(overrides)

    if config.reporting.enable:
        debug = config.reporting.log_level == "debug"
        for line in render_summary(profile, debug=debug).splitlines():
            logger.info(line)
    return profile
