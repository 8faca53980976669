"""Probe Layer - read-only access to OS-exposed paths.

Every probe is tolerant of absence: a missing or unreadable file yields
a RawSample with available=False and the declared fallback content, and
a missing directory lists as empty. Probes never raise.

All paths are resolved under a probe root (default "/"), so a fixture
tree can stand in for /proc and /sys.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from hwprofile.core.logging import get_logger
from hwprofile.detection.models import RawSample

logger = get_logger(__name__)

# OS introspection surface, relative to the probe root
CPUINFO_PATH = "/proc/cpuinfo"
CPU_ONLINE_PATH = "/sys/devices/system/cpu/online"
MEMINFO_PATH = "/proc/meminfo"
BLOCK_DIR = "/sys/block"
NVME_CLASS_DIR = "/sys/class/nvme"
DRM_CLASS_DIR = "/sys/class/drm"
MODULES_PATH = "/proc/modules"
NVIDIA_DRIVER_DIR = "/proc/driver/nvidia"
DMI_PRODUCT_NAME_PATH = "/sys/class/dmi/id/product_name"
DMI_SYS_VENDOR_PATH = "/sys/class/dmi/id/sys_vendor"
DMI_CHASSIS_TYPE_PATH = "/sys/class/dmi/id/chassis_type"
POWER_SUPPLY_DIR = "/sys/class/power_supply"
WSL_INTEROP_PATH = "/proc/sys/fs/binfmt_misc/WSLInterop"
DOCKERENV_PATH = "/.dockerenv"
CONTAINERENV_PATH = "/run/.containerenv"
CONTAINER_ENV_VAR = "container"


class Prober:
    """Read-only view of the OS introspection surface.

    Usage:
        prober = Prober()                      # the running system
        prober = Prober(root=tmp_path)         # a fixture tree

        sample = prober.read("/proc/cpuinfo")
        if not sample.available:
            ...                                # fall back
    """

    def __init__(
        self,
        root: Union[str, Path] = "/",
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.root = Path(root)
        self._environ = environ if environ is not None else os.environ

    def resolve(self, path: str) -> Path:
        """Map an absolute OS path onto the probe root."""
        return self.root / path.lstrip("/")

    def read(self, path: str, fallback: str = "") -> RawSample:
        """Read a text source, returning the fallback on any failure."""
        target = self.resolve(path)
        try:
            content = target.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Probe unavailable", path=path, reason=type(e).__name__)
            return RawSample(source_path=path, content=fallback, available=False)

        logger.debug("Probe read", path=path, size=len(content))
        return RawSample(source_path=path, content=content, available=True)

    def list_dir(self, path: str) -> Tuple[str, ...]:
        """List directory entry names (sorted); empty when absent."""
        target = self.resolve(path)
        try:
            names = sorted(entry.name for entry in target.iterdir())
        except OSError as e:
            logger.debug("Listing unavailable", path=path, reason=type(e).__name__)
            return ()

        logger.debug("Listing read", path=path, entries=len(names))
        return tuple(names)

    def link_name(self, path: str) -> str:
        """Name of a symlink's target (e.g. a device's driver); empty when absent."""
        target = self.resolve(path)
        try:
            return Path(os.readlink(target)).name
        except OSError:
            return ""

    def exists(self, path: str) -> bool:
        """Check whether a path exists under the probe root."""
        try:
            return self.resolve(path).exists()
        except OSError:
            return False

    def getenv(self, name: str) -> str:
        """Read an environment indicator; empty string when unset."""
        return self._environ.get(name, "")
