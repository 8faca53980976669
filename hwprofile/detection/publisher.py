"""Facts Publisher - holds the current HardwareProfile snapshot.

Readers get an immutable snapshot; a refresh builds a whole new profile
and swaps the reference. Nothing mutates a published profile.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

from hwprofile.core.logging import get_logger
from hwprofile.detection.models import HardwareProfile

if TYPE_CHECKING:
    from hwprofile.detection.detector import HardwareDetector
    from hwprofile.detection.overrides import OverrideSet

logger = get_logger(__name__)


class ProfilePublisher:
    """Single point of publication for detection results.

    Usage:
        publisher = ProfilePublisher()
        publisher.refresh(HardwareDetector())
        profile = publisher.current()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._profile: Optional[HardwareProfile] = None

    def publish(self, profile: HardwareProfile) -> None:
        """Replace the current snapshot."""
        with self._lock:
            previous = self._profile
            self._profile = profile

        if previous is not None and previous.performance_profile != profile.performance_profile:
            logger.info(
                "Performance profile changed",
                previous=previous.performance_profile.value,
                current=profile.performance_profile.value,
            )

    def current(self) -> Optional[HardwareProfile]:
        """Return the published snapshot, or None before the first publish."""
        with self._lock:
            return self._profile

    def refresh(
        self,
        detector: "HardwareDetector",
        overrides: Optional["OverrideSet"] = None,
    ) -> HardwareProfile:
        """Re-run detection and publish the fresh profile."""
        profile = detector.run(overrides)
        self.publish(profile)
        return profile
