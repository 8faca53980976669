"""
Tuning policy interface.

Downstream layers (kernel parameters, filesystem options, power
management) consume a published HardwareProfile through this interface.
Policies must treat the profile as read-only input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from hwprofile.detection.models import HardwareProfile


class TuningPolicy(ABC):
    """Maps a hardware profile to named settings.

    Implementations:
        Subclasses set ``name`` and implement ``derive``.
    """

    name: str = "policy"

    @abstractmethod
    def derive(self, profile: HardwareProfile) -> Mapping[str, str]:
        """Derive settings for one profile.

        Args:
            profile: Published, immutable hardware profile

        Returns:
            Setting name -> value
        """
        pass
