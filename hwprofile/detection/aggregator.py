"""Profile Aggregator - combines classified and overridden facts."""

from __future__ import annotations

from typing import Optional

from hwprofile.core.logging import get_logger
from hwprofile.detection.classifier import performance_profile
from hwprofile.detection.models import DetectedFacts, HardwareProfile
from hwprofile.detection.overrides import OverrideSet, apply_overrides

logger = get_logger(__name__)


def aggregate(
    detected: DetectedFacts, overrides: Optional[OverrideSet] = None
) -> HardwareProfile:
    """Build the immutable HardwareProfile for one detection run.

    Overrides are applied first, then the performance profile is derived
    from the resulting memory class, core count and primary storage type.
    A forced performance profile bypasses the decision table entirely.
    """
    facts = apply_overrides(detected, overrides)

    forced = overrides.performance_profile if overrides is not None else None
    if forced is not None:
        label = forced
        logger.info("Performance profile forced", performance_profile=label.value)
    else:
        label = performance_profile(
            facts.memory.memory_class,
            facts.cpu.core_count,
            facts.storage.primary_type,
        )

    return HardwareProfile(
        cpu=facts.cpu,
        memory=facts.memory,
        storage=facts.storage,
        gpu=facts.gpu,
        virtualization=facts.virtualization,
        platform=facts.platform,
        performance_profile=label,
        forced_profile=forced is not None,
        defaulted=facts.defaulted,
    )
