"""hwprofile - Hardware detection and performance-profile classification.

Probes OS-exposed pseudo-files, builds an immutable hardware profile and
derives a single performance-profile label for downstream tuning layers.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
