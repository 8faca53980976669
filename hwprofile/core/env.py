"""
Environment variable parsing with validation.

Environment overrides are operator input: a malformed value is an error,
not something to silently replace with a default. Each getter returns
None when the variable is unset and raises when it is set but invalid.

Usage Pattern
-------------
    from hwprofile.core.env import get_env_int

    cores = get_env_int("HWPROFILE_CPU_CORES", min_value=1)
    if cores is not None:
        ...
"""

from __future__ import annotations

import os
from typing import FrozenSet, Optional, Type

from hwprofile.core.exceptions import ConfigValidationError, ValidationError

TRUE_VALUES: FrozenSet[str] = frozenset(["true", "yes", "1", "on"])
FALSE_VALUES: FrozenSet[str] = frozenset(["false", "no", "0", "off"])


def get_env_str(name: str) -> Optional[str]:
    """Return the stripped value, or None when unset or blank."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def get_env_int(
    name: str,
    min_value: Optional[int] = None,
    error: Type[ValidationError] = ConfigValidationError,
) -> Optional[int]:
    """
    Get integer from environment variable with bounds validation.

    Args:
        name: Environment variable name.
        min_value: Minimum allowed value (inclusive).
        error: Exception class raised on invalid input.

    Returns:
        Parsed integer, or None when the variable is unset.

    Raises:
        ValidationError: (the given subclass) on a non-integer or
            out-of-range value.
    """
    value = get_env_str(name)
    if value is None:
        return None

    try:
        int_value = int(value)
    except ValueError:
        raise error(
            f"{name} must be an integer, got '{value}'", field=name, value=value
        ) from None

    if min_value is not None and int_value < min_value:
        raise error(
            f"{name} must be >= {min_value}, got {int_value}",
            field=name,
            value=int_value,
        )
    return int_value


def get_env_bool(
    name: str,
    error: Type[ValidationError] = ConfigValidationError,
) -> Optional[bool]:
    """
    Get boolean from environment variable.

    Recognizes:
    - True: "true", "yes", "1", "on"
    - False: "false", "no", "0", "off"

    Example:
        >>> # With HWPROFILE_PARALLEL="yes"
        >>> get_env_bool("HWPROFILE_PARALLEL")
        True
    """
    value = get_env_str(name)
    if value is None:
        return None

    normalized = value.lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise error(f"{name} must be a boolean, got '{value}'", field=name, value=value)


def get_env_whitelist(
    name: str,
    allowed: FrozenSet[str],
    error: Type[ValidationError] = ConfigValidationError,
) -> Optional[str]:
    """
    Get string from environment variable with whitelist validation.

    Comparison is case-insensitive; the allowed spelling is returned.
    """
    value = get_env_str(name)
    if value is None:
        return None

    normalized = value.lower()
    for allowed_value in allowed:
        if normalized == allowed_value.lower():
            return allowed_value

    raise error(
        f"{name} must be one of {', '.join(sorted(allowed))}, got '{value}'",
        field=name,
        value=value,
    )
