"""
Centralized Exception Hierarchy for hwprofile.

This module defines all custom exceptions used throughout hwprofile.
All exceptions inherit from HwProfileError for easy catching.

Helpful Error Messages
----------------------
Each exception includes:
- user_message: Human-readable description of what went wrong
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue
- error_code: Unique identifier for documentation lookup (e.g., "HP-VAL-001")

Failure Classes
---------------
Detection itself never raises. A probed path that is missing, or present
but unparseable, degrades to a fallback value and is reported through the
list of defaulted facts. Only operator input can fail, and it fails fast:

    HwProfileError (base)
    └── ValidationError
        ├── OverrideValidationError
        └── ConfigValidationError

Usage
-----
    from hwprofile.core.exceptions import OverrideValidationError

    try:
        overrides = OverrideSet.from_mapping(data)
    except OverrideValidationError as e:
        logger.error(f"Invalid override {e.field}: {e}")
"""

import builtins
from typing import Any, List, Optional


def get_root_cause(exc: BaseException) -> BaseException:
    """Extract the root cause from a chain of exceptions.

    Follows nested __cause__ and __context__ attributes to find
    the original error that started the chain.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        # Avoid infinite loops
        if id(current) in seen:
            break
        seen.add(id(current))

        # Prefer explicit cause over implicit context
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class HwProfileError(Exception):
    """
    Base exception for all hwprofile errors.

    Example
    -------
        try:
            profile = detect_profile(config)
        except HwProfileError as e:
            logger.error(f"Detection setup failed: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    # Default error info - subclasses should override
    error_code: str = "HP-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize HwProfileError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "HP-VAL-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(message)

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(HwProfileError):
    """
    Raised when operator input fails validation.
    """

    error_code = "HP-VAL-000"
    why_it_happened = "Validation failed for operator-supplied input"
    how_to_fix = [
        "Check the error message for specific validation failures",
        "Review the expected format or value constraints",
    ]

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.field = field
        self.value = value


class OverrideValidationError(ValidationError):
    """
    Raised when an operator override violates its declared type or range.

    Overrides are never coerced: a core count of "4" (string) or 0 is
    rejected here instead of being silently fixed up.

    Attributes
    ----------
    field : str
        Dotted override path, e.g. "cpu.cores"
    value : any
        The rejected value
    """

    error_code = "HP-VAL-001"
    why_it_happened = (
        "An override value does not match the type or range declared for "
        "its field, so it cannot replace the detected fact"
    )
    how_to_fix = [
        "Check the overrides block of hwprofile.yaml",
        "Check HWPROFILE_* environment variables",
        "Run 'hwprofile detect --help' for valid values",
    ]


class ConfigValidationError(ValidationError):
    """
    Raised when the configuration file cannot be parsed or has a wrong shape.
    """

    error_code = "HP-VAL-002"
    why_it_happened = (
        "The configuration file is not valid YAML or one of its sections "
        "has the wrong type"
    )
    how_to_fix = [
        "Validate YAML syntax of hwprofile.yaml",
        "Ensure 'detection', 'reporting' and 'overrides' are mappings",
        "Check value types against examples/hwprofile.yaml",
    ]


# ============================================================================
# Error Info Lookup
# ============================================================================


# Mapping from standard exceptions to helpful error info
# Used by ErrorRenderer to provide context for non-hwprofile exceptions
STANDARD_ERROR_INFO: dict[type, dict[str, Any]] = {
    builtins.FileNotFoundError: {
        "error_code": "HP-FILE-001",
        "why_it_happened": "The specified file or directory could not be found",
        "how_to_fix": [
            "Check that the file path is correct",
            "Pass an absolute path with --config",
        ],
    },
    builtins.PermissionError: {
        "error_code": "HP-FILE-002",
        "why_it_happened": "You don't have permission to access this file",
        "how_to_fix": [
            "Check file permissions: ls -la <file>",
            "Run the command with appropriate privileges",
        ],
    },
    ValueError: {
        "error_code": "HP-VAL-003",
        "why_it_happened": "An invalid value was provided",
        "how_to_fix": [
            "Check the error message for the expected value format",
        ],
    },
    OSError: {
        "error_code": "HP-SYS-001",
        "why_it_happened": "A system-level error occurred",
        "how_to_fix": [
            "Check disk space and permissions",
            "Review system logs for more details",
        ],
    },
}


def get_error_info(exc: BaseException) -> dict[str, Any]:
    """Get helpful error information for any exception.

    Looks up the exception type in STANDARD_ERROR_INFO or extracts
    info from HwProfileError subclasses.

    Args:
        exc: Exception to get info for

    Returns:
        Dict with error_code, why_it_happened, how_to_fix
    """
    if isinstance(exc, HwProfileError):
        return {
            "error_code": exc.error_code,
            "why_it_happened": exc.why_it_happened,
            "how_to_fix": exc.how_to_fix,
        }

    exc_type = type(exc)
    if exc_type in STANDARD_ERROR_INFO:
        return STANDARD_ERROR_INFO[exc_type]

    for parent_type, info in STANDARD_ERROR_INFO.items():
        if isinstance(exc, parent_type):
            return info

    return {
        "error_code": "HP-ERR-999",
        "why_it_happened": "An unexpected error occurred",
        "how_to_fix": [
            "Check the error message for details",
            "Re-run with --debug and report the issue if it persists",
        ],
    }
