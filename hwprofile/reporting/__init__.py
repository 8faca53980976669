"""Reporting for detection results (text, table, JSON, environment)."""

from hwprofile.reporting.summary import (
    profile_to_dict,
    profile_to_environment,
    profile_to_json,
    render_summary,
    render_table,
)

__all__ = [
    "profile_to_dict",
    "profile_to_environment",
    "profile_to_json",
    "render_summary",
    "render_table",
]
