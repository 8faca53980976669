"""
Tests for report rendering.

Test Strategy
-------------
- Rendering is pure: build profiles with make_profile, no detection
- Check the fixed header and line formats consumers grep for

Organization
------------
- TestRenderSummary: standard and debug reports
- TestExports: dict/JSON dump and environment variables
- TestRenderTable: rich table rows
"""

import json

from rich.console import Console

from hwprofile.detection.models import (
    MemoryClass,
    PerformanceProfile,
    StorageType,
    VirtualizationKind,
)
from hwprofile.reporting import (
    profile_to_dict,
    profile_to_environment,
    profile_to_json,
    render_summary,
    render_table,
)
from hwprofile.reporting.summary import DEBUG_HEADER, REPORT_HEADER


class TestRenderSummary:
    """Tests for render_summary."""

    def test_standard_lines(self, make_profile):
        text = render_summary(make_profile())
        lines = text.splitlines()

        assert lines[0] == REPORT_HEADER == "=== Hardware Detection Report ==="
        assert "CPU: amd AMD Ryzen 7 5800X 8-Core Processor (8 cores)" in lines
        assert "Memory: 16GB (medium)" in lines
        assert "Storage: ssd" in lines
        assert "Virtualization: bare-metal" in lines
        assert "Architecture: x86_64" in lines
        assert "Hardware Type: desktop (confidence: medium, 45 points)" in lines
        assert lines[-1] == "Performance Profile: balanced"
        assert DEBUG_HEADER not in text

    def test_forced_marker(self, make_profile):
        text = render_summary(
            make_profile(performance=PerformanceProfile.MINIMAL, forced=True)
        )

        assert "Performance Profile: minimal (forced)" in text

    def test_debug_details(self, make_profile):
        text = render_summary(make_profile(defaulted=("memory.total",)), debug=True)

        assert DEBUG_HEADER in text
        assert "AVX=true" in text
        assert "AVX512=false" in text
        assert "GPU: nvidia=false amd=true" in text
        assert "Storage Flags: nvme=false ssd=true" in text
        assert "Block Devices: sda(solid-state)" in text
        assert "Form Factor: desktop (battery=false)" in text
        assert "Defaulted: memory.total" in text

    def test_debug_without_defaults(self, make_profile):
        text = render_summary(make_profile(), debug=True)

        assert "Defaulted:" not in text


class TestExports:
    """Tests for dict, JSON and environment exports."""

    def test_dict_is_plain(self, make_profile):
        data = profile_to_dict(make_profile(kind=VirtualizationKind.QEMU))

        assert data["performance_profile"] == "balanced"
        assert data["virtualization"]["kind"] == "qemu"
        assert data["virtualization"]["is_vm"] is True
        assert data["cpu"]["features"] == ["avx", "avx2"]
        assert data["cpu"]["cpu_class"] == "medium"
        assert data["memory"]["total_gb"] == 16
        assert data["storage"]["devices"][0]["name"] == "sda"

    def test_json_round_trips(self, make_profile):
        profile = make_profile()

        assert json.loads(profile_to_json(profile)) == profile_to_dict(profile)

    def test_environment(self, make_profile):
        env = profile_to_environment(
            make_profile(
                memory_class=MemoryClass.HIGH,
                storage_type=StorageType.NVME,
                performance=PerformanceProfile.HIGH_PERFORMANCE,
            )
        )

        assert env == {
            "HWPROFILE_PERFORMANCE_PROFILE": "high-performance",
            "HWPROFILE_CPU_VENDOR": "amd",
            "HWPROFILE_VIRTUALIZATION": "bare-metal",
            "HWPROFILE_MEMORY_CLASS": "high",
            "HWPROFILE_STORAGE_TYPE": "nvme",
        }


class TestRenderTable:
    """Tests for render_table."""

    def _render(self, table) -> str:
        console = Console(record=True, width=120)
        console.print(table)
        return console.export_text()

    def test_platform_confidence(self, make_profile):
        output = self._render(render_table(make_profile()))

        assert "desktop (medium)" in output

    def test_rows(self, make_profile):
        table = render_table(make_profile())

        assert table.title == "Hardware Profile"
        assert table.row_count == 7
        assert [c.header for c in table.columns] == ["Category", "Value", "Class"]

    def test_forced_label(self, make_profile):
        output = self._render(
            render_table(make_profile(performance=PerformanceProfile.MINIMAL, forced=True))
        )

        assert "minimal (forced)" in output
        assert "amd" in output
