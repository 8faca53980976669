"""
Tests for the Facts Publisher.

Organization
------------
- TestProfilePublisher: snapshot swap, refresh, change logging
"""

import logging
import threading

from hwprofile.detection.models import PerformanceProfile
from hwprofile.detection.overrides import OverrideSet
from hwprofile.detection.publisher import ProfilePublisher


class TestProfilePublisher:
    """Tests for ProfilePublisher."""

    def test_empty_before_publish(self):
        assert ProfilePublisher().current() is None

    def test_publish_swaps_snapshot(self, make_profile):
        publisher = ProfilePublisher()
        first = make_profile()
        second = make_profile(cores=16)

        publisher.publish(first)
        held = publisher.current()
        publisher.publish(second)

        assert held is first
        assert publisher.current() is second
        assert held.cpu.core_count == 8

    def test_refresh_runs_detector(self, workstation_root):
        publisher = ProfilePublisher()

        profile = publisher.refresh(
            workstation_root.detector(), OverrideSet.from_mapping({"cpu": {"cores": 2}})
        )

        assert publisher.current() is profile
        assert profile.cpu.core_count == 2

    def test_logs_profile_change(self, make_profile, caplog):
        publisher = ProfilePublisher()
        publisher.publish(make_profile(performance=PerformanceProfile.BALANCED))

        with caplog.at_level(logging.INFO):
            publisher.publish(make_profile(performance=PerformanceProfile.MINIMAL))

        assert "Performance profile changed" in caplog.text
        assert "previous=balanced" in caplog.text
        assert "current=minimal" in caplog.text

    def test_no_log_when_unchanged(self, make_profile, caplog):
        publisher = ProfilePublisher()
        publisher.publish(make_profile())

        with caplog.at_level(logging.INFO):
            publisher.publish(make_profile())

        assert "Performance profile changed" not in caplog.text

    def test_concurrent_readers_see_whole_profiles(self, make_profile):
        publisher = ProfilePublisher()
        profiles = [make_profile(cores=n) for n in (2, 4, 8, 16)]
        seen = []

        def reader():
            for _ in range(200):
                snapshot = publisher.current()
                if snapshot is not None:
                    seen.append(snapshot)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for profile in profiles:
            publisher.publish(profile)
        for thread in threads:
            thread.join()

        assert all(any(s is p for p in profiles) for s in seen)
