"""Tests for clock state and hand angles."""

import logging

import pytest

from watch_face.clock_state import (
    ClockSnapshot,
    ClockState,
    hour_angle,
    minute_angle,
    system_zone_id,
)

from .conftest import FIXED_EPOCH


class TestAngles:
    """Tests for hand angle math."""

    def test_minute_angle_every_minute(self):
        for minute in range(60):
            angle = minute_angle(minute)
            assert angle == minute * 6
            assert 0 <= angle <= 354

    def test_hour_angle_formula(self):
        for hour in range(24):
            for minute in range(60):
                assert hour_angle(hour, minute) == pytest.approx(
                    (hour % 12 + minute / 60) * 30
                )

    def test_hour_angle_in_range(self):
        for hour in range(24):
            for minute in range(60):
                assert 0 <= hour_angle(hour, minute) < 360

    def test_hour_angle_creeps_with_minutes(self):
        for hour in range(24):
            angles = [hour_angle(hour, minute) for minute in range(60)]
            assert angles == sorted(angles)
            assert angles[30] > angles[0]

    def test_hour_angle_wraps_at_twelve(self):
        assert hour_angle(0, 0) == 0
        assert hour_angle(12, 0) == 0
        assert hour_angle(11, 59) == pytest.approx(359.5)

    def test_three_oclock(self):
        assert hour_angle(3, 0) == 90
        assert hour_angle(15, 0) == 90
        assert minute_angle(0) == 0

    @pytest.mark.parametrize("minute", [-1, 60])
    def test_invalid_minute(self, minute):
        with pytest.raises(ValueError):
            minute_angle(minute)
        with pytest.raises(ValueError):
            hour_angle(0, minute)

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_invalid_hour(self, hour):
        with pytest.raises(ValueError):
            hour_angle(hour, 0)

    def test_snapshot_angles(self):
        snapshot = ClockSnapshot(hour=9, minute=30, second=0, zone_id="UTC")
        assert snapshot.minute_angle == 180
        assert snapshot.hour_angle == 285


class TestClockState:
    """Tests for ClockState."""

    def test_refresh_in_utc(self, clock_state):
        snapshot = clock_state.refresh()
        assert (snapshot.hour, snapshot.minute, snapshot.second) == (22, 13, 20)
        assert snapshot.zone_id == "UTC"
        assert clock_state.snapshot is snapshot

    def test_refresh_binds_zone(self, clock_state):
        snapshot = clock_state.refresh("America/New_York")
        assert (snapshot.hour, snapshot.minute) == (17, 13)
        assert snapshot.zone_id == "America/New_York"
        assert clock_state.zone_id == "America/New_York"

    def test_refresh_reads_time_source_each_call(self):
        now = [FIXED_EPOCH]
        state = ClockState("UTC", time_source=lambda: now[0])
        state.refresh()
        now[0] += 120
        assert state.refresh().minute == 15

    def test_zone_change_clears_snapshot(self, clock_state):
        clock_state.refresh()
        clock_state.handle_zone_changed("Asia/Tokyo")

        assert clock_state.snapshot is None
        snapshot = clock_state.refresh()
        assert snapshot.zone_id == "Asia/Tokyo"
        assert snapshot.hour == 7  # 22:13 UTC is 07:13 JST

    def test_same_zone_not_logged_as_change(self, clock_state, caplog):
        with caplog.at_level(logging.INFO, logger="watch_face.clock_state"):
            clock_state.handle_zone_changed("UTC")
            assert "Time zone changed" not in caplog.text

            clock_state.handle_zone_changed("Asia/Tokyo")
            assert "Time zone changed to Asia/Tokyo" in caplog.text

    def test_unknown_zone_keeps_previous(self, clock_state):
        clock_state.handle_zone_changed("Not/A_Zone")
        assert clock_state.zone_id == "UTC"
        assert clock_state.refresh().zone_id == "UTC"

    def test_unknown_initial_zone_falls_back_to_utc(self):
        state = ClockState("Not/A_Zone", time_source=lambda: FIXED_EPOCH)
        assert state.zone_id == "UTC"


def _raise_oserror(*args):
    raise OSError("missing")


class TestSystemZoneId:
    """Tests for system zone lookup."""

    def test_uses_tz_environment(self, monkeypatch):
        monkeypatch.setenv("TZ", ":Europe/Paris")
        assert system_zone_id() == "Europe/Paris"

    def test_falls_back_to_default(self, monkeypatch):
        monkeypatch.delenv("TZ", raising=False)
        monkeypatch.setattr(
            "watch_face.clock_state.Path.read_text",
            _raise_oserror,
        )
        monkeypatch.setattr(
            "watch_face.clock_state.os.readlink",
            _raise_oserror,
        )
        assert system_zone_id(default="Etc/UTC") == "Etc/UTC"

    def test_reads_localtime_symlink(self, monkeypatch):
        monkeypatch.delenv("TZ", raising=False)
        monkeypatch.setattr(
            "watch_face.clock_state.Path.read_text",
            _raise_oserror,
        )
        monkeypatch.setattr(
            "watch_face.clock_state.os.readlink",
            lambda path: "/usr/share/zoneinfo/America/Chicago",
        )
        assert system_zone_id() == "America/Chicago"
