"""Tests for the in-memory device catalog and usage progress store."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from device_catalog import DEFAULT_DEVICES, DeviceCatalog, DeviceExistsError
from models import Device
from progress import LEVEL_THRESHOLDS, ProgressStore, level_for_points, level_progress


def pixel_device(device_id="pixel-8") -> Device:
    return Device.model_validate({
        "id": device_id,
        "name": "Pixel 8",
        "type": "phone",
        "manufacturer": "Google",
        "screenSizes": [{"width": 412, "height": 915}],
        "osVersions": ["Android 14"],
    })


class TestDeviceCatalog:
    def test_seeded_with_defaults(self):
        catalog = DeviceCatalog()
        assert len(catalog) == len(DEFAULT_DEVICES)
        iphone = catalog.get_device("iphone-14-pro")
        assert iphone.screen_sizes[1].width == 390
        assert iphone.screen_sizes[1].height == 844

    def test_every_device_has_a_screen_size(self):
        assert all(device.screen_sizes for device in DeviceCatalog().list_devices())

    def test_unknown_device(self):
        assert DeviceCatalog().get_device("nokia-3310") is None

    def test_add_keeps_insertion_order(self):
        catalog = DeviceCatalog(seed=[])
        catalog.add_device(pixel_device("a"))
        catalog.add_device(pixel_device("b"))
        assert [d.id for d in catalog.list_devices()] == ["a", "b"]

    def test_duplicate_id_rejected(self):
        catalog = DeviceCatalog()
        catalog.add_device(pixel_device())
        with pytest.raises(DeviceExistsError):
            catalog.add_device(pixel_device())
        assert len(catalog) == len(DEFAULT_DEVICES) + 1

    def test_device_needs_screen_sizes(self):
        with pytest.raises(ValidationError):
            Device.model_validate({
                "id": "bare",
                "name": "Bare",
                "type": "phone",
                "manufacturer": "Acme",
                "screenSizes": [],
            })


class TestLevels:
    @pytest.mark.parametrize("points, level", [(0, 1), (99, 1), (100, 2), (249, 2), (250, 3), (40000, 10)])
    def test_level_for_points(self, points, level):
        assert level_for_points(points) == level

    def test_level_progress_is_clamped(self):
        assert level_progress(160, 2) == 40.0
        assert level_progress(0, 1) == 0.0
        assert level_progress(LEVEL_THRESHOLDS[-1] * 4, 10) == 100.0


class TestProgressStore:
    @pytest.fixture
    def clock(self):
        now = {"value": datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)}

        def tick(days=0):
            now["value"] += timedelta(days=days)

        tick.now = lambda: now["value"]
        return tick

    @pytest.fixture
    def store(self, clock):
        return ProgressStore(clock=clock.now)

    def test_starts_empty(self, store):
        progress = store.get()
        assert progress.stats == {}
        assert progress.achievements == []
        assert progress.total_points == 0
        assert progress.level == 1

    def test_first_test_unlocks_achievement(self, store):
        progress = store.record("tests_run")
        assert progress.stats["tests_run"] == 1
        assert progress.achievements == ["first_test"]
        assert progress.total_points == 10
        assert progress.level_progress == 10.0

    def test_achievement_unlocks_once(self, store):
        store.record("tests_run")
        progress = store.record("tests_run")
        assert progress.stats["tests_run"] == 2
        assert progress.achievements == ["first_test"]
        assert progress.total_points == 10

    def test_update_merges_counters(self, store):
        store.record("tests_run")
        progress = store.update({"accessibility_fixes": 10})
        assert progress.stats["tests_run"] == 1
        assert progress.achievements == ["first_test", "accessibility_master"]
        assert progress.total_points == 60

    def test_level_up(self, store):
        store.record("tests_run")
        progress = store.update({"accessibility_fixes": 10, "perfect_performance": 5})
        assert progress.total_points == 160
        assert progress.level == 2
        assert progress.level_progress == 40.0

    def test_daily_streak(self, store, clock):
        assert store.record("tests_run").stats["daily_streak"] == 1
        assert store.record("tests_run").stats["daily_streak"] == 1

        clock(days=1)
        assert store.record("tests_run").stats["daily_streak"] == 2

        clock(days=3)
        progress = store.record("tests_run")
        assert progress.stats["daily_streak"] == 1
        assert progress.last_active == clock.now().isoformat()

    def test_streak_achievement(self, store, clock):
        for _ in range(5):
            progress = store.record("tests_run")
            clock(days=1)
        assert "testing_streak" in progress.achievements

    def test_get_returns_a_copy(self, store):
        store.get().stats["tests_run"] = 99
        assert store.get().stats == {}

    def test_close_resets(self, store):
        store.record("tests_run")
        store.close()
        assert store.get().total_points == 0
