"""
Usage progress tracking for Responsive Tester

Keeps per-metric counters, unlocked achievements, points and level in memory.
Points come from unlocked achievements; the level follows LEVEL_THRESHOLDS.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List

from models import UserProgress

logger = logging.getLogger(__name__)


ACHIEVEMENTS: List[dict] = [
    {
        "id": "first_test",
        "name": "First Steps",
        "description": "Run your first website test",
        "points": 10,
        "category": "testing",
        "metric": "tests_run",
        "target": 1,
    },
    {
        "id": "accessibility_master",
        "name": "Accessibility Champion",
        "description": "Fix 10 accessibility issues",
        "points": 50,
        "category": "accessibility",
        "metric": "accessibility_fixes",
        "target": 10,
    },
    {
        "id": "performance_guru",
        "name": "Performance Guru",
        "description": "Achieve perfect performance score on 5 sites",
        "points": 100,
        "category": "performance",
        "metric": "perfect_performance",
        "target": 5,
    },
    {
        "id": "design_expert",
        "name": "Design Expert",
        "description": "Test responsive design on 20 different device sizes",
        "points": 75,
        "category": "design",
        "metric": "devices_tested",
        "target": 20,
    },
    {
        "id": "testing_streak",
        "name": "Testing Streak",
        "description": "Test websites for 5 days in a row",
        "points": 150,
        "category": "testing",
        "metric": "daily_streak",
        "target": 5,
    },
]

# Experience points needed for each level (index 0 = level 1)
LEVEL_THRESHOLDS = [0, 100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000]

STREAK_METRIC = "daily_streak"


def level_for_points(points: int) -> int:
    level = 1
    for index, threshold in enumerate(LEVEL_THRESHOLDS):
        if points >= threshold:
            level = index + 1
    return level


def level_progress(points: int, level: int) -> float:
    """Percentage of the way from the current level's threshold to the next one."""
    current = LEVEL_THRESHOLDS[level - 1] if level - 1 < len(LEVEL_THRESHOLDS) else LEVEL_THRESHOLDS[-1]
    if level < len(LEVEL_THRESHOLDS):
        upcoming = LEVEL_THRESHOLDS[level]
    else:
        upcoming = current * 2
    percent = (points - current) / (upcoming - current) * 100
    return min(100.0, max(0.0, percent))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressStore:
    """
    Holds one UserProgress. Constructed at application startup and
    cleared on shutdown; nothing is written to disk.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._progress = self._fresh()

    def _fresh(self) -> UserProgress:
        return UserProgress(lastActive=self._clock().isoformat())

    def get(self) -> UserProgress:
        return self._progress.model_copy(deep=True)

    def record(self, metric: str, value: int = 1) -> UserProgress:
        """Increment one counter and re-evaluate achievements."""
        stats = dict(self._progress.stats)
        stats[metric] = stats.get(metric, 0) + value
        self._touch(stats)
        return self._apply(stats)

    def update(self, stats: Dict[str, int]) -> UserProgress:
        """Overwrite the given counters, keeping the others."""
        merged = dict(self._progress.stats)
        merged.update(stats)
        return self._apply(merged)

    def _touch(self, stats: Dict[str, int]):
        # Consecutive active days extend the streak, a gap restarts it
        now = self._clock()
        last = datetime.fromisoformat(self._progress.last_active)
        gap = (now.date() - last.date()).days
        if STREAK_METRIC not in stats or gap > 1:
            stats[STREAK_METRIC] = 1
        elif gap == 1:
            stats[STREAK_METRIC] += 1
        self._progress.last_active = now.isoformat()

    def _apply(self, stats: Dict[str, int]) -> UserProgress:
        unlocked = list(self._progress.achievements)
        points = self._progress.total_points
        for achievement in ACHIEVEMENTS:
            if achievement["id"] in unlocked:
                continue
            if stats.get(achievement["metric"], 0) >= achievement["target"]:
                unlocked.append(achievement["id"])
                points += achievement["points"]
                logger.info(f"🏆 Achievement unlocked: {achievement['name']}")

        self._progress.stats = stats
        self._progress.achievements = unlocked
        self._progress.total_points = points
        self._progress.level = level_for_points(points)
        self._progress.level_progress = level_progress(points, self._progress.level)
        return self.get()

    def close(self):
        """Reset to an empty record at shutdown"""
        self._progress = self._fresh()
