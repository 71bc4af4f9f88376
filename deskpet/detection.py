"""User status detection from several sources"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from .config import config
from .database import SharedStore, store as default_store
from .models import DetectionSource, PetState, UserStatusSnapshot
from .test_mode import TestModeManager
from . import keys

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    def estimate_state(self) -> Optional[UserStatusSnapshot]:
        ...


class ScreenTimeSource:
    """Simulated screen time reading until a real usage API is wired in"""

    def estimate_state(self) -> Optional[UserStatusSnapshot]:
        return UserStatusSnapshot(
            detected_state=PetState.OVERUSE_WARNING,
            confidence=0.7,
            source=DetectionSource.SCREEN_TIME,
            context={'reason': 'simulated'}
        )


class ActivitySource:
    """Simulated activity reading until a real fitness API is wired in"""

    def estimate_state(self) -> Optional[UserStatusSnapshot]:
        return UserStatusSnapshot(
            detected_state=PetState.RUNNING,
            confidence=0.6,
            source=DetectionSource.HEALTH_KIT,
            context={'reason': 'simulated'}
        )


class IdleInferenceSource:
    """Infers sleepiness from how long the app has been inactive"""

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        clock: Callable[[], datetime] = datetime.now,
        test_mode: Optional[TestModeManager] = None,
        warning_hours: Optional[float] = None
    ):
        self.store = store or default_store
        self.clock = clock
        self.test_mode = test_mode or TestModeManager(self.store)
        self.warning_hours = warning_hours

    def warning_threshold(self) -> float:
        """Seconds away before the pet counts as sleepy, matching the inactivity warning"""
        hours = self.warning_hours
        if hours is None:
            stored = self.store.get_float(keys.INACTIVITY_WARNING_HOURS, suite=keys.STANDARD)
            hours = stored if stored > 0 else config.inactivity_warning_hours
        return self.test_mode.scaled_interval(hours * 3600)

    def estimate_state(self) -> Optional[UserStatusSnapshot]:
        last_active = self.store.get_datetime(keys.SHARED_LAST_ACTIVE)
        if last_active is None:
            return None

        idle_seconds = (self.clock() - last_active).total_seconds()
        if idle_seconds < self.warning_threshold():
            return None

        idle_hours = idle_seconds / 3600

        return UserStatusSnapshot(
            detected_state=PetState.SLEEPY,
            confidence=0.5,
            source=DetectionSource.IDLE_INFERENCE,
            context={'idle_hours': f"{idle_hours:.1f}"}
        )


class StateDetector:
    """Collects snapshots from all sources and keeps the most confident"""

    def __init__(self, sources: Optional[List[StatusSource]] = None):
        if sources is None:
            sources = [ScreenTimeSource(), ActivitySource(), IdleInferenceSource()]
        self.sources = sources

    def detect(self) -> UserStatusSnapshot:
        snapshots = []
        for source in self.sources:
            snapshot = source.estimate_state()
            if snapshot is not None:
                snapshots.append(snapshot)

        result = self.fuse(snapshots) or self.fallback_snapshot()
        logger.info(
            "Detected %s from %s (confidence %.2f)",
            result.detected_state.value, result.source.value, result.confidence
        )
        return result

    def fuse(self, snapshots: List[UserStatusSnapshot]) -> Optional[UserStatusSnapshot]:
        if not snapshots:
            return None
        return max(snapshots, key=lambda s: s.confidence)

    def fallback_snapshot(self) -> UserStatusSnapshot:
        return UserStatusSnapshot(
            detected_state=PetState.HAPPY,
            confidence=0.2,
            source=DetectionSource.MANUAL_OVERRIDE
        )
