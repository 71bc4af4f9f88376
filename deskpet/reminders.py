"""Usage habit reminders: too long away from the pet, too long on the screen"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from .config import config
from .database import SharedStore, store as default_store
from .models import PetState
from .sync import SyncManager, sync_manager
from .test_mode import TestModeManager, test_mode as default_test_mode
from .widget import WidgetCenter
from . import keys

logger = logging.getLogger(__name__)

HOUR = 60 * 60

# A relaunch after this long restarts the continuous-use clock
LAUNCH_RESET_SECONDS = HOUR

# Away at least this long before the return is logged as a comeback
WELCOME_BACK_LOG_HOURS = 2


def format_duration(seconds: float) -> str:
    """Format seconds as 'Xh Ym', or 'Ym' under an hour"""
    hours = int(seconds // HOUR)
    minutes = int((seconds % HOUR) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class UsageReminderManager:
    """
    Watches how the user uses the app and moves the pet's mood accordingly

    Two reminders run off one polling loop:

    - inactivity: how long since the app was last active. Past the warning
      threshold the pet misses the user; past the limit it welcomes them back.
    - continuous use: how long since the app was launched. Past the threshold
      the pet shows an overuse warning.

    Each reminder fires once until its flag is reset by the user coming back.
    All thresholds shrink by the test mode factor while test mode is on.
    """

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        sync: Optional[SyncManager] = None,
        test_mode: Optional[TestModeManager] = None,
        widget_center: Optional[WidgetCenter] = None,
        clock: Callable[[], datetime] = datetime.now,
        restore_after: Optional[float] = None
    ):
        self.store = store or default_store
        self.sync = sync or sync_manager
        self.test_mode = test_mode or default_test_mode
        self.widget_center = widget_center or WidgetCenter(self.store)
        self.clock = clock
        self.restore_after = config.simulation_restore_seconds if restore_after is None else restore_after

        self.last_active_time: datetime = self.clock()
        self.background_entry_time: Optional[datetime] = None
        self.is_monitoring = False
        self.inactivity_warning_sent = False
        self.inactivity_limit_sent = False
        self.continuous_warning_sent = False

        self._lock = threading.RLock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

        self._load_last_active_time()
        self.test_mode.add_listener(self._test_mode_did_change)

    # Thresholds (hours, persisted; a stored value <= 0 means the default)

    def _get_hours(self, key: str, default: float) -> float:
        value = self.store.get_float(key, suite=keys.STANDARD)
        return value if value > 0 else default

    def _set_hours(self, key: str, hours: float):
        if hours <= 0:
            raise ValueError(f"Threshold must be positive, got {hours}")
        self.store.set(key, float(hours), suite=keys.STANDARD)

    def get_inactivity_warning_hours(self) -> float:
        return self._get_hours(keys.INACTIVITY_WARNING_HOURS, config.inactivity_warning_hours)

    def get_inactivity_limit_hours(self) -> float:
        return self._get_hours(keys.INACTIVITY_LIMIT_HOURS, config.inactivity_limit_hours)

    def get_check_interval_hours(self) -> float:
        return self._get_hours(keys.CHECK_INTERVAL_HOURS, config.check_interval_hours)

    def get_continuous_warning_hours(self) -> float:
        return self._get_hours(keys.CONTINUOUS_WARNING_HOURS, config.continuous_warning_hours)

    def update_inactivity_warning(self, hours: float):
        self._set_hours(keys.INACTIVITY_WARNING_HOURS, hours)
        logger.info("Inactivity warning threshold set to %sh", hours)

    def update_inactivity_limit(self, hours: float):
        self._set_hours(keys.INACTIVITY_LIMIT_HOURS, hours)
        logger.info("Inactivity limit threshold set to %sh", hours)

    def update_check_interval(self, hours: float):
        self._set_hours(keys.CHECK_INTERVAL_HOURS, hours)
        logger.info("Check interval set to %sh", hours)
        # Restart so the new interval takes effect
        if self.is_monitoring:
            self.stop_monitoring()
            self.start_monitoring()

    def update_continuous_warning(self, hours: float):
        self._set_hours(keys.CONTINUOUS_WARNING_HOURS, hours)
        logger.info("Continuous use warning threshold set to %sh", hours)

    # Effective thresholds in seconds

    def current_inactivity_warning_threshold(self) -> float:
        return self.test_mode.scaled_interval(self.get_inactivity_warning_hours() * HOUR)

    def current_inactivity_limit_threshold(self) -> float:
        return self.test_mode.scaled_interval(self.get_inactivity_limit_hours() * HOUR)

    def current_check_interval(self) -> float:
        return self.test_mode.scaled_interval(self.get_check_interval_hours() * HOUR)

    def current_continuous_warning_threshold(self) -> float:
        return self.test_mode.scaled_interval(self.get_continuous_warning_hours() * HOUR)

    # Monitoring

    def start_monitoring(self):
        """Record the user as active and start the polling loop"""
        with self._lock:
            if self.is_monitoring:
                return

            self.is_monitoring = True
            self._update_last_active_time()
            self._reset_flags()

            interval = self.current_check_interval()
            logger.info("Started usage monitoring, checking every %.1fs", interval)

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._poll,
                args=(interval, self._stop_event),
                name="usage-reminder",
                daemon=True
            )
            self._thread.start()

    def stop_monitoring(self):
        """Stop the polling loop"""
        with self._lock:
            self.is_monitoring = False
            if self._stop_event:
                self._stop_event.set()

            thread = self._thread
            self._stop_event = None
            self._thread = None

        if thread and thread is not threading.current_thread():
            thread.join(timeout=5.0)
        logger.info("Stopped usage monitoring")

    def _poll(self, interval: float, stop_event: threading.Event):
        while not stop_event.wait(interval):
            try:
                self.perform_check()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Usage reminder check failed")

    def _test_mode_did_change(self, enabled: bool):
        logger.info("Test mode changed (%s), reapplying thresholds", "on" if enabled else "off")
        if self.is_monitoring:
            self.stop_monitoring()
            self.start_monitoring()

    # App lifecycle events

    def app_did_become_active(self):
        """The user opened the app or brought it to the foreground"""
        with self._lock:
            now = self.clock()

            away = (now - self.last_active_time).total_seconds()
            hours = int(away / HOUR)
            if hours >= WELCOME_BACK_LOG_HOURS:
                logger.info("The user is back after %d hours away", hours)

            if self.background_entry_time is not None:
                background = (now - self.background_entry_time).total_seconds()
                self.background_entry_time = None
                logger.info("Resumed from background after %s", format_duration(background))
                # Opening the app counts as activity regardless of how long it was away
                self._update_last_active_time()
            else:
                logger.info("Cold start or direct activation")
                self._update_last_active_time()
                self._reset_flags()

            self.sync.update_all_carriers(PetState.HAPPY)
            self.widget_center.reload_all_timelines()

            self.continuous_warning_sent = False

            launch_time = self.store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD)
            if launch_time is None:
                self.store.set_datetime(keys.APP_LAUNCH_TIME, now, suite=keys.STANDARD)
                logger.info("First launch recorded for continuous use tracking")
            elif (now - launch_time).total_seconds() > LAUNCH_RESET_SECONDS:
                self.store.set_datetime(keys.APP_LAUNCH_TIME, now, suite=keys.STANDARD)
                logger.info("Relaunched after a long gap, continuous use clock restarted")

            logger.debug("Inactivity now %s", format_duration((self.clock() - self.last_active_time).total_seconds()))

    def app_did_enter_background(self):
        with self._lock:
            self.background_entry_time = self.clock()
            logger.info("App entered background")

    # Checks

    def perform_check(self):
        """Run both reminder checks once"""
        with self._lock:
            self.check_inactivity_reminders()
            self.check_continuous_usage()

    def manual_check(self):
        logger.info("Manual reminder check")
        self.perform_check()

    def check_inactivity_reminders(self):
        """Fire the inactivity warning or limit, each at most once"""
        inactive = (self.clock() - self.last_active_time).total_seconds()
        warning = self.current_inactivity_warning_threshold()
        limit = self.current_inactivity_limit_threshold()

        logger.debug(
            "Inactive for %s (warning at %s, limit at %s)",
            format_duration(inactive), format_duration(warning), format_duration(limit)
        )

        if inactive >= limit and not self.inactivity_limit_sent:
            logger.info("Inactivity limit reached")
            self._send_welcome_back(inactive)
            self.inactivity_limit_sent = True
            self.inactivity_warning_sent = True
        elif inactive >= warning and not self.inactivity_warning_sent:
            logger.info("Inactivity warning reached")
            self._send_gentle_reminder(inactive)
            self.inactivity_warning_sent = True

    def check_continuous_usage(self):
        """
        Warn once the app has been in use past the continuous threshold

        Use is measured from the recorded launch time, an approximation of
        total screen time.
        """
        now = self.clock()
        launch_time = self.store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD)

        if launch_time is None:
            self.store.set_datetime(keys.APP_LAUNCH_TIME, now, suite=keys.STANDARD)
            logger.info("Recorded launch time for continuous use tracking")
            return

        elapsed = (now - launch_time).total_seconds()
        logger.debug("In use for %s since launch", format_duration(elapsed))

        if elapsed >= self.current_continuous_warning_threshold() and not self.continuous_warning_sent:
            self._send_continuous_usage_warning(elapsed)
            self.continuous_warning_sent = True

    def effective_hours(self, seconds: float) -> int:
        """Whole hours as the user experiences them (scaled in test mode)"""
        return int(seconds * self.test_mode.time_scale_factor / HOUR)

    def _send_welcome_back(self, inactive: float):
        logger.info("Away for %s, the pet will welcome the user back", format_duration(inactive))
        self.sync.update_all_carriers(PetState.HAPPY)

    def _send_gentle_reminder(self, inactive: float):
        hours = self.effective_hours(inactive)
        if 2 <= hours < 6:
            state = PetState.HAPPY
        elif 6 <= hours < 24:
            state = PetState.BORED
        else:
            state = PetState.SLEEPY

        logger.info("Away for %dh, the pet misses the user (%s)", hours, state.value)
        self.sync.update_all_carriers(state)

    def _send_continuous_usage_warning(self, elapsed: float):
        logger.warning("Continuous use of %s, showing overuse warning", format_duration(elapsed))
        self.sync.update_all_carriers(PetState.OVERUSE_WARNING)

    # Persistence

    def _update_last_active_time(self):
        self.last_active_time = self.clock()
        self.store.set_datetime(keys.SHARED_LAST_ACTIVE, self.last_active_time)
        logger.debug("Saved last active time %s", self.last_active_time.isoformat())

    def _load_last_active_time(self):
        saved = self.store.get_datetime(keys.SHARED_LAST_ACTIVE)
        if saved is not None:
            self.last_active_time = saved
            logger.debug("Loaded last active time %s", saved.isoformat())
        else:
            # Not persisted until the app actually becomes active
            self.last_active_time = self.clock()

    def _reset_flags(self):
        self.inactivity_warning_sent = False
        self.inactivity_limit_sent = False
        self.continuous_warning_sent = False

    # Testing helpers

    def _after_delay(self, delay: float, action: Callable[[], None]):
        if delay <= 0:
            action()
            return
        timer = threading.Timer(delay, action)
        timer.daemon = True
        timer.start()

    def simulate_inactivity(self, hours: float, restore_after: Optional[float] = None):
        """Pretend the user has been away, check, then restore the real time"""
        logger.info("Simulating %sh of inactivity", hours)
        with self._lock:
            real_last_active = self.last_active_time
            self.last_active_time = self.clock() - timedelta(hours=hours)
            self.manual_check()

        def restore():
            with self._lock:
                self.last_active_time = real_last_active
            logger.info("Inactivity simulation over, real time restored")
            self.widget_center.reload_all_timelines()

        self._after_delay(self.restore_after if restore_after is None else restore_after, restore)

    def simulate_continuous_usage(self, minutes: float, restore_after: Optional[float] = None):
        """Pretend the app was launched a while ago, check, then forget the launch"""
        logger.info("Simulating %s minutes of continuous use", minutes)
        simulated_launch = self.clock() - timedelta(minutes=minutes)
        self.store.set_datetime(keys.APP_LAUNCH_TIME, simulated_launch, suite=keys.STANDARD)
        self.manual_check()

        def restore():
            self.store.remove(keys.APP_LAUNCH_TIME, suite=keys.STANDARD)
            logger.info("Continuous use simulation over, launch time cleared")

        self._after_delay(self.restore_after if restore_after is None else restore_after, restore)

    def reset_inactivity_state(self):
        """Treat the user as active right now and cheer up the pet"""
        logger.info("Resetting inactivity state")
        with self._lock:
            self._update_last_active_time()
            self._reset_flags()
        self.sync.update_all_carriers(PetState.HAPPY)
        self.widget_center.reload_all_timelines()

    def validate_test_mode_thresholds(self) -> Dict[str, float]:
        """Report the effective thresholds (seconds) and the current scale"""
        report = {
            'inactivity_warning': self.current_inactivity_warning_threshold(),
            'inactivity_limit': self.current_inactivity_limit_threshold(),
            'check_interval': self.current_check_interval(),
            'continuous_warning': self.current_continuous_warning_threshold(),
            'time_scale_factor': self.test_mode.time_scale_factor,
        }

        logger.info("Effective reminder thresholds (test mode %s, %.0fx):",
                    "on" if self.test_mode.enabled else "off", report['time_scale_factor'])
        logger.info("  Inactivity warning: %s", format_duration(report['inactivity_warning']))
        logger.info("  Inactivity limit: %s", format_duration(report['inactivity_limit']))
        logger.info("  Check interval: %s", format_duration(report['check_interval']))
        logger.info("  Continuous use warning: %s", format_duration(report['continuous_warning']))

        return report


# Global usage reminder instance
usage_reminder = UsageReminderManager()
