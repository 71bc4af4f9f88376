"""Local notifications"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from .config import config
from .models import MessageCategory, PetConfiguration

logger = logging.getLogger(__name__)

MIN_DELAY_SECONDS = 0.1

CATEGORY_TITLES = {
    MessageCategory.HEALTH_REMINDER: "Health reminder",
    MessageCategory.SPORT_ENCOURAGE: "Keep moving",
    MessageCategory.STUDY_PRAISE: "Study praise",
    MessageCategory.ACHIEVEMENT: "Achievement unlocked",
    MessageCategory.DAILY_CARE: "Daily care",
}

NotificationSink = Callable[[str, str], None]


def console_sink(title: str, body: str):
    """Show a notification as a rich panel"""
    from .ui import display_notification
    display_notification(title, body)


class NotificationManager:
    """Schedules titled notifications and hands them to a sink"""

    def __init__(
        self,
        sink: Optional[NotificationSink] = None,
        configuration: Optional[Callable[[], PetConfiguration]] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.sink = sink or console_sink
        self.configuration = configuration or PetConfiguration
        self.clock = clock
        self._timers: List[threading.Timer] = []

    def schedule(
        self,
        message: str,
        category: MessageCategory,
        in_seconds: float = 0
    ) -> Optional[threading.Timer]:
        """
        Schedule a notification

        Args:
            message: Notification body
            category: Picks the title
            in_seconds: Delay before delivery

        Returns:
            The pending timer, or None if the notification was dropped
        """
        prefs = self.configuration().notification_preference
        if not config.notifications_enabled or not prefs.enable_notifications:
            logger.info("Notifications disabled, dropping: %s", message)
            return None

        delay = in_seconds if in_seconds > 0 else MIN_DELAY_SECONDS
        title = CATEGORY_TITLES[category]

        timer = threading.Timer(delay, self._deliver, args=(title, message))
        timer.daemon = True
        self._timers = [t for t in self._timers if t.is_alive()]
        self._timers.append(timer)
        timer.start()
        logger.debug("Scheduled '%s' in %.1fs", title, delay)
        return timer

    def cancel_all(self):
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

    def _deliver(self, title: str, body: str):
        prefs = self.configuration().notification_preference
        if prefs.is_quiet(self.clock().hour):
            logger.info("Quiet hours, dropping: %s", body)
            return
        self.sink(title, body)
