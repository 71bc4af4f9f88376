"""Widget side: reload signalling and the read-only snapshot provider

The widget runs in its own process. It never writes pet state; it only reads
the group suite of the shared store and decides what to show.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from .config import config
from .database import SharedStore, store as default_store
from .models import PetEmotion, TodoItem
from . import keys

logger = logging.getLogger(__name__)

WIDGET_KIND = 'PetWidget'

# Inactivity (in effective hours) at which the widget switches to "missing you"
INACTIVE_DISPLAY_HOURS = 2

# Below this many real seconds the user is treated as just back
JUST_OPENED_SECONDS = 60

SMALL = 'small'
MEDIUM = 'medium'

DEFAULT_EXPRESSIONS = {
    PetEmotion.IDLE: ("🐾", "Hi! Tap me to get started"),
    PetEmotion.HAPPY: ("😺", "Let's have a happy day~"),
    PetEmotion.DIZZY: ("😵‍💫", "You've been on the screen a while... take a break?"),
    PetEmotion.SLEEPY: ("😴", "Getting sleepy, maybe rest for a bit?"),
    PetEmotion.WORKOUT: ("🏃‍♂️", "Let's move around, no more sitting!"),
    PetEmotion.AWAY_FOCUS: ("📖", "I'll watch the screen, you focus"),
    PetEmotion.BORED: ("🥱", "Kind of bored, let's do something fun?"),
    PetEmotion.LONG_USAGE: ("⚠️", "That's a long session, time for a break"),
}


class WidgetCenter:
    """Signals widget processes that their timeline is stale"""

    def __init__(self, store: Optional[SharedStore] = None):
        self.store = store or default_store

    def reload_timelines(self, kind: str = WIDGET_KIND):
        """Bump the reload token so a running widget refreshes on its next poll"""
        token = self.store.get_int(keys.SHARED_WIDGET_RELOAD) + 1
        self.store.set(keys.SHARED_WIDGET_RELOAD, token)
        logger.debug("Requested %s timeline reload (token %d)", kind, token)

    def reload_all_timelines(self):
        self.reload_timelines(WIDGET_KIND)

    def reload_token(self) -> int:
        return self.store.get_int(keys.SHARED_WIDGET_RELOAD)


@dataclass
class PetEntry:
    """One point on the widget timeline"""
    date: datetime
    emotion: PetEmotion
    emoji: str
    phrase: str
    todos: List[TodoItem] = field(default_factory=list)
    inactive_hours: int = 0
    inactive_seconds: int = 0

    @property
    def is_inactive(self) -> bool:
        return self.inactive_hours >= INACTIVE_DISPLAY_HOURS


def inactive_emoji(hours: int) -> str:
    """Emoji shown when the user has been away for a while"""
    if 2 <= hours < 6:
        return "💭"
    if 6 <= hours < 24:
        return "😢"
    if 24 <= hours < 72:
        return "😭"
    return "💔"


def inactive_message(hours: int) -> str:
    """Message shown when the user has been away for a while"""
    if 2 <= hours < 6:
        return "Haven't seen you in a while..."
    if 6 <= hours < 24:
        return "I'm starting to miss you, come see me!"
    if 24 <= hours < 72:
        days = hours // 24
        return f"{days} day{'s' if days > 1 else ''} without you, I miss you!"
    return "It's been so long, I miss you so much..."


def format_clock(seconds: int) -> str:
    """Format seconds as H:MM:SS, or M:SS under an hour"""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def max_todo_count(size: str, todos: List[TodoItem]) -> int:
    """How many todos fit on a widget of the given size"""
    if size == SMALL:
        return 0 if not todos else 2
    if size == MEDIUM:
        return 3
    return 2


class WidgetProvider:
    """Builds widget timeline entries from the shared snapshot"""

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        clock: Callable[[], datetime] = datetime.now,
        test_mode_scale: Optional[float] = None
    ):
        self.store = store or default_store
        self.clock = clock
        self.test_mode_scale = test_mode_scale or config.test_mode_scale

    def is_test_mode(self) -> bool:
        return self.store.get_bool(keys.SHARED_TEST_MODE)

    def placeholder(self) -> PetEntry:
        """Sample entry used before any real data is available"""
        emoji, phrase = DEFAULT_EXPRESSIONS[PetEmotion.IDLE]
        return PetEntry(
            date=self.clock(),
            emotion=PetEmotion.IDLE,
            emoji=emoji,
            phrase=phrase,
            todos=[
                TodoItem(text="Sample todo 1"),
                TodoItem(text="Sample todo 2", is_completed=True)
            ]
        )

    def current_entry(self) -> PetEntry:
        """Read the shared snapshot into an entry"""
        emotion = PetEmotion.parse(self.store.get(keys.SHARED_EMOTION))
        emoji, phrase = self._expression(emotion)

        return PetEntry(
            date=self.clock(),
            emotion=emotion,
            emoji=emoji,
            phrase=phrase,
            todos=self.load_todos(),
            inactive_hours=self.inactive_hours(),
            inactive_seconds=self.inactive_seconds()
        )

    def _expression(self, emotion: PetEmotion) -> Tuple[str, str]:
        """Saved icon and message when present, otherwise the defaults"""
        saved_icon = self.store.get(keys.SHARED_ICON)
        saved_message = self.store.get(keys.SHARED_STATE_MESSAGE)
        default_emoji, default_phrase = DEFAULT_EXPRESSIONS[emotion]

        if saved_icon and saved_message:
            return saved_icon, saved_message
        if saved_message:
            return default_emoji, saved_message
        return default_emoji, default_phrase

    def load_todos(self) -> List[TodoItem]:
        raw = self.store.get(keys.SHARED_TODOS, [])
        try:
            return [TodoItem.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Widget could not read shared todos")
            return []

    def inactive_seconds(self) -> int:
        """Real seconds since the app was last active"""
        last_active = self.store.get_datetime(keys.SHARED_LAST_ACTIVE)
        if last_active is None:
            return 0
        return int((self.clock() - last_active).total_seconds())

    def inactive_hours(self) -> int:
        """Effective hours since last active, sped up in test mode"""
        last_active = self.store.get_datetime(keys.SHARED_LAST_ACTIVE)
        if last_active is None:
            logger.debug("No last active time recorded, treating as active")
            return 0

        inactive = (self.clock() - last_active).total_seconds()
        if inactive < JUST_OPENED_SECONDS:
            return 0

        return self._effective_hours(inactive, self.is_test_mode())

    def _effective_hours(self, seconds: float, test_mode: bool) -> int:
        effective = seconds * self.test_mode_scale if test_mode else seconds
        return int(effective / 3600)

    def timeline(self) -> Tuple[List[PetEntry], datetime]:
        """
        Build the timeline and the time of the next refresh

        Test mode produces one entry per second for the next minute so the
        clock and the inactivity counter tick visibly.

        Returns:
            (entries, next_refresh)
        """
        entry = self.current_entry()
        now = entry.date
        test_mode = self.is_test_mode()

        if test_mode:
            refresh_interval = 1
            entries = []
            for i in range(60):
                seconds = entry.inactive_seconds + i
                entries.append(replace(
                    entry,
                    date=now + timedelta(seconds=i),
                    inactive_seconds=seconds,
                    inactive_hours=self._effective_hours(seconds, True)
                ))
        else:
            refresh_interval = 30 if entry.is_inactive else 60
            entries = [entry]

        next_refresh = now + timedelta(seconds=refresh_interval)
        logger.debug(
            "Widget timeline: %s, next refresh %s, test mode %s, inactive hours %d",
            "inactive" if entry.is_inactive else "normal",
            next_refresh.strftime('%H:%M:%S'), test_mode, entry.inactive_hours
        )
        return entries, next_refresh
