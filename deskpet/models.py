"""Data models for pet states, todos, messages, and sync records"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Tuple

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    # Everything else in the app compares naive local times
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _format_dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class PetStateCategory(Enum):
    """Groups of pet states"""
    FATIGUE = 'fatigue'
    SPORT = 'sport'
    FOCUS = 'focus'
    HEALTHY = 'healthy'
    ALERT = 'alert'


class PetEmotion(Enum):
    """Coarse emotion shown by the widget and used by the message library"""
    IDLE = 'idle'
    LONG_USAGE = 'longUsage'
    AWAY_FOCUS = 'awayFocus'
    WORKOUT = 'workout'
    SLEEPY = 'sleepy'
    DIZZY = 'dizzy'
    BORED = 'bored'
    HAPPY = 'happy'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'PetEmotion':
        """Lenient lookup for stored data; unknown values become IDLE"""
        try:
            return cls(value)
        except ValueError:
            return cls.IDLE


class PetState(Enum):
    """Fine-grained pet state driven by the reminder manager and the user"""
    # Fatigue
    DIZZY = 'dizzy'
    SLEEPY = 'sleepy'
    TIRED_EYES = 'tiredEyes'
    # Sport
    RUNNING = 'running'
    JUMPING = 'jumping'
    WORKOUT = 'workout'
    # Focus
    READING = 'reading'
    THINKING = 'thinking'
    BORED = 'bored'
    # Healthy
    HAPPY = 'happy'
    CHEERING = 'cheering'
    CELEBRATING = 'celebrating'
    # Alert
    OVERUSE_WARNING = 'overuseWarning'
    REST_NEEDED = 'restNeeded'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'PetState':
        """Lenient lookup for stored data; unknown values become HAPPY"""
        try:
            return cls(value)
        except ValueError:
            logger.warning("Mapping unknown pet state %r to happy", value)
            return cls.HAPPY

    @property
    def category(self) -> PetStateCategory:
        return _STATE_CATEGORIES[self]

    @property
    def emotion(self) -> PetEmotion:
        return _STATE_EMOTIONS[self]


_STATE_CATEGORIES = {
    PetState.DIZZY: PetStateCategory.FATIGUE,
    PetState.SLEEPY: PetStateCategory.FATIGUE,
    PetState.TIRED_EYES: PetStateCategory.FATIGUE,
    PetState.RUNNING: PetStateCategory.SPORT,
    PetState.JUMPING: PetStateCategory.SPORT,
    PetState.WORKOUT: PetStateCategory.SPORT,
    PetState.READING: PetStateCategory.FOCUS,
    PetState.THINKING: PetStateCategory.FOCUS,
    PetState.BORED: PetStateCategory.FOCUS,
    PetState.HAPPY: PetStateCategory.HEALTHY,
    PetState.CHEERING: PetStateCategory.HEALTHY,
    PetState.CELEBRATING: PetStateCategory.HEALTHY,
    PetState.OVERUSE_WARNING: PetStateCategory.ALERT,
    PetState.REST_NEEDED: PetStateCategory.ALERT,
}

_STATE_EMOTIONS = {
    PetState.DIZZY: PetEmotion.DIZZY,
    PetState.TIRED_EYES: PetEmotion.DIZZY,
    PetState.OVERUSE_WARNING: PetEmotion.LONG_USAGE,
    PetState.SLEEPY: PetEmotion.SLEEPY,
    PetState.REST_NEEDED: PetEmotion.SLEEPY,
    PetState.RUNNING: PetEmotion.WORKOUT,
    PetState.JUMPING: PetEmotion.WORKOUT,
    PetState.WORKOUT: PetEmotion.WORKOUT,
    PetState.READING: PetEmotion.AWAY_FOCUS,
    PetState.THINKING: PetEmotion.AWAY_FOCUS,
    PetState.BORED: PetEmotion.BORED,
    PetState.HAPPY: PetEmotion.HAPPY,
    PetState.CHEERING: PetEmotion.HAPPY,
    PetState.CELEBRATING: PetEmotion.HAPPY,
}


class PetCarrier(Enum):
    """Surfaces that display the pet"""
    WIDGET = 'widget'
    APP_ICON = 'appIcon'
    IN_APP = 'inApp'
    NOTIFICATION = 'notification'


class MessageSource(Enum):
    BUILTIN = 'builtin'
    AI_GENERATED = 'aiGenerated'
    USER_CUSTOM = 'userCustom'


class MessageCategory(Enum):
    HEALTH_REMINDER = 'healthReminder'
    SPORT_ENCOURAGE = 'sportEncourage'
    STUDY_PRAISE = 'studyPraise'
    ACHIEVEMENT = 'achievement'
    DAILY_CARE = 'dailyCare'


class DetectionSource(Enum):
    SCREEN_TIME = 'screenTime'
    HEALTH_KIT = 'healthKit'
    IDLE_INFERENCE = 'idleInference'
    HABIT_MODEL = 'habitModel'
    MANUAL_OVERRIDE = 'manualOverride'


@dataclass
class TodoItem:
    """A todo entry shown in the app and on the widget"""
    text: str
    is_completed: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'TodoItem':
        """Create TodoItem from its stored form"""
        return cls(
            id=data['id'],
            text=data['text'],
            is_completed=bool(data.get('isCompleted', False)),
            created_at=_parse_dt(data.get('createdAt')) or datetime.now()
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'text': self.text,
            'isCompleted': self.is_completed,
            'createdAt': _format_dt(self.created_at)
        }


@dataclass
class StateMessage:
    """A message the pet can say while in a given state"""
    state: PetState
    content: str
    created_at: datetime = field(default_factory=datetime.now)
    last_used: Optional[datetime] = None
    used_count: int = 0
    source: MessageSource = MessageSource.BUILTIN
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'StateMessage':
        """Create StateMessage from its stored form"""
        return cls(
            id=data['id'],
            state=PetState.parse(data['state']),
            content=data['content'],
            created_at=_parse_dt(data.get('createdAt')) or datetime.now(),
            last_used=_parse_dt(data.get('lastUsed')),
            used_count=int(data.get('usedCount', 0)),
            source=MessageSource(data.get('source', 'builtin'))
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'state': self.state.value,
            'content': self.content,
            'createdAt': _format_dt(self.created_at),
            'lastUsed': _format_dt(self.last_used),
            'usedCount': self.used_count,
            'source': self.source.value
        }


@dataclass
class MessageItem:
    """A categorised message used for notifications"""
    category: MessageCategory
    content: str
    last_used: Optional[datetime] = None
    used_count: int = 0
    source: MessageSource = MessageSource.BUILTIN
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'MessageItem':
        return cls(
            id=data.get('id') or _new_id(),
            category=MessageCategory(data['category']),
            content=data['content'],
            last_used=_parse_dt(data.get('lastUsed')),
            used_count=int(data.get('usedCount', 0)),
            source=MessageSource(data.get('source', 'builtin'))
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'category': self.category.value,
            'content': self.content,
            'lastUsed': _format_dt(self.last_used),
            'usedCount': self.used_count,
            'source': self.source.value
        }


@dataclass
class ResourceTrigger:
    """Context in which an expression resource applies"""
    context: str
    time_range: Optional[Tuple[int, int]] = None  # minutes, inclusive

    @classmethod
    def from_dict(cls, data: Dict) -> 'ResourceTrigger':
        time_range = data.get('timeRange')
        return cls(
            context=data['context'],
            time_range=(int(time_range[0]), int(time_range[1])) if time_range else None
        )

    def to_dict(self) -> Dict:
        return {
            'context': self.context,
            'timeRange': list(self.time_range) if self.time_range else None
        }

    def matches(self, context: str, minutes: Optional[int] = None) -> bool:
        """Check whether this trigger applies to a context and duration"""
        if context != self.context:
            return False
        if self.time_range is None or minutes is None:
            return True
        low, high = self.time_range
        return low <= minutes <= high


@dataclass
class ExpressionResource:
    """Display resource for one state on one carrier"""
    id: str
    state: PetState
    carrier: PetCarrier
    display: str
    priority: int = 0
    triggers: List[ResourceTrigger] = field(default_factory=list)
    image_name: Optional[str] = None
    animation_name: Optional[str] = None
    sound_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'ExpressionResource':
        return cls(
            id=data['id'],
            state=PetState(data['state']),
            carrier=PetCarrier(data['carrier']),
            display=data['display'],
            priority=int(data.get('priority', 0)),
            triggers=[ResourceTrigger.from_dict(t) for t in data.get('triggers', [])],
            image_name=data.get('imageName'),
            animation_name=data.get('animationName'),
            sound_name=data.get('soundName')
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'state': self.state.value,
            'carrier': self.carrier.value,
            'display': self.display,
            'priority': self.priority,
            'triggers': [t.to_dict() for t in self.triggers],
            'imageName': self.image_name,
            'animationName': self.animation_name,
            'soundName': self.sound_name
        }


@dataclass
class CarrierSyncState:
    """Record of one push of pet state to a carrier"""
    carrier: PetCarrier
    last_state: PetState
    last_updated: datetime = field(default_factory=datetime.now)
    last_success: bool = True
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'CarrierSyncState':
        return cls(
            id=data['id'],
            carrier=PetCarrier(data['carrier']),
            last_state=PetState.parse(data['lastState']),
            last_updated=_parse_dt(data['lastUpdated']),
            last_success=bool(data['lastSuccess'])
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'carrier': self.carrier.value,
            'lastState': self.last_state.value,
            'lastUpdated': _format_dt(self.last_updated),
            'lastSuccess': self.last_success
        }


@dataclass
class UserStatusSnapshot:
    """A detected user status with its confidence"""
    detected_state: PetState
    confidence: float
    source: DetectionSource
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0 and 1, got {self.confidence}")

    @classmethod
    def from_dict(cls, data: Dict) -> 'UserStatusSnapshot':
        return cls(
            id=data['id'],
            detected_state=PetState.parse(data['detectedState']),
            confidence=float(data['confidence']),
            source=DetectionSource(data['source']),
            timestamp=_parse_dt(data['timestamp']),
            context=dict(data.get('context', {}))
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'detectedState': self.detected_state.value,
            'confidence': self.confidence,
            'source': self.source.value,
            'timestamp': _format_dt(self.timestamp),
            'context': dict(self.context)
        }


@dataclass
class PetAppearance:
    color_hex: str = '#FFD166'
    accessory: str = '🎀'
    base_form: str = 'cat'


@dataclass
class BehaviorThresholds:
    screen_time_limit_minutes: int = 90
    rest_reminder_minutes: int = 30
    focus_detection_idle_minutes: int = 20


@dataclass
class NotificationPreference:
    enable_notifications: bool = True
    daily_greeting_times: List[str] = field(default_factory=lambda: ['08:00', '22:00'])
    quiet_hours: Optional[Tuple[int, int]] = None  # 0-23, inclusive

    def is_quiet(self, hour: int) -> bool:
        """Check if an hour falls inside quiet hours (ranges may wrap midnight)"""
        if self.quiet_hours is None:
            return False
        start, end = self.quiet_hours
        if start <= end:
            return start <= hour <= end
        return hour >= start or hour <= end


@dataclass
class PetConfiguration:
    """User-editable pet settings"""
    name: str = 'Default'
    appearance: PetAppearance = field(default_factory=PetAppearance)
    thresholds: BehaviorThresholds = field(default_factory=BehaviorThresholds)
    notification_preference: NotificationPreference = field(default_factory=NotificationPreference)
    sensitivity: float = 0.6
    last_updated: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'PetConfiguration':
        """Create PetConfiguration from its stored form"""
        appearance = data.get('appearance', {})
        thresholds = data.get('thresholds', {})
        prefs = data.get('notificationPreference', {})
        quiet = prefs.get('quietHours')

        return cls(
            id=data.get('id') or _new_id(),
            name=data.get('name', 'Default'),
            appearance=PetAppearance(
                color_hex=appearance.get('colorHex', '#FFD166'),
                accessory=appearance.get('accessory', '🎀'),
                base_form=appearance.get('baseForm', 'cat')
            ),
            thresholds=BehaviorThresholds(
                screen_time_limit_minutes=int(thresholds.get('screenTimeLimitMinutes', 90)),
                rest_reminder_minutes=int(thresholds.get('restReminderMinutes', 30)),
                focus_detection_idle_minutes=int(thresholds.get('focusDetectionIdleMinutes', 20))
            ),
            notification_preference=NotificationPreference(
                enable_notifications=bool(prefs.get('enableNotifications', True)),
                daily_greeting_times=list(prefs.get('dailyGreetingTimes', ['08:00', '22:00'])),
                quiet_hours=(int(quiet[0]), int(quiet[1])) if quiet else None
            ),
            sensitivity=float(data.get('sensitivity', 0.6)),
            last_updated=_parse_dt(data.get('lastUpdated')) or datetime.now()
        )

    def to_dict(self) -> Dict:
        prefs = self.notification_preference
        return {
            'id': self.id,
            'name': self.name,
            'appearance': {
                'colorHex': self.appearance.color_hex,
                'accessory': self.appearance.accessory,
                'baseForm': self.appearance.base_form
            },
            'thresholds': {
                'screenTimeLimitMinutes': self.thresholds.screen_time_limit_minutes,
                'restReminderMinutes': self.thresholds.rest_reminder_minutes,
                'focusDetectionIdleMinutes': self.thresholds.focus_detection_idle_minutes
            },
            'notificationPreference': {
                'enableNotifications': prefs.enable_notifications,
                'dailyGreetingTimes': list(prefs.daily_greeting_times),
                'quietHours': list(prefs.quiet_hours) if prefs.quiet_hours else None
            },
            'sensitivity': self.sensitivity,
            'lastUpdated': _format_dt(self.last_updated)
        }
