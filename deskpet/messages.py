"""Message libraries: per-state pet messages and categorised notification texts"""

import json
import logging
import random
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Union

from .config import config
from .database import SharedStore, store as default_store
from .models import (
    MessageCategory, MessageItem, MessageSource, PetState, StateMessage
)
from . import keys

logger = logging.getLogger(__name__)

# Share of least-used messages that get_message picks from
LEAST_USED_FRACTION = 0.3

DEFAULT_MESSAGES = {
    PetState.HAPPY: [
        "Please look after me today too~",
        "Let's do our best today! (๑•̀ㅂ•́)و✧",
        "I'm right here with you~",
        "Today is a wonderful day! ✨",
    ],
    PetState.CHEERING: [
        "Amazing! Cheering for you! 🎉",
        "Go go go! I believe in you! 💪",
        "You're doing great, keep it up! 🌟",
    ],
    PetState.CELEBRATING: [
        "Congratulations! Time to celebrate! 🎊",
        "So impressive, I'm proud of you! 🏆",
    ],
    PetState.DIZZY: [
        "You've been on the screen a while... take a break? 😵‍💫",
        "Your eyes must be tired, rest a little~",
        "Feeling dizzy? Put the screen down for a moment",
    ],
    PetState.SLEEPY: [
        "So sleepy... you should rest too 😴",
        "It's late, time for bed~",
        "I'm a bit sleepy, get some rest early",
    ],
    PetState.TIRED_EYES: [
        "My eyes are so tired... let's rest 🥺",
        "Too long on the screen, give your eyes a break",
    ],
    PetState.RUNNING: [
        "Let's go for a run, no more sitting! 🏃‍♂️",
        "Exercise time! Let's head out!",
        "Get moving, it's good for you~",
    ],
    PetState.JUMPING: [
        "Jump! Full of energy! 🤸‍♀️",
        "Let's exercise together!",
    ],
    PetState.WORKOUT: [
        "Work out and stay healthy! 🏋️‍♀️",
        "Exercise makes life better!",
    ],
    PetState.READING: [
        "I'll watch the screen, you focus on studying 📚",
        "Study time! Stay focused~",
        "Learn a little more every day!",
    ],
    PetState.THINKING: [
        "What are you thinking about? 🤔",
        "Let's think it through together~",
    ],
    PetState.BORED: [
        "Kind of bored... 🥱",
        "Play with me for a while~",
        "So bored, let's find something to do",
    ],
    PetState.OVERUSE_WARNING: [
        "You've been on the screen too long, time to rest! ⚠️",
        "Take a break, your body will thank you",
        "Too much screen time, put it down for a bit",
    ],
    PetState.REST_NEEDED: [
        "You need a rest! 😴",
        "Time to rest, health comes first",
    ],
}


def default_message(state: PetState) -> str:
    """Fallback text when a state has no messages at all"""
    return DEFAULT_MESSAGES[state][0]


class StateMessageManager:
    """Keeps the messages for each pet state and picks one to show"""

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store or default_store
        self.rng = rng or random.Random()
        self.clock = clock
        self.messages: List[StateMessage] = []

        self._load_messages()
        if not self.messages:
            self._load_default_messages()

    @property
    def max_messages_per_state(self) -> int:
        value = self.store.get_int(keys.MAX_MESSAGES_PER_STATE, suite=keys.STANDARD)
        return value if value > 0 else config.max_messages_per_state

    @max_messages_per_state.setter
    def max_messages_per_state(self, value: int):
        if value <= 0:
            raise ValueError("Max messages per state must be positive")
        self.store.set(keys.MAX_MESSAGES_PER_STATE, int(value), suite=keys.STANDARD)
        logger.info("Max messages per state set to %d", value)

    def get_message(self, state: PetState) -> str:
        """
        Pick a message for a state, favouring the least used ones

        Messages are ordered by use count, then by last use (never used
        first). One is drawn at random from the leading 30% and marked used.

        Args:
            state: Pet state to pick for

        Returns:
            Message text
        """
        state_messages = self.get_messages(state)
        if not state_messages:
            return default_message(state)

        ordered = sorted(
            state_messages,
            key=lambda m: (m.used_count, m.last_used or datetime.min)
        )
        top_count = max(1, int(len(ordered) * LEAST_USED_FRACTION))
        selected = self.rng.choice(ordered[:top_count])

        self.mark_used(selected.id)
        return selected.content

    def get_messages(self, state: PetState) -> List[StateMessage]:
        return [m for m in self.messages if m.state == state]

    def add_message(
        self,
        state: PetState,
        content: str,
        source: MessageSource = MessageSource.USER_CUSTOM
    ) -> StateMessage:
        """Add a message, evicting random old ones once the state is full"""
        content = content.strip()
        if not content:
            raise ValueError("Message content cannot be empty")

        state_messages = self.get_messages(state)
        limit = self.max_messages_per_state
        if len(state_messages) >= limit:
            to_remove = len(state_messages) - limit + 1
            self._evict(state_messages, to_remove)
            logger.info("Removed %d old message(s) to keep %s at %d", to_remove, state.value, limit)

        message = StateMessage(state=state, content=content, created_at=self.clock(), source=source)
        self.messages.append(message)
        self._save_messages()
        return message

    def add_messages(self, new_messages: Iterable[StateMessage]):
        """Add a batch, capping each state at the maximum"""
        new_messages = list(new_messages)
        grouped: Dict[PetState, List[StateMessage]] = defaultdict(list)
        for message in new_messages:
            grouped[message.state].append(message)

        limit = self.max_messages_per_state
        for state, state_new in grouped.items():
            existing = self.get_messages(state)
            total = len(existing) + len(state_new)
            if total > limit:
                to_remove = min(total - limit, len(existing))
                self._evict(existing, to_remove)
                logger.info("Removed %d old %s message(s) before batch add", to_remove, state.value)

        self.messages.extend(new_messages)
        self._save_messages()

    def _evict(self, candidates: List[StateMessage], count: int):
        doomed = {m.id for m in self.rng.sample(candidates, min(count, len(candidates)))}
        self.messages = [m for m in self.messages if m.id not in doomed]

    def mark_used(self, message_id: str):
        for message in self.messages:
            if message.id == message_id:
                message.used_count += 1
                message.last_used = self.clock()
                self._save_messages()
                return

    def delete_message(self, message_id: str) -> bool:
        """Delete a message by id; returns False when it was not found"""
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.id != message_id]

        if len(self.messages) == before:
            logger.warning("Message not found: %s", message_id)
            return False

        self._save_messages()
        logger.info("Deleted message %s, %d left", message_id, len(self.messages))
        return True

    def delete_messages(self, state: PetState) -> int:
        """Delete all messages for a state and return how many went"""
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.state != state]
        deleted = before - len(self.messages)

        if deleted:
            self._save_messages()
            logger.info("Deleted %d message(s) for %s", deleted, state.value)
        return deleted

    def find_message(self, prefix: str) -> Optional[StateMessage]:
        """Find a message by id or unique id prefix"""
        matches = [m for m in self.messages if m.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    def _save_messages(self):
        self.store.set(
            keys.STATE_MESSAGES,
            [m.to_dict() for m in self.messages],
            suite=keys.STANDARD
        )

    def _load_messages(self):
        raw = self.store.get(keys.STATE_MESSAGES, None, suite=keys.STANDARD)
        if raw is None:
            logger.debug("No saved state messages")
            return

        try:
            self.messages = [StateMessage.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Saved state messages are unreadable, starting over")
            self.messages = []
            return

        logger.debug("Loaded %d state messages", len(self.messages))

    def _load_default_messages(self):
        # Staggered creation times, a day in the past
        base_time = self.clock() - timedelta(days=1)
        messages = []
        for state, contents in DEFAULT_MESSAGES.items():
            for content in contents:
                messages.append(StateMessage(
                    state=state,
                    content=content,
                    created_at=base_time + timedelta(seconds=len(messages)),
                    source=MessageSource.BUILTIN
                ))

        self.messages = messages
        self._save_messages()
        logger.info("Loaded %d default state messages", len(messages))


class MessageLibraryManager:
    """Categorised messages used for notifications"""

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store or default_store
        self.rng = rng or random.Random()
        self.clock = clock
        self.messages: List[MessageItem] = []

        raw = self.store.get(keys.MESSAGE_LIBRARY, [], suite=keys.STANDARD)
        try:
            self.messages = [MessageItem.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Saved message library is unreadable, starting empty")

    def load(self, data: Union[str, bytes]):
        """Replace the library from a JSON array"""
        items = json.loads(data)
        self.messages = [MessageItem.from_dict(item) for item in items]
        self._save()
        logger.info("Loaded %d library messages", len(self.messages))

    def random_message(self, category: MessageCategory) -> Optional[MessageItem]:
        """Pick a message in a category, drawn from the least recently used half"""
        candidates = sorted(
            (m for m in self.messages if m.category == category),
            key=lambda m: m.last_used or datetime.min
        )
        if not candidates:
            return None

        pool = candidates[:max(1, (len(candidates) + 1) // 2)]
        return self.rng.choice(pool)

    def mark_used(self, message_id: str):
        for message in self.messages:
            if message.id == message_id:
                message.last_used = self.clock()
                message.used_count += 1
                self._save()
                return

    def _save(self):
        self.store.set(
            keys.MESSAGE_LIBRARY,
            [m.to_dict() for m in self.messages],
            suite=keys.STANDARD
        )


# Global state message manager instance
state_messages = StateMessageManager()
