from datetime import timedelta

from deskpet import keys
from deskpet.models import PetEmotion
from deskpet.widget import (
    DEFAULT_EXPRESSIONS, MEDIUM, SMALL, format_clock, inactive_emoji, inactive_message, max_todo_count,
)


def test_placeholder(provider):
    entry = provider.placeholder()
    assert entry.emotion == PetEmotion.IDLE
    assert len(entry.todos) == 2


def test_empty_store_shows_idle_defaults(provider):
    entry = provider.current_entry()
    assert entry.emotion == PetEmotion.IDLE
    assert (entry.emoji, entry.phrase) == DEFAULT_EXPRESSIONS[PetEmotion.IDLE]
    assert entry.inactive_hours == 0
    assert entry.todos == []


def test_saved_icon_and_message_win(provider, shared_store):
    shared_store.set(keys.SHARED_EMOTION, "sleepy")
    shared_store.set(keys.SHARED_STATE_MESSAGE, "Five more minutes")

    entry = provider.current_entry()
    assert entry.emoji == DEFAULT_EXPRESSIONS[PetEmotion.SLEEPY][0]
    assert entry.phrase == "Five more minutes"

    shared_store.set(keys.SHARED_ICON, "😪")
    assert provider.current_entry().emoji == "😪"


def test_inactive_hours(provider, shared_store, clock):
    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(seconds=30))
    assert provider.inactive_hours() == 0

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=3, minutes=10))
    assert provider.inactive_hours() == 3
    assert provider.inactive_seconds() == 3 * 3600 + 600


def test_inactive_hours_scaled_in_test_mode(provider, shared_store, clock):
    shared_store.set(keys.SHARED_TEST_MODE, True)
    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(minutes=2))
    assert provider.inactive_hours() == 4


def test_normal_timeline_refresh(provider, shared_store, clock):
    entries, next_refresh = provider.timeline()
    assert len(entries) == 1
    assert next_refresh == clock() + timedelta(seconds=60)

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=3))
    entries, next_refresh = provider.timeline()
    assert entries[0].is_inactive
    assert next_refresh == clock() + timedelta(seconds=30)


def test_test_mode_timeline_ticks_every_second(provider, shared_store, clock):
    shared_store.set(keys.SHARED_TEST_MODE, True)
    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(seconds=100))

    entries, next_refresh = provider.timeline()

    assert len(entries) == 60
    assert next_refresh == clock() + timedelta(seconds=1)
    assert entries[0].inactive_seconds == 100
    assert entries[59].inactive_seconds == 159
    assert entries[59].date == clock() + timedelta(seconds=59)
    assert entries[59].inactive_hours == int(159 * 120 / 3600)


def test_inactive_texts():
    assert inactive_emoji(3) == "💭"
    assert inactive_emoji(10) == "😢"
    assert inactive_emoji(30) == "😭"
    assert inactive_emoji(100) == "💔"
    assert inactive_message(24) == "1 day without you, I miss you!"
    assert inactive_message(50) == "2 days without you, I miss you!"
    assert "so long" in inactive_message(72)


def test_format_clock():
    assert format_clock(59) == "0:59"
    assert format_clock(3725) == "1:02:05"


def test_max_todo_count():
    assert max_todo_count(SMALL, []) == 0
    assert max_todo_count(SMALL, [object()]) == 2
    assert max_todo_count(MEDIUM, []) == 3
