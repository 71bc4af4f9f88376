import sqlite3

import pytest

from deskpet import keys
from deskpet.icons import STATE_ICONS
from deskpet.models import PetState
from deskpet.sync import MAX_SYNC_RECORDS


def test_update_writes_every_shared_key(sync, shared_store, widget_center):
    token = widget_center.reload_token()

    entry = sync.update_all_carriers(PetState.TIRED_EYES)

    assert shared_store.get(keys.SHARED_STATE) == "tiredEyes"
    assert shared_store.get(keys.SHARED_EMOTION) == "dizzy"
    assert shared_store.get(keys.SHARED_ICON) in STATE_ICONS[PetState.TIRED_EYES]
    assert shared_store.get(keys.SHARED_STATE_MESSAGE)
    assert widget_center.reload_token() > token
    assert entry.last_success and entry.last_state == PetState.TIRED_EYES


def test_current_state(sync):
    assert sync.current_state() is None
    sync.update_all_carriers(PetState.WORKOUT)
    assert sync.current_state() == PetState.WORKOUT


def test_failed_write_is_recorded_and_raised(sync, shared_store, monkeypatch):
    real_set = shared_store.set

    def locked(key, value, suite=keys.GROUP):
        if key == keys.SHARED_STATE:
            raise sqlite3.OperationalError("Shared store locked after 3 attempts")
        real_set(key, value, suite)

    monkeypatch.setattr(shared_store, "set", locked)

    with pytest.raises(sqlite3.OperationalError):
        sync.update_all_carriers(PetState.HAPPY)
    assert sync.carrier_states[-1].last_success is False


def test_failed_message_bookkeeping_is_recorded_and_raised(sync, shared_store, monkeypatch):
    real_set = shared_store.set

    def locked(key, value, suite=keys.GROUP):
        if key == keys.STATE_MESSAGES:
            raise sqlite3.OperationalError("Shared store locked after 3 attempts")
        real_set(key, value, suite)

    monkeypatch.setattr(shared_store, "set", locked)

    with pytest.raises(sqlite3.OperationalError):
        sync.update_all_carriers(PetState.SLEEPY)
    assert sync.carrier_states[-1].last_success is False
    assert sync.carrier_states[-1].last_state == PetState.SLEEPY


def test_sync_history_is_bounded(sync):
    for _ in range(MAX_SYNC_RECORDS + 5):
        sync.update_all_carriers(PetState.HAPPY)
    assert len(sync.carrier_states) == MAX_SYNC_RECORDS
