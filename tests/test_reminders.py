import threading

import pytest

from deskpet import keys
from deskpet.models import PetState
from deskpet.reminders import format_duration


def current_state(shared_store):
    return PetState(shared_store.get(keys.SHARED_STATE))


def test_format_duration():
    assert format_duration(59 * 60) == "59m"
    assert format_duration(2 * 3600 + 5 * 60) == "2h 5m"


def test_fresh_install_does_not_write_last_active(reminder, shared_store):
    assert shared_store.get_datetime(keys.SHARED_LAST_ACTIVE) is None

    reminder.check_continuous_usage()
    assert shared_store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD) is not None


def test_becoming_active_publishes_happy(reminder, shared_store, clock):
    reminder.app_did_become_active()

    assert current_state(shared_store) == PetState.HAPPY
    assert shared_store.get_datetime(keys.SHARED_LAST_ACTIVE) == clock()
    assert shared_store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD) == clock()


def test_inactivity_warning_fires_once(reminder, shared_store, clock):
    reminder.update_inactivity_limit(30)
    reminder.app_did_become_active()

    clock.advance(hours=8)
    reminder.check_inactivity_reminders()
    assert current_state(shared_store) == PetState.BORED
    assert reminder.inactivity_warning_sent

    reminder.sync.update_all_carriers(PetState.READING)
    clock.advance(hours=1)
    reminder.check_inactivity_reminders()
    assert current_state(shared_store) == PetState.READING


def test_gentle_reminder_depends_on_time_away(reminder, shared_store, clock):
    reminder.update_inactivity_limit(100)
    reminder.app_did_become_active()
    reminder.sync.update_all_carriers(PetState.READING)

    clock.advance(hours=3)
    reminder.check_inactivity_reminders()
    assert current_state(shared_store) == PetState.HAPPY

    reminder.reset_inactivity_state()
    clock.advance(hours=30)
    reminder.check_inactivity_reminders()
    assert current_state(shared_store) == PetState.SLEEPY


def test_inactivity_limit_welcomes_back_and_sets_both_flags(reminder, shared_store, clock):
    reminder.app_did_become_active()
    reminder.sync.update_all_carriers(PetState.READING)

    clock.advance(hours=7)
    reminder.check_inactivity_reminders()

    assert current_state(shared_store) == PetState.HAPPY
    assert reminder.inactivity_limit_sent
    assert reminder.inactivity_warning_sent


def test_continuous_use_warning_fires_once(reminder, shared_store, clock):
    reminder.app_did_become_active()

    clock.advance(minutes=100)
    reminder.check_continuous_usage()
    assert current_state(shared_store) == PetState.OVERUSE_WARNING

    reminder.sync.update_all_carriers(PetState.HAPPY)
    clock.advance(minutes=30)
    reminder.check_continuous_usage()
    assert current_state(shared_store) == PetState.HAPPY


def test_relaunch_after_an_hour_restarts_continuous_clock(reminder, shared_store, clock):
    reminder.app_did_become_active()
    first_launch = clock()

    clock.advance(minutes=30)
    reminder.app_did_become_active()
    assert shared_store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD) == first_launch

    clock.advance(minutes=61)
    reminder.app_did_become_active()
    assert shared_store.get_datetime(keys.APP_LAUNCH_TIME, suite=keys.STANDARD) == clock()


def test_cold_start_resets_flags_but_background_resume_keeps_them(reminder, clock):
    reminder.app_did_become_active()
    clock.advance(hours=7)
    reminder.check_inactivity_reminders()
    assert reminder.inactivity_limit_sent

    reminder.app_did_enter_background()
    clock.advance(minutes=5)
    reminder.app_did_become_active()
    assert reminder.background_entry_time is None
    assert reminder.last_active_time == clock()
    assert reminder.inactivity_limit_sent

    reminder.app_did_become_active()
    assert not reminder.inactivity_limit_sent
    assert not reminder.inactivity_warning_sent


def test_test_mode_shrinks_thresholds(reminder, shared_store, clock):
    reminder.test_mode.enabled = True
    reminder.update_inactivity_limit(30)
    reminder.app_did_become_active()

    # 4 real minutes are 8 hours at 120x
    clock.advance(minutes=4)
    reminder.check_inactivity_reminders()
    assert current_state(shared_store) == PetState.BORED

    report = reminder.validate_test_mode_thresholds()
    assert report["inactivity_warning"] == 60
    assert report["check_interval"] == 30
    assert report["continuous_warning"] == 45
    assert report["time_scale_factor"] == 120


def test_thresholds_must_be_positive(reminder, shared_store):
    with pytest.raises(ValueError):
        reminder.update_inactivity_warning(0)

    shared_store.set(keys.INACTIVITY_WARNING_HOURS, -1.0, suite=keys.STANDARD)
    assert reminder.get_inactivity_warning_hours() == 2.0

    reminder.update_inactivity_warning(3)
    assert reminder.get_inactivity_warning_hours() == 3.0
    assert reminder.current_inactivity_warning_threshold() == 3 * 3600


def test_simulate_inactivity_restores_real_time(reminder, shared_store, clock):
    reminder.app_did_become_active()
    before = reminder.last_active_time

    reminder.simulate_inactivity(7)

    assert reminder.inactivity_limit_sent
    assert reminder.last_active_time == before


def test_simulate_continuous_usage_clears_launch_time(reminder, shared_store):
    reminder.simulate_continuous_usage(100)

    assert current_state(shared_store) == PetState.OVERUSE_WARNING
    assert not shared_store.contains(keys.APP_LAUNCH_TIME, suite=keys.STANDARD)


def test_reset_inactivity_state(reminder, shared_store, clock):
    reminder.app_did_become_active()
    clock.advance(hours=7)
    reminder.check_inactivity_reminders()

    reminder.reset_inactivity_state()

    assert not reminder.inactivity_limit_sent
    assert shared_store.get_datetime(keys.SHARED_LAST_ACTIVE) == clock()
    assert current_state(shared_store) == PetState.HAPPY


def test_test_mode_change_restarts_running_monitor(reminder):
    reminder.start_monitoring()
    first_thread = reminder._thread
    assert reminder.is_monitoring and first_thread.is_alive()

    reminder.test_mode.toggle()

    assert reminder.is_monitoring
    assert reminder._thread is not first_thread
    assert not first_thread.is_alive()

    reminder.stop_monitoring()
    assert not reminder.is_monitoring


def test_test_mode_change_does_not_start_idle_monitor(reminder):
    reminder.test_mode.toggle()
    assert not reminder.is_monitoring
    assert reminder._thread is None


def test_check_interval_change_restarts_running_monitor(reminder, shared_store):
    reminder.start_monitoring()
    first_thread = reminder._thread

    reminder.update_check_interval(2)

    assert shared_store.get_float(keys.CHECK_INTERVAL_HOURS, suite=keys.STANDARD) == 2
    assert reminder.is_monitoring
    assert reminder._thread is not first_thread and reminder._thread.is_alive()
    assert not first_thread.is_alive()


def test_monitor_thread_runs_periodic_checks(reminder, monkeypatch):
    checked = threading.Event()
    monkeypatch.setattr(reminder, "perform_check", checked.set)

    # 0.36s a tick, 3ms once test mode divides it by 120
    reminder.test_mode.enabled = True
    reminder.update_check_interval(0.0001)
    reminder.start_monitoring()

    assert checked.wait(timeout=2)
