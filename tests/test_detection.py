from datetime import timedelta

from deskpet import keys
from deskpet.detection import ActivitySource, IdleInferenceSource, ScreenTimeSource, StateDetector
from deskpet.models import DetectionSource, PetState


def test_highest_confidence_wins():
    snapshot = StateDetector([ActivitySource(), ScreenTimeSource()]).detect()
    assert snapshot.detected_state == PetState.OVERUSE_WARNING
    assert snapshot.confidence == 0.7


def test_no_sources_falls_back_to_happy():
    snapshot = StateDetector([]).detect()
    assert snapshot.detected_state == PetState.HAPPY
    assert snapshot.confidence == 0.2
    assert snapshot.source == DetectionSource.MANUAL_OVERRIDE


def test_idle_inference(shared_store, clock):
    source = IdleInferenceSource(shared_store, clock, warning_hours=2)
    assert source.estimate_state() is None

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=1))
    assert source.estimate_state() is None

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=3))
    snapshot = StateDetector([source]).detect()
    assert snapshot.detected_state == PetState.SLEEPY
    assert snapshot.confidence == 0.5
    assert snapshot.context["idle_hours"] == "3.0"


def test_idle_inference_follows_stored_warning_threshold(shared_store, clock, pet_test_mode):
    source = IdleInferenceSource(shared_store, clock, pet_test_mode)
    shared_store.set(keys.INACTIVITY_WARNING_HOURS, 5.0, suite=keys.STANDARD)

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=3))
    assert source.estimate_state() is None

    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(hours=5))
    assert source.estimate_state().detected_state == PetState.SLEEPY


def test_idle_inference_scales_with_test_mode(shared_store, clock, pet_test_mode):
    source = IdleInferenceSource(shared_store, clock, pet_test_mode)
    shared_store.set_datetime(keys.SHARED_LAST_ACTIVE, clock() - timedelta(minutes=2))
    assert source.estimate_state() is None

    # Default 2h warning becomes one minute at 120x
    pet_test_mode.enabled = True
    assert source.warning_threshold() == 60
    assert source.estimate_state().detected_state == PetState.SLEEPY
