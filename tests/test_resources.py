import json
import random

from deskpet.models import PetCarrier, PetState
from deskpet.resources import ResourceManager

RESOURCES = json.dumps([
    {"id": "late", "state": "sleepy", "carrier": "widget", "display": "😴", "priority": 5},
    {"id": "early", "state": "sleepy", "carrier": "widget", "display": "🥱", "priority": 1,
     "triggers": [{"context": "night", "timeRange": [0, 60]}]},
    {"id": "icon", "state": "sleepy", "carrier": "appIcon", "display": "💤"},
    {"id": "run", "state": "running", "carrier": "widget", "display": "🏃"},
])


def load():
    manager = ResourceManager(random.Random(3))
    manager.load(RESOURCES)
    return manager


def test_resources_sorted_by_priority():
    ids = [r.id for r in load().resources(PetState.SLEEPY, PetCarrier.WIDGET)]
    assert ids == ["early", "late"]


def test_random_resource():
    manager = load()
    assert manager.random_resource(PetState.SLEEPY, PetCarrier.APP_ICON).id == "icon"
    assert manager.random_resource(PetState.HAPPY, PetCarrier.WIDGET) is None


def test_context_filter():
    manager = load()
    assert [r.id for r in manager.for_context(PetState.SLEEPY, PetCarrier.WIDGET, "night", 30)] == ["early"]
    assert manager.for_context(PetState.SLEEPY, PetCarrier.WIDGET, "night", 90) == []
