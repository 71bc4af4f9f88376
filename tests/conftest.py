import os
import sys
import random
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Point the global store at a throwaway directory before deskpet is imported
os.environ["DESKPET_DATA_DIR"] = tempfile.mkdtemp(prefix="deskpet-tests-")
os.environ.pop("LOG_FILE", None)

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from deskpet.database import SharedStore  # noqa: E402
from deskpet.icons import IconManager  # noqa: E402
from deskpet.messages import StateMessageManager  # noqa: E402
from deskpet.reminders import UsageReminderManager  # noqa: E402
from deskpet.sync import SyncManager  # noqa: E402
from deskpet.test_mode import TestModeManager  # noqa: E402
from deskpet.todos import TodoManager  # noqa: E402
from deskpet.widget import WidgetCenter, WidgetProvider  # noqa: E402


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 9, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture()
def shared_store(tmp_path):
    return SharedStore(tmp_path / "deskpet.db")


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def rng():
    return random.Random(42)


@pytest.fixture()
def widget_center(shared_store):
    return WidgetCenter(shared_store)


@pytest.fixture()
def pet_test_mode(shared_store, widget_center):
    return TestModeManager(shared_store, widget_center, scale=120)


@pytest.fixture()
def messages(shared_store, rng, clock):
    return StateMessageManager(shared_store, rng, clock)


@pytest.fixture()
def sync(shared_store, messages, rng, widget_center):
    return SyncManager(shared_store, messages, IconManager(rng), widget_center)


@pytest.fixture()
def todos(shared_store, widget_center):
    return TodoManager(shared_store, widget_center)


@pytest.fixture()
def provider(shared_store, clock):
    return WidgetProvider(shared_store, clock, test_mode_scale=120)


@pytest.fixture()
def reminder(shared_store, sync, pet_test_mode, widget_center, clock):
    manager = UsageReminderManager(
        shared_store, sync, pet_test_mode, widget_center, clock, restore_after=0
    )
    yield manager
    manager.stop_monitoring()
