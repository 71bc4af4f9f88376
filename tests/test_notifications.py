from deskpet.models import MessageCategory, NotificationPreference, PetConfiguration
from deskpet.notifications import MIN_DELAY_SECONDS, NotificationManager


def make_manager(clock, **prefs):
    delivered = []
    configuration = PetConfiguration(notification_preference=NotificationPreference(**prefs))
    manager = NotificationManager(
        sink=lambda title, body: delivered.append((title, body)),
        configuration=lambda: configuration,
        clock=clock
    )
    return manager, delivered


def test_delivers_with_category_title(clock):
    manager, delivered = make_manager(clock)

    timer = manager.schedule("Stretch your legs", MessageCategory.SPORT_ENCOURAGE, in_seconds=0)
    timer.join(timeout=2)

    assert timer.interval == MIN_DELAY_SECONDS
    assert delivered == [("Keep moving", "Stretch your legs")]


def test_disabled_notifications_are_dropped(clock):
    manager, delivered = make_manager(clock, enable_notifications=False)
    assert manager.schedule("hi", MessageCategory.DAILY_CARE) is None
    assert delivered == []


def test_quiet_hours_drop_delivery(clock):
    # The fake clock reads 09:00
    manager, delivered = make_manager(clock, quiet_hours=(8, 10))

    timer = manager.schedule("Good morning", MessageCategory.DAILY_CARE)
    timer.join(timeout=2)

    assert delivered == []


def test_cancel_all(clock):
    manager, delivered = make_manager(clock)
    timer = manager.schedule("later", MessageCategory.ACHIEVEMENT, in_seconds=60)
    manager.cancel_all()
    timer.join(timeout=2)
    assert delivered == []
