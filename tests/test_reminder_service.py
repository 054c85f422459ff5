from datetime import datetime, timedelta, timezone

import pytest

from plantlog.core.exceptions import StorageError
from plantlog.notifications.models import Reminder, ReminderStatus
from plantlog.notifications.service import ReminderService

from tests.conftest import BrokenCollection

UTC = timezone.utc
PLANT_ID = "3f1c2b8e-5d4a-4c1e-9f7a-2b6d8e0a1c3f"
WHEN = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


async def test_schedule_stores_reminder(reminders):
    await reminders.schedule(PLANT_ID, WHEN, "Water Monstera", "Time to water Monstera deliciosa.")

    reminder = await reminders.get_reminder(PLANT_ID)

    assert reminder.id == f"plant-{PLANT_ID}"
    assert reminder.fire_at == WHEN
    assert reminder.title == "Water Monstera"
    assert reminder.status == ReminderStatus.PENDING


async def test_scheduling_twice_keeps_a_single_reminder(reminders):
    await reminders.schedule(PLANT_ID, WHEN, "Water Monstera", "body")
    await reminders.schedule(PLANT_ID, WHEN + timedelta(days=7), "Water Monstera", "body")

    assert await reminders.collection.count_documents({"plant_id": PLANT_ID}) == 1
    reminder = await reminders.get_reminder(PLANT_ID)
    assert reminder.fire_at == WHEN + timedelta(days=7)


async def test_cancel(reminders):
    await reminders.schedule(PLANT_ID, WHEN, "t", "b")

    assert await reminders.cancel(PLANT_ID) is True
    assert await reminders.get_reminder(PLANT_ID) is None
    assert await reminders.cancel(PLANT_ID) is False


async def test_deliver_due_fires_each_reminder_once(reminders):
    other_id = "9b2e4f6a-1c3d-4e5f-8a7b-6c5d4e3f2a1b"
    await reminders.schedule(PLANT_ID, WHEN, "t", "b")
    await reminders.schedule(other_id, WHEN + timedelta(days=3), "t", "b")
    now = WHEN + timedelta(minutes=1)

    stats = await reminders.deliver_due(now)

    assert stats == {"due": 1, "delivered": 1, "skipped": 0}
    delivered = await reminders.get_reminder(PLANT_ID)
    assert delivered.status == ReminderStatus.DELIVERED
    assert delivered.delivered_at == now
    assert await reminders.deliver_due(now) == {"due": 0, "delivered": 0, "skipped": 0}
    assert [r.plant_id for r in await reminders.pending_reminders()] == [other_id]


async def test_rescheduling_delivered_reminder_makes_it_pending_again(reminders):
    await reminders.schedule(PLANT_ID, WHEN, "t", "b")
    await reminders.deliver_due(WHEN + timedelta(minutes=1))

    await reminders.schedule(PLANT_ID, WHEN + timedelta(days=7), "t", "b")

    assert (await reminders.get_reminder(PLANT_ID)).status == ReminderStatus.PENDING


async def test_unreachable_store_raises_storage_error():
    broken = ReminderService(BrokenCollection())
    reminder = Reminder(
        id=f"plant-{PLANT_ID}", plant_id=PLANT_ID, fire_at=WHEN,
        title="t", body="b", created_at=WHEN,
    )

    with pytest.raises(StorageError):
        await broken.get_reminder(PLANT_ID)
    with pytest.raises(StorageError):
        await broken.pending_reminders()
    with pytest.raises(StorageError):
        await broken.due_reminders(WHEN)
    with pytest.raises(StorageError):
        await broken.mark_delivered(reminder, WHEN)
    with pytest.raises(StorageError):
        await broken.deliver_due(WHEN)
