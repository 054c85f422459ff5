"""Celery tasks (sync wrappers over the async reminder service)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from plantlog.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


def _run_async(coro):
    """Run async function in sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def _deliver_due_reminders() -> Dict[str, Any]:
    from plantlog.core.database import Database
    from plantlog.notifications.service import ReminderService

    # Motor clients are bound to the loop they were created on, so each run
    # connects on its own loop.
    await Database.connect()
    try:
        return await ReminderService().deliver_due()
    finally:
        await Database.disconnect()


@celery_app.task(name="plantlog.worker.tasks.deliver_due_reminders", acks_late=True)
def deliver_due_reminders() -> Dict[str, Any]:
    """
    Fire pending reminders whose time has come.

    Runs on the beat schedule. Each reminder is flipped to delivered at most
    once, so overlapping runs do not double-deliver.

    Returns:
        Dict with counts: due, delivered, skipped.
    """
    logger.info("Delivering due watering reminders")

    try:
        stats = _run_async(_deliver_due_reminders())
    except Exception as e:
        logger.error(f"Failed to deliver reminders: {e}")
        raise

    if stats.get("delivered", 0) > 0:
        logger.info(f"Reminder delivery complete: {stats}")
    return stats


async def _reschedule_all() -> Dict[str, int]:
    from plantlog.core.database import Database
    from plantlog.notifications.service import ReminderService
    from plantlog.plants.repository import PlantRepository
    from plantlog.plants.service import reschedule_reminder

    await Database.connect()
    try:
        reminders = ReminderService()
        plants = await PlantRepository().fetch_all_plants()
        for plant in plants:
            await reschedule_reminder(reminders, plant)
        return {"plants": len(plants)}
    finally:
        await Database.disconnect()


@celery_app.task(name="plantlog.worker.tasks.reschedule_all_reminders", acks_late=True)
def reschedule_all_reminders() -> Dict[str, int]:
    """Re-issue every plant's reminder from its current schedule."""
    logger.info("Rescheduling reminders for all plants")
    try:
        return _run_async(_reschedule_all())
    except Exception as e:
        logger.error(f"Failed to reschedule reminders: {e}")
        raise
