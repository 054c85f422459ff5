#!/usr/bin/env python3
"""
Re-issue the pending reminder for every stored plant.

Useful after restoring the plants collection from a backup, when the
reminders collection no longer matches the plants' schedules. Scheduling is
an upsert per plant, so running this twice is harmless.

Usage:
  python scripts/reschedule_reminders.py
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plantlog.core.database import Database
from plantlog.notifications.service import ReminderService
from plantlog.plants.repository import PlantRepository
from plantlog.plants.service import reschedule_reminder


async def reschedule():
    await Database.connect()
    reminders = ReminderService()

    scanned = 0
    scheduled = 0
    skipped = 0

    for plant in await PlantRepository().fetch_all_plants():
        scanned += 1
        await reschedule_reminder(reminders, plant)
        if await reminders.get_reminder(plant.id):
            scheduled += 1
        else:
            skipped += 1

    print(f"Scanned: {scanned} | Scheduled: {scheduled} | Skipped: {skipped}")
    await Database.disconnect()


if __name__ == "__main__":
    asyncio.run(reschedule())
