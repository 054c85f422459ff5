"""
Reminder Service

Persists one-shot watering reminders in the `reminders` collection. Each
plant has at most one reminder document (`_id = plant-<plant id>`), so
scheduling is an upsert: re-issuing for the same plant replaces the pending
reminder rather than adding another.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pymongo.errors import PyMongoError

from plantlog.core.database import Database
from plantlog.core.exceptions import StorageError
from plantlog.notifications.content import reminder_id
from plantlog.notifications.models import Reminder, ReminderStatus
from plantlog.plants.repository import to_storage, from_storage

logger = logging.getLogger(__name__)


def _doc_to_reminder(doc: dict) -> Reminder:
    return Reminder(
        id=doc["_id"],
        plant_id=doc["plant_id"],
        fire_at=from_storage(doc["fire_at"]),
        title=doc["title"],
        body=doc["body"],
        status=ReminderStatus(doc.get("status", ReminderStatus.PENDING.value)),
        created_at=from_storage(doc["created_at"]),
        delivered_at=from_storage(doc.get("delivered_at")),
    )


class ReminderService:
    """Schedule and cancel per-plant watering reminders."""

    def __init__(self, collection=None):
        self._collection = collection

    @property
    def collection(self):
        if self._collection is None:
            return Database.get_collection("reminders")
        return self._collection

    async def schedule(self, plant_id: str, when: datetime, title: str, body: str) -> Reminder:
        """Create or replace the pending reminder for `plant_id`."""
        now = datetime.now(timezone.utc)
        doc = {
            "_id": reminder_id(plant_id),
            "plant_id": plant_id,
            "fire_at": to_storage(when),
            "title": title,
            "body": body,
            "status": ReminderStatus.PENDING.value,
            "created_at": to_storage(now),
            "delivered_at": None,
        }
        try:
            await self.collection.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        except PyMongoError as e:
            logger.error(f"Failed to schedule reminder for plant {plant_id}: {e}")
            raise StorageError(str(e)) from e

        logger.info(f"Scheduled reminder for plant {plant_id} at {when.isoformat()}")
        return _doc_to_reminder(doc)

    async def cancel(self, plant_id: str) -> bool:
        """Drop any reminder for `plant_id`. Returns True if one existed."""
        try:
            result = await self.collection.delete_one({"_id": reminder_id(plant_id)})
        except PyMongoError as e:
            logger.error(f"Failed to cancel reminder for plant {plant_id}: {e}")
            raise StorageError(str(e)) from e
        if result.deleted_count:
            logger.info(f"Cancelled reminder for plant {plant_id}")
        return bool(result.deleted_count)

    async def get_reminder(self, plant_id: str) -> Optional[Reminder]:
        try:
            doc = await self.collection.find_one({"_id": reminder_id(plant_id)})
        except PyMongoError as e:
            logger.error(f"Failed to fetch reminder for plant {plant_id}: {e}")
            raise StorageError(str(e)) from e
        return _doc_to_reminder(doc) if doc else None

    async def _find_sorted(self, query: dict) -> List[Reminder]:
        """Reminders matching `query`, soonest first."""
        try:
            cursor = self.collection.find(query).sort("fire_at", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to fetch reminders: {e}")
            raise StorageError(str(e)) from e
        return [_doc_to_reminder(d) for d in docs]

    async def pending_reminders(self) -> List[Reminder]:
        return await self._find_sorted({"status": ReminderStatus.PENDING.value})

    async def due_reminders(self, now: Optional[datetime] = None) -> List[Reminder]:
        """Pending reminders whose fire time has passed."""
        now = now or datetime.now(timezone.utc)
        return await self._find_sorted({
            "status": ReminderStatus.PENDING.value,
            "fire_at": {"$lte": to_storage(now)},
        })

    async def mark_delivered(self, reminder: Reminder, at: Optional[datetime] = None) -> bool:
        """
        Flip a pending reminder to delivered.

        Matches on fire_at too, so a reminder re-scheduled between the scan and
        this call stays pending.
        """
        at = at or datetime.now(timezone.utc)
        try:
            result = await self.collection.update_one(
                {
                    "_id": reminder.id,
                    "status": ReminderStatus.PENDING.value,
                    "fire_at": to_storage(reminder.fire_at),
                },
                {"$set": {"status": ReminderStatus.DELIVERED.value, "delivered_at": to_storage(at)}},
            )
        except PyMongoError as e:
            logger.error(f"Failed to mark reminder {reminder.id} delivered: {e}")
            raise StorageError(str(e)) from e
        return bool(result.modified_count)

    async def deliver_due(self, now: Optional[datetime] = None) -> dict:
        """Fire every due reminder once. Returns delivery stats."""
        now = now or datetime.now(timezone.utc)
        stats = {"due": 0, "delivered": 0, "skipped": 0}
        for reminder in await self.due_reminders(now):
            stats["due"] += 1
            if await self.mark_delivered(reminder, now):
                logger.info(f"Delivered reminder {reminder.id}: {reminder.title} - {reminder.body}")
                stats["delivered"] += 1
            else:
                stats["skipped"] += 1
        return stats
