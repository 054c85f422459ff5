"""Plant repository - MongoDB persistence for plants and their watering history.

Watering events are embedded in the plant document, so deleting a plant
removes its history in the same write.
"""

import logging
from datetime import datetime, time, timezone
from typing import List, Optional

from pymongo.errors import PyMongoError

from plantlog.core.database import Database
from plantlog.core.exceptions import StorageError
from plantlog.plants.models import Plant, WateringEvent, WateringScheduleType

logger = logging.getLogger(__name__)


def to_storage(dt: datetime) -> datetime:
    """Mongo stores naive UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def from_storage(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _event_to_doc(event: WateringEvent) -> dict:
    return {"date": to_storage(event.date), "amount_ml": event.amount_ml}


def _plant_to_doc(plant: Plant) -> dict:
    return {
        "_id": plant.id,
        "name": plant.name,
        "species": plant.species,
        "schedule_type": plant.schedule_type.value,
        "watering_interval_days": plant.watering_interval_days,
        "weekday": plant.weekday,
        "watering_time": plant.watering_time.strftime("%H:%M"),
        "start_date": to_storage(plant.start_date),
        "image_data": plant.image_data,
        "watering_history": [_event_to_doc(e) for e in plant.watering_history],
        "created_at": to_storage(plant.created_at),
    }


def _doc_to_plant(doc: dict) -> Plant:
    raw_time = doc.get("watering_time") or "09:00"
    hour, minute = (int(part) for part in raw_time.split(":")[:2])
    return Plant(
        id=str(doc["_id"]),
        name=doc["name"],
        species=doc.get("species", ""),
        schedule_type=WateringScheduleType(doc.get("schedule_type", WateringScheduleType.INTERVAL.value)),
        watering_interval_days=doc.get("watering_interval_days", 7),
        weekday=doc.get("weekday"),
        watering_time=time(hour, minute),
        start_date=from_storage(doc["start_date"]),
        image_data=doc.get("image_data"),
        watering_history=[
            WateringEvent(date=from_storage(e["date"]), amount_ml=e.get("amount_ml"))
            for e in doc.get("watering_history", [])
        ],
        created_at=from_storage(doc.get("created_at") or doc["start_date"]),
    )


class PlantRepository:
    """Store, fetch and delete plant documents."""

    def __init__(self, collection=None):
        self._collection = collection

    @property
    def collection(self):
        if self._collection is None:
            return Database.get_collection("plants")
        return self._collection

    async def fetch_all_plants(self) -> List[Plant]:
        """All plants ordered by name."""
        try:
            cursor = self.collection.find({}).sort("name", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to fetch plants: {e}")
            raise StorageError(str(e)) from e
        return [_doc_to_plant(d) for d in docs]

    async def fetch_plant(self, plant_id: str) -> Optional[Plant]:
        try:
            doc = await self.collection.find_one({"_id": plant_id})
        except PyMongoError as e:
            logger.error(f"Failed to fetch plant {plant_id}: {e}")
            raise StorageError(str(e)) from e
        return _doc_to_plant(doc) if doc else None

    async def save_plant(self, plant: Plant) -> None:
        try:
            await self.collection.insert_one(_plant_to_doc(plant))
        except PyMongoError as e:
            logger.error(f"Failed to save plant {plant.id}: {e}")
            raise StorageError(str(e)) from e

    async def update_plant(self, plant: Plant) -> None:
        try:
            result = await self.collection.replace_one({"_id": plant.id}, _plant_to_doc(plant))
        except PyMongoError as e:
            logger.error(f"Failed to update plant {plant.id}: {e}")
            raise StorageError(str(e)) from e
        if result.matched_count == 0:
            raise StorageError(f"Plant {plant.id} no longer exists")

    async def delete_plant(self, plant: Plant) -> None:
        try:
            await self.collection.delete_one({"_id": plant.id})
        except PyMongoError as e:
            logger.error(f"Failed to delete plant {plant.id}: {e}")
            raise StorageError(str(e)) from e

    async def add_watering_event(
        self,
        plant: Plant,
        amount_ml: Optional[int] = None,
        date: Optional[datetime] = None,
    ) -> WateringEvent:
        """
        Prepend a watering event and move the plant's anchor to its date.

        History and anchor are written in one update; `plant` is only
        mutated once the write succeeded.
        """
        date = from_storage(date) if date else datetime.now(timezone.utc)
        event = WateringEvent(date=date, amount_ml=amount_ml)
        history = [event] + list(plant.watering_history)
        try:
            result = await self.collection.update_one(
                {"_id": plant.id},
                {"$set": {
                    "watering_history": [_event_to_doc(e) for e in history],
                    "start_date": to_storage(date),
                }},
            )
        except PyMongoError as e:
            logger.error(f"Failed to add watering event to plant {plant.id}: {e}")
            raise StorageError(str(e)) from e
        if result.matched_count == 0:
            raise StorageError(f"Plant {plant.id} no longer exists")

        plant.watering_history = history
        plant.start_date = date
        return event

    @staticmethod
    def get_watering_history(plant: Plant, limit: Optional[int] = None) -> List[WateringEvent]:
        """Events newest first, optionally truncated."""
        events = sorted(plant.watering_history, key=lambda e: e.date, reverse=True)
        if limit is not None:
            return events[:limit]
        return events
