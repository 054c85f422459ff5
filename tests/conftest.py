"""Shared fixtures: an in-memory Mongo and recording doubles."""

from datetime import datetime, time, timezone

import pytest
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import ServerSelectionTimeoutError

from plantlog.core.exceptions import StorageError
from plantlog.notifications.service import ReminderService
from plantlog.plants.models import Plant
from plantlog.plants.repository import PlantRepository


class RecordingReminderService(ReminderService):
    """Real reminder service that also records every call."""

    def __init__(self, collection):
        super().__init__(collection)
        self.scheduled = []
        self.cancelled = []

    async def schedule(self, plant_id, when, title, body):
        self.scheduled.append((plant_id, when, title, body))
        return await super().schedule(plant_id, when, title, body)

    async def cancel(self, plant_id):
        self.cancelled.append(plant_id)
        return await super().cancel(plant_id)


class FailingReminderService(RecordingReminderService):
    """Plant writes succeed but every reminder write fails."""

    async def schedule(self, plant_id, when, title, body):
        self.scheduled.append((plant_id, when, title, body))
        raise StorageError("reminder store offline")

    async def cancel(self, plant_id):
        self.cancelled.append(plant_id)
        raise StorageError("reminder store offline")


class _BrokenCursor:
    def sort(self, *args, **kwargs):
        return self

    async def to_list(self, length=None):
        raise ServerSelectionTimeoutError("no servers available")


class BrokenCollection:
    """A collection whose server has gone away."""

    def find(self, *args, **kwargs):
        return _BrokenCursor()

    async def find_one(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")

    async def update_one(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")

    async def replace_one(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")

    async def delete_one(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")


class FailingPlantRepository(PlantRepository):
    """Every write fails the way a broken store would."""

    async def save_plant(self, plant):
        raise StorageError("disk full")

    async def update_plant(self, plant):
        raise StorageError("disk full")

    async def delete_plant(self, plant):
        raise StorageError("disk full")

    async def add_watering_event(self, plant, amount_ml=None, date=None):
        raise StorageError("disk full")

    async def fetch_all_plants(self):
        raise StorageError("connection refused")


@pytest.fixture
def mongo_db():
    return AsyncMongoMockClient()["plantlog_test"]


@pytest.fixture
def repository(mongo_db):
    return PlantRepository(mongo_db["plants"])


@pytest.fixture
def reminders(mongo_db):
    return RecordingReminderService(mongo_db["reminders"])


@pytest.fixture
def failing_repository(mongo_db):
    return FailingPlantRepository(mongo_db["plants"])


def make_plant(name="Monstera", species="Monstera deliciosa", **kwargs):
    kwargs.setdefault("start_date", datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
    kwargs.setdefault("watering_time", time(9, 0))
    return Plant(name=name, species=species, **kwargs)


@pytest.fixture
def failing_reminders(mongo_db):
    return FailingReminderService(mongo_db["reminders"])
