"""Reminder models and schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field


class ReminderStatus(str, Enum):
    """Reminder lifecycle: pending until the worker fires it."""
    PENDING = "pending"
    DELIVERED = "delivered"


class Reminder(BaseModel):
    """A one-shot watering reminder for a single plant."""
    id: str
    plant_id: str
    fire_at: datetime
    title: str
    body: str
    status: ReminderStatus = ReminderStatus.PENDING
    created_at: datetime
    delivered_at: Optional[datetime] = None


class ReminderListResponse(BaseModel):
    reminders: List[Reminder]
    total_count: int


class NotificationTap(BaseModel):
    """Payload delivered when the user taps a reminder."""
    plant_id: str = Field(..., alias="plantID")

    model_config = {"populate_by_name": True}
