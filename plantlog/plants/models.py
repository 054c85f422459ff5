"""Plant-related models and schemas."""

import base64
import binascii
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from plantlog.core.config import get_settings


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _default_interval_days() -> int:
    return get_settings().DEFAULT_INTERVAL_DAYS


def _default_watering_time() -> time:
    return time(get_settings().DEFAULT_WATERING_HOUR, 0)


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WateringScheduleType(str, Enum):
    """How the next watering date is derived."""
    INTERVAL = "interval"
    WEEKDAY = "weekday"


class IntervalFilter(str, Enum):
    """Coarse bucket over a plant's configured watering interval."""
    ALL = "all"
    LESS_THAN_7 = "less_than_7"
    BETWEEN_7_AND_14 = "between_7_and_14"
    MORE_THAN_14 = "more_than_14"

    @property
    def label(self) -> str:
        return {
            IntervalFilter.ALL: "All Plants",
            IntervalFilter.LESS_THAN_7: "Next 7 days",
            IntervalFilter.BETWEEN_7_AND_14: "7 to 14 days",
            IntervalFilter.MORE_THAN_14: "More than 14 days",
        }[self]


class WateringEvent(BaseModel):
    """A single logged watering."""
    date: datetime
    amount_ml: Optional[int] = Field(None, gt=0)

    @field_validator("date")
    @classmethod
    def _utc_date(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Plant(BaseModel):
    """
    A tracked plant.

    `start_date` is the schedule anchor: it starts as the user-chosen start
    date and moves to the most recent watering each time one is logged.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    species: str = ""
    schedule_type: WateringScheduleType = WateringScheduleType.INTERVAL
    watering_interval_days: int = Field(default_factory=_default_interval_days, ge=1)
    weekday: Optional[int] = Field(None, ge=1, le=7, description="1 = Sunday ... 7 = Saturday")
    watering_time: time = Field(default_factory=_default_watering_time)
    start_date: datetime = Field(default_factory=_utc_now)
    image_data: Optional[bytes] = None
    watering_history: List[WateringEvent] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("start_date", "created_at")
    @classmethod
    def _utc_dates(cls, value: datetime) -> datetime:
        return _as_utc(value)


# ==================== Request / Response Schemas ====================


class _PlantFields(BaseModel):
    """Fields shared by the create and update forms."""
    name: str = Field(..., description="Display name, required")
    species: str = ""
    schedule_type: WateringScheduleType = WateringScheduleType.INTERVAL
    watering_interval_days: int = Field(default_factory=_default_interval_days, ge=1)
    weekday: Optional[int] = Field(None, ge=1, le=7, description="1 = Sunday ... 7 = Saturday")
    watering_time: time = Field(default_factory=_default_watering_time)
    start_date: Optional[datetime] = None
    image_base64: Optional[str] = Field(None, description="Base64 encoded plant photo")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    @field_validator("image_base64")
    @classmethod
    def _valid_base64(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError):
                raise ValueError("image_base64 is not valid base64")
        return value

    @model_validator(mode="after")
    def _weekday_required(self):
        if self.schedule_type == WateringScheduleType.WEEKDAY and self.weekday is None:
            raise ValueError("weekday is required for weekday schedules")
        return self

    def image_bytes(self) -> Optional[bytes]:
        if not self.image_base64:
            return None
        return base64.b64decode(self.image_base64)


class PlantCreate(_PlantFields):
    """Schema to add a plant."""

    def build_plant(self) -> Plant:
        fields = {
            "name": self.name,
            "species": self.species,
            "schedule_type": self.schedule_type,
            "watering_interval_days": self.watering_interval_days,
            "weekday": self.weekday,
            "watering_time": self.watering_time,
            "image_data": self.image_bytes(),
        }
        if self.start_date is not None:
            fields["start_date"] = self.start_date
        return Plant(**fields)


class PlantUpdate(_PlantFields):
    """Schema to resubmit the edit form for an existing plant."""

    def apply_to(self, plant: Plant) -> Plant:
        """Copy form values onto `plant`; history and identity are kept."""
        updates = {
            "name": self.name,
            "species": self.species,
            "schedule_type": self.schedule_type,
            "watering_interval_days": self.watering_interval_days,
            "weekday": self.weekday,
            "watering_time": self.watering_time,
        }
        if self.start_date is not None:
            updates["start_date"] = self.start_date
        # Omitting the photo keeps the current one
        if self.image_base64 is not None:
            updates["image_data"] = self.image_bytes()
        return Plant(**{**plant.model_dump(), **updates})


class WateringEventCreate(BaseModel):
    """Schema to log a watering."""
    amount_ml: Optional[int] = Field(None, gt=0, description="Volume in ml, omit if unknown")


class WateringEventResponse(BaseModel):
    date: datetime
    amount_ml: Optional[int] = None


class PlantResponse(BaseModel):
    """Response schema for a plant."""
    id: str
    name: str
    species: str
    schedule_type: WateringScheduleType
    watering_interval_days: int
    weekday: Optional[int] = None
    watering_time: time
    start_date: datetime
    image_base64: Optional[str] = None
    schedule_description: str
    next_watering_date: Optional[datetime] = None
    last_watered: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_plant(
        cls,
        plant: Plant,
        *,
        schedule_description: str,
        next_watering_date: Optional[datetime],
    ) -> "PlantResponse":
        last = max((e.date for e in plant.watering_history), default=None)
        return cls(
            id=plant.id,
            name=plant.name,
            species=plant.species,
            schedule_type=plant.schedule_type,
            watering_interval_days=plant.watering_interval_days,
            weekday=plant.weekday,
            watering_time=plant.watering_time,
            start_date=plant.start_date,
            image_base64=base64.b64encode(plant.image_data).decode("ascii") if plant.image_data else None,
            schedule_description=schedule_description,
            next_watering_date=next_watering_date,
            last_watered=last,
            created_at=plant.created_at,
        )


class PlantDetailResponse(PlantResponse):
    """Plant with its most recent watering events."""
    recent_watering_events: List[WateringEventResponse] = Field(default_factory=list)


class PlantListResponse(BaseModel):
    plants: List[PlantResponse]
    total_count: int
    search: str = ""
    interval_filter: IntervalFilter = IntervalFilter.ALL


class WateringHistoryResponse(BaseModel):
    plant_id: str
    events: List[WateringEventResponse]
    total_count: int


class WateringCalendarResponse(BaseModel):
    """Local calendar days with waterings, plus the events of one selected day."""
    plant_id: str
    days: List[date]
    day: Optional[date] = None
    events: List[WateringEventResponse] = Field(default_factory=list)
