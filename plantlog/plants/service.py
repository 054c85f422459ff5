"""Plant controllers - screen state plus the mutation flow.

Every mutation persists first and only then touches reminders, so a failed
write never leaves a reminder for data that was not stored. A reminder
failure after a successful write still counts as success; it is reported
through `error_message` with its own wording. Nothing is retried.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import List, Optional

from plantlog.core.config import get_settings
from plantlog.core.exceptions import IncompleteScheduleError, StorageError
from plantlog.notifications.content import WaterReminderContent
from plantlog.notifications.service import ReminderService
from plantlog.plants.filters import visible_plants
from plantlog.plants.models import IntervalFilter, Plant, WateringEvent
from plantlog.plants.repository import PlantRepository
from plantlog.plants.schedule import describe_schedule, next_watering_date

logger = logging.getLogger(__name__)


async def reschedule_reminder(
    reminders: ReminderService,
    plant: Plant,
    reference: Optional[datetime] = None,
) -> None:
    """Issue (or replace) the reminder for the plant's next watering."""
    try:
        when = next_watering_date(plant, reference)
    except IncompleteScheduleError:
        logger.warning(f"Plant {plant.id} has an incomplete weekday schedule; no reminder scheduled")
        await reminders.cancel(plant.id)
        return
    await reminders.schedule(
        plant.id,
        when,
        WaterReminderContent.title(plant.name),
        WaterReminderContent.body(plant.species),
    )


class PlantListController:
    """State and actions behind the plant list."""

    def __init__(self, repository: PlantRepository, reminders: ReminderService):
        self.repository = repository
        self.reminders = reminders
        self.plants: List[Plant] = []
        self.search_text: str = ""
        self.interval_filter: IntervalFilter = IntervalFilter.ALL
        self.is_loading: bool = False
        self.error_message: Optional[str] = None
        self.selected_plant: Optional[Plant] = None

    @property
    def filtered_plants(self) -> List[Plant]:
        """Recomputed on every access from the current plants and filters."""
        return visible_plants(self.plants, self.search_text, self.interval_filter)

    async def load_plants(self) -> None:
        self.is_loading = True
        self.error_message = None
        try:
            self.plants = await self.repository.fetch_all_plants()
        except StorageError as e:
            self.error_message = f"Failed to load plants: {e}"
        finally:
            self.is_loading = False

    async def _reload(self, warning: Optional[str] = None) -> None:
        """Reload after a stored mutation; a load failure outranks the warning."""
        await self.load_plants()
        if warning and not self.error_message:
            self.error_message = warning

    async def create_plant(self, plant: Plant) -> bool:
        try:
            await self.repository.save_plant(plant)
        except StorageError as e:
            self.error_message = f"Failed to save plant: {e}"
            return False
        logger.info(f"Created plant {plant.id} ({plant.name})")
        warning = None
        try:
            await reschedule_reminder(self.reminders, plant)
        except StorageError as e:
            logger.error(f"Reminder for plant {plant.id} not scheduled: {e}")
            warning = f"Plant saved but reminder failed: {e}"
        await self._reload(warning)
        return True

    async def update_plant(self, plant: Plant) -> bool:
        try:
            await self.repository.update_plant(plant)
        except StorageError as e:
            self.error_message = f"Failed to update plant: {e}"
            return False
        logger.info(f"Updated plant {plant.id}")
        warning = None
        try:
            await reschedule_reminder(self.reminders, plant)
        except StorageError as e:
            logger.error(f"Reminder for plant {plant.id} not rescheduled: {e}")
            warning = f"Plant updated but reminder failed: {e}"
        await self._reload(warning)
        return True

    async def delete_plant(self, plant: Plant) -> bool:
        try:
            await self.repository.delete_plant(plant)
        except StorageError as e:
            self.error_message = f"Failed to delete plant: {e}"
            return False
        logger.info(f"Deleted plant {plant.id}")
        if self.selected_plant is not None and self.selected_plant.id == plant.id:
            self.selected_plant = None
        warning = None
        try:
            await self.reminders.cancel(plant.id)
        except StorageError as e:
            logger.error(f"Reminder for plant {plant.id} not cancelled: {e}")
            warning = f"Plant deleted but reminder cancel failed: {e}"
        await self._reload(warning)
        return True

    def handle_notification_tap(self, plant_id: str) -> None:
        """Select the tapped plant; unknown ids (e.g. deleted plants) are ignored."""
        plant = next((p for p in self.plants if p.id == plant_id), None)
        if plant is None:
            logger.debug(f"Notification tap for unknown plant {plant_id}")
            return
        self.selected_plant = plant


class PlantDetailController:
    """State and actions behind a single plant's detail view."""

    def __init__(self, plant: Plant, repository: PlantRepository, reminders: ReminderService):
        self.plant = plant
        self.repository = repository
        self.reminders = reminders
        self.amount_ml: Optional[int] = None
        self.error_message: Optional[str] = None

    @property
    def schedule_description(self) -> str:
        return describe_schedule(self.plant)

    def next_watering_date(self, reference: Optional[datetime] = None) -> Optional[datetime]:
        """None when the schedule is incomplete."""
        try:
            return next_watering_date(self.plant, reference)
        except IncompleteScheduleError:
            return None

    @property
    def recent_watering_events(self) -> List[WateringEvent]:
        return self.repository.get_watering_history(self.plant, limit=get_settings().RECENT_HISTORY_LIMIT)

    @property
    def last_watered(self) -> Optional[datetime]:
        recent = self.repository.get_watering_history(self.plant, limit=1)
        return recent[0].date if recent else None

    @property
    def has_watering_history(self) -> bool:
        return bool(self.plant.watering_history)

    def watering_days(self, tz: Optional[tzinfo] = None) -> List[date]:
        """Distinct local calendar days with at least one watering, oldest first."""
        tz = tz or get_settings().tz
        return sorted({e.date.astimezone(tz).date() for e in self.plant.watering_history})

    def events_on_day(self, day: date, tz: Optional[tzinfo] = None) -> List[WateringEvent]:
        """Waterings on a local calendar day, newest first."""
        tz = tz or get_settings().tz
        return [
            e for e in self.repository.get_watering_history(self.plant)
            if e.date.astimezone(tz).date() == day
        ]

    async def log_watering_event(self, amount_ml: Optional[int] = None, when: Optional[datetime] = None) -> bool:
        """Record a watering now (or at `when`) and re-schedule from the new anchor."""
        when = when or datetime.now(timezone.utc)
        amount = amount_ml if amount_ml is not None else self.amount_ml
        try:
            await self.repository.add_watering_event(self.plant, amount_ml=amount, date=when)
        except StorageError as e:
            self.error_message = f"Failed to add watering event: {e}"
            return False
        logger.info(f"Logged watering for plant {self.plant.id} at {when.isoformat()}")
        self.amount_ml = None
        try:
            await reschedule_reminder(self.reminders, self.plant)
        except StorageError as e:
            logger.error(f"Reminder for plant {self.plant.id} not rescheduled: {e}")
            self.error_message = f"Watering logged but reminder failed: {e}"
        return True

    async def update_plant(self, updated: Plant) -> bool:
        try:
            await self.repository.update_plant(updated)
        except StorageError as e:
            self.error_message = f"Failed to update plant: {e}"
            return False
        self.plant = updated
        try:
            await reschedule_reminder(self.reminders, updated)
        except StorageError as e:
            logger.error(f"Reminder for plant {updated.id} not rescheduled: {e}")
            self.error_message = f"Plant updated but reminder failed: {e}"
        return True

    async def delete_plant(self) -> bool:
        try:
            await self.repository.delete_plant(self.plant)
        except StorageError as e:
            self.error_message = f"Failed to delete plant: {e}"
            return False
        logger.info(f"Deleted plant {self.plant.id}")
        try:
            await self.reminders.cancel(self.plant.id)
        except StorageError as e:
            logger.error(f"Reminder for plant {self.plant.id} not cancelled: {e}")
            self.error_message = f"Plant deleted but reminder cancel failed: {e}"
        return True

    def cancel_watering(self) -> None:
        self.amount_ml = None
