"""Plants API routes."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from plantlog.core.dependencies import get_plant_repository, get_reminder_service
from plantlog.core.exceptions import (
    BadRequestException,
    IncompleteScheduleError,
    NotFoundException,
    ServiceUnavailableException,
    StorageError,
)
from plantlog.notifications.service import ReminderService
from plantlog.plants.models import (
    IntervalFilter,
    Plant,
    PlantCreate,
    PlantDetailResponse,
    PlantListResponse,
    PlantResponse,
    PlantUpdate,
    WateringCalendarResponse,
    WateringEventCreate,
    WateringEventResponse,
    WateringHistoryResponse,
)
from plantlog.plants.repository import PlantRepository
from plantlog.plants.schedule import describe_schedule, next_watering_date
from plantlog.plants.service import PlantDetailController, PlantListController


router = APIRouter(prefix="/plants", tags=["Plants"])


def build_plant_response(plant: Plant) -> PlantResponse:
    try:
        next_date = next_watering_date(plant)
    except IncompleteScheduleError:
        next_date = None
    return PlantResponse.from_plant(
        plant,
        schedule_description=describe_schedule(plant),
        next_watering_date=next_date,
    )


def _build_detail_response(controller: PlantDetailController) -> PlantDetailResponse:
    base = build_plant_response(controller.plant)
    return PlantDetailResponse(
        **base.model_dump(),
        recent_watering_events=[
            WateringEventResponse(date=e.date, amount_ml=e.amount_ml)
            for e in controller.recent_watering_events
        ],
    )


async def _get_plant_or_404(plant_id: str, repository: PlantRepository) -> Plant:
    try:
        UUID(plant_id)
    except ValueError:
        raise BadRequestException("Invalid plant ID")
    try:
        plant = await repository.fetch_plant(plant_id)
    except StorageError as e:
        raise ServiceUnavailableException(f"Failed to load plant: {e}")
    if plant is None:
        raise NotFoundException("Plant not found")
    return plant


@router.get("", response_model=PlantListResponse)
async def list_plants(
    search: str = Query(default=""),
    interval_filter: IntervalFilter = Query(default=IntervalFilter.ALL),
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """
    List plants ordered by name.

    - `search` matches name or species, case-insensitive
    - `interval_filter` buckets by configured watering interval
    """
    controller = PlantListController(repository, reminders)
    await controller.load_plants()
    if controller.error_message:
        raise ServiceUnavailableException(controller.error_message)

    controller.search_text = search
    controller.interval_filter = interval_filter
    plants = controller.filtered_plants
    return PlantListResponse(
        plants=[build_plant_response(p) for p in plants],
        total_count=len(plants),
        search=search,
        interval_filter=interval_filter,
    )


@router.post("", response_model=PlantResponse, status_code=status.HTTP_201_CREATED)
async def create_plant(
    plant_data: PlantCreate,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Add a plant and schedule its first reminder."""
    plant = plant_data.build_plant()
    controller = PlantListController(repository, reminders)
    if not await controller.create_plant(plant):
        raise ServiceUnavailableException(controller.error_message)
    return build_plant_response(plant)


@router.get("/{plant_id}", response_model=PlantDetailResponse)
async def get_plant(
    plant_id: str,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Get a plant with its schedule and most recent waterings."""
    plant = await _get_plant_or_404(plant_id, repository)
    return _build_detail_response(PlantDetailController(plant, repository, reminders))


@router.put("/{plant_id}", response_model=PlantDetailResponse)
async def update_plant(
    plant_id: str,
    plant_data: PlantUpdate,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Resubmit the edit form. Replaces the plant's pending reminder."""
    plant = await _get_plant_or_404(plant_id, repository)
    controller = PlantDetailController(plant, repository, reminders)
    if not await controller.update_plant(plant_data.apply_to(plant)):
        raise ServiceUnavailableException(controller.error_message)
    return _build_detail_response(controller)


@router.delete("/{plant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plant(
    plant_id: str,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Delete a plant, its watering history and its reminder."""
    plant = await _get_plant_or_404(plant_id, repository)
    controller = PlantDetailController(plant, repository, reminders)
    if not await controller.delete_plant():
        raise ServiceUnavailableException(controller.error_message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{plant_id}/water", response_model=PlantDetailResponse)
async def water_plant(
    plant_id: str,
    event: Optional[WateringEventCreate] = None,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Log a watering now; the schedule re-anchors on this watering."""
    plant = await _get_plant_or_404(plant_id, repository)
    controller = PlantDetailController(plant, repository, reminders)
    amount_ml = event.amount_ml if event else None
    if not await controller.log_watering_event(amount_ml=amount_ml):
        raise ServiceUnavailableException(controller.error_message)
    return _build_detail_response(controller)


@router.get("/{plant_id}/history", response_model=WateringHistoryResponse)
async def get_watering_history(
    plant_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    repository: PlantRepository = Depends(get_plant_repository),
):
    """Watering events, newest first."""
    plant = await _get_plant_or_404(plant_id, repository)
    events = repository.get_watering_history(plant, limit=limit)
    return WateringHistoryResponse(
        plant_id=plant.id,
        events=[WateringEventResponse(date=e.date, amount_ml=e.amount_ml) for e in events],
        total_count=len(plant.watering_history),
    )


@router.get("/{plant_id}/calendar", response_model=WateringCalendarResponse)
async def get_watering_calendar(
    plant_id: str,
    day: Optional[date] = Query(default=None, description="Local date, YYYY-MM-DD"),
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Days with at least one watering; with `day`, that day's waterings newest first."""
    plant = await _get_plant_or_404(plant_id, repository)
    controller = PlantDetailController(plant, repository, reminders)
    events = controller.events_on_day(day) if day is not None else []
    return WateringCalendarResponse(
        plant_id=plant.id,
        days=controller.watering_days(),
        day=day,
        events=[WateringEventResponse(date=e.date, amount_ml=e.amount_ml) for e in events],
    )
