"""Notifications API routes."""

from fastapi import APIRouter, Depends, Response, status

from plantlog.core.dependencies import (
    get_notification_router,
    get_plant_repository,
    get_reminder_service,
)
from plantlog.core.exceptions import ServiceUnavailableException, StorageError
from plantlog.notifications.models import NotificationTap, ReminderListResponse
from plantlog.notifications.router import NotificationRouter
from plantlog.notifications.service import ReminderService
from plantlog.plants.models import PlantResponse
from plantlog.plants.repository import PlantRepository
from plantlog.plants.service import PlantListController
from plantlog.plants.views import build_plant_response

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/reminders", response_model=ReminderListResponse)
async def get_pending_reminders(
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Pending watering reminders, soonest first."""
    try:
        pending = await reminders.pending_reminders()
    except StorageError as e:
        raise ServiceUnavailableException(f"Failed to load reminders: {e}")
    return ReminderListResponse(reminders=pending, total_count=len(pending))


@router.post(
    "/tap",
    response_model=PlantResponse,
    responses={204: {"description": "Plant no longer exists"}},
)
async def handle_notification_tap(
    tap: NotificationTap,
    repository: PlantRepository = Depends(get_plant_repository),
    reminders: ReminderService = Depends(get_reminder_service),
    notification_router: NotificationRouter = Depends(get_notification_router),
):
    """
    Resolve a tapped reminder to its plant.

    Returns 204 when the payload is unusable or the plant was deleted since
    the reminder was scheduled.
    """
    controller = PlantListController(repository, reminders)
    await controller.load_plants()
    if controller.error_message:
        raise ServiceUnavailableException(controller.error_message)

    notification_router.subscribe(controller.handle_notification_tap)
    try:
        notification_router.handle_payload({"plantID": tap.plant_id})
    finally:
        notification_router.unsubscribe(controller.handle_notification_tap)

    if controller.selected_plant is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return build_plant_response(controller.selected_plant)
