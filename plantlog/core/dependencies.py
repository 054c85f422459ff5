"""
Common dependencies for FastAPI routes.
"""

from fastapi import Request

from plantlog.notifications.router import NotificationRouter
from plantlog.notifications.service import ReminderService
from plantlog.plants.repository import PlantRepository


def get_plant_repository() -> PlantRepository:
    return PlantRepository()


def get_reminder_service() -> ReminderService:
    return ReminderService()


def get_notification_router(request: Request) -> NotificationRouter:
    """The router lives on app.state; one per application, not per process."""
    return request.app.state.notification_router
