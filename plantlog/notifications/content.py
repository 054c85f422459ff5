"""
Notification Content Templates

Reminder copy lives here so wording can change without touching the
scheduling logic.
"""


class WaterReminderContent:
    """Water reminder notification content templates."""

    @staticmethod
    def title(plant_name: str) -> str:
        return f"Water {plant_name}"

    @staticmethod
    def body(species: str) -> str:
        if not species.strip():
            return "Time to water your plant."
        return f"Time to water {species}."


def reminder_id(plant_id: str) -> str:
    """Pending reminders are keyed by plant identity."""
    return f"plant-{plant_id}"
