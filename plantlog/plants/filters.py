"""Plant list filtering by search text and interval bucket."""

from typing import Iterable, List

from plantlog.plants.models import IntervalFilter, Plant


def matches_search(plant: Plant, search_text: str) -> bool:
    """Case-insensitive substring match on name or species; blank matches all."""
    query = (search_text or "").strip().lower()
    if not query:
        return True
    return query in plant.name.lower() or query in plant.species.lower()


def matches_interval(plant: Plant, interval_filter: IntervalFilter) -> bool:
    interval = plant.watering_interval_days
    if interval_filter == IntervalFilter.LESS_THAN_7:
        return interval < 7
    if interval_filter == IntervalFilter.BETWEEN_7_AND_14:
        return 7 <= interval <= 14
    if interval_filter == IntervalFilter.MORE_THAN_14:
        return interval > 14
    return True


def visible_plants(
    plants: Iterable[Plant],
    search_text: str = "",
    interval_filter: IntervalFilter = IntervalFilter.ALL,
) -> List[Plant]:
    """Return the plants passing both predicates, in their original order."""
    return [
        plant for plant in plants
        if matches_search(plant, search_text) and matches_interval(plant, interval_filter)
    ]
