"""Grouping of festival records into a January-to-December calendar."""
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

MONTH_ORDER = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

PAN_INDIA = "Pan India"


@dataclass
class MonthGroup:
    """Festivals falling in one calendar month."""
    month: str
    festivals: list = field(default_factory=list)
    sort_order: int = len(MONTH_ORDER)


def month_sort_order(month: str) -> int:
    """Position of a month in the calendar; unknown names sort after December"""
    try:
        return MONTH_ORDER.index(month)
    except ValueError:
        return len(MONTH_ORDER)


def festival_summary(festival) -> dict[str, Any]:
    return {"name": festival.name, "date": festival.date, "region": festival.region}


def festival_detail(festival) -> dict[str, Any]:
    return {
        "id": festival.id,
        "name": festival.name,
        "month": festival.month,
        "date": festival.date,
        "region": festival.region,
        "year": festival.year,
    }


def group_festivals_by_month(festivals: Iterable,
                             entry: Callable[[Any], Any] = festival_summary) -> list[MonthGroup]:
    """Group festivals by month and order the groups by the calendar.

    Festivals keep their input order inside a month. Months that are not
    calendar month names are placed last, in first-seen order.
    """
    groups: dict[str, MonthGroup] = {}
    for festival in festivals:
        month = festival.month
        if month not in groups:
            groups[month] = MonthGroup(month=month, sort_order=month_sort_order(month))
        groups[month].festivals.append(entry(festival))
    # sorted() is stable, so ties keep first-seen order
    return sorted(groups.values(), key=lambda group: group.sort_order)
