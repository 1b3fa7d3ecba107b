import math
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import date
from typing import Any

from profile_page.api.schemas.profile import ContributionDay
from profile_page.api.schemas.profile import HeatmapCell


HEATMAP_COLORS = ["#161b22", "#0e4429", "#006d32", "#26a641", "#39d353"]
MAX_LEVEL = len(HEATMAP_COLORS) - 1
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def flatten_contribution_weeks(weeks: Sequence[Any]) -> list[ContributionDay]:
    """Flatten GraphQL calendar weeks into a date-ordered contribution series.

    Malformed entries are skipped. When a date appears twice the first
    occurrence wins.
    """

    days: dict[date, ContributionDay] = {}
    for week in weeks:
        if not isinstance(week, Mapping):
            continue
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            continue
        for item in contribution_days:
            if not isinstance(item, Mapping):
                continue
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            if not isinstance(raw_date, str) or not isinstance(raw_count, int):
                continue
            if raw_count < 0:
                continue

            try:
                parsed_day = date.fromisoformat(raw_date)
            except ValueError:
                continue

            days.setdefault(
                parsed_day, ContributionDay(date=parsed_day, count=raw_count)
            )

    return [days[day] for day in sorted(days)]


def total_contributions(series: Sequence[ContributionDay]) -> int:
    return sum(day.count for day in series)


def scale_max(series: Sequence[ContributionDay]) -> int:
    """Upper bound of the color scale; never below 1."""

    return max([day.count for day in series] + [1])


def contribution_level(count: int, maximum: int) -> int:
    """Map a daily count to a heatmap level in range 0..4 relative to `maximum`."""

    if count <= 0:
        return 0
    level = math.ceil(MAX_LEVEL * count / max(1, maximum))
    return min(MAX_LEVEL, max(1, level))


def cell_label(day: ContributionDay) -> str:
    return f"{day.count} contributions on {day.date.isoformat()}"


def build_heatmap_cells(series: Sequence[ContributionDay]) -> list[HeatmapCell]:
    maximum = scale_max(series)
    return [
        HeatmapCell(
            date=day.date,
            count=day.count,
            level=contribution_level(day.count, maximum),
            label=cell_label(day),
        )
        for day in series
    ]


def build_chart_option(series: Sequence[ContributionDay]) -> dict[str, Any]:
    """Build the ECharts calendar heatmap option for a contribution series.

    An empty series yields an empty option, which renders nothing.
    """

    if not series:
        return {}

    calendar_data = [
        {"value": [day.date.isoformat(), day.count], "name": cell_label(day)}
        for day in series
    ]

    return {
        "tooltip": {"formatter": "{b}"},
        "visualMap": {
            "show": False,
            "min": 0,
            "max": scale_max(series),
            "inRange": {"color": HEATMAP_COLORS},
        },
        "calendar": {
            "top": 20,
            "left": 40,
            "right": 20,
            "cellSize": [13, 13],
            "range": [series[0].date.isoformat(), series[-1].date.isoformat()],
            "itemStyle": {"borderWidth": 3, "borderColor": "#0d1117"},
            "yearLabel": {"show": False},
            "dayLabel": {"color": "#8b949e", "fontSize": 10, "nameMap": DAY_NAMES},
            "monthLabel": {"color": "#8b949e", "fontSize": 10},
            "splitLine": {"show": False},
        },
        "series": [
            {
                "type": "heatmap",
                "coordinateSystem": "calendar",
                "data": calendar_data,
            }
        ],
    }
