from __future__ import annotations

from datetime import datetime, timezone

EXTENDED_CYCLES = frozenset({0, 6, 12, 18})
EXTENDED_MAX_FHR = 48
STANDARD_MAX_FHR = 18
CYCLE_HOURS = tuple(range(24))


def is_extended_cycle(cycle_hour: int) -> bool:
    return cycle_hour in EXTENDED_CYCLES


def max_forecast_hour(cycle_hour: int) -> int:
    if is_extended_cycle(cycle_hour):
        return EXTENDED_MAX_FHR
    return STANDARD_MAX_FHR


def valid_forecast_hours(cycle_hour: int) -> list[int]:
    """Forecast hours MAG publishes for a given HRRR cycle, in order."""
    return list(range(0, max_forecast_hour(cycle_hour) + 1))


def cycle_label(cycle_hour: int) -> str:
    return f"{str(cycle_hour).rjust(2, '0')}Z"


def forecast_hour_label(forecast_hour: int) -> str:
    return f"F{str(forecast_hour).rjust(3, '0')}"


def utc_hour_now(now: datetime | None = None) -> int:
    current = now or datetime.now(timezone.utc)
    return current.astimezone(timezone.utc).hour
