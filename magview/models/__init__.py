from .hrrr import (
    EXTENDED_CYCLES,
    cycle_label,
    forecast_hour_label,
    is_extended_cycle,
    max_forecast_hour,
    valid_forecast_hours,
)
from .params import PARAM_GROUPS, ParamGroup, ParamItem, filter_param_groups, find_param

__all__ = [
    "EXTENDED_CYCLES",
    "cycle_label",
    "forecast_hour_label",
    "is_extended_cycle",
    "max_forecast_hour",
    "valid_forecast_hours",
    "PARAM_GROUPS",
    "ParamGroup",
    "ParamItem",
    "filter_param_groups",
    "find_param",
]
