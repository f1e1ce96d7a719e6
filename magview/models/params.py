from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParamItem:
    key: str
    label: str

    def matches(self, query: str) -> bool:
        return query in self.key.lower() or query in self.label.lower()


@dataclass(frozen=True)
class ParamGroup:
    group: str
    items: tuple[ParamItem, ...]


PARAM_GROUPS: tuple[ParamGroup, ...] = (
    ParamGroup(
        group="Aviation (priority)",
        items=(
            ParamItem(key="ceiling", label="Ceiling (AGL)"),
            ParamItem(key="vis", label="Visibility"),
        ),
    ),
    ParamGroup(
        group="Precipitation",
        items=(
            ParamItem(key="sim_radar_comp", label="Simulated Composite Reflectivity"),
            ParamItem(key="precip_ptot", label="Total Precipitation"),
            ParamItem(key="snow_total", label="Snow Total"),
        ),
    ),
    ParamGroup(
        group="Surface / Layer",
        items=(
            ParamItem(key="2m_temp_10m_wnd", label="2 m Temp / 10 m Wind"),
            ParamItem(key="2m_dewp_10m_wnd", label="2 m Dewpoint / 10 m Wind"),
            ParamItem(key="10m_wnd", label="10 m Wind"),
        ),
    ),
    ParamGroup(
        group="Upper Air",
        items=(
            ParamItem(key="700_rh_ht", label="700 mb RH/Height"),
            ParamItem(key="850_temp_ht", label="850 mb Temp/Height"),
            ParamItem(key="300_wnd", label="300 mb Wind"),
        ),
    ),
)


def filter_param_groups(
    query: str | None,
    groups: tuple[ParamGroup, ...] = PARAM_GROUPS,
) -> tuple[ParamGroup, ...]:
    """Case-insensitive substring filter over item keys and labels.

    A blank query returns every group. Groups with no matching items are dropped.
    """
    if query is None or not query.strip():
        return groups
    needle = query.lower()
    filtered: list[ParamGroup] = []
    for group in groups:
        items = tuple(item for item in group.items if item.matches(needle))
        if items:
            filtered.append(ParamGroup(group=group.group, items=items))
    return tuple(filtered)


def find_param(key: str, groups: tuple[ParamGroup, ...] = PARAM_GROUPS) -> ParamItem | None:
    for group in groups:
        for item in group.items:
            if item.key == key:
                return item
    return None
