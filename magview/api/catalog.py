from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from magview.config import settings
from magview.models.hrrr import (
    CYCLE_HOURS,
    cycle_label,
    is_extended_cycle,
    max_forecast_hour,
    valid_forecast_hours,
)
from magview.models.params import filter_param_groups, find_param
from magview.models.schemas import CycleInfo, FrameInfo, ParamGroupSchema, ParamItemSchema
from magview.services.naming import MagNaming

router = APIRouter(prefix="/api", tags=["catalog"])


def _ensure_cycle(cycle: int) -> None:
    if cycle not in CYCLE_HOURS:
        raise HTTPException(status_code=400, detail="Invalid cycle: must be 0-23")


def _ensure_fhr(cycle: int, fhr: int) -> None:
    if fhr < 0 or fhr > max_forecast_hour(cycle):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid fhr for {cycle_label(cycle)} cycle: must be 0-{max_forecast_hour(cycle)}",
        )


def _naming() -> MagNaming:
    return MagNaming.from_settings(settings)


@router.get("/params")
def list_params(q: str | None = Query(default=None)) -> list[ParamGroupSchema]:
    return [
        ParamGroupSchema(
            group=group.group,
            items=[ParamItemSchema(key=item.key, label=item.label) for item in group.items],
        )
        for group in filter_param_groups(q)
    ]


@router.get("/cycles")
def list_cycles() -> list[CycleInfo]:
    return [
        CycleInfo(
            hour=hour,
            label=cycle_label(hour),
            extended=is_extended_cycle(hour),
            max_forecast_hour=max_forecast_hour(hour),
        )
        for hour in CYCLE_HOURS
    ]


@router.get("/cycles/{cycle}/hours")
def list_hours(cycle: int) -> list[int]:
    _ensure_cycle(cycle)
    return valid_forecast_hours(cycle)


@router.get("/frame")
def frame_info(
    cycle: int = Query(...),
    fhr: int = Query(...),
    param: str | None = Query(default=None),
    model: str | None = Query(default=None),
    area: str | None = Query(default=None),
) -> FrameInfo:
    _ensure_cycle(cycle)
    _ensure_fhr(cycle, fhr)
    naming = _naming()
    request = naming.request(cycle, fhr, param, model=model, area=area)
    item = find_param(request.param)
    return FrameInfo(
        model=request.model,
        area=request.area,
        cycle=request.cycle,
        fhr=request.fhr,
        param=request.param,
        label=item.label if item else None,
        **naming.frame_urls(request),
    )
