"""Pydantic schemas for the catalog API"""
from typing import List, Optional

from pydantic import BaseModel


class ParamItemSchema(BaseModel):
    key: str
    label: str


class ParamGroupSchema(BaseModel):
    group: str
    items: List[ParamItemSchema]


class CycleInfo(BaseModel):
    """One selectable HRRR cycle"""
    hour: int
    label: str  # "06Z"
    extended: bool
    max_forecast_hour: int


class FrameInfo(BaseModel):
    """URLs for a single (cycle, forecast hour, parameter) frame"""
    model: str
    area: str
    cycle: str
    fhr: str
    param: str
    filename: str
    direct_url: str
    proxy_url: str
    caption: str
    label: Optional[str] = None  # catalog label, None for keys outside the catalog
