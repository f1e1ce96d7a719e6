from __future__ import annotations

from fastapi import APIRouter, Query, Response

from magview.config import settings
from magview.services.relay import get_relay

router = APIRouter(tags=["proxy"])


@router.get(settings.PROXY_PATH)
def mag_proxy(
    model: str | None = Query(default=None),
    area: str | None = Query(default=None),
    cycle: str | None = Query(default=None),
    fhr: str | None = Query(default=None),
    param: str | None = Query(default=None),
    size: str | None = Query(default=None),
) -> Response:
    query = {
        "model": model,
        "area": area,
        "cycle": cycle,
        "fhr": fhr,
        "param": param,
        "size": size,
    }
    result = get_relay().relay(query)
    return Response(
        content=result.content(),
        status_code=result.status_code,
        headers=result.headers,
    )
