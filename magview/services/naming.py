from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit

from magview.config import Settings
from magview.models.hrrr import cycle_label, forecast_hour_label

MAG_HOST = "mag.ncep.noaa.gov"
DEFAULT_MODEL = "hrrr"
DEFAULT_AREA = "conus"
DEFAULT_PARAM = "ceiling"

CYCLE_WIDTH = 2
FHR_WIDTH = 3
# MAG encodes the valid time as HHHMM; minutes are always zero.
MINUTE_FIELD = "00"


def pad_cycle(value: object) -> str:
    return str(value).rjust(CYCLE_WIDTH, "0")


def pad_fhr(value: object) -> str:
    return str(value).rjust(FHR_WIDTH, "0")


@dataclass(frozen=True)
class ImageRequest:
    model: str
    area: str
    cycle: str
    fhr: str
    param: str
    size: str = ""

    @classmethod
    def create(
        cls,
        *,
        model: str,
        area: str,
        cycle_hour: int | str,
        forecast_hour: int | str,
        param: str,
        size: str = "",
    ) -> "ImageRequest":
        return cls(
            model=str(model).lower(),
            area=str(area).lower(),
            cycle=pad_cycle(cycle_hour),
            fhr=pad_fhr(forecast_hour),
            param=str(param).lower(),
            size=str(size).lower(),
        )

    @property
    def filename(self) -> str:
        return f"{self.model}_{self.area}_{self.fhr}{MINUTE_FIELD}_{self.param}{self.size}.gif"

    def query(self) -> dict[str, str]:
        params = {
            "model": self.model,
            "area": self.area,
            "cycle": self.cycle,
            "fhr": self.fhr,
            "param": self.param,
        }
        if self.size:
            params["size"] = self.size
        return params


def direct_url_for(request: ImageRequest, host: str = MAG_HOST) -> str:
    return f"https://{host}/data/{request.model}{request.cycle}/{request.filename}"


def build_filename(
    model: str,
    area: str,
    forecast_hour: int | str,
    parameter: str,
    size_suffix: str = "",
) -> str:
    return ImageRequest.create(
        model=model,
        area=area,
        cycle_hour="",
        forecast_hour=forecast_hour,
        param=parameter,
        size=size_suffix,
    ).filename


def build_direct_url(
    model: str,
    area: str,
    cycle_hour: int | str,
    forecast_hour: int | str,
    parameter: str,
    size_suffix: str = "",
    host: str = MAG_HOST,
) -> str:
    request = ImageRequest.create(
        model=model,
        area=area,
        cycle_hour=cycle_hour,
        forecast_hour=forecast_hour,
        param=parameter,
        size=size_suffix,
    )
    return direct_url_for(request, host)


def build_proxy_url(
    base: str,
    model: str,
    area: str,
    cycle_hour: int | str,
    forecast_hour: int | str,
    parameter: str,
    size_suffix: str = "",
) -> str:
    request = ImageRequest.create(
        model=model,
        area=area,
        cycle_hour=cycle_hour,
        forecast_hour=forecast_hour,
        param=parameter,
        size=size_suffix,
    )
    return f"{base}?{urlencode(request.query())}"


def decode_proxy_query(url_or_query: str) -> dict[str, str]:
    """Parse the query string of a proxy URL (or a bare query string)."""
    if "?" in url_or_query:
        query = urlsplit(url_or_query).query
    else:
        query = url_or_query
    return dict(parse_qsl(query, keep_blank_values=True))


class MagNaming:
    """MAG path and filename rules bound to one host and proxy endpoint."""

    def __init__(
        self,
        *,
        host: str = MAG_HOST,
        proxy_base: str = "/api/mag",
        default_model: str = DEFAULT_MODEL,
        default_area: str = DEFAULT_AREA,
        default_param: str = DEFAULT_PARAM,
        size_suffix: str = "",
    ) -> None:
        self.host = host
        self.proxy_base = proxy_base
        self.default_model = default_model.lower()
        self.default_area = default_area.lower()
        self.default_param = default_param.lower()
        self.size_suffix = size_suffix.lower()

    @classmethod
    def from_settings(cls, settings: Settings) -> "MagNaming":
        return cls(
            host=settings.MAG_HOST,
            proxy_base=settings.PROXY_PATH,
            default_model=settings.DEFAULT_MODEL,
            default_area=settings.DEFAULT_AREA,
            default_param=settings.DEFAULT_PARAM,
            size_suffix=settings.SIZE_SUFFIX,
        )

    @property
    def origin(self) -> str:
        return f"https://{self.host}/"

    def request(
        self,
        cycle_hour: int | str,
        forecast_hour: int | str,
        param: str | None = None,
        *,
        model: str | None = None,
        area: str | None = None,
    ) -> ImageRequest:
        return ImageRequest.create(
            model=model or self.default_model,
            area=area or self.default_area,
            cycle_hour=cycle_hour,
            forecast_hour=forecast_hour,
            param=param or self.default_param,
            size=self.size_suffix,
        )

    def request_from_query(self, query: Mapping[str, str | None]) -> ImageRequest:
        """Rebuild a request from proxy query parameters.

        Missing or empty values fall back to the defaults. cycle and fhr are only
        padded, never range checked.
        """
        return ImageRequest.create(
            model=query.get("model") or self.default_model,
            area=query.get("area") or self.default_area,
            cycle_hour=query.get("cycle") or "",
            forecast_hour=query.get("fhr") or "0",
            param=query.get("param") or self.default_param,
            size=query.get("size") or "",
        )

    def filename(self, request: ImageRequest) -> str:
        return request.filename

    def direct_url(self, request: ImageRequest) -> str:
        return direct_url_for(request, self.host)

    def proxy_url(self, request: ImageRequest) -> str:
        return f"{self.proxy_base}?{urlencode(request.query())}"

    def caption(self, request: ImageRequest) -> str:
        return (
            f"{request.param} – {request.model.upper()} {request.area.upper()} "
            f"{cycle_label(request.cycle)} {forecast_hour_label(request.fhr)}"
        )

    def frame_urls(self, request: ImageRequest) -> dict[str, str]:
        return {
            "filename": self.filename(request),
            "direct_url": self.direct_url(request),
            "proxy_url": self.proxy_url(request),
            "caption": self.caption(request),
        }
