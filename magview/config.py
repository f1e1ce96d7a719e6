from __future__ import annotations

import os
from dataclasses import dataclass

MAG_ACCEPT_HEADER = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"


def _env_str(name: str, *, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip()


def _env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, *, default: int, minimum: int | None = None, maximum: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = default
    if minimum is not None and value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


def _env_float(name: str, *, default: float, minimum: float | None = None, maximum: float | None = None) -> float:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        try:
            value = float(raw.strip())
        except ValueError:
            value = default
    if minimum is not None and value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


@dataclass(frozen=True)
class Settings:
    MAG_HOST: str = _env_str("MAGVIEW_MAG_HOST", default="mag.ncep.noaa.gov") or "mag.ncep.noaa.gov"
    USER_AGENT: str = _env_str(
        "MAGVIEW_USER_AGENT", default="Mozilla/5.0 (X11; Linux x86_64) magview-proxy"
    )
    PROXY_PATH: str = _env_str("MAGVIEW_PROXY_PATH", default="/api/mag") or "/api/mag"
    DEFAULT_MODEL: str = _env_str("MAGVIEW_MODEL", default="hrrr").lower() or "hrrr"
    DEFAULT_AREA: str = _env_str("MAGVIEW_AREA", default="conus").lower() or "conus"
    DEFAULT_PARAM: str = _env_str("MAGVIEW_PARAM", default="ceiling").lower() or "ceiling"
    SIZE_SUFFIX: str = _env_str("MAGVIEW_SIZE_SUFFIX", default="").lower()
    UPSTREAM_TIMEOUT_SECONDS: float = _env_float("MAGVIEW_UPSTREAM_TIMEOUT", default=15.0, minimum=1.0, maximum=60.0)
    CACHE_MAX_AGE_SECONDS: int = _env_int("MAGVIEW_CACHE_MAX_AGE", default=300, minimum=0, maximum=86400)
    PLAYBACK_INTERVAL_MS: int = _env_int("MAGVIEW_PLAYBACK_INTERVAL_MS", default=600, minimum=50, maximum=10000)
    CORS_ENABLED: bool = _env_bool("MAGVIEW_CORS", default=False)
    API_HOST: str = _env_str("MAGVIEW_HOST", default="127.0.0.1") or "127.0.0.1"
    API_PORT: int = _env_int("MAGVIEW_PORT", default=8188, minimum=1, maximum=65535)
    LOG_LEVEL: str = _env_str("MAGVIEW_LOG_LEVEL", default="INFO").upper() or "INFO"

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.CACHE_MAX_AGE_SECONDS}"


settings = Settings()
