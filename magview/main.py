from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from magview import __version__
from magview.config import settings

from .api.catalog import router as catalog_router
from .api.proxy import router as proxy_router

app = FastAPI(
    title="magview",
    description="HRRR imagery browser with a MAG hotlink proxy",
    version=__version__,
)

if settings.CORS_ENABLED:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

app.include_router(proxy_router)
app.include_router(catalog_router)


@app.get("/health", tags=["health"])
def health_check() -> dict[str, str]:
    return {"status": "ok"}
