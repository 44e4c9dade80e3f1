import asyncio
from enum import Enum

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse, RedirectResponse, PlainTextResponse

from prehrastream.config.settings import settings
from prehrastream.scrapers.prehrajto.premium import get_premium_session
from prehrastream.services.stream import stream_service
from prehrastream.utils.logger import api_logger


# ===========================
# Router Instance
# ===========================
router = APIRouter()


# ===========================
# Content Type Enum
# ===========================
class ContentType(str, Enum):
    movie = "movie"
    series = "series"


# ===========================
# Web Interface Endpoints
# ===========================
@router.get("/", summary="Home", description="Redirects to the addon manifest")
async def root():
    return RedirectResponse("/manifest.json")


@router.get("/health", summary="Health check", description="Liveness probe")
async def health():
    return PlainTextResponse("OK")


# ===========================
# Stremio Addon Endpoints
# ===========================
@router.get("/manifest.json", summary="Stremio Manifest", description="Returns addon metadata for installation")
async def get_manifest():
    return JSONResponse(content=settings.ADDON_MANIFEST)


@router.get("/stream/{content_type}/{content_id}",
            summary="Get streams",
            description="Returns available streams for the requested content")
async def get_streams(
    content_type: ContentType = Path(..., description="Content type"),
    content_id: str = Path(..., description="Content identifier")
):
    content_id_formatted = content_id.replace(".json", "")
    api_logger.debug(f"Stream: {content_type.value}/{content_id_formatted}")

    try:
        premium = await get_premium_session()

        streams = await asyncio.wait_for(
            stream_service.get_streams(
                content_type=content_type.value,
                content_id=content_id_formatted,
                premium=premium
            ),
            timeout=settings.STREAM_REQUEST_TIMEOUT
        )

        return JSONResponse(content={
            "streams": streams,
            "cacheMaxAge": settings.CONTENT_CACHE_TTL
        })

    except asyncio.TimeoutError:
        api_logger.error(f"Stream timeout after {settings.STREAM_REQUEST_TIMEOUT}s")
        return JSONResponse(content={"streams": []})
    except Exception as e:
        api_logger.error(f"Stream failed: {type(e).__name__}")
        return JSONResponse(content={"streams": []})
