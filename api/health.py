"""
Health Check and Utility Endpoints
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from cache import cache_manager
from sources import source_manager
from config import config

health_router = APIRouter()

VERSION = "1.0.0"


@health_router.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return JSONResponse({
        "status": "healthy",
        "version": VERSION
    })


@health_router.get("/api/status")
async def api_status():
    """Detailed API status with backend and cache info."""
    source = source_manager.source
    return JSONResponse({
        "status": "healthy",
        "version": VERSION,
        "config": {
            "indicator_api_url": getattr(source, 'base_url', config.indicator_api_url),
            "max_axes": config.max_axes,
            "default_theme": config.default_theme,
        },
        "data_source": source.name,
        "cache": cache_manager.stats(),
    })


@health_router.get("/api/cache/clear")
async def clear_cache():
    """Clear fetched series (admin endpoint). Sessions are kept."""
    cache_manager.clear_data()
    return JSONResponse({
        "status": "success",
        "message": "Data cache cleared"
    })
