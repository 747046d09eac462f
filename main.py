"""
Series Composer - Multi-axis charts for economic indicator series

Pulls annual indicator series from the backend, lets an analyst combine
them into ratio or difference series, and prepares everything a chart
renderer needs.

Features:
- Unit categorization and one y-axis per unit category
- Derived series (A / B, A - B) with gap-aware year alignment
- Year-pivoted rows and CSV table export
- Wrapped legend layout shared by the live chart and the SVG export
- Per-session chart state with two-tier caching
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import modules
from config import config
from api import chart_router, tools_router, health_router
from sources.indicators import close_async_client

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# APP INITIALIZATION
# =============================================================================

app = FastAPI(
    title="Series Composer",
    description="Multi-axis composition of economic indicator series",
    version="1.0.0"
)

# CORS for development (React runs on different port)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chart_router)
app.include_router(tools_router)
app.include_router(health_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__}
    )


# =============================================================================
# STARTUP / SHUTDOWN
# =============================================================================

@app.on_event("startup")
async def startup():
    logger.info("Series Composer starting up")
    logger.info(f"  Indicator backend: {config.indicator_api_url}")
    logger.info(f"  Max axes: {config.max_axes}, theme: {config.default_theme}")


@app.on_event("shutdown")
async def shutdown():
    await close_async_client()


# =============================================================================
# RUN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
