"""API module - FastAPI routers and endpoints."""

from .chart import chart_router, tools_router
from .health import health_router

__all__ = ['chart_router', 'tools_router', 'health_router']
