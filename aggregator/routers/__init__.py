"""
API routers for v1 endpoints.
"""

from aggregator.routers.feeds import router as feeds_router

__all__ = [
    "feeds_router",
]
