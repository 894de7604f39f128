"""
app/api/routers package marker.
"""

from app.api.routers.auth import router as auth_router
from app.api.routers.dashboard import router as dashboard_router
from app.api.routers.export import router as export_router
from app.api.routers.improvement import router as improvement_router
from app.api.routers.summary import router as summary_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "export_router",
    "improvement_router",
    "summary_router",
]
