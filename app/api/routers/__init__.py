"""
app/api/routers package marker.
"""

from app.api.routers.activity_router import router as activity_router
from app.api.routers.region_router import router as region_router
from app.api.routers.scheme_import import router as scheme_import_router

__all__ = [
    "activity_router",
    "region_router",
    "scheme_import_router",
]
