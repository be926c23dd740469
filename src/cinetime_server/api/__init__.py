"""API routers."""

from .episodes import router as episodes_router
from .maintenance import router as maintenance_router
from .watchlist import router as watchlist_router

__all__ = ["episodes_router", "maintenance_router", "watchlist_router"]
