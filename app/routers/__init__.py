from app.routers.missions import router as missions_router
from app.routers.tutorials import router as tutorials_router
from app.routers.progress import router as progress_router
from app.routers.cron import router as cron_router

__all__ = ["missions_router", "tutorials_router", "progress_router", "cron_router"]
