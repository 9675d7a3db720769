# routers/__init__.py
from .houses import router as houses_router
from .rentals import router as rentals_router
from .payments import router as payments_router
from .notifications import router as notifications_router

__all__ = [
     "houses_router",
     "rentals_router",
     "payments_router",
     "notifications_router",
]
