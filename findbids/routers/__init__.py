# Routers package
from . import auth_router
from . import account_router
from . import employees_router
from . import rfps_router
from . import rfis_router
from . import notifications_router
from . import analytics_router
from . import ws_router

__all__ = [
    "auth_router",
    "account_router",
    "employees_router",
    "rfps_router",
    "rfis_router",
    "notifications_router",
    "analytics_router",
    "ws_router",
]
