# Models package (re-export feature modules for stable imports)
from .users.user import User
from .users.session import UserSession
from .users.employee import Employee
from .marketplace.rfp import Rfp
from .marketplace.rfi import Rfi, RfiMessage, RfiAttachment
from .notifications.notification import Notification
from .analytics.analytics import RfpAnalytics, RfpViewSession

__all__ = [
    "User",
    "UserSession",
    "Employee",
    "Rfp",
    "Rfi",
    "RfiMessage",
    "RfiAttachment",
    "Notification",
    "RfpAnalytics",
    "RfpViewSession",
]
