# Schemas package (re-export feature modules for stable imports)
from .auth.auth import *
from .users.user import *
from .employees.employee import *
from .rfps.rfp import *
from .rfis.rfi import *
from .notifications.notification import *
from .analytics.analytics import *
from .common.common import *
