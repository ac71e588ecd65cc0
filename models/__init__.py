from .db import db
from .user import User, Role, user_roles
from .audit_log import AuditLog
from .session import Session
from .service import Service
from .capacity_override import CapacityOverride
from .booking import Booking
from .customer_note import CustomerNote
