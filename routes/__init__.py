from .health import health_bp
from .auth import auth_bp
from .availability import availability_bp
from .booking import booking_bp
from .catalog import catalog_bp
from .admin import admin_bp
