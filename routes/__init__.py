from .health import health_bp
from .slots import slots_bp
from .booking import booking_bp
from .admin import admin_bp
