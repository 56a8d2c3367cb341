from .auth import auth_bp
from .registration import registration_bp
from .admin import admin_bp
from .vendor import vendor_bp
from .orders import orders_bp
from .notifications import notifications_bp
from .chat import chat_bp
from .analytics import analytics_bp
from .search import search_bp


__all__ = [
    'auth_bp',
    'registration_bp',
    'admin_bp',
    'vendor_bp',
    'orders_bp',
    'notifications_bp',
    'chat_bp',
    'analytics_bp',
    'search_bp',
]
