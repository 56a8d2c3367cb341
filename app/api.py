from app.routes import (
    auth_bp,
    registration_bp,
    admin_bp,
    vendor_bp,
    orders_bp,
    notifications_bp,
    chat_bp,
    analytics_bp,
    search_bp,
)


def register_api_v1(app):
    """Register blueprint routes under the API version prefix."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(registration_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(vendor_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(search_bp)
