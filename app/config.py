import os

class BaseConfig:
    JSON_SORT_KEYS = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
    REGISTRATION_LIMIT_PER_IP = os.getenv("REGISTRATION_LIMIT_PER_IP", "5 per hour")
    LOGIN_LIMIT_PER_IP = os.getenv("LOGIN_LIMIT_PER_IP", "10 per 30 minutes")
    ORDER_LIMIT_PER_IP = os.getenv("ORDER_LIMIT_PER_IP", "20 per hour")
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-jwt-key")
    ACCESS_TOKEN_LIFETIME_MIN = int(os.getenv("ACCESS_TOKEN_LIFETIME_MIN", 15))
    REFRESH_TOKEN_LIFETIME_DAYS = int(os.getenv("REFRESH_TOKEN_LIFETIME_DAYS", 30))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

    # Caching (analytics and search)
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")  # RedisCache in production
    CACHE_REDIS_URL = os.getenv("CACHE_REDIS_URL")
    CACHE_DEFAULT_TIMEOUT = 300
    ANALYTICS_CACHE_TTL = int(os.getenv("ANALYTICS_CACHE_TTL", 3600))
    SEARCH_CACHE_TTL = int(os.getenv("SEARCH_CACHE_TTL", 300))

    # Background tasks
    CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "0") == "1"

    # Email
    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY", "")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@grabtogo.in")
    EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "GrabtoGo")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "info@grabtogo.in")
    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@grabtogo.in")
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000")

    # Payment gateway (Razorpay)
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
    RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")
    PAYMENT_GATEWAY_TIMEOUT = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", 10))

    # Real-time relay
    SOCKETIO_MESSAGE_QUEUE = os.getenv("SOCKETIO_MESSAGE_QUEUE")

    OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "grabtogo-backend")
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dev.db")

class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-key"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False
    CACHE_TYPE = "SimpleCache"
    CELERY_TASK_ALWAYS_EAGER = True
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = "rzp_test_secret"
    BCRYPT_ROUNDS = 4

class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")

    @staticmethod
    def validate():
        missing = []
        for key in ("SECRET_KEY", "DATABASE_URL", "JWT_SECRET"):
            if not os.getenv(key):
                missing.append(key)
        if missing:
            raise RuntimeError(
                f"Missing required env vars in production: {', '.join(missing)}"
            )

def get_config_class():
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        ProductionConfig.validate()
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
