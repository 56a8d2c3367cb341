from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import BigInteger, Integer

# Use BigInteger in production but fall back to Integer for SQLite
BIGINT = BigInteger().with_variant(Integer, "sqlite")

db = SQLAlchemy()

# Re-export common models for convenience
from .user import User  # noqa: F401,E402
from .vendor import VendorRegistrationRequest, VendorProfile  # noqa: F401,E402
from .subscription import VendorSubscription, Payment  # noqa: F401,E402
from .notification import Notification  # noqa: F401,E402
from .chat import Chat, ChatParticipant, ChatMessage  # noqa: F401,E402
from .product import Product  # noqa: F401,E402
from .order import Order, OrderItem  # noqa: F401,E402
from .analytics import VendorAnalytics, TrendingSearch  # noqa: F401,E402
