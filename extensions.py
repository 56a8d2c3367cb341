from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO
import os

# Global limiter instance used across the app
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("RATELIMIT_STORAGE_URL", "memory://"),
    strategy="fixed-window",
    default_limits=["200 per hour"],
)

# Short-TTL cache for analytics and search results
cache = Cache()

# Real-time relay; handlers live in app.sockets
socketio = SocketIO()
