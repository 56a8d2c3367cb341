import logging

from models import db
from models.product import Product
from models.vendor import VendorProfile
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.services import analytics, subscriptions
from app.utils.db import transactional

logger = logging.getLogger(__name__)


def add_product(vendor_id, data) -> Product:
    """Create a product if the vendor's subscription allows another one."""
    sub = subscriptions.get_subscription(vendor_id)
    if not subscriptions.has_access(sub):
        raise AuthorizationError("Your subscription has expired, please upgrade to continue")
    active = Product.query.filter_by(vendor_id=vendor_id, is_active=True).count()
    if active >= sub.max_products:
        raise ValidationError(f"Product limit reached for your plan ({sub.max_products})")

    with transactional("Failed to add product"):
        product = Product(
            vendor_id=vendor_id,
            name=data.name,
            brand=data.brand,
            description=data.description,
            category=data.category,
            tags=",".join(t.strip() for t in data.tags if t.strip()),
            price=data.price,
            quantity=data.quantity,
            image_url=data.image_url,
            is_active=True,
        )
        db.session.add(product)
    logger.info("Product %s added for vendor %s", product.id, vendor_id)
    return product


def list_vendor_products(vendor_id, include_inactive=False):
    query = Product.query.filter_by(vendor_id=vendor_id)
    if not include_inactive:
        query = query.filter_by(is_active=True)
    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def store_page(slug) -> dict:
    """Public storefront; counts a view for today."""
    profile = VendorProfile.query.filter_by(store_slug=slug, is_active=True).first()
    if profile is None:
        raise NotFoundError("Store not found")
    sub = subscriptions.get_subscription(profile.user_id)
    products = list_vendor_products(profile.user_id) if subscriptions.has_access(sub) else []
    try:
        analytics.record_store_view(profile.user_id)
    except Exception:
        logger.exception("Store view for vendor %s not recorded", profile.user_id)
    return {
        "store": profile.to_dict(),
        "products": [p.to_dict() for p in products],
        "isOpen": subscriptions.has_access(sub),
    }
