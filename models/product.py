# --- models/product.py ---
from models import db, BIGINT
from datetime import datetime


class Product(db.Model):
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_vendor_active", "vendor_id", "is_active"),
    )

    id = db.Column(BIGINT, primary_key=True)
    vendor_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)

    # Core details
    name = db.Column(db.String(150), nullable=False)
    brand = db.Column(db.String(80), nullable=True)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(80), nullable=True)            # slug, e.g. "groceries"
    tags = db.Column(db.String(255), nullable=True)               # comma separated

    # Pricing & inventory
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, default=0)

    # Status
    is_active = db.Column(db.Boolean, default=True)
    order_count = db.Column(db.Integer, default=0)               # popularity sort

    image_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "vendorId": self.vendor_id,
            "name": self.name,
            "brand": self.brand,
            "description": self.description,
            "category": self.category,
            "tags": [t for t in (self.tags or "").split(",") if t],
            "price": float(self.price),
            "quantity": self.quantity,
            "isActive": self.is_active,
            "imageUrl": self.image_url,
        }
