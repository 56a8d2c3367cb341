from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from models import db, BIGINT


ORDER_STATUSES = ("pending", "confirmed", "preparing", "out_for_delivery", "delivered", "cancelled")


class Order(db.Model):
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_vendor_created", "vendor_id", "created_at"),
    )
    id = Column(BIGINT, primary_key=True)
    customer_id = Column(BIGINT, ForeignKey("users.id"), nullable=False)
    vendor_id = Column(BIGINT, ForeignKey("users.id"), nullable=False)
    status = Column(String(30), default="pending")
    delivery_notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    items = db.relationship("OrderItem", backref="order", cascade="all, delete-orphan", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "vendorId": self.vendor_id,
            "status": self.status,
            "deliveryNotes": self.delivery_notes,
            "totalAmount": float(self.total_amount),
            "items": [i.to_dict() for i in self.items],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"
    id = db.Column(BIGINT, primary_key=True)
    order_id = db.Column(BIGINT, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(BIGINT, db.ForeignKey("products.id"), nullable=False)

    name = db.Column(db.String(150))
    unit_price = db.Column(db.Numeric(10, 2))
    quantity = db.Column(db.Integer)
    subtotal = db.Column(db.Numeric(10, 2))

    def to_dict(self):
        return {
            "productId": self.product_id,
            "name": self.name,
            "unitPrice": float(self.unit_price),
            "quantity": self.quantity,
            "subtotal": float(self.subtotal),
        }
