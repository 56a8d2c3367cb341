from decimal import Decimal
from datetime import timedelta

from models import db
from models.order import Order, OrderItem, ORDER_STATUSES
from models.product import Product
from models.user import User, ROLE_ADMIN
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.services import subscriptions
from app.utils.clock import utcnow


def _period_start(sub, now):
    if sub.is_trial:
        return sub.start_date
    return max(sub.start_date, now - timedelta(days=subscriptions.BILLING_PERIOD_DAYS[sub.billing_cycle]))


def place_order(customer: User, vendor_id: int, lines, delivery_notes: str = None) -> Order:
    """Create an order for one vendor, locking and decrementing stock.

    Does not commit; caller wraps in ``transactional``.
    """
    sub = subscriptions.get_subscription(vendor_id)
    now = utcnow()
    if not subscriptions.has_access(sub, now):
        raise ValidationError("This store is not accepting orders")
    taken = (
        Order.query.filter_by(vendor_id=vendor_id)
        .filter(Order.created_at >= _period_start(sub, now))
        .count()
    )
    if taken >= sub.max_orders:
        raise ValidationError("This store has reached its order limit")

    order = Order(
        customer_id=customer.id,
        vendor_id=vendor_id,
        status="pending",
        delivery_notes=delivery_notes,
        total_amount=Decimal("0"),
        created_at=now,
    )
    db.session.add(order)
    db.session.flush()

    total = Decimal("0")
    for line in lines:
        product = (
            Product.query.filter_by(id=line.productId, vendor_id=vendor_id, is_active=True)
            .with_for_update()
            .first()
        )
        if product is None:
            raise NotFoundError(f"Product {line.productId} not found")
        if (product.quantity or 0) < line.quantity:
            raise ValidationError(f"Not enough stock for {product.name}")
        product.quantity -= line.quantity
        product.order_count = (product.order_count or 0) + line.quantity

        subtotal = Decimal(str(product.price)) * line.quantity
        total += subtotal
        db.session.add(OrderItem(
            order_id=order.id,
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=line.quantity,
            subtotal=subtotal,
        ))

    order.total_amount = total
    return order


def get_order_for_actor(order_id, actor: User) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if actor.role != ROLE_ADMIN and order.vendor_id != actor.id:
        raise AuthorizationError("Order not found or access denied")
    return order


def set_status(order: Order, status: str) -> Order:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status: {status}")
    if order.status in ("delivered", "cancelled"):
        raise ValidationError(f"Order is already {order.status}")
    order.status = status
    order.updated_at = utcnow()
    return order


def list_customer_orders(customer_id):
    return (
        Order.query.filter_by(customer_id=customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def list_vendor_orders(vendor_id):
    return (
        Order.query.filter_by(vendor_id=vendor_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
