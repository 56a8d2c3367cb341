from flask import Blueprint, request, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.schemas.orders import PlaceOrderRequest
from app.services import orders, relay
from app.utils import auth_required, role_required, ok, transactional, validate_schema
from app.version import API_PREFIX

orders_bp = Blueprint("orders", __name__, url_prefix=API_PREFIX)


@orders_bp.route("/orders", methods=["POST"])
@auth_required
@role_required("customer:place_order")
@limiter.limit(
    lambda: current_app.config["ORDER_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many orders from this IP",
)
@validate_schema(PlaceOrderRequest)
def place_order():
    data: PlaceOrderRequest = request.validated_data
    with transactional("Failed to place order"):
        order = orders.place_order(request.user, data.vendorId, data.items, data.deliveryNotes)
    relay.emit("new-order", order.to_dict(), relay.vendor_room(order.vendor_id))
    return ok(message="Order placed", order=order.to_dict(), status=201)


@orders_bp.route("/orders", methods=["GET"])
@auth_required
def list_orders():
    rows = orders.list_customer_orders(request.user.id)
    return ok(message="Orders fetched", orders=[o.to_dict() for o in rows])
