from app.version import API_PREFIX
from models import db
from models.order import Order
from models.product import Product
from models.subscription import VendorSubscription


def _hdr(token):
    return {"Authorization": f"Bearer {token}"}


def _place(client, token, vendor_id, *lines):
    return client.post(
        f"{API_PREFIX}/orders",
        json={"vendorId": vendor_id, "items": [{"productId": p, "quantity": q} for p, q in lines]},
        headers=_hdr(token),
    )


def test_vendor_adds_and_lists_products(client, make_vendor):
    vendor = make_vendor()
    r = client.post(f"{API_PREFIX}/vendor/products",
                    json={"name": "Banana Chips", "price": 55, "quantity": 20, "tags": ["snacks", " kerala "]},
                    headers=_hdr(vendor.token))
    assert r.status_code == 201
    assert r.get_json()["product"]["tags"] == ["snacks", "kerala"]

    products = client.get(f"{API_PREFIX}/vendor/products", headers=_hdr(vendor.token)).get_json()["products"]
    assert [p["name"] for p in products] == ["Banana Chips"]


def test_product_limit_follows_plan(client, make_vendor, make_product):
    vendor = make_vendor()
    sub = VendorSubscription.query.filter_by(vendor_id=vendor.id).one()
    sub.max_products = 1
    db.session.commit()
    make_product(vendor, "Only Item", 10)
    r = client.post(f"{API_PREFIX}/vendor/products", json={"name": "One Too Many", "price": 5},
                    headers=_hdr(vendor.token))
    assert r.status_code == 400
    assert r.get_json()["error"] == "Product limit reached for your plan (1)"


def test_lapsed_vendor_cannot_add_products(client, make_vendor):
    vendor = make_vendor(expired=True)
    r = client.post(f"{API_PREFIX}/vendor/products", json={"name": "Late", "price": 5}, headers=_hdr(vendor.token))
    assert r.status_code == 403


def test_order_totals_and_stock(client, make_vendor, make_product, login):
    vendor = make_vendor()
    tea = make_product(vendor, "Tea", 40, quantity=10)
    cake = make_product(vendor, "Plum Cake", 150, quantity=2)
    buyer = login("buyer@example.com")
    r = _place(client, buyer["access"], vendor.id, (tea.id, 3), (cake.id, 1))
    assert r.status_code == 201
    order = r.get_json()["order"]
    assert order["totalAmount"] == 270.0
    assert order["status"] == "pending"

    listed = client.get(f"{API_PREFIX}/orders", headers=_hdr(buyer["access"])).get_json()["orders"]
    assert [o["id"] for o in listed] == [order["id"]]
    vendor_view = client.get(f"{API_PREFIX}/vendor/orders", headers=_hdr(vendor.token)).get_json()["orders"]
    assert [o["id"] for o in vendor_view] == [order["id"]]


def test_insufficient_stock_rolls_back_whole_order(client, make_vendor, make_product, login):
    vendor = make_vendor()
    tea = make_product(vendor, "Tea", 40, quantity=10)
    cake = make_product(vendor, "Plum Cake", 150, quantity=1)
    buyer = login("buyer@example.com")
    r = _place(client, buyer["access"], vendor.id, (tea.id, 3), (cake.id, 2))
    assert r.status_code == 400
    assert r.get_json()["error"] == "Not enough stock for Plum Cake"
    db.session.expire_all()
    assert db.session.get(Product, tea.id).quantity == 10
    assert Order.query.count() == 0


def test_order_cap_follows_plan(client, make_vendor, make_product, login):
    vendor = make_vendor()
    sub = VendorSubscription.query.filter_by(vendor_id=vendor.id).one()
    sub.max_orders = 1
    db.session.commit()
    tea = make_product(vendor, "Tea", 40)
    buyer = login("buyer@example.com")
    assert _place(client, buyer["access"], vendor.id, (tea.id, 1)).status_code == 201
    r = _place(client, buyer["access"], vendor.id, (tea.id, 1))
    assert r.status_code == 400
    assert r.get_json()["error"] == "This store has reached its order limit"


def test_lapsed_store_refuses_orders(client, make_vendor, make_product, login):
    vendor = make_vendor(expired=True)
    tea = make_product(vendor, "Tea", 40)
    buyer = login("buyer@example.com")
    r = _place(client, buyer["access"], vendor.id, (tea.id, 1))
    assert r.status_code == 400
    assert r.get_json()["error"] == "This store is not accepting orders"


def test_vendor_cannot_place_orders(client, make_vendor, make_product):
    vendor = make_vendor()
    tea = make_product(vendor, "Tea", 40)
    assert _place(client, vendor.token, vendor.id, (tea.id, 1)).status_code == 403
