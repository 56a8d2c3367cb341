from app.auth.permissions import role_has_scope
from app.version import API_PREFIX


def test_role_scopes():
    assert role_has_scope("customer", "place_order")
    assert not role_has_scope("customer", "view_analytics")
    assert role_has_scope("vendor", "manage_subscription")
    assert not role_has_scope("vendor", "place_order")
    assert role_has_scope("admin", "anything")
    assert not role_has_scope("ghost", "chat")


def test_blueprint_access(client, login, make_vendor):
    customer = login("c_role@example.com", "customer")
    vendor = make_vendor()
    admin = login("a_role@example.com", "admin")
    c_hdr = {"Authorization": f"Bearer {customer['access']}"}
    v_hdr = {"Authorization": f"Bearer {vendor.token}"}
    a_hdr = {"Authorization": f"Bearer {admin['access']}"}

    # vendor routes
    assert client.get(f"{API_PREFIX}/vendor/products", headers=v_hdr).status_code == 200
    assert client.get(f"{API_PREFIX}/vendor/products", headers=c_hdr).status_code == 403
    assert client.get(f"{API_PREFIX}/vendor/products", headers=a_hdr).status_code == 403

    # admin routes
    assert client.get(f"{API_PREFIX}/admin/vendor-registrations", headers=a_hdr).status_code == 200
    assert client.get(f"{API_PREFIX}/admin/vendor-registrations", headers=v_hdr).status_code == 403


def test_vendor_routes_check_action_scopes(client, make_vendor, monkeypatch):
    from app.auth import permissions

    vendor = make_vendor()
    v_hdr = {"Authorization": f"Bearer {vendor.token}"}
    monkeypatch.setitem(permissions.ROLE_SCOPES, "vendor", {"manage_subscription", "chat"})

    r = client.get(f"{API_PREFIX}/vendor/products", headers=v_hdr)
    assert r.status_code == 403
    assert client.get(f"{API_PREFIX}/vendor/orders", headers=v_hdr).status_code == 403
    assert client.get(f"{API_PREFIX}/analytics", headers=v_hdr).status_code == 403
    assert client.get(f"{API_PREFIX}/vendor/subscription", headers=v_hdr).status_code == 200


def test_chat_requires_chat_scope(client, login, make_vendor, monkeypatch):
    from app.auth import permissions

    vendor = make_vendor()
    customer = login("c_chat@example.com", "customer")
    c_hdr = {"Authorization": f"Bearer {customer['access']}"}
    assert client.post(f"{API_PREFIX}/chats", json={"participantId": vendor.id}, headers=c_hdr).status_code == 200

    monkeypatch.setitem(permissions.ROLE_SCOPES, "customer", {"place_order"})
    r = client.post(f"{API_PREFIX}/chats", json={"participantId": vendor.id}, headers=c_hdr)
    assert r.status_code == 403
