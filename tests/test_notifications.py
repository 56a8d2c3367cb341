import pytest

from app.errors import ValidationError
from app.services import notifications
from app.version import API_PREFIX
from models import db

URL = f"{API_PREFIX}/notifications"


def _hdr(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def inbox(login):
    user = login("reader@example.com")
    for i in range(3):
        notifications.create_notification(user["userId"], "order", f"Order {i}", "Status changed")
    notifications.create_notification(user["userId"], "system", "Welcome", "Hello")
    db.session.commit()
    return user


def test_list_with_pagination_and_unread_count(client, inbox):
    r = client.get(f"{URL}?limit=3", headers=_hdr(inbox["access"]))
    assert r.status_code == 200
    body = r.get_json()
    assert len(body["notifications"]) == 3
    assert body["pagination"] == {"page": 1, "limit": 3, "total": 4, "pages": 2}
    assert body["unreadCount"] == 4


def test_filter_by_type_and_read_state(client, inbox):
    body = client.get(f"{URL}?type=system", headers=_hdr(inbox["access"])).get_json()
    assert [n["title"] for n in body["notifications"]] == ["Welcome"]

    first = body["notifications"][0]["id"]
    client.patch(f"{URL}/{first}/read", headers=_hdr(inbox["access"]))
    body = client.get(f"{URL}?isRead=false", headers=_hdr(inbox["access"])).get_json()
    assert body["pagination"]["total"] == 3
    assert body["unreadCount"] == 3


def test_mark_read_is_scoped_to_owner(client, inbox, login):
    other = login("someone@example.com")
    note_id = client.get(URL, headers=_hdr(inbox["access"])).get_json()["notifications"][0]["id"]
    r = client.patch(f"{URL}/{note_id}/read", headers=_hdr(other["access"]))
    assert r.status_code == 404

    r = client.patch(f"{URL}/{note_id}/read", headers=_hdr(inbox["access"]))
    assert r.status_code == 200
    assert r.get_json()["notification"]["isRead"] is True


def test_mark_all_read(client, inbox):
    r = client.post(f"{URL}/read-all", headers=_hdr(inbox["access"]))
    assert r.get_json()["updated"] == 4
    assert client.get(URL, headers=_hdr(inbox["access"])).get_json()["unreadCount"] == 0


def test_bad_read_filter(client, inbox):
    assert client.get(f"{URL}?isRead=maybe", headers=_hdr(inbox["access"])).status_code == 400


def test_requires_login(client):
    r = client.get(URL)
    assert r.status_code == 401
    assert r.get_json()["error"] == "Auth header missing"


def test_unknown_type_rejected(app, login):
    user = login("typo@example.com")
    with pytest.raises(ValidationError):
        notifications.create_notification(user["userId"], "promo", "Sale", "50% off")
