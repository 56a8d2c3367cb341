import os
import sys
from datetime import timedelta

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from models import db


@pytest.fixture(scope='session')
def app_instance():
    os.environ['APP_ENV'] = 'testing'
    from app import create_app
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_TRACK_MODIFICATIONS=False
    )
    return app


@pytest.fixture(scope='function')
def app(app_instance):
    from celery_app import celery_app
    from extensions import cache

    celery_app.conf.task_always_eager = True
    with app_instance.app_context():
        db.drop_all()
        db.create_all()
        cache.clear()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    """Capture outgoing email instead of calling SendGrid."""
    sent = []

    def fake_send(to, subject, html, text=None):
        sent.append({"to": to, "subject": subject, "html": html})
        return True

    monkeypatch.setattr("app.services.mail.send_email", fake_send)
    return sent


@pytest.fixture
def login(client):
    """Create (or reuse) a user through the test login stub and return its tokens."""

    def _login(email, role="customer", **extra):
        r = client.post("/__auth/login_stub", json={"email": email, "role": role, **extra})
        assert r.status_code == 200
        return r.get_json()["data"]

    return _login


@pytest.fixture
def admin(login):
    return login("admin@grabtogo.in", "admin", name="Ops Admin")


def registration_payload(**overrides):
    data = {
        "fullName": "Joe Thomas",
        "email": "joe@example.com",
        "phone": "9876543210",
        "password": "s3cret-pass",
        "companyName": "Joe's Café & Grill",
        "businessType": "Restaurant",
        "businessCategory": "food",
        "addressLine1": "12 MG Road",
        "city": "Kochi",
        "state": "Kerala",
        "pinCode": "682001",
        "coordinates": {"lat": 9.9312, "lng": 76.2673},
        "deliveryRadius": 5,
        "gstNumber": "32ABCDE1234F1Z5",
        "gstVerified": True,
        "gstDetails": {"legalName": "JOE THOMAS", "status": "Active"},
        "tagline": "Grills and coffee",
        "selectedPackage": "basic",
        "billingCycle": "monthly",
        "termsAccepted": True,
        "privacyAccepted": True,
    }
    data.update(overrides)
    return data


@pytest.fixture
def registration_form():
    return registration_payload


@pytest.fixture
def submit(client):
    def _submit(**overrides):
        r = client.post("/api/v1/vendor-registration/submit", json=registration_payload(**overrides))
        assert r.status_code == 200, r.get_json()
        return r.get_json()["requestId"]

    return _submit


@pytest.fixture
def make_vendor(app):
    """Build a vendor account directly: user, storefront and trial subscription."""
    from app.services import subscriptions
    from app.utils import create_access_token, utcnow
    from models.user import User, ROLE_VENDOR
    from models.vendor import VendorProfile

    def _make(email="vendor@example.com", store_name="Fresh Mart", lat=9.9312, lng=76.2673,
              plan=None, expired=False, city="Kochi"):
        user = User(name=store_name, email=email, password_hash="x", role=ROLE_VENDOR)
        db.session.add(user)
        db.session.flush()
        db.session.add(VendorProfile(
            user_id=user.id,
            store_name=store_name,
            store_slug=store_name.lower().replace(" ", "-"),
            description=f"Welcome to {store_name}",
            city=city,
            latitude=lat,
            longitude=lng,
            is_verified=True,
            is_active=True,
        ))
        now = utcnow()
        sub = subscriptions.start_trial(user.id, now=now)
        if plan:
            subscriptions.transition(sub, subscriptions.ACTIVE, now=now, plan_type=plan)
        if expired:
            sub.end_date = now - timedelta(days=1)
        db.session.commit()
        user.token = create_access_token(user.id, user.role)
        return user

    return _make


@pytest.fixture
def make_product(app):
    from models.product import Product

    def _make(vendor, name, price, quantity=10, **fields):
        product = Product(vendor_id=vendor.id, name=name, price=price, quantity=quantity, **fields)
        db.session.add(product)
        db.session.commit()
        return product

    return _make
