from types import SimpleNamespace

from flask import render_template


def _application(**fields):
    base = dict(full_name="Joe Thomas", email="joe@example.com", phone="9876543210",
                company_name="Joe's Café & Grill", city="Kochi", state="Kerala",
                business_type="Restaurant", business_category="food", agent_code=None,
                agent_name=None, gst_number=None, rejection_reason=None,
                created_at=None, id=7)
    base.update(fields)
    return SimpleNamespace(**base)


def test_application_submitted_mentions_trial(app):
    html = render_template("email/application_submitted.html", application=_application(), trial_days=20)
    assert "Joe Thomas" in html
    assert "20" in html


def test_company_name_is_escaped(app):
    html = render_template("email/admin_new_application.html", application=_application())
    assert "Joe&#39;s Café &amp; Grill" in html


def test_rejection_includes_reason(app):
    html = render_template("email/vendor_rejected.html",
                           application=_application(rejection_reason="GST mismatch"))
    assert "GST mismatch" in html


def test_queue_email_renders_and_delivers(app, outbox):
    from app.services import mail

    assert mail.queue_email("joe@example.com", "Hello", "vendor_rejected",
                            application=_application(rejection_reason="Closed"))
    assert outbox[0]["to"] == "joe@example.com"
    assert "Closed" in outbox[0]["html"]


def test_send_email_without_api_key_is_a_noop(app):
    from app.services import mail

    assert mail.send_email("joe@example.com", "Hi", "<p>Hi</p>") is False
