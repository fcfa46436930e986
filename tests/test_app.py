"""Route tests through the Flask test client."""
import io
from datetime import date, timedelta
from unittest.mock import Mock

import pytest
from PIL import Image

from appointment_dates import add_months
import mailer
import storage


def test_health_and_request_id(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"].startswith("req-")
    assert client.get("/health", headers={"X-Request-ID": "abc"}).headers["X-Request-ID"] == "abc"


def test_me(client, admin_headers):
    assert client.get("/me").get_json() == {"is_admin": False, "user": None}
    assert client.get("/me", headers=admin_headers).get_json()["is_admin"] is True


@pytest.mark.parametrize("path,text", [
    ("/", "Expert care for your eyes"),
    ("/eyecare", "Clear vision, lifelong eye health"),
    ("/gynecology", "When should I see a gynecologist?"),
    ("/eyecare/conditions", "Cataract"),
    ("/gynecology/health", "Hysteroscopy"),
    ("/eyecare/doctor", "Dr. Sanjeev Lehri"),
    ("/gynecology/doctor", "Dr. Nisha Bhatnagar"),
    ("/eyecare/appointment", "Book Your Appointment"),
    ("/gynecology/appointment", "Fertility consultation"),
    ("/gallery", "Photos coming soon."),
    ("/developers", "Developers"),
    ("/admin", "Sign In"),
    ("/admin/forgot-password", "Send code"),
    ("/admin/reset-password", "Choose a new password"),
])
def test_public_pages_render_with_fallbacks(client, path, text):
    resp = client.get(path)
    assert resp.status_code == 200
    assert text in resp.get_data(as_text=True)


@pytest.mark.parametrize("path", ["/admin/dashboard", "/admin/export-data", "/admin/edit-content"])
def test_admin_pages_need_login(client, admin_headers, path):
    resp = client.get(path)
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin")
    assert client.get(path, headers=admin_headers).status_code == 200


def test_admin_login_page_redirects_when_signed_in(client, admin_headers):
    resp = client.get("/admin", headers=admin_headers)
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin/dashboard")


def test_unknown_api_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_missing_row_is_404_but_key_error_is_500(client, admin_headers, monkeypatch):
    import blocks

    resp = client.delete("/api/blocks/999", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Block not found"}

    def broken(db, page, section=None):
        raise KeyError("title")

    monkeypatch.setattr(blocks, "list_blocks", broken)
    resp = client.get("/api/blocks?page=/")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Something went wrong. Please try again."}


def test_non_object_json_body_is_400(client, admin_headers):
    resp = client.post("/api/holidays/check", json=["2025-04-18"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "JSON body must be an object"
    assert client.post("/login", json="admin").status_code == 400
    assert client.patch("/api/editors/faqs/1", json=[1], headers=admin_headers).status_code == 400


def test_admin_escaping_covers_quotes(client, admin_headers):
    page = client.get("/admin/dashboard", headers=admin_headers).get_data(as_text=True)
    assert "'\"': '&quot;'" in page
    assert "\"'\": '&#39;'" in page
    assert "d.innerHTML" not in page


def test_login_sets_cookie_and_logout_clears_it(client):
    bad = client.post("/login", json={"email": "admin@eyefem.test", "password": "nope"})
    assert bad.status_code == 401
    resp = client.post("/login", json={"email": "admin@eyefem.test", "password": "s3cret-pass"})
    assert resp.status_code == 200
    cookie = resp.headers["Set-Cookie"]
    assert cookie.startswith("Authorization=")
    assert "test-token" in cookie
    assert "HttpOnly" in cookie
    out = client.get("/logout")
    assert out.status_code == 302
    assert "Max-Age=0" in out.headers["Set-Cookie"]


def test_password_reset_over_http(client, monkeypatch):
    codes = []
    monkeypatch.setattr(mailer, "send_reset_code", lambda email, code: codes.append(code) or True)
    assert client.post("/admin/forgot-password", json={"email": "ghost@example.com"}).get_json() == {"ok": True}
    assert codes == []
    assert client.post("/admin/forgot-password", json={"email": "admin@eyefem.test"}).status_code == 200
    assert len(codes) == 1

    bad = client.post("/admin/reset-password",
                      json={"email": "admin@eyefem.test", "code": "12345", "password": "brand-new-pass"})
    assert bad.status_code == 400
    ok = client.post("/admin/reset-password",
                     json={"email": "admin@eyefem.test", "code": codes[0], "password": "brand-new-pass"})
    assert ok.status_code == 200
    login = client.post("/login", json={"email": "admin@eyefem.test", "password": "brand-new-pass"})
    assert login.status_code == 200



def test_password_reset_with_numeric_code(client, monkeypatch):
    codes = []
    monkeypatch.setattr(mailer, "send_reset_code", lambda email, code: codes.append(code) or True)
    client.post("/admin/forgot-password", json={"email": "admin@eyefem.test"})
    bad = client.post("/admin/reset-password",
                      json={"email": "admin@eyefem.test", "code": 123, "password": "brand-new-pass"})
    assert bad.status_code == 400
    ok = client.post("/admin/reset-password",
                     json={"email": "admin@eyefem.test", "code": int(codes[0]), "password": "brand-new-pass"})
    assert ok.status_code == 200
    assert client.post("/admin/forgot-password", json={"email": 5}).get_json() == {"ok": True}


# ---------------- Blocks ----------------
def test_block_mutations_need_admin(client):
    assert client.post("/api/blocks", json={"page": "/"}).status_code == 401
    assert client.patch("/api/blocks/1", json={"content": "x"}).status_code == 401
    assert client.delete("/api/blocks/1").status_code == 401


def test_block_editing_round(client, admin_headers):
    ids = []
    for kind in ("heading", "text", "list"):
        resp = client.post("/api/blocks", json={"page": "/eyecare", "type": kind}, headers=admin_headers)
        assert resp.status_code == 201
        ids.append(resp.get_json()["id"])
    assert [b["order_index"] for b in client.get("/api/blocks?page=/eyecare").get_json()] == [0, 1, 2]

    moved = client.post(f"/api/blocks/{ids[2]}/move", json={"direction": "up"}, headers=admin_headers)
    assert [b["id"] for b in moved.get_json()] == [ids[0], ids[2], ids[1]]
    noop = client.post(f"/api/blocks/{ids[0]}/move", json={"direction": "up"}, headers=admin_headers)
    assert [b["id"] for b in noop.get_json()] == [ids[0], ids[2], ids[1]]

    patched = client.patch(f"/api/blocks/{ids[1]}", json={"content": "<script>alert(1)</script>"},
                           headers=admin_headers)
    assert patched.get_json()["content"] == "<script>alert(1)</script>"
    page = client.get("/eyecare").get_data(as_text=True)
    assert "New Heading" in page
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in page
    assert "<script>alert(1)</script>" not in page

    assert client.delete(f"/api/blocks/{ids[0]}", headers=admin_headers).status_code == 204
    assert client.delete(f"/api/blocks/{ids[0]}", headers=admin_headers).status_code == 404


def test_block_move_bad_direction(client, admin_headers):
    block = client.post("/api/blocks", json={"page": "/"}, headers=admin_headers).get_json()
    resp = client.post(f"/api/blocks/{block['id']}/move", json={"direction": "left"}, headers=admin_headers)
    assert resp.status_code == 400


def test_block_image_upload(client, admin_headers, monkeypatch):
    s3 = Mock()
    monkeypatch.setattr(storage, "s3", s3)
    monkeypatch.setattr(storage.settings, "S3_BUCKET", "eyefem-media")
    monkeypatch.setattr(storage.settings, "S3_PUBLIC_BASE_URL", "https://cdn.eyefem.in")
    block = client.post("/api/blocks", json={"page": "/gallery", "type": "image"}, headers=admin_headers).get_json()

    buf = io.BytesIO()
    Image.new("RGB", (10, 10), "white").save(buf, format="PNG")
    buf.seek(0)
    resp = client.post(f"/api/blocks/{block['id']}/image", data={"file": (buf, "hero.png")},
                       content_type="multipart/form-data", headers=admin_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["image_url"].startswith("https://cdn.eyefem.in/blocks/")
    assert body["type"] == "image"
    s3.put_object.assert_called_once()


def test_image_upload_without_bucket(client, admin_headers, monkeypatch):
    monkeypatch.setattr(storage.settings, "S3_BUCKET", "")
    block = client.post("/api/blocks", json={"page": "/"}, headers=admin_headers).get_json()
    resp = client.post(f"/api/blocks/{block['id']}/image", data={"file": (io.BytesIO(b"x"), "a.png")},
                       content_type="multipart/form-data", headers=admin_headers)
    assert resp.status_code == 503


# ---------------- Editors ----------------
def test_editor_api(client, admin_headers):
    assert client.post("/api/editors/faqs", json={"question": "Q"}, headers=admin_headers).status_code == 400
    created = client.post("/api/editors/faqs", headers=admin_headers, json={
        "question": "Do you accept walk-ins?", "answer": "Yes, before noon.", "specialty": "gynecology"})
    assert created.status_code == 201
    item_id = created.get_json()["id"]

    listed = client.get("/api/editors/faqs?specialty=gynecology").get_json()
    assert [f["question"] for f in listed] == ["Do you accept walk-ins?"]
    page = client.get("/gynecology").get_data(as_text=True)
    assert "Do you accept walk-ins?" in page
    assert "When should I see a gynecologist?" not in page

    patched = client.patch(f"/api/editors/faqs/{item_id}", json={"answer": "Mornings only."}, headers=admin_headers)
    assert patched.get_json()["answer"] == "Mornings only."
    assert client.delete(f"/api/editors/faqs/{item_id}", headers=admin_headers).status_code == 204
    assert client.get("/api/editors/blog_posts").status_code == 404


def test_editor_patch_with_null_clears_field(client, admin_headers):
    created = client.post("/api/editors/departments", headers=admin_headers, json={
        "name": "Retina", "icon": "eye", "specialty": "eyecare"}).get_json()
    resp = client.patch(f"/api/editors/departments/{created['id']}", headers=admin_headers,
                        json={"name": "Retina", "icon": None, "description": None, "specialty": "eyecare"})
    assert resp.status_code == 200
    assert resp.get_json()["icon"] is None
    cleared = client.patch(f"/api/editors/departments/{created['id']}", headers=admin_headers,
                           json={"name": None})
    assert cleared.status_code == 400


# ---------------- Appointments ----------------
def test_public_booking(client, booking, future_weekday):
    resp = client.post("/api/appointments", json=dict(booking(future_weekday), doctor="gynecology"))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["status"] == "pending"
    assert body["specialty"] == "gynecology"
    assert body["doctor"] == "Nisha Bhatnagar"
    assert body["date"] == future_weekday.isoformat()
    assert body["email_sent"] is False


def test_booking_validation_errors(client, booking, future_weekday):
    resp = client.post("/api/appointments", json=dict(booking(future_weekday, email=""), doctor="eye"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Email is required"


def test_booking_window_on_form_and_api(client, booking):
    today = date.today()
    first, last = today + timedelta(days=1), add_months(today, 3)
    gyn = client.get("/gynecology/appointment").get_data(as_text=True)
    assert f'min="{first.isoformat()}" max="{last.isoformat()}"' in gyn
    eye = client.get("/eyecare/appointment").get_data(as_text=True)
    assert f'min="{first.isoformat()}"' in eye
    assert 'max="' + last.isoformat() not in eye

    resp = client.post("/api/appointments", json=dict(booking(today), doctor="eye"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please select a date in the future."
    resp = client.post("/api/appointments", json=dict(booking(last + timedelta(days=1)), doctor="gynecology"))
    assert resp.status_code == 400
    assert "up to 3 months in advance" in resp.get_json()["error"]


def test_booking_blocked_by_holiday(client, admin_headers, booking, future_weekday):
    holiday = client.post("/api/holidays", headers=admin_headers, json={
        "date": future_weekday.isoformat(), "name": "Conference", "doctor": "eye"})
    assert holiday.status_code == 201

    check = client.post("/api/holidays/check", json={"date": future_weekday.isoformat(), "doctor": "eye"})
    assert check.get_json()["available"] is False
    assert "Dr. Sanjeev Lehri is unavailable" in check.get_json()["message"]
    other = client.post("/api/holidays/check", json={"date": future_weekday.isoformat(), "doctor": "gynecology"})
    assert other.get_json()["available"] is True

    resp = client.post("/api/appointments", json=dict(booking(future_weekday), doctor="eye"))
    assert resp.status_code == 400
    assert resp.get_json()["holiday"]["name"] == "Conference"

    blocked = client.get("/api/holidays/blocked?doctor=eye").get_json()
    assert blocked == [future_weekday.isoformat()]
    assert client.get("/api/holidays/blocked?doctor=gynecology").get_json() == []


def test_admin_appointment_actions(client, admin_headers, booking, future_weekday, monkeypatch):
    confirmations = []
    monkeypatch.setattr(mailer, "send_appointment_confirmation", lambda a: confirmations.append(a.id) or True)
    created = client.post("/api/appointments", json=dict(booking(future_weekday), doctor="eye")).get_json()

    assert client.get("/api/appointments").status_code == 401
    listed = client.get("/api/appointments?doctor=eye", headers=admin_headers).get_json()
    assert [a["id"] for a in listed] == [created["id"]]
    assert client.get("/api/appointments?specialty=gynecology", headers=admin_headers).get_json() == []

    resp = client.patch(f"/api/appointments/{created['id']}/status", json={"status": "confirmed"},
                        headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "confirmed"
    assert resp.get_json()["email_sent"] is True
    assert confirmations == [created["id"]]
    bad = client.patch(f"/api/appointments/{created['id']}/status", json={"status": "done"}, headers=admin_headers)
    assert bad.status_code == 400


def test_export(client, admin_headers, booking, future_weekday):
    client.post("/api/appointments", json=dict(booking(future_weekday), doctor="eye"))
    resp = client.get("/api/appointments/export?format=csv&specialty=eyecare", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "appointments-eyecare-" in resp.headers["Content-Disposition"]
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0].startswith("ID,First Name,Last Name")
    assert len(lines) == 2

    as_json = client.get("/api/appointments/export?format=json", headers=admin_headers)
    assert as_json.headers["Content-Disposition"].endswith('.json"')
    assert len(as_json.get_json()) == 1
    assert client.get("/api/appointments/export?format=xml", headers=admin_headers).status_code == 400


# ---------------- Holidays & calendar ----------------
def test_holiday_admin(client, admin_headers):
    assert client.post("/api/holidays", json={"date": "2025-04-18", "name": "x"}).status_code == 401
    missing = client.post("/api/holidays", json={"date": "2025-04-18", "name": ""}, headers=admin_headers)
    assert missing.get_json()["error"] == "Please provide a name for the holiday."

    created = client.post("/api/holidays", headers=admin_headers, json={
        "date": "April 18th, 2025", "name": "Staff day", "doctor": "all"}).get_json()
    assert created["date"] == "2025-04-18"
    assert created["doctor"] is None
    assert [h["id"] for h in client.get("/api/holidays?doctor=eye").get_json()] == [created["id"]]
    assert client.delete(f"/api/holidays/{created['id']}", headers=admin_headers).status_code == 204
    assert client.get("/api/holidays").get_json() == []


def test_holiday_import(client, admin_headers, monkeypatch):
    import holiday_calendar
    from datetime import date

    monkeypatch.setattr(holiday_calendar, "fetch_national_holidays", lambda year: [
        {"date": date(year, 1, 26), "name": "Republic Day", "description": None}])
    resp = client.post("/api/holidays/import", json={"year": 2026}, headers=admin_headers)
    assert resp.get_json() == {"year": 2026, "count": 1}
    again = client.post("/api/holidays/import", json={"year": 2026}, headers=admin_headers)
    assert again.get_json()["count"] == 0


def test_holiday_import_feed_failure(client, admin_headers, monkeypatch):
    import holiday_calendar

    monkeypatch.setattr(holiday_calendar.settings, "CALENDARIFIC_API_KEY", "")
    resp = client.post("/api/holidays/import", json={"year": 2026}, headers=admin_headers)
    assert resp.status_code == 502


def test_calendar(client, admin_headers, booking, future_weekday):
    client.post("/api/appointments", json=dict(booking(future_weekday), doctor="eye"))
    client.post("/api/holidays", headers=admin_headers, json={
        "date": future_weekday.isoformat(), "name": "Half day", "doctor": "gynecology"})

    month = client.get(f"/api/calendar?year={future_weekday.year}&month={future_weekday.month}&doctor=eye",
                       headers=admin_headers).get_json()
    day = next(d for d in month if d["date"] == future_weekday.isoformat())
    assert day["appointment_count"] == 1
    assert day["status_counts"]["pending"] == 1
    assert not day["has_holiday"]

    detail = client.get(f"/api/calendar/day?date={future_weekday.isoformat()}&doctor=all",
                        headers=admin_headers).get_json()
    assert detail["has_custom_holiday"] is True
    assert [a["first_name"] for a in detail["appointments"]] == ["Asha"]
    assert client.get("/api/calendar?year=2025&month=13", headers=admin_headers).status_code == 400
