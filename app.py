from datetime import date, timedelta

from flask import Flask, jsonify, request, Response, redirect, make_response, render_template
from werkzeug.exceptions import HTTPException

from db import SessionLocal, init_db
from logging_config import setup_logging, get_logger, RequestIDMiddleware
from admin_auth import (require_admin, require_admin_page, is_admin, authenticate,
                        ensure_bootstrap_admin, get_admin, issue_reset_code, reset_password)
from holiday_calendar import (HolidayConflict, HolidayFeedError, booking_window, check_booking_date, blocked_dates,
                              visible_holidays, list_holidays, serialize_holiday, add_manual_holiday,
                              delete_holiday, import_national_holidays, ensure_national_holidays,
                              day_summary, month_summary, specialty_for_doctor, doctor_for_specialty)
from models import NotFound, to_dict
from storage import StorageNotConfigured, upload_website_image
import appointments
import blocks
import editors
import mailer
import pages
import settings

setup_logging(settings.LOG_LEVEL)
log = get_logger(__name__)

# ---------------- App & config ----------------
app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = settings.MAX_UPLOAD_BYTES
app.config["PREFERRED_URL_SCHEME"] = "https"
app.jinja_loader = pages.template_loader
app.wsgi_app = RequestIDMiddleware(app.wsgi_app)

init_db()
with SessionLocal() as _db:
    ensure_bootstrap_admin(_db)

COOKIE_MAX_AGE = int(timedelta(days=7).total_seconds())


def render(template, **ctx):
    ctx.setdefault("specialty", None)
    return render_template(template, clinic=settings.CLINIC_NAME, year=date.today().year, **ctx)


def _json():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data


def _uploaded_file():
    file = request.files.get("file")
    if not file or not file.filename:
        raise ValueError("file required")
    return file


def _set_auth_cookie(resp, value, max_age):
    resp.set_cookie(
        "Authorization", value, max_age=max_age, path="/",
        secure=settings.COOKIE_SECURE, httponly=True, samesite="Lax"
    )
    return resp


# ---------------- Errors ----------------
@app.errorhandler(HolidayConflict)
def holiday_conflict(e):
    return jsonify({"error": str(e), "holiday": serialize_holiday(e.holiday)}), 400


@app.errorhandler(ValueError)
def bad_request(e):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(NotFound)
def not_found(e):
    return jsonify({"error": str(e)}), 404


@app.errorhandler(HolidayFeedError)
def holiday_feed_failed(e):
    log.warning("holiday_feed_failed", error=str(e))
    return jsonify({"error": str(e)}), 502


@app.errorhandler(StorageNotConfigured)
def storage_missing(e):
    log.error("storage_not_configured", path=request.path)
    return jsonify({"error": "image storage is not configured"}), 503


@app.errorhandler(HTTPException)
def http_error(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": e.description}), e.code
    return e


@app.errorhandler(Exception)
def server_error(e):
    log.exception("unhandled_error", path=request.path, method=request.method)
    return jsonify({"error": "Something went wrong. Please try again."}), 500


# ---------------- Health / Me ----------------
@app.get("/health")
def health():
    return jsonify({"status":"ok"})

@app.get("/me")
def me():
    admin = is_admin()
    return jsonify({"is_admin": admin, "user": settings.ADMIN_USER if admin else None})

# ---------------- Content blocks ----------------
@app.get("/api/blocks")
def blocks_list():
    page = request.args.get("page", "")
    if not page:
        raise ValueError("page required")
    with SessionLocal() as db:
        return jsonify([blocks.serialize_block(b)
                        for b in blocks.list_blocks(db, page, request.args.get("section"))])

@app.post("/api/blocks")
@require_admin
def blocks_create():
    data = _json()
    with SessionLocal() as db:
        b = blocks.add_block(db, data.get("page"), data.get("type") or "text",
                             section=data.get("section") or "main",
                             specialty=data.get("specialty") or "general")
        return jsonify(blocks.serialize_block(b)), 201

@app.patch("/api/blocks/<int:block_id>")
@require_admin
def blocks_update(block_id):
    with SessionLocal() as db:
        b = blocks.update_block(db, block_id, _json())
        return jsonify(blocks.serialize_block(b))

@app.delete("/api/blocks/<int:block_id>")
@require_admin
def blocks_delete(block_id):
    with SessionLocal() as db:
        blocks.delete_block(db, block_id)
    return "", 204

@app.post("/api/blocks/<int:block_id>/move")
@require_admin
def blocks_move(block_id):
    direction = _json().get("direction")
    with SessionLocal() as db:
        page = blocks.get_block(db, block_id).page
        rows = blocks.reorder_block(db, page, block_id, direction)
        return jsonify([blocks.serialize_block(b) for b in rows])

@app.post("/api/blocks/<int:block_id>/image")
@require_admin
def blocks_image(block_id):
    file = _uploaded_file()
    with SessionLocal() as db:
        blocks.get_block(db, block_id)
        url = upload_website_image(file, prefix="blocks")
        b = blocks.set_block_image(db, block_id, url)
        return jsonify(blocks.serialize_block(b)), 201

# ---------------- CMS editors ----------------
@app.get("/api/editors/<category>")
def editor_list(category):
    with SessionLocal() as db:
        items = editors.list_items(db, category, specialty=request.args.get("specialty"))
        return jsonify([to_dict(x) for x in items])

@app.post("/api/editors/<category>")
@require_admin
def editor_create(category):
    with SessionLocal() as db:
        item = editors.create_item(db, category, _json())
        return jsonify(to_dict(item)), 201

@app.patch("/api/editors/<category>/<int:item_id>")
@require_admin
def editor_update(category, item_id):
    with SessionLocal() as db:
        item = editors.update_item(db, category, item_id, _json())
        return jsonify(to_dict(item))

@app.delete("/api/editors/<category>/<int:item_id>")
@require_admin
def editor_delete(category, item_id):
    with SessionLocal() as db:
        editors.delete_item(db, category, item_id)
    return "", 204

@app.post("/api/editors/<category>/<int:item_id>/move")
@require_admin
def editor_move(category, item_id):
    direction = _json().get("direction")
    with SessionLocal() as db:
        rows = editors.reorder_item(db, category, item_id, direction)
        return jsonify([to_dict(x) for x in rows])

@app.post("/api/editors/<category>/<int:item_id>/image")
@require_admin
def editor_image(category, item_id):
    file = _uploaded_file()
    with SessionLocal() as db:
        if not editors.get_editor(category).image_field:
            raise ValueError(f"{category} items have no image")
        editors.get_item(db, category, item_id)
        url = upload_website_image(file, prefix=category)
        item = editors.set_item_image(db, category, item_id, url)
        return jsonify(to_dict(item)), 201

# ---------------- Appointments ----------------
@app.post("/api/appointments")
def appt_create():
    data = _json()
    with SessionLocal() as db:
        a = appointments.book_appointment(db, data, data.get("doctor"))
        out = appointments.serialize_appointment(a)
        out["email_sent"] = a.email_sent
        return jsonify(out), 201

@app.get("/api/appointments")
@require_admin
def appt_list():
    specialty = request.args.get("specialty") or specialty_for_doctor(request.args.get("doctor"))
    with SessionLocal() as db:
        return jsonify([appointments.serialize_appointment(a)
                        for a in appointments.list_appointments(db, specialty)])

@app.patch("/api/appointments/<int:appointment_id>/status")
@require_admin
def appt_status(appointment_id):
    with SessionLocal() as db:
        a = appointments.set_status(db, appointment_id, _json().get("status"))
        out = appointments.serialize_appointment(a)
        out["email_sent"] = a.email_sent
        return jsonify(out)

@app.get("/api/appointments/export")
@require_admin
def appt_export():
    fmt = request.args.get("format", "csv")
    if fmt not in ("csv", "json"):
        raise ValueError("format must be csv or json")
    specialty = request.args.get("specialty") or "all"
    with SessionLocal() as db:
        rows = appointments.list_appointments(db, specialty)
        body = appointments.export_csv(rows) if fmt == "csv" else appointments.export_json(rows)
    log.info("appointments_exported", format=fmt, specialty=specialty, count=len(rows))
    mimetype = "text/csv" if fmt == "csv" else "application/json"
    filename = appointments.export_filename(specialty, fmt)
    return Response(body, mimetype=mimetype,
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})

# ---------------- Holidays & calendar ----------------
@app.get("/api/holidays")
def holidays_list():
    doctor = request.args.get("doctor", "all")
    with SessionLocal() as db:
        return jsonify([serialize_holiday(h) for h in visible_holidays(list_holidays(db), doctor)])

@app.get("/api/holidays/blocked")
def holidays_blocked():
    doctor = request.args.get("doctor", "all")
    with SessionLocal() as db:
        return jsonify([d.isoformat() for d in blocked_dates(list_holidays(db), doctor)])

@app.post("/api/holidays/check")
def holidays_check():
    data = _json()
    with SessionLocal() as db:
        holidays = list_holidays(db)
    try:
        day = check_booking_date(holidays, data.get("date"), data.get("doctor"))
    except HolidayConflict as e:
        return jsonify({"available": False, "message": str(e), "holiday": serialize_holiday(e.holiday)})
    except ValueError as e:
        return jsonify({"available": False, "message": str(e)})
    return jsonify({"available": True, "date": day.isoformat()})

@app.post("/api/holidays")
@require_admin
def holidays_create():
    data = _json()
    with SessionLocal() as db:
        h = add_manual_holiday(db, data.get("date"), data.get("name"),
                               data.get("doctor") or "all", data.get("description"))
        return jsonify(serialize_holiday(h)), 201

@app.delete("/api/holidays/<int:holiday_id>")
@require_admin
def holidays_delete(holiday_id):
    with SessionLocal() as db:
        delete_holiday(db, holiday_id)
    return "", 204

@app.post("/api/holidays/import")
@require_admin
def holidays_import():
    year = int(_json().get("year") or date.today().year)
    with SessionLocal() as db:
        count = import_national_holidays(db, year)
    return jsonify({"year": year, "count": count})

@app.get("/api/calendar")
@require_admin
def calendar_month():
    today = date.today()
    year = int(request.args.get("year", today.year))
    month = int(request.args.get("month", today.month))
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    doctor = request.args.get("doctor", "all")
    with SessionLocal() as db:
        if settings.CALENDARIFIC_API_KEY:
            try:
                ensure_national_holidays(db, year)
            except HolidayFeedError as e:
                log.warning("holiday_autoload_failed", year=year, error=str(e))
        appts = appointments.list_appointments(db)
        return jsonify(month_summary(year, month, appts, list_holidays(db), doctor))

@app.get("/api/calendar/day")
@require_admin
def calendar_day():
    doctor = request.args.get("doctor", "all")
    with SessionLocal() as db:
        rows = appointments.appointments_on(db, request.args.get("date"), doctor)
        summary = day_summary(request.args.get("date"), rows, list_holidays(db), doctor)
        summary["appointments"] = [appointments.serialize_appointment(a) for a in rows]
        return jsonify(summary)

# ---------------- Auth ----------------
@app.post("/login")
def login_post():
    data = _json()
    email = str(data.get("email") or "").strip()
    pw    = data.get("password") or ""
    if not settings.ADMIN_TOKEN:
        return jsonify({"error":"admin token not configured"}), 500
    with SessionLocal() as db:
        ok = authenticate(db, email, pw)
    if not ok:
        log.info("admin_login_failed", email=email)
        return jsonify({"error":"invalid"}), 401
    log.info("admin_login", email=email)
    return _set_auth_cookie(make_response(jsonify({"ok":True})), f"Bearer {settings.ADMIN_TOKEN}", COOKIE_MAX_AGE)

@app.get("/logout")
def logout():
    return _set_auth_cookie(make_response(redirect("/admin", code=302)), "", 0)

@app.post("/admin/forgot-password")
def forgot_password_post():
    email = str(_json().get("email") or "").strip()
    with SessionLocal() as db:
        code = issue_reset_code(db, email)
        user = get_admin(db, email) if code else None
    if code:
        try:
            mailer.send_reset_code(user.email, code)
        except Exception:
            log.exception("reset_mail_failed", email=user.email)
    # same answer whether or not the address is an admin
    return jsonify({"ok": True})

@app.post("/admin/reset-password")
def reset_password_post():
    data = _json()
    with SessionLocal() as db:
        reset_password(db, data.get("email"), data.get("code"), data.get("password"))
    return jsonify({"ok": True})

# ---------------- Admin pages ----------------
@app.get("/admin")
def admin_login_page():
    if is_admin():
        return redirect("/admin/dashboard", code=302)
    return render("admin_login.html")

@app.get("/admin/forgot-password")
def forgot_password_page():
    return render("admin_forgot.html")

@app.get("/admin/reset-password")
def reset_password_page():
    return render("admin_reset.html", email=request.args.get("email", ""))

@app.get("/admin/dashboard")
@require_admin_page
def admin_dashboard():
    return render("admin_dashboard.html", doctors=settings.DOCTORS,
                  month=date.today().strftime("%Y-%m"))

@app.get("/admin/export-data")
@require_admin_page
def admin_export():
    return render("admin_export.html")

@app.get("/admin/edit-content")
@require_admin_page
def admin_edit_content():
    return render("admin_edit_content.html", pages=pages.PUBLIC_PAGES,
                  block_types=blocks.BLOCK_TYPES, categories=pages.admin_categories())

# ---------------- Public pages ----------------
@app.get("/")
def home():
    with SessionLocal() as db:
        return render("home.html", **pages.home_context(db))

@app.get("/eyecare")
def eyecare():
    with SessionLocal() as db:
        return render("specialty.html", **pages.specialty_context(db, "eyecare"))

@app.get("/gynecology")
def gynecology():
    with SessionLocal() as db:
        return render("specialty.html", **pages.specialty_context(db, "gynecology"))

@app.get("/eyecare/conditions")
def eyecare_conditions():
    with SessionLocal() as db:
        ctx = pages.listing_context(db, "/eyecare/conditions", "eyecare", [
            ("Conditions", "conditions", "name", "description"),
            ("Treatments & Procedures", "procedures", "title", "description"),
        ])
        return render("listing.html", **ctx)

@app.get("/gynecology/health")
def gynecology_health():
    with SessionLocal() as db:
        ctx = pages.listing_context(db, "/gynecology/health", "gynecology", [
            ("Health Topics", "conditions", "name", "description"),
            ("Procedures", "procedures", "title", "description"),
            ("Frequently Asked Questions", "faqs", "question", "answer"),
        ])
        return render("listing.html", **ctx)

@app.get("/<any(eyecare, gynecology):specialty>/doctor")
def doctor_page(specialty):
    page = f"/{specialty}/doctor"
    with SessionLocal() as db:
        _, page_blocks = pages.page_blocks(db, page)
        return render("doctor.html", specialty=specialty, blocks=page_blocks,
                      doctors=pages.items_or_default(db, "doctor_profiles", specialty))

@app.get("/<any(eyecare, gynecology):specialty>/appointment")
def appointment_page(specialty):
    doctor_key = doctor_for_specialty(specialty)
    first_day, last_day = booking_window(doctor_key)
    return render("appointment.html", specialty=specialty, doctor_key=doctor_key,
                  doctor=settings.DOCTORS[doctor_key], first_day=first_day.isoformat(),
                  last_day=last_day.isoformat() if last_day else None,
                  time_slots=pages.TIME_SLOTS, reasons=pages.REASONS[specialty])

@app.get("/gallery")
def gallery():
    with SessionLocal() as db:
        content, page_blocks = pages.page_blocks(db, "/gallery")
        images = [to_dict(x) for x in editors.list_items(db, "gallery_images")]
        return render("gallery.html", content=content, blocks=page_blocks, images=images)

@app.get("/developers")
def developers():
    with SessionLocal() as db:
        content, page_blocks = pages.page_blocks(db, "/developers")
        return render("developers.html", content=content, blocks=page_blocks,
                      developers=pages.DEVELOPERS)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=settings.PORT)
