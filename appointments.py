"""Appointment booking, admin status changes and data export."""
import csv
import io
import json
from datetime import date

from sqlalchemy import select

from appointment_dates import parse_appointment_date
from holiday_calendar import STATUSES, check_booking_date, filter_by_doctor, list_holidays
from logging_config import get_logger
from models import Appointment, NotFound, to_dict
import mailer
import settings

log = get_logger(__name__)

REQUIRED = (
    ("first_name", "First name is required"),
    ("last_name", "Last name is required"),
    ("email", "Email is required"),
    ("phone", "Phone number is required"),
    ("date", "A date is required to book an appointment"),
    ("time", "A time slot is required to book an appointment"),
    ("reason", "A reason is required to book an appointment"),
)
EXPORT_HEADER = [
    "ID", "First Name", "Last Name", "Email", "Phone",
    "Date", "Time", "Specialty", "Doctor", "Clinic",
    "Status", "Reason", "Additional Info", "Age", "Gender", "Created At",
]


def _text(data, key):
    value = data.get(key)
    return value.strip() if isinstance(value, str) else value


def book_appointment(db, data: dict, doctor_key: str, today=None):
    """Validate and store a public booking request, then notify by mail.

    The mail step never undoes the booking; a failed send is logged and
    reported back through ``appt.email_sent``.
    """
    entry = settings.DOCTORS.get(doctor_key)
    if entry is None:
        raise ValueError(f"unknown doctor: {doctor_key}")
    for key, message in REQUIRED:
        if not _text(data, key):
            raise ValueError(message)

    age = data.get("age")
    if age in (None, ""):
        age = None
    else:
        try:
            age = int(age)
        except (TypeError, ValueError):
            raise ValueError("Age must be a number") from None
        if age < 0 or age > 130:
            raise ValueError("Age must be between 0 and 130")

    day = check_booking_date(list_holidays(db), data["date"], doctor_key, today=today)

    appt = Appointment(
        first_name=_text(data, "first_name"),
        last_name=_text(data, "last_name"),
        email=_text(data, "email"),
        phone=_text(data, "phone"),
        date=day,
        time=_text(data, "time"),
        reason=_text(data, "reason"),
        additional_info=_text(data, "additional_info") or None,
        specialty=entry["specialty"],
        clinic=entry["clinic"],
        doctor=entry["name"],
        status="pending",
        age=age,
        gender=_text(data, "gender") or None,
    )
    db.add(appt)
    db.commit()
    db.refresh(appt)
    log.info("appointment_booked", appointment_id=appt.id, specialty=appt.specialty,
             date=appt.date.isoformat())

    try:
        appt.email_sent = mailer.send_appointment_request(appt)
    except Exception:
        log.exception("appointment_mail_failed", appointment_id=appt.id)
        appt.email_sent = False
    return appt


def get_appointment(db, appointment_id) -> Appointment:
    appt = db.get(Appointment, appointment_id)
    if appt is None:
        raise NotFound("Appointment not found")
    return appt


def set_status(db, appointment_id, status):
    """Set any status; confirmations and cancellations notify the patient."""
    if status not in STATUSES:
        raise ValueError(f"status must be one of: {', '.join(STATUSES)}")
    appt = get_appointment(db, appointment_id)
    previous = appt.status
    appt.status = status
    db.commit()
    log.info("appointment_status_changed", appointment_id=appt.id, previous=previous, status=status)

    notify = {
        "confirmed": mailer.send_appointment_confirmation,
        "cancelled": mailer.send_appointment_cancellation,
    }.get(status)
    appt.email_sent = False
    if notify is not None:
        try:
            appt.email_sent = notify(appt)
        except Exception:
            log.exception("appointment_mail_failed", appointment_id=appt.id, status=status)
    return appt


def list_appointments(db, specialty=None):
    stmt = select(Appointment)
    if specialty and specialty != "all":
        stmt = stmt.where(Appointment.specialty == specialty)
    stmt = stmt.order_by(Appointment.created_at.desc(), Appointment.id.desc())
    return list(db.execute(stmt).scalars())


def appointments_on(db, day, doctor_filter="all"):
    day = parse_appointment_date(day)
    rows = db.execute(
        select(Appointment).where(Appointment.date == day).order_by(Appointment.time, Appointment.id)
    ).scalars()
    return filter_by_doctor(rows, doctor_filter)


def serialize_appointment(appt) -> dict:
    return to_dict(appt)


# ---------------- Export ----------------
def export_filename(specialty, fmt, today=None):
    today = today or date.today()
    return f"appointments-{specialty or 'all'}-{today.isoformat()}.{fmt}"


def export_csv(rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for a in rows:
        writer.writerow([
            a.id, a.first_name, a.last_name, a.email, a.phone,
            a.date.isoformat(), a.time, a.specialty, a.doctor, a.clinic,
            a.status, a.reason, a.additional_info or "",
            a.age if a.age is not None else "", a.gender or "",
            a.created_at.isoformat() if a.created_at else "",
        ])
    return buf.getvalue()


def export_json(rows) -> str:
    return json.dumps([serialize_appointment(a) for a in rows], indent=2)
