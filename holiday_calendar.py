"""Holidays and the admin appointment calendar.

A holiday with no doctor closes the whole clinic; one with a doctor key
(``eye``/``gynecology``) only blocks that doctor's bookings.
"""
import calendar as _calendar
from datetime import date, timedelta

import requests
from sqlalchemy import select

from appointment_dates import add_months, parse_appointment_date
from logging_config import get_logger
from models import Holiday, NotFound
import settings

log = get_logger(__name__)

HOLIDAY_TYPES = ("national", "doctor", "manual", "api")
STATUSES = ("pending", "confirmed", "completed", "cancelled")
CALENDARIFIC_URL = "https://calendarific.com/api/v2/holidays"
FOREIGN_OBSERVANCES = (
    "Hanukkah", "Valentine's Day", "Lunar New Year", "March Equinox",
    "June Solstice", "September Equinox", "December Solstice",
)


class HolidayConflict(ValueError):
    def __init__(self, message, holiday):
        super().__init__(message)
        self.holiday = holiday


class HolidayFeedError(RuntimeError):
    pass


def normalize_holiday_type(value) -> str:
    if value in HOLIDAY_TYPES:
        return value
    log.warning("holiday_type_invalid", received=value, fallback="manual")
    return "manual"


def specialty_for_doctor(doctor_key):
    entry = settings.DOCTORS.get(doctor_key)
    return entry["specialty"] if entry else None


def doctor_for_specialty(specialty):
    for key, entry in settings.DOCTORS.items():
        if entry["specialty"] == specialty:
            return key
    return None


def is_clinic_wide(holiday) -> bool:
    return holiday.doctor in (None, "", "all")


def holiday_applies(holiday, doctor) -> bool:
    """Whether ``holiday`` blocks the given doctor key (``all``/None = any)."""
    if is_clinic_wide(holiday):
        return True
    if doctor in (None, "all"):
        return True
    return holiday.doctor == doctor


def find_blocking_holiday(holidays, day, doctor):
    day = parse_appointment_date(day)
    for holiday in holidays:
        if parse_appointment_date(holiday.date) == day and holiday_applies(holiday, doctor):
            return holiday
    return None


def booking_window(doctor, today=None):
    """First and last bookable day for ``doctor``; the last is None when open-ended."""
    today = today or date.today()
    months = settings.DOCTORS.get(doctor, {}).get("max_months_ahead")
    return today + timedelta(days=1), (add_months(today, months) if months else None)


def check_booking_date(holidays, day, doctor, today=None):
    """Reject a booking date that is not after today, too far ahead, a Sunday, or a holiday."""
    day = parse_appointment_date(day)
    first, last = booking_window(doctor, today)
    if day < first:
        raise ValueError("Please select a date in the future.")
    if last is not None and day > last:
        months = settings.DOCTORS[doctor]["max_months_ahead"]
        raise ValueError(
            f"Appointments with Dr. {settings.DOCTORS[doctor]['name']} can only be booked "
            f"up to {months} months in advance."
        )
    if day.weekday() == 6:
        raise ValueError("The clinic is closed on Sundays. Please select another date.")
    holiday = find_blocking_holiday(holidays, day, doctor)
    if holiday is not None:
        reason = holiday.description or holiday.name
        entry = settings.DOCTORS.get(holiday.doctor)
        if entry and not is_clinic_wide(holiday):
            message = f"Dr. {entry['name']} is unavailable on this date: {reason}. Please select another date."
        else:
            message = f"The clinic is closed on this date: {reason}. Please select another date."
        raise HolidayConflict(message, holiday)
    return day


def blocked_dates(holidays, doctor):
    return sorted({parse_appointment_date(h.date) for h in holidays if holiday_applies(h, doctor)})


# ---------------- Calendar view ----------------
def filter_by_doctor(appointments, doctor_filter):
    if doctor_filter in (None, "all"):
        return list(appointments)
    specialty = specialty_for_doctor(doctor_filter)
    return [a for a in appointments if a.specialty == specialty]


def visible_holidays(holidays, doctor_filter):
    shown = [h for h in holidays if holiday_applies(h, doctor_filter)]
    return sorted(shown, key=lambda h: parse_appointment_date(h.date))


def day_summary(day, appointments, holidays, doctor_filter="all"):
    day = parse_appointment_date(day)
    on_day = [a for a in filter_by_doctor(appointments, doctor_filter)
              if parse_appointment_date(a.date) == day]
    holidays_on_day = [
        h for h in holidays
        if parse_appointment_date(h.date) == day
        and (h.type in ("national", "api") or holiday_applies(h, doctor_filter))
    ]
    counts = {status: 0 for status in STATUSES}
    for appt in on_day:
        counts[appt.status] = counts.get(appt.status, 0) + 1
    return {
        "date": day.isoformat(),
        "holidays": [{
            "id": h.id, "name": h.name, "type": normalize_holiday_type(h.type),
            "doctor": h.doctor, "description": h.description,
        } for h in holidays_on_day],
        "has_holiday": bool(holidays_on_day),
        "has_custom_holiday": any(h.type == "manual" for h in holidays_on_day),
        "appointment_count": len(on_day),
        "status_counts": counts,
    }


def month_summary(year, month, appointments, holidays, doctor_filter="all"):
    _, days = _calendar.monthrange(year, month)
    first = date(year, month, 1)
    return [day_summary(first + timedelta(days=i), appointments, holidays, doctor_filter)
            for i in range(days)]


# ---------------- Persistence ----------------
def list_holidays(db):
    return list(db.execute(select(Holiday).order_by(Holiday.date, Holiday.id)).scalars())


def serialize_holiday(holiday) -> dict:
    return {
        "id": holiday.id,
        "date": holiday.date.isoformat(),
        "name": holiday.name,
        "type": normalize_holiday_type(holiday.type),
        "doctor": holiday.doctor,
        "description": holiday.description,
        "department": holiday.department,
    }


def add_manual_holiday(db, day, name, doctor_filter="all", description=None):
    if day in (None, ""):
        raise ValueError("Please select a date for the holiday.")
    if not name or not name.strip():
        raise ValueError("Please provide a name for the holiday.")
    doctor = None if doctor_filter in (None, "", "all") else doctor_filter
    if doctor is not None and doctor not in settings.DOCTORS:
        raise ValueError(f"unknown doctor: {doctor}")
    holiday = Holiday(
        date=parse_appointment_date(day),
        name=name.strip(),
        type="manual",
        doctor=doctor,
        description=description or None,
        department=specialty_for_doctor(doctor) or "general",
    )
    db.add(holiday)
    db.commit()
    db.refresh(holiday)
    log.info("holiday_added", holiday_id=holiday.id, date=holiday.date.isoformat(), doctor=doctor)
    return holiday


def delete_holiday(db, holiday_id):
    holiday = db.get(Holiday, holiday_id)
    if holiday is None:
        raise NotFound("Holiday not found")
    db.delete(holiday)
    db.commit()
    log.info("holiday_deleted", holiday_id=holiday_id)


def fetch_national_holidays(year, api_key=None, country=None, session=None):
    """Pull the public holidays for ``year`` from Calendarific."""
    api_key = api_key or settings.CALENDARIFIC_API_KEY
    if not api_key:
        raise HolidayFeedError("CALENDARIFIC_API_KEY is not configured")
    http = session or requests
    try:
        resp = http.get(CALENDARIFIC_URL, params={
            "api_key": api_key,
            "country": country or settings.HOLIDAY_COUNTRY,
            "year": year,
        }, timeout=15)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise HolidayFeedError(f"holiday API call failed: {exc}") from exc

    holidays = (payload.get("response") or {}).get("holidays")
    if not isinstance(holidays, list):
        raise HolidayFeedError("Invalid response format from holiday API")

    out = []
    for item in holidays:
        name = item.get("name") or ""
        if any(f.lower() in name.lower() for f in FOREIGN_OBSERVANCES):
            continue
        iso = ((item.get("date") or {}).get("iso") or "")[:10]
        if not iso:
            continue
        out.append({"date": parse_appointment_date(iso), "name": name,
                    "description": item.get("description") or None})
    return out


def import_national_holidays(db, year, fetched=None):
    fetched = fetched if fetched is not None else fetch_national_holidays(year)
    existing = {
        (h.date, h.name)
        for h in db.execute(select(Holiday).where(Holiday.type == "national")).scalars()
    }
    added = 0
    for item in fetched:
        key = (item["date"], item["name"])
        if key in existing:
            continue
        existing.add(key)
        db.add(Holiday(date=item["date"], name=item["name"], description=item["description"],
                       type="national", doctor=None, department="general"))
        added += 1
    db.commit()
    log.info("national_holidays_imported", year=year, count=added)
    return added


def ensure_national_holidays(db, year):
    """Import the year's national holidays unless some are already stored."""
    have = db.execute(
        select(Holiday.id).where(
            Holiday.type == "national",
            Holiday.date >= date(year, 1, 1),
            Holiday.date < date(year + 1, 1, 1),
        ).limit(1)
    ).first()
    if have:
        return 0
    return import_national_holidays(db, year)
