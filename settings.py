import os
from dotenv import load_dotenv

load_dotenv()

# ---------------- Core ----------------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///eyefem.sqlite3")
PORT         = int(os.getenv("PORT", "8000"))
LOG_LEVEL    = os.getenv("LOG_LEVEL", "INFO")
CLINIC_NAME  = os.getenv("CLINIC_NAME", "Eyefem Healthcare")

# ---------------- Storage ----------------
AWS_REGION         = os.getenv("AWS_REGION", "ap-south-1")
S3_BUCKET          = os.getenv("S3_BUCKET")
S3_PUBLIC_BASE_URL = os.getenv("S3_PUBLIC_BASE_URL", "")
MAX_UPLOAD_BYTES   = 5 * 1024 * 1024

# ---------------- Admin ----------------
ADMIN_TOKEN   = os.getenv("ADMIN_TOKEN", "")
ADMIN_USER    = os.getenv("ADMIN_USER", "")
ADMIN_PASS    = os.getenv("ADMIN_PASSWORD", "")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "1") not in ("0", "false", "False")

# ---------------- Mail ----------------
SMTP_HOST     = os.getenv("SMTP_HOST", "")
SMTP_PORT     = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER     = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
MAIL_FROM     = os.getenv("MAIL_FROM") or SMTP_USER or "no-reply@eyefem.local"
DOCTOR_EMAIL  = os.getenv("DOCTOR_EMAIL", "")

# ---------------- Holidays ----------------
CALENDARIFIC_API_KEY = os.getenv("CALENDARIFIC_API_KEY", "")
HOLIDAY_COUNTRY      = os.getenv("HOLIDAY_COUNTRY", "IN")

# Doctor keys as used by the calendar filter and holiday rows.
# max_months_ahead: booking horizon, None for no limit.
DOCTORS = {
    "eye": {
        "specialty": "eyecare",
        "name": "Sanjeev Lehri",
        "clinic": "Eyefem Eye Care Clinic",
        "max_months_ahead": None,
    },
    "gynecology": {
        "specialty": "gynecology",
        "name": "Nisha Bhatnagar",
        "clinic": "Eyefem Gynecology Clinic",
        "max_months_ahead": 3,
    },
}
SPECIALTIES = ("eyecare", "gynecology")
