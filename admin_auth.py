import hmac
import secrets
from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import jsonify, request, redirect
from sqlalchemy import select, delete
from werkzeug.security import generate_password_hash, check_password_hash

from logging_config import get_logger
from models import AdminUser, AdminResetCode
import settings

log = get_logger(__name__)

RESET_CODE_TTL = timedelta(minutes=15)
MIN_PASSWORD_LENGTH = 8


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ---------------- Token ----------------
def _extract_token():
    # Header
    hdr = request.headers.get("Authorization", "")
    if hdr.startswith("Bearer "):
        return hdr[7:].strip()
    # Cookie
    c = request.cookies.get("Authorization", "")
    if c.startswith("Bearer "):
        return c[7:].strip()
    # Query param
    q = request.args.get("token", "")
    if q:
        return q.strip()
    return ""


def is_admin() -> bool:
    tok = _extract_token()
    return bool(settings.ADMIN_TOKEN and tok and hmac.compare_digest(tok, settings.ADMIN_TOKEN))


def require_admin(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not settings.ADMIN_TOKEN:
            return jsonify({"error": "admin token not configured"}), 500
        if not is_admin():
            return jsonify({"error": "unauthorized"}), 401
        return f(*args, **kwargs)
    return wrapper


def require_admin_page(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not is_admin():
            return redirect("/admin", code=302)
        return f(*args, **kwargs)
    return wrapper


# ---------------- Users ----------------
def ensure_bootstrap_admin(db):
    """Seed the first admin from ADMIN_USER/ADMIN_PASSWORD."""
    if not (settings.ADMIN_USER and settings.ADMIN_PASS):
        return None
    if db.execute(select(AdminUser.id).limit(1)).first():
        return None
    user = AdminUser(email=settings.ADMIN_USER.lower(),
                     password_hash=generate_password_hash(settings.ADMIN_PASS))
    db.add(user)
    db.commit()
    log.info("admin_bootstrapped", email=user.email)
    return user


def get_admin(db, email):
    email = str(email or "").strip().lower()
    if not email:
        return None
    return db.execute(select(AdminUser).where(AdminUser.email == email)).scalar_one_or_none()


def authenticate(db, email, password) -> bool:
    user = get_admin(db, email)
    if user is None or not password:
        return False
    return check_password_hash(user.password_hash, str(password))


# ---------------- Password reset ----------------
def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def issue_reset_code(db, email, now=None):
    """Store a fresh reset code for an admin; returns it, or None for unknown emails."""
    user = get_admin(db, email)
    if user is None:
        log.warning("reset_code_unknown_email", email=email)
        return None
    now = now or _utcnow()
    db.execute(delete(AdminResetCode).where(AdminResetCode.email == user.email))
    code = generate_code()
    db.add(AdminResetCode(email=user.email, code_hash=generate_password_hash(code),
                          expires_at=now + RESET_CODE_TTL))
    db.commit()
    log.info("reset_code_issued", email=user.email)
    return code


def verify_reset_code(db, email, code, now=None) -> bool:
    email = str(email or "").strip().lower()
    code = str(code or "").strip()
    row = db.execute(
        select(AdminResetCode).where(AdminResetCode.email == email)
        .order_by(AdminResetCode.id.desc())
    ).scalars().first()
    if row is None or not code:
        return False
    if not check_password_hash(row.code_hash, code):
        return False
    if row.expires_at < (now or _utcnow()):
        log.info("reset_code_expired", email=email)
        return False
    return True


def reset_password(db, email, code, new_password, now=None):
    new_password = str(new_password or "")
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not verify_reset_code(db, email, code, now=now):
        raise ValueError("Invalid or expired code.")
    user = get_admin(db, email)
    user.password_hash = generate_password_hash(new_password)
    db.execute(delete(AdminResetCode).where(AdminResetCode.email == user.email))
    db.commit()
    log.info("admin_password_reset", email=user.email)
