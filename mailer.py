import ssl
import smtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from appointment_dates import display_date
from logging_config import get_logger
import settings

log = get_logger(__name__)

SPECIALTY_LABELS = {"eyecare": "Eye Care", "gynecology": "Gynecology"}
SPECIALTY_COLORS = {
    "eyecare": ("#3182CE", "#EBF8FF"),
    "gynecology": ("#D53F8C", "#FFF5F7"),
}


def send_email(to, subject: str, html_body: str, text_body: str = "") -> bool:
    """Send one message. Returns False when SMTP is not configured."""
    recipients = [to] if isinstance(to, str) else [r for r in to if r]
    if not settings.SMTP_HOST or not recipients:
        log.info("mail_skipped", reason="smtp not configured", to=recipients, subject=subject)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.CLINIC_NAME} <{settings.MAIL_FROM}>"
    msg["To"] = ", ".join(recipients)
    msg.attach(MIMEText(text_body or subject, "plain"))
    msg.attach(MIMEText(html_body, "html"))

    context = ssl.create_default_context()
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as server:
        if settings.SMTP_PORT == 587:
            server.starttls(context=context)
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.MAIL_FROM, recipients, msg.as_string())
    log.info("mail_sent", to=recipients, subject=subject)
    return True


def _frame(specialty, heading, body_html):
    primary, secondary = SPECIALTY_COLORS.get(specialty, ("#4366a0", "#f4f6fb"))
    label = SPECIALTY_LABELS.get(specialty, "")
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="text-align:center;background:{secondary};padding:20px;border-radius:5px;">
    <h1 style="color:{primary};margin:0;">{escape(settings.CLINIC_NAME)} {label}</h1>
  </div>
  <h2 style="color:{primary};text-align:center;">{heading}</h2>
  {body_html}
  <p style="margin-top:30px;">Best regards,<br>The {escape(settings.CLINIC_NAME)} Team</p>
</div>"""


def _details(appt):
    rows = [
        ("Patient", f"{appt.first_name} {appt.last_name}"),
        ("Email", appt.email),
        ("Phone", appt.phone),
        ("Date", display_date(appt.date)),
        ("Time", appt.time),
        ("Department", SPECIALTY_LABELS.get(appt.specialty, appt.specialty)),
        ("Doctor", appt.doctor),
        ("Clinic", appt.clinic),
        ("Reason", appt.reason),
    ]
    if appt.age:
        rows.append(("Age", str(appt.age)))
    if appt.gender:
        rows.append(("Gender", appt.gender))
    if appt.additional_info:
        rows.append(("Additional information", appt.additional_info))
    return "".join(f"<p style='margin:5px 0'><strong>{k}:</strong> {escape(v or '')}</p>" for k, v in rows)


def send_appointment_request(appt) -> bool:
    """Patient acknowledgement plus a doctor copy for a new booking."""
    patient = _frame(appt.specialty, "Appointment Request Received",
                     f"<p>Dear {escape(appt.first_name)},</p>"
                     "<p>We have received your appointment request. Our team will contact you shortly "
                     "to confirm it.</p>" + _details(appt))
    sent = send_email(appt.email, "Appointment Request Received", patient)
    if settings.DOCTOR_EMAIL:
        doctor = _frame(appt.specialty, "New Appointment Request", _details(appt))
        send_email(settings.DOCTOR_EMAIL, f"New appointment request: {appt.first_name} {appt.last_name}", doctor)
    return sent


def send_appointment_confirmation(appt) -> bool:
    body = _frame(appt.specialty, "Appointment Confirmed",
                  f"<p>Dear {escape(appt.first_name)},</p>"
                  "<p>Your appointment has been confirmed.</p>" + _details(appt))
    sent = send_email(appt.email, "Appointment Confirmed", body)
    if settings.DOCTOR_EMAIL:
        send_email(settings.DOCTOR_EMAIL, f"Confirmed: {appt.first_name} {appt.last_name}",
                   _frame(appt.specialty, "Appointment Confirmed", _details(appt)))
    return sent


def send_appointment_cancellation(appt) -> bool:
    body = _frame(appt.specialty, "We're Currently Overbooked",
                  f"<p>Dear {escape(appt.first_name)} {escape(appt.last_name)},</p>"
                  "<p>We regret to inform you that your appointment scheduled for:</p>"
                  + _details(appt) +
                  "<p>has been cancelled due to high demand. We sincerely apologize for the "
                  "inconvenience and encourage you to book another available slot.</p>")
    return send_email(appt.email, "Appointment Cancelled - We're Currently Overbooked", body)


def send_reset_code(email, code) -> bool:
    body = _frame(None, "Password Reset Request",
                  "<p>We received a request to reset your admin password.</p>"
                  f"<p style='font-size:28px;letter-spacing:6px;text-align:center'><b>{escape(code)}</b></p>"
                  "<p>This code expires in 15 minutes. If you didn't request it, ignore this email.</p>")
    return send_email(email, "Your password reset code", body)
