from datetime import date, datetime

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON, func, inspect

from db import Base


class ContentBlock(Base):
    __tablename__ = "content_blocks"
    id = Column(Integer, primary_key=True, index=True)
    page = Column(String(200), nullable=False, index=True)
    section = Column(String(100), default="main")
    specialty = Column(String(50), default="general")
    name = Column(String(200))
    title = Column(String(300))
    content = Column(Text, default="")
    image_url = Column(String(500))
    order_index = Column(Integer, nullable=False, default=0)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Appointment(Base):
    __tablename__ = "appointments"
    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    email = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(50), nullable=False)
    specialty = Column(String(50), nullable=False)
    reason = Column(String(500), nullable=False)
    doctor = Column(String(200))
    clinic = Column(String(200))
    status = Column(String(20), nullable=False, default="pending")
    age = Column(Integer)
    gender = Column(String(30))
    additional_info = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class Holiday(Base):
    __tablename__ = "holidays"
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default="manual")
    doctor = Column(String(50))
    description = Column(Text)
    department = Column(String(50), default="general")
    created_at = Column(DateTime, server_default=func.now())


class AdminUser(Base):
    __tablename__ = "admin_users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(200), nullable=False, unique=True)
    password_hash = Column(String(300), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class AdminResetCode(Base):
    __tablename__ = "admin_reset_codes"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(200), nullable=False, index=True)
    code_hash = Column(String(300), nullable=False)
    expires_at = Column(DateTime, nullable=False)


# ---------------- CMS editor tables ----------------
class CmsItem:
    id = Column(Integer, primary_key=True, index=True)
    specialty = Column(String(50), default="general")
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Faq(CmsItem, Base):
    __tablename__ = "csm_faqs"
    question = Column(String(500), nullable=False)
    answer = Column(Text, nullable=False)


class Testimonial(CmsItem, Base):
    __tablename__ = "csm_testimonials"
    name = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    rating = Column(Integer, default=5)
    image_url = Column(String(500))


class InsuranceProvider(CmsItem, Base):
    __tablename__ = "csm_insurance_panel_providers"
    name = Column(String(200), nullable=False)
    logo_url = Column(String(500))


class ServiceCard(CmsItem, Base):
    __tablename__ = "csm_service_cards"
    title = Column(String(200), nullable=False)
    description = Column(Text)
    icon = Column(String(100))
    link = Column(String(300))


class DoctorProfile(CmsItem, Base):
    __tablename__ = "csm_doctor_profiles"
    name = Column(String(200), nullable=False)
    title = Column(String(200))
    bio = Column(Text)
    qualifications = Column(Text)
    experience = Column(String(200))
    image_url = Column(String(500))


class Procedure(CmsItem, Base):
    __tablename__ = "csm_procedures"
    title = Column(String(200), nullable=False)
    description = Column(Text)
    image_url = Column(String(500))


class Condition(CmsItem, Base):
    __tablename__ = "csm_conditions"
    name = Column(String(200), nullable=False)
    description = Column(Text)
    symptoms = Column(Text)
    treatments = Column(Text)
    image_url = Column(String(500))


class GalleryImage(CmsItem, Base):
    __tablename__ = "csm_gallery_images"
    title = Column(String(200))
    caption = Column(Text)
    image_url = Column(String(500), nullable=False)


class Department(CmsItem, Base):
    __tablename__ = "csm_departments"
    name = Column(String(200), nullable=False)
    description = Column(Text)
    icon = Column(String(100))


def to_dict(row, exclude=()):
    out = {}
    for attr in inspect(row).mapper.column_attrs:
        name = attr.columns[0].name
        if name in exclude:
            continue
        value = getattr(row, attr.key)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        out[name] = value
    return out


class NotFound(LookupError):
    """A row looked up by id (or an editor category) does not exist."""
