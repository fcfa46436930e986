"""Admin content editors.

Every CMS table follows the same list/add/update/delete/reorder pattern, so
the editors are one registry plus a handful of generic operations.
"""
from dataclasses import dataclass

from sqlalchemy import select

from blocks import swap_neighbors, next_order_index
from logging_config import get_logger
from models import (Faq, Testimonial, InsuranceProvider, ServiceCard, DoctorProfile,
                    Procedure, Condition, GalleryImage, Department, NotFound)

log = get_logger(__name__)


@dataclass(frozen=True)
class Editor:
    model: type
    fields: tuple
    required: tuple
    image_field: str = ""


EDITORS = {
    "faqs": Editor(Faq, ("question", "answer", "specialty"), ("question", "answer")),
    "testimonials": Editor(Testimonial, ("name", "content", "rating", "specialty", "image_url"),
                           ("name", "content"), "image_url"),
    "insurance_providers": Editor(InsuranceProvider, ("name", "logo_url", "specialty"),
                                  ("name",), "logo_url"),
    "service_cards": Editor(ServiceCard, ("title", "description", "icon", "link", "specialty"),
                            ("title",)),
    "doctor_profiles": Editor(DoctorProfile, ("name", "title", "bio", "qualifications",
                                              "experience", "specialty", "image_url"),
                              ("name", "specialty"), "image_url"),
    "procedures": Editor(Procedure, ("title", "description", "specialty", "image_url"),
                         ("title",), "image_url"),
    "conditions": Editor(Condition, ("name", "description", "symptoms", "treatments",
                                     "specialty", "image_url"),
                         ("name",), "image_url"),
    "gallery_images": Editor(GalleryImage, ("title", "caption", "specialty", "image_url"),
                             ("image_url",), "image_url"),
    "departments": Editor(Department, ("name", "description", "icon", "specialty"),
                          ("name",)),
}


def get_editor(category) -> Editor:
    editor = EDITORS.get(category)
    if editor is None:
        raise NotFound(f"Unknown content category: {category}")
    return editor


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def list_items(db, category, specialty=None):
    model = get_editor(category).model
    stmt = select(model)
    if specialty:
        stmt = stmt.where(model.specialty == specialty)
    stmt = stmt.order_by(model.order_index, model.created_at, model.id)
    return list(db.execute(stmt).scalars())


def get_item(db, category, item_id):
    item = db.get(get_editor(category).model, item_id)
    if item is None:
        raise NotFound("Item not found")
    return item


def create_item(db, category, data: dict):
    editor = get_editor(category)
    for field in editor.required:
        if _blank(data.get(field)):
            raise ValueError(f"{field} required")
    values = {k: data[k] for k in editor.fields if k in data}
    if "order_index" in data:
        values["order_index"] = int(data["order_index"])
    else:
        values["order_index"] = next_order_index(db, editor.model)
    item = editor.model(**values)
    db.add(item)
    db.commit()
    db.refresh(item)
    log.info("content_item_created", category=category, item_id=item.id)
    return item


def update_item(db, category, item_id, changes: dict):
    editor = get_editor(category)
    item = get_item(db, category, item_id)
    for key, value in changes.items():
        if key not in editor.fields and key != "order_index":
            continue
        if key in editor.required and _blank(value):
            raise ValueError(f"{key} required")
        if key == "specialty" and _blank(value):
            value = "general"
        setattr(item, key, int(value) if key == "order_index" else value)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db, category, item_id):
    item = get_item(db, category, item_id)
    db.delete(item)
    db.commit()
    log.info("content_item_deleted", category=category, item_id=item_id)


def reorder_item(db, category, item_id, direction):
    item = get_item(db, category, item_id)
    rows = list_items(db, category)
    swapped = swap_neighbors(rows, item.id, direction)
    if swapped:
        db.commit()
    return sorted(rows, key=lambda r: r.order_index)


def set_item_image(db, category, item_id, url):
    editor = get_editor(category)
    if not editor.image_field:
        raise ValueError(f"{category} items have no image")
    return update_item(db, category, item_id, {editor.image_field: url})
