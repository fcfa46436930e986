import pytest

import editors
from models import NotFound


def test_create_requires_fields(db):
    with pytest.raises(ValueError, match="question required"):
        editors.create_item(db, "faqs", {"answer": "Yes"})
    with pytest.raises(ValueError, match="specialty required"):
        editors.create_item(db, "doctor_profiles", {"name": "Dr. Lehri", "specialty": ""})


def test_unknown_category():
    with pytest.raises(NotFound):
        editors.get_editor("blog_posts")


def test_create_appends_and_ignores_unknown_fields(db):
    first = editors.create_item(db, "service_cards", {"title": "Cataract Surgery", "specialty": "eyecare"})
    second = editors.create_item(db, "service_cards", {"title": "LASIK", "specialty": "eyecare",
                                                       "price": "n/a"})
    assert (first.order_index, second.order_index) == (0, 1)
    assert not hasattr(second, "price")


def test_list_filters_by_specialty(db):
    editors.create_item(db, "faqs", {"question": "Q1", "answer": "A1", "specialty": "gynecology"})
    editors.create_item(db, "faqs", {"question": "Q2", "answer": "A2", "specialty": "eyecare"})
    assert [f.question for f in editors.list_items(db, "faqs", "gynecology")] == ["Q1"]
    assert len(editors.list_items(db, "faqs")) == 2


def test_update_cannot_blank_required_field(db):
    item = editors.create_item(db, "testimonials", {"name": "Priya", "content": "Great care"})
    with pytest.raises(ValueError, match="content required"):
        editors.update_item(db, "testimonials", item.id, {"content": " "})
    updated = editors.update_item(db, "testimonials", item.id, {"rating": 5})
    assert updated.rating == 5


def test_reorder_and_delete(db):
    ids = [editors.create_item(db, "departments", {"name": name}).id
           for name in ("Retina", "Cornea", "Glaucoma")]
    rows = editors.reorder_item(db, "departments", ids[0], "down")
    assert [r.id for r in rows] == [ids[1], ids[0], ids[2]]
    assert editors.reorder_item(db, "departments", ids[2], "down")[-1].id == ids[2]

    editors.delete_item(db, "departments", ids[1])
    remaining = editors.list_items(db, "departments")
    assert [(r.id, r.order_index) for r in remaining] == [(ids[0], 1), (ids[2], 2)]
    with pytest.raises(LookupError):
        editors.get_item(db, "departments", ids[1])


def test_set_item_image(db):
    provider = editors.create_item(db, "insurance_providers", {"name": "Star Health"})
    assert editors.set_item_image(db, "insurance_providers", provider.id, "https://cdn/x.jpg").logo_url \
        == "https://cdn/x.jpg"
    faq = editors.create_item(db, "faqs", {"question": "Q", "answer": "A"})
    with pytest.raises(ValueError):
        editors.set_item_image(db, "faqs", faq.id, "https://cdn/x.jpg")


def test_update_clears_optional_fields(db):
    card = editors.create_item(db, "service_cards", {"title": "LASIK", "icon": "eye",
                                                     "link": "/eyecare", "specialty": "eyecare"})
    updated = editors.update_item(db, "service_cards", card.id,
                                  {"title": "LASIK", "icon": None, "link": None, "specialty": None})
    assert (updated.icon, updated.link) == (None, None)
    assert updated.specialty == "general"
