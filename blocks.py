"""Content block store.

Blocks are named units of editable text/image content tied to a page. Their
display order within a page is the ascending ``order_index``; moving a block
swaps its index with the neighbour's instead of renumbering the page.
"""
import json
import time

from sqlalchemy import select, func

from logging_config import get_logger
from models import ContentBlock, NotFound

log = get_logger(__name__)

BLOCK_TYPES = ("text", "image", "button", "heading", "list", "link")
DIRECTIONS = ("up", "down")
EDITABLE_FIELDS = ("title", "content", "image_url", "section", "specialty",
                   "name", "metadata", "order_index")

INITIAL_CONTENT = {
    "text": "New text block",
    "button": "New button",
    "heading": "New Heading",
    "list": "Item 1|Item 2|Item 3",
    "link": "New link",
    "image": "",
}


def parse_metadata(value) -> dict:
    if not value:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            log.warning("block_metadata_unparseable", raw=value[:80])
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def infer_block_type(block) -> str:
    """Guess how a block should render from the fields it carries."""
    image_url = getattr(block, "image_url", None)
    section = getattr(block, "section", None) or ""
    name = getattr(block, "name", None) or ""
    content = getattr(block, "content", None) or ""
    meta = parse_metadata(getattr(block, "meta", None))

    if image_url:
        return "image"
    for kind in ("heading", "button"):
        if section == kind or kind in name:
            return kind
    if section == "list" or "list" in name or "|" in content:
        return "list"
    if section == "link" or "link" in name or meta.get("url"):
        return "link"
    return "text"


def swap_neighbors(rows, row_id, direction):
    """Swap ``order_index`` of ``row_id`` with its neighbour in ``direction``.

    ``rows`` may be in any order; they are sorted by ``order_index`` first.
    Returns the two swapped rows, or ``None`` when the row is already at the
    boundary or is not in ``rows``.
    """
    if direction not in DIRECTIONS:
        raise ValueError("direction must be 'up' or 'down'")
    ordered = sorted(rows, key=lambda r: r.order_index)
    idx = next((i for i, r in enumerate(ordered) if r.id == row_id), None)
    if idx is None:
        return None
    target = idx - 1 if direction == "up" else idx + 1
    if target < 0 or target >= len(ordered):
        return None
    current, neighbour = ordered[idx], ordered[target]
    current.order_index, neighbour.order_index = neighbour.order_index, current.order_index
    return current, neighbour


def next_order_index(db, model, **filters) -> int:
    stmt = select(func.max(model.order_index))
    for key, value in filters.items():
        stmt = stmt.where(getattr(model, key) == value)
    current = db.execute(stmt).scalar()
    return 0 if current is None else current + 1


# ---------------- Queries ----------------
def list_blocks(db, page, section=None):
    stmt = select(ContentBlock).where(ContentBlock.page == page)
    if section:
        stmt = stmt.where(ContentBlock.section == section)
    stmt = stmt.order_by(ContentBlock.order_index, ContentBlock.id)
    return list(db.execute(stmt).scalars())


def get_block(db, block_id) -> ContentBlock:
    block = db.get(ContentBlock, block_id)
    if block is None:
        raise NotFound("Block not found")
    return block


def serialize_block(block) -> dict:
    return {
        "id": block.id,
        "type": infer_block_type(block),
        "page": block.page,
        "section": block.section,
        "specialty": block.specialty,
        "name": block.name,
        "title": block.title,
        "content": block.content or "",
        "image_url": block.image_url,
        "order_index": block.order_index,
        "metadata": parse_metadata(block.meta),
        "created_at": block.created_at.isoformat() if block.created_at else None,
        "updated_at": block.updated_at.isoformat() if block.updated_at else None,
    }


# ---------------- Mutations ----------------
def add_block(db, page, block_type="text", section="main", specialty="general"):
    if not page:
        raise ValueError("page required")
    if block_type not in BLOCK_TYPES:
        raise ValueError(f"unknown block type: {block_type}")
    block = ContentBlock(
        page=page,
        name=f"new-{block_type}-{int(time.time() * 1000)}",
        content=INITIAL_CONTENT[block_type],
        order_index=next_order_index(db, ContentBlock, page=page),
        section=section or "main",
        specialty=specialty or "general",
        meta={},
    )
    db.add(block)
    db.commit()
    db.refresh(block)
    log.info("block_added", block_id=block.id, page=page, order_index=block.order_index)
    return block


def update_block(db, block_id, changes: dict):
    block = get_block(db, block_id)
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        if key == "metadata":
            block.meta = parse_metadata(value)
        elif key == "order_index":
            block.order_index = int(value)
        else:
            setattr(block, key, value)
    db.commit()
    db.refresh(block)
    return block


def delete_block(db, block_id):
    block = get_block(db, block_id)
    db.delete(block)
    db.commit()
    log.info("block_deleted", block_id=block_id, page=block.page)


def reorder_block(db, page, block_id, direction):
    """Move a block one step and return the page's blocks in display order."""
    blocks = list_blocks(db, page)
    if not any(b.id == block_id for b in blocks):
        raise NotFound("Block not found")
    swapped = swap_neighbors(blocks, block_id, direction)
    if swapped:
        db.commit()
        log.info("block_moved", block_id=block_id, direction=direction,
                 neighbour_id=swapped[1].id)
    return sorted(blocks, key=lambda b: b.order_index)


def set_block_image(db, block_id, url):
    return update_block(db, block_id, {"image_url": url})


def page_content(db, page, defaults=None) -> dict:
    """Blocks of a page keyed by name, layered over static fallbacks.

    Fallback entries are plain dicts with the same keys as
    :func:`serialize_block` so templates can treat both alike.
    """
    content = {name: dict(value) for name, value in (defaults or {}).items()}
    for block in list_blocks(db, page):
        key = block.name or f"block-{block.id}"
        content[key] = serialize_block(block)
    return content
