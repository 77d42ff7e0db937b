import logging

from sqlalchemy.orm import Session

from core.auth_service import require_role
from core.db import commit
from core.errors import NotFoundError, ValidationError
from core.logger import log_action
from core.validators import check_fields, validate_price, validate_text
from models.cart import CartItem
from models.menu_item import MenuItem

logger = logging.getLogger(__name__)

MENU_FIELDS = ("name", "description", "price", "category", "image", "available")
REQUIRED_FIELDS = ("name", "description", "price", "category")
MENU_EDITORS = ("admin", "moderator")


def _clean_menu_fields(data: dict) -> dict:
    """Validate and normalise whichever menu fields are present."""
    cleaned = {}
    for field in ("name", "description", "category"):
        if field in data:
            cleaned[field] = validate_text(data[field], field)
    if "price" in data:
        cleaned["price"] = validate_price(data["price"])
    if "image" in data:
        image = data["image"]
        cleaned["image"] = validate_text(image, "image") if image is not None else None
    if "available" in data:
        if not isinstance(data["available"], bool):
            raise ValidationError("available must be true or false")
        cleaned["available"] = data["available"]
    return cleaned


def list_available_items(db: Session, category: str = None):
    """Menu as customers see it."""
    query = db.query(MenuItem).filter(MenuItem.available.is_(True))
    if category:
        query = query.filter(MenuItem.category == category)
    return query.order_by(MenuItem.category, MenuItem.name).all()


def list_all_items(db: Session, actor):
    """Every item, including unavailable ones (admin/moderator)."""
    require_role(actor, *MENU_EDITORS)
    return db.query(MenuItem).order_by(MenuItem.category, MenuItem.name).all()


def get_menu_item(db: Session, item_id: int) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise NotFoundError("Menu item not found")
    return item


def create_menu_item(db: Session, actor, data: dict) -> MenuItem:
    require_role(actor, *MENU_EDITORS)
    check_fields(data, MENU_FIELDS, REQUIRED_FIELDS)

    item = MenuItem(**_clean_menu_fields(data))
    db.add(item)
    db.flush()
    log_action(db, actor, "create_menu_item", "menu_item", item.id)
    commit(db)
    return item


def update_menu_item(db: Session, actor, item_id: int, data: dict) -> MenuItem:
    require_role(actor, *MENU_EDITORS)
    check_fields(data, MENU_FIELDS)
    item = get_menu_item(db, item_id)

    for field, value in _clean_menu_fields(data).items():
        setattr(item, field, value)
    log_action(db, actor, "update_menu_item", "menu_item", item.id)
    commit(db)
    return item


def delete_menu_item(db: Session, actor, item_id: int):
    """Delete the item and drop it from every cart; past orders keep their snapshot."""
    require_role(actor, *MENU_EDITORS)
    item = get_menu_item(db, item_id)

    removed = db.query(CartItem).filter(CartItem.menu_item_id == item.id).delete(synchronize_session=False)
    db.delete(item)
    log_action(db, actor, "delete_menu_item", "menu_item", item_id)
    commit(db)
    logger.info("Deleted menu item %s (%s cart lines removed)", item_id, removed)
