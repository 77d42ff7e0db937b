import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import MAX_QUANTITY
from core.db import commit
from core.errors import NotFoundError, ValidationError
from core.utils import utcnow
from core.validators import validate_quantity
from models.cart import Cart, CartItem
from models.menu_item import MenuItem

logger = logging.getLogger(__name__)


def get_user_cart(db: Session, user_id: int):
    return db.query(Cart).filter(Cart.user_id == user_id).first()


def get_cart_items(db: Session, user_id: int):
    """Cart lines with their menu items loaded; empty list if the user has no cart yet."""
    cart = get_user_cart(db, user_id)
    if not cart:
        return []
    return (
        db.query(CartItem)
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
        .all()
    )


def _get_or_create_cart(db: Session, user_id: int) -> Cart:
    cart = get_user_cart(db, user_id)
    if cart:
        return cart
    cart = Cart(user_id=user_id, updated_at=utcnow())
    db.add(cart)
    try:
        db.flush()
    except IntegrityError:
        # Another request created the cart first
        db.rollback()
        cart = get_user_cart(db, user_id)
    return cart


def _increment_line(db: Session, cart_id: int, menu_item_id: int, quantity: int) -> int:
    """
    Atomic `quantity = quantity + n`; returns the number of lines touched.
    A line that would go over MAX_QUANTITY is left alone.
    """
    result = db.execute(
        update(CartItem)
        .where(
            CartItem.cart_id == cart_id,
            CartItem.menu_item_id == menu_item_id,
            CartItem.quantity <= MAX_QUANTITY - quantity,
        )
        .values(quantity=CartItem.quantity + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def _find_line(db: Session, user_id: int, menu_item_id: int) -> CartItem:
    cart = get_user_cart(db, user_id)
    if not cart:
        raise NotFoundError("Cart not found")
    line = db.query(CartItem).filter(
        CartItem.cart_id == cart.id,
        CartItem.menu_item_id == menu_item_id
    ).first()
    if not line:
        raise NotFoundError("Item not found in cart")
    return line


def _line_exists(db: Session, cart_id: int, menu_item_id: int) -> bool:
    return db.query(CartItem.id).filter(
        CartItem.cart_id == cart_id,
        CartItem.menu_item_id == menu_item_id
    ).first() is not None


def _reject_over_limit(db: Session):
    db.rollback()
    raise ValidationError(f"Quantity must not exceed {MAX_QUANTITY}", max_quantity=MAX_QUANTITY)


def add_to_cart(db: Session, user_id: int, menu_item_id: int, quantity: int = 1):
    """Add item to cart, or increase its quantity if it is already there."""
    quantity = validate_quantity(quantity)
    if not db.query(MenuItem).filter(MenuItem.id == menu_item_id).first():
        raise NotFoundError("Menu item not found")

    cart = _get_or_create_cart(db, user_id)
    if not _increment_line(db, cart.id, menu_item_id, quantity):
        if _line_exists(db, cart.id, menu_item_id):
            _reject_over_limit(db)
        db.add(CartItem(cart_id=cart.id, menu_item_id=menu_item_id, quantity=quantity))
        try:
            db.flush()
        except IntegrityError:
            # Lost the insert race; the line exists now, so increment it
            db.rollback()
            cart = _get_or_create_cart(db, user_id)
            if not _increment_line(db, cart.id, menu_item_id, quantity):
                _reject_over_limit(db)

    cart.updated_at = utcnow()
    commit(db)
    db.expire_all()
    return get_cart_items(db, user_id)


def update_cart_quantity(db: Session, user_id: int, menu_item_id: int, quantity: int):
    """Set a line's quantity. Anything below 1 is rejected and the line is left as is."""
    quantity = validate_quantity(quantity)
    line = _find_line(db, user_id, menu_item_id)
    line.quantity = quantity
    line.cart.updated_at = utcnow()
    commit(db)
    return get_cart_items(db, user_id)


def decrement_cart_item(db: Session, user_id: int, menu_item_id: int):
    """The "-" button: one less, and the line goes away when it would reach 0."""
    line = _find_line(db, user_id, menu_item_id)
    cart = line.cart
    if line.quantity <= 1:
        cart.items.remove(line)
    else:
        line.quantity -= 1
    cart.updated_at = utcnow()
    commit(db)
    return get_cart_items(db, user_id)


def remove_from_cart(db: Session, user_id: int, menu_item_id: int):
    """Remove item from cart"""
    line = _find_line(db, user_id, menu_item_id)
    cart = line.cart
    cart.items.remove(line)
    cart.updated_at = utcnow()
    commit(db)
    return get_cart_items(db, user_id)


def clear_user_cart(db: Session, user_id: int, autocommit: bool = True):
    """Empty the cart; checkout passes autocommit=False so this joins its transaction."""
    cart = get_user_cart(db, user_id)
    if not cart:
        return
    db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session=False)
    cart.updated_at = utcnow()
    if autocommit:
        commit(db)
    db.expire(cart, ["items"])


def get_cart_count(db: Session, user_id: int) -> int:
    """Total number of units in the cart"""
    return sum(line.quantity for line in get_cart_items(db, user_id))


def get_cart_total(db: Session, user_id: int) -> float:
    """Derived on every call; carts never store a total."""
    return sum(line.subtotal for line in get_cart_items(db, user_id))
