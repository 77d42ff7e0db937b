import logging

from sqlalchemy.orm import Session

from core.auth_service import require_role
from core.cart_service import clear_user_cart, get_cart_items
from core.db import commit
from core.errors import NotFoundError, ValidationError
from core.logger import log_action
from core.validators import validate_id, validate_quantity
from models.menu_item import MenuItem
from models.order import Order, OrderItem, ORDER_STATUSES

logger = logging.getLogger(__name__)


def _check_line_requests(line_requests):
    """Return [(menu_item_id, quantity), ...] or raise ValidationError."""
    if not isinstance(line_requests, (list, tuple)) or not line_requests:
        raise ValidationError("Invalid order items: at least one item is required")

    lines = []
    for entry in line_requests:
        if not isinstance(entry, dict) or entry.get("menu_item_id") is None or entry.get("quantity") is None:
            raise ValidationError(
                "Invalid item format",
                invalid_item=entry if isinstance(entry, dict) else str(entry),
                required_format={"menu_item_id": "integer", "quantity": "integer"},
            )
        lines.append((validate_id(entry["menu_item_id"], "menu_item_id"), validate_quantity(entry["quantity"])))
    return lines


def _build_order(db: Session, user_id: int, line_requests) -> Order:
    """
    Price the requested lines against the current menu and stage the order.

    Name, price and category are copied onto each line so later menu edits
    never change a placed order. Nothing is committed here.
    """
    lines = _check_line_requests(line_requests)
    requested_ids = list(dict.fromkeys(menu_item_id for menu_item_id, _ in lines))

    menu_items = db.query(MenuItem).filter(MenuItem.id.in_(requested_ids)).all()
    by_id = {item.id: item for item in menu_items}
    missing = [menu_item_id for menu_item_id in requested_ids if menu_item_id not in by_id]
    if missing:
        raise NotFoundError("Some menu items not found", missing_ids=missing)

    order = Order(user_id=user_id, status="pending", total_amount=0.0)
    for menu_item_id, quantity in lines:
        menu_item = by_id[menu_item_id]
        order.items.append(OrderItem(
            menu_item_id=menu_item.id,
            name=menu_item.name,
            category=menu_item.category,
            price=menu_item.price,
            quantity=quantity,
        ))
    order.total_amount = sum(line.price * line.quantity for line in order.items)
    db.add(order)
    return order


def create_order(db: Session, user_id: int, line_requests) -> Order:
    """Place an order from an explicit list of {menu_item_id, quantity}."""
    order = _build_order(db, user_id, line_requests)
    commit(db)
    logger.info("Order %s created for user %s (total %.2f)", order.id, user_id, order.total_amount)
    return order


def checkout_cart(db: Session, user_id: int) -> Order:
    """Turn the user's cart into an order and empty the cart, all in one commit."""
    cart_lines = get_cart_items(db, user_id)
    if not cart_lines:
        raise ValidationError("Cart is empty")

    order = _build_order(db, user_id, [
        {"menu_item_id": line.menu_item_id, "quantity": line.quantity} for line in cart_lines
    ])
    clear_user_cart(db, user_id, autocommit=False)
    commit(db)
    logger.info("Checkout: order %s created from cart of user %s", order.id, user_id)
    return order


def list_orders(db: Session, actor, user_id: int = None, start=None, end=None):
    """
    Orders newest first.

    Non-admins always get their own orders only, whatever user_id they pass.
    """
    query = db.query(Order)
    if actor.role != "admin":
        query = query.filter(Order.user_id == actor.id)
    elif user_id is not None:
        query = query.filter(Order.user_id == user_id)

    if start is not None and end is not None:
        query = query.filter(Order.created_at >= start, Order.created_at <= end)

    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(db: Session, actor, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    # Someone else's order looks exactly like a missing one
    if not order or (actor.role != "admin" and order.user_id != actor.id):
        raise NotFoundError("Order not found")
    return order


def update_order_status(db: Session, actor, order_id: int, status: str) -> Order:
    require_role(actor, "admin")
    if status not in ORDER_STATUSES:
        raise ValidationError("Invalid status", allowed=list(ORDER_STATUSES))

    order = get_order(db, actor, order_id)
    previous = order.status
    order.status = status
    log_action(db, actor, f"order_status:{previous}->{status}", "order", order.id)
    commit(db)
    return order
