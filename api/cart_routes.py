from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.deps import get_current_user
from api.schemas import CartAddBody, CartLineBody, CartUpdateBody
from api.serializers import cart_items_to_list
from core import cart_service
from core.db import get_db

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(db, user, lines, message=None):
    body = {"cart": cart_items_to_list(lines), "total": cart_service.get_cart_total(db, user.id)}
    if message:
        body["message"] = message
    return body


@router.get("")
def get_cart(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return _cart_response(db, user, cart_service.get_cart_items(db, user.id))


@router.post("/add")
def add_item(body: CartAddBody, user=Depends(get_current_user), db: Session = Depends(get_db)):
    lines = cart_service.add_to_cart(db, user.id, body.menu_item_id, body.quantity)
    return _cart_response(db, user, lines, "Item added to cart successfully")


@router.post("/update")
def update_item(body: CartUpdateBody, user=Depends(get_current_user), db: Session = Depends(get_db)):
    lines = cart_service.update_cart_quantity(db, user.id, body.menu_item_id, body.quantity)
    return _cart_response(db, user, lines, "Cart updated successfully")


@router.post("/decrement")
def decrement_item(body: CartLineBody, user=Depends(get_current_user), db: Session = Depends(get_db)):
    lines = cart_service.decrement_cart_item(db, user.id, body.menu_item_id)
    return _cart_response(db, user, lines)


@router.delete("/{menu_item_id}")
def remove_item(menu_item_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    lines = cart_service.remove_from_cart(db, user.id, menu_item_id)
    return _cart_response(db, user, lines, "Item removed from cart successfully")


@router.delete("")
def clear_cart(user=Depends(get_current_user), db: Session = Depends(get_db)):
    cart_service.clear_user_cart(db, user.id)
    return _cart_response(db, user, [], "Cart cleared")
