from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_current_user
from api.schemas import OrderCreateBody, OrderStatusBody
from api.serializers import order_to_dict
from core import order_service
from core.db import get_db
from core.utils import parse_date_range

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(body: OrderCreateBody, user=Depends(get_current_user), db: Session = Depends(get_db)):
    order = order_service.create_order(db, user.id, [line.model_dump() for line in body.items])
    return order_to_dict(order)


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
def checkout(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return order_to_dict(order_service.checkout_cart(db, user.id))


@router.get("")
def list_orders(start: Optional[str] = None, end: Optional[str] = None, user_id: Optional[int] = None,
                user=Depends(get_current_user), db: Session = Depends(get_db)):
    date_range = parse_date_range(start, end, required=False, max_days=None)
    start_at, end_at = date_range if date_range else (None, None)
    orders = order_service.list_orders(db, user, user_id=user_id, start=start_at, end=end_at)
    return [order_to_dict(o) for o in orders]


@router.get("/{order_id}")
def get_order(order_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return order_to_dict(order_service.get_order(db, user, order_id))


@router.patch("/{order_id}/status")
def set_status(order_id: int, body: OrderStatusBody, user=Depends(get_current_user),
               db: Session = Depends(get_db)):
    return order_to_dict(order_service.update_order_status(db, user, order_id, body.status))
