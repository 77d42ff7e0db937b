from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_current_user
from api.schemas import MenuItemCreate, MenuItemUpdate
from api.serializers import menu_item_to_dict
from core import menu_service
from core.db import get_db

router = APIRouter(prefix="/menu", tags=["menu"])


@router.get("")
def list_menu(category: Optional[str] = None, db: Session = Depends(get_db)):
    return [menu_item_to_dict(i) for i in menu_service.list_available_items(db, category)]


@router.get("/all")
def list_all(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return [menu_item_to_dict(i) for i in menu_service.list_all_items(db, user)]


@router.post("", status_code=status.HTTP_201_CREATED)
def add_menu_item(body: MenuItemCreate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    item = menu_service.create_menu_item(db, user, body.model_dump())
    return menu_item_to_dict(item)


@router.put("/{item_id}")
def edit_menu_item(item_id: int, body: MenuItemUpdate, user=Depends(get_current_user),
                   db: Session = Depends(get_db)):
    item = menu_service.update_menu_item(db, user, item_id, body.model_dump(exclude_unset=True))
    return menu_item_to_dict(item)


@router.delete("/{item_id}")
def remove_menu_item(item_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    menu_service.delete_menu_item(db, user, item_id)
    return {"message": "Menu item deleted successfully"}
