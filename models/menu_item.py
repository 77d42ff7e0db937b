# models/menu_item.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from core.db import Base
from core.utils import utcnow


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)  # free-text label: Pizza, Drinks, ...
    price = Column(Float, nullable=False)
    image = Column(String, nullable=True)  # path or URL
    available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
