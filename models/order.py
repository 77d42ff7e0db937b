from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from core.db import Base
from core.utils import utcnow
from models.menu_item import MenuItem

ORDER_STATUSES = ("pending", "processing", "completed", "cancelled")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # Reference by id only; reports inner-join against users
    user_id = Column(Integer, nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    status = Column(String, default="pending", nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")


class OrderItem(Base):
    """A priced line captured when the order was placed. Never updated afterwards."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    menu_item_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
    # May resolve to None once the menu item is deleted
    menu_item = relationship(
        MenuItem,
        primaryjoin="foreign(OrderItem.menu_item_id) == MenuItem.id",
        viewonly=True,
    )

    @property
    def subtotal(self):
        return self.price * self.quantity
