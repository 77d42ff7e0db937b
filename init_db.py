import logging

from core.db import Base, engine, SessionLocal
from core.logger import setup_logging
# Import all models so every table is registered on Base.metadata
from models.user import User
from models.menu_item import MenuItem
from models.cart import Cart, CartItem
from models.order import Order, OrderItem
from models.audit_log import AuditLog
from core.user_service import create_default_admin

logger = logging.getLogger(__name__)


def seed_menu_items(db):
    if db.query(MenuItem).first():
        logger.info("Menu items already seeded.")
        return
    sample_items = [
        MenuItem(name="Margherita", description="Tomato, mozzarella, basil.", category="Pizza", price=9.5),
        MenuItem(name="Pepperoni", description="Tomato, mozzarella, pepperoni.", category="Pizza", price=11.0),
        MenuItem(name="Caesar Salad", description="Romaine, croutons, parmesan.", category="Salads", price=7.0),
        MenuItem(name="Greek Salad", description="Feta, olives, cucumber, tomato.", category="Salads", price=7.5),
        MenuItem(name="Tiramisu", description="Coffee-soaked ladyfingers, mascarpone.", category="Desserts", price=5.5),
        MenuItem(name="Lemonade", description="Fresh lemon, mint.", category="Drinks", price=3.0),
        MenuItem(name="Espresso", description="Double shot.", category="Drinks", price=2.5),
        MenuItem(name="Seasonal Soup", description="Ask the staff.", category="Soups", price=6.0, available=False),
    ]
    db.add_all(sample_items)
    db.commit()
    logger.info("Seeded %d sample menu items.", len(sample_items))


def create_tables(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def init_db(rebuild: bool = False):
    if rebuild:
        logger.info("Rebuilding database (drop/create)...")
        Base.metadata.drop_all(bind=engine)
    create_tables()
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))

    db = SessionLocal()
    try:
        create_default_admin(db)
        seed_menu_items(db)
    finally:
        db.close()
    logger.info("Database initialization complete!")


if __name__ == "__main__":
    import sys

    setup_logging()
    init_db(rebuild="--rebuild" in sys.argv)
