import os

# Keep imports from pointing the module-level engine at a real file
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime

import bcrypt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.app import create_app
from core.auth_service import create_access_token
from core.db import Base, get_db
from models.audit_log import AuditLog  # noqa: F401  (registers the table)
from models.cart import Cart, CartItem  # noqa: F401
from models.menu_item import MenuItem
from models.order import Order, OrderItem
from models.user import User

PASSWORD = "secret123"
# Low work factor keeps the suite fast; checkpw reads the cost from the hash
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _make_user(db, name, email, role):
    user = User(name=name, email=email, password_hash=PASSWORD_HASH, role=role)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db):
    return _make_user(db, "Ada Admin", "admin@example.com", "admin")


@pytest.fixture
def moderator(db):
    return _make_user(db, "Max Moderator", "mod@example.com", "moderator")


@pytest.fixture
def customer(db):
    return _make_user(db, "Cleo Customer", "cleo@example.com", "user")


@pytest.fixture
def other_customer(db):
    return _make_user(db, "Otto Other", "otto@example.com", "user")


@pytest.fixture
def menu(db):
    """Four items keyed by short name; the soup is unavailable."""
    items = {
        "pizza": MenuItem(name="Margherita", description="Tomato and mozzarella", category="Pizza", price=10.0),
        "salad": MenuItem(name="Caesar Salad", description="Romaine and parmesan", category="Salads", price=5.0),
        "cola": MenuItem(name="Cola", description="Chilled", category="Drinks", price=2.5),
        "soup": MenuItem(name="Soup of the Day", description="Ask staff", category="Soups", price=4.0,
                         available=False),
    }
    db.add_all(items.values())
    db.commit()
    return items


@pytest.fixture
def make_order(db):
    """Insert an order directly, bypassing the service, at a chosen timestamp."""
    def _make_order(user_id, lines, status="completed", created_at=datetime(2024, 3, 10, 12, 0)):
        order = Order(user_id=user_id, status=status, created_at=created_at, total_amount=0.0)
        for item, quantity in lines:
            order.items.append(OrderItem(
                menu_item_id=item.id, name=item.name, category=item.category,
                price=item.price, quantity=quantity,
            ))
        order.total_amount = sum(line.price * line.quantity for line in order.items)
        db.add(order)
        db.commit()
        return order
    return _make_order


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def auth_header():
    def _auth_header(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _auth_header
