"""
Test configuration for pytest
"""

import pytest
import os
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ENVIRONMENT"] = "test"

from restaurant_pos.core.auth import hash_password  # noqa: E402
from restaurant_pos.core.permissions import CurrentUser  # noqa: E402
from restaurant_pos.models import (  # noqa: E402
    BusinessUnit, User, UserRole, MenuItem, ItemType
)
from restaurant_pos.schemas.orders import OrderCreate, OrderItemCreate  # noqa: E402
from restaurant_pos.schemas.results import OrderResult  # noqa: E402
from restaurant_pos.services.orders import place_order  # noqa: E402


# Create test engine using in-memory SQLite for unit tests
test_engine = create_engine(
    "sqlite://",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


def _create_business_unit(db: Session, code: str, name: str) -> BusinessUnit:
    business_unit = BusinessUnit(code=code, name=name, is_active=True)
    db.add(business_unit)
    db.commit()
    db.refresh(business_unit)
    return business_unit


def _create_user(db: Session, business_unit: BusinessUnit, email: str, name: str, role: UserRole) -> CurrentUser:
    user = User(
        business_unit_id=business_unit.id,
        email=email,
        name=name,
        role=role,
        password_hash=hash_password("password123"),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return CurrentUser.for_role(user.id, business_unit.id, user.role.value, user.name)


@pytest.fixture
def test_business_unit(db: Session) -> BusinessUnit:
    """Create the restaurant every test order belongs to"""
    return _create_business_unit(db, "REST001", "Test Restaurant")


@pytest.fixture
def other_business_unit(db: Session) -> BusinessUnit:
    """Create a second, unrelated restaurant"""
    return _create_business_unit(db, "REST002", "Other Restaurant")


@pytest.fixture
def waiter(db: Session, test_business_unit: BusinessUnit) -> CurrentUser:
    return _create_user(db, test_business_unit, "waiter@test.com", "Test Waiter", UserRole.WAITER)


@pytest.fixture
def manager(db: Session, test_business_unit: BusinessUnit) -> CurrentUser:
    return _create_user(db, test_business_unit, "manager@test.com", "Test Manager", UserRole.MANAGER)


@pytest.fixture
def cook(db: Session, test_business_unit: BusinessUnit) -> CurrentUser:
    return _create_user(db, test_business_unit, "cook@test.com", "Test Cook", UserRole.KITCHEN)


@pytest.fixture
def test_menu(db: Session, test_business_unit: BusinessUnit) -> dict:
    """Create a small menu: two dishes for the kitchen, two drinks for the bar"""
    menu = {
        "burger": MenuItem(
            business_unit_id=test_business_unit.id,
            name="Burger",
            price=Decimal("12.50"),
            item_type=ItemType.FOOD,
            prep_time=20,
        ),
        "fries": MenuItem(
            business_unit_id=test_business_unit.id,
            name="Fries",
            price=Decimal("4.00"),
            item_type=ItemType.FOOD,
            prep_time=8,
        ),
        "beer": MenuItem(
            business_unit_id=test_business_unit.id,
            name="Beer",
            price=Decimal("5.00"),
            item_type=ItemType.DRINK,
            prep_time=2,
        ),
        "soda": MenuItem(
            business_unit_id=test_business_unit.id,
            name="Soda",
            price=Decimal("2.50"),
            item_type=ItemType.DRINK,
        ),
    }
    for menu_item in menu.values():
        db.add(menu_item)
    db.commit()
    for menu_item in menu.values():
        db.refresh(menu_item)
    return menu


@pytest.fixture
def order_factory(db: Session, test_business_unit: BusinessUnit, test_menu: dict, waiter: CurrentUser):
    """Place an order for the named menu items and return the result"""
    def _place(*names: str, table_number: int = 5, notes: str = None) -> OrderResult:
        order_data = OrderCreate(
            table_number=table_number,
            notes=notes,
            items=[OrderItemCreate(menu_item_id=test_menu[name].id, quantity=1) for name in names],
        )
        result = place_order(db, test_business_unit.id, order_data, waiter)
        assert result.success, result.error
        return result
    return _place
