from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from resto_pos.database import Database
from resto_pos.main import create_app
from resto_pos.models import (
    DiningTable,
    Food,
    FoodCategory,
    FoodIngredient,
    FoodOption,
    FoodPrice,
    Ingredient,
    OrderType,
    OrderTypeDiscount,
    Outlet,
    User,
)
from resto_pos.schemas.order import OrderCreate, OrderItemCreate, OrderItemOptionCreate
from resto_pos.services.orders import create_order
from resto_pos.utils.security import create_access_token, hash_password

ORDER_TYPE_NAMES = ("Dine In", "Take Away", "GoFood", "Boss", "Staff", "Kasbon")
USER_ROLES = {
    "admin": "ADMIN",
    "cashier": "CASHIER",
    "waiter": "WAITER",
    "other_waiter": "WAITER",
    "chef": "CHEF",
}


@pytest.fixture
def database():
    database = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def _user(db, outlet, username, role):
    user = User(
        username=username,
        name=username.title(),
        password_hash=hash_password("secret123"),
        role=role,
        outlet_id=outlet.id,
        is_active=True,
    )
    db.add(user)
    return user


@pytest.fixture
def seed(db):
    """
    One outlet with a small menu:

    * Nasi Goreng 10000 (any order type), option Extra Egg +2000,
      uses 200 g rice and 1 egg
    * Es Teh 5000, category Minuman, uses 10 g tea
    * Kerupuk 3000, no bill of materials
    * GoFood orders get a 20% order-type discount
    """
    outlet = Outlet(name="Nagoya", address="Jl. Imam Bonjol", phone="0778-000")
    other_outlet = Outlet(name="Seraya")
    db.add_all([outlet, other_outlet])
    db.flush()

    users = {
        "admin": _user(db, outlet, "admin", "ADMIN"),
        "cashier": _user(db, outlet, "cashier", "CASHIER"),
        "waiter": _user(db, outlet, "waiter", "WAITER"),
        "other_waiter": _user(db, outlet, "waiter2", "WAITER"),
        "chef": _user(db, outlet, "chef", "CHEF"),
    }

    order_types = {name: OrderType(name=name) for name in ORDER_TYPE_NAMES}
    db.add_all(order_types.values())

    table = DiningTable(outlet_id=outlet.id, number="A1")
    other_table = DiningTable(outlet_id=other_outlet.id, number="B1")
    food_category = FoodCategory(name="Makanan")
    drink_category = FoodCategory(name="Minuman")
    db.add_all([table, other_table, food_category, drink_category])
    db.flush()

    rice = Ingredient(outlet_id=outlet.id, name="Rice", unit="g", stock_qty=Decimal("5000"))
    egg = Ingredient(outlet_id=outlet.id, name="Egg", unit="pcs", stock_qty=Decimal("50"))
    tea = Ingredient(outlet_id=outlet.id, name="Tea", unit="g", stock_qty=Decimal("500"))
    foreign_rice = Ingredient(outlet_id=other_outlet.id, name="Rice", unit="g", stock_qty=Decimal("5000"))
    db.add_all([rice, egg, tea, foreign_rice])

    nasi_goreng = Food(outlet_id=outlet.id, food_category=food_category, name="Nasi Goreng")
    es_teh = Food(outlet_id=outlet.id, food_category=drink_category, name="Es Teh")
    kerupuk = Food(outlet_id=outlet.id, food_category=food_category, name="Kerupuk")
    db.add_all([nasi_goreng, es_teh, kerupuk])
    db.flush()

    extra_egg = FoodOption(food_id=nasi_goreng.id, name="Extra Egg", extra_price=Decimal("2000"))
    db.add(extra_egg)

    for order_type in order_types.values():
        db.add_all([
            FoodPrice(food_id=nasi_goreng.id, order_type_id=order_type.id, price=Decimal("10000")),
            FoodPrice(food_id=es_teh.id, order_type_id=order_type.id, price=Decimal("5000")),
            FoodPrice(food_id=kerupuk.id, order_type_id=order_type.id, price=Decimal("3000")),
        ])

    db.add_all([
        FoodIngredient(food_id=nasi_goreng.id, ingredient_id=rice.id, quantity=Decimal("200")),
        FoodIngredient(food_id=nasi_goreng.id, ingredient_id=egg.id, quantity=Decimal("1")),
        FoodIngredient(food_id=es_teh.id, ingredient_id=tea.id, quantity=Decimal("10")),
        OrderTypeDiscount(
            order_type_id=order_types["GoFood"].id,
            outlet_id=outlet.id,
            percentage=Decimal("0.2"),
            is_active=True,
        ),
    ])
    db.commit()

    return SimpleNamespace(
        outlet_id=outlet.id,
        other_outlet_id=other_outlet.id,
        table_id=table.id,
        other_table_id=other_table.id,
        user_ids={key: user.id for key, user in users.items()},
        order_type_ids={name: ot.id for name, ot in order_types.items()},
        nasi_goreng_id=nasi_goreng.id,
        es_teh_id=es_teh.id,
        kerupuk_id=kerupuk.id,
        extra_egg_id=extra_egg.id,
        rice_id=rice.id,
        egg_id=egg.id,
        tea_id=tea.id,
        foreign_rice_id=foreign_rice.id,
    )


@pytest.fixture
def make_order(db, seed):
    """Create and commit an order through the service layer"""
    def _make_order(order_type="Dine In", items=None, waiter="waiter"):
        if items is None:
            items = [
                OrderItemCreate(
                    food_id=seed.nasi_goreng_id,
                    quantity=2,
                    options=[OrderItemOptionCreate(option_id=seed.extra_egg_id, quantity=1)],
                )
            ]
        data = OrderCreate(
            waiter_id=seed.user_ids[waiter],
            outlet_id=seed.outlet_id,
            order_type_id=seed.order_type_ids[order_type],
            dining_table_id=seed.table_id if order_type == "Dine In" else None,
            items=items,
        )
        order = create_order(db, data)
        db.commit()
        return order

    return _make_order


@pytest.fixture
def client(database, seed):
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(seed):
    def _headers(user="cashier"):
        token = create_access_token({
            "sub": str(seed.user_ids[user]),
            "role": USER_ROLES[user],
            "outlet_id": str(seed.outlet_id),
        })
        return {"Authorization": f"Bearer {token}"}

    return _headers
