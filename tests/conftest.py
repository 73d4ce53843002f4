import os
from datetime import datetime, timedelta

os.environ["ENV"] = "test"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from farmconnect.config import settings  # noqa: E402
from farmconnect.database import get_session  # noqa: E402
from farmconnect.main import app  # noqa: E402
from farmconnect.models import CartItem, Product, User, UserRole  # noqa: E402
from farmconnect.notifications.realtime import manager  # noqa: E402


ADDRESS = {
    "addressLine1": "123 Farm Road",
    "addressLine2": "Apt 4B",
    "city": "Accra",
    "state": "Greater Accra",
    "country": "Ghana",
    "postalCode": "00233",
}


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
    manager.rooms.clear()


def make_user(session: Session, role: UserRole, first_name: str, email: str) -> User:
    user = User(first_name=first_name, last_name="Test", email=email, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_product(session: Session, farmer: User, name: str, price: float) -> Product:
    product = Product(farmer_id=farmer.id, name=name, price=price, category="Vegetables")
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def put_in_cart(session: Session, customer: User, product: Product, quantity: int) -> CartItem:
    item = CartItem(customer_id=customer.id, product_id=product.id, quantity=quantity)
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def create_access_token(data: dict, expires_delta: timedelta = timedelta(minutes=60)) -> str:
    # stands in for the auth service that issues tokens in deployment
    claims = {**data, "exp": datetime.utcnow() + expires_delta}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(session):
    return make_user(session, UserRole.customer, "Kofi", "kofi@example.com")


@pytest.fixture
def other_customer(session):
    return make_user(session, UserRole.customer, "Esi", "esi@example.com")


@pytest.fixture
def farmer_one(session):
    return make_user(session, UserRole.farmer, "Ama", "ama@example.com")


@pytest.fixture
def farmer_two(session):
    return make_user(session, UserRole.farmer, "Yaw", "yaw@example.com")


@pytest.fixture
def tomatoes(session, farmer_one):
    return make_product(session, farmer_one, "Tomatoes", 10.0)


@pytest.fixture
def yams(session, farmer_two):
    return make_product(session, farmer_two, "Yams", 5.0)


@pytest.fixture
def two_farmer_cart(session, customer, tomatoes, yams):
    """cart = [tomatoes (F1, 10) x 2, yams (F2, 5) x 1]"""
    return [
        put_in_cart(session, customer, tomatoes, 2),
        put_in_cart(session, customer, yams, 1),
    ]


@pytest.fixture
def placed_order(client, customer, two_farmer_cart):
    response = client.post(
        "/orders",
        json={"deliveryAddress": ADDRESS},
        headers=auth_headers(customer),
    )
    assert response.status_code == 201
    return response.json()
