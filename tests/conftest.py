import asyncio
import hashlib
import hmac
import os
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from gatepass.security import hash_password

# Settings are read at import time, so the environment goes in first
test_db_dir = Path(tempfile.mkdtemp(prefix="gatepass-test-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_dir / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD_HASH"] = hash_password("admin-password")
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ.pop("SMTP_HOST", None)

from gatepass.database import async_session_maker, create_db_and_tables, drop_db_and_tables  # noqa: E402
from gatepass.main import app  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"
GATEWAY_SECRET = "rzp_test_secret"


def sign_payment(order_id: str, payment_id: str, secret: str = GATEWAY_SECRET) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def confirmation_payload(order_id="order_1", payment_id="pay_1", **overrides):
    payload = {
        "order_id": order_id,
        "payment_id": payment_id,
        "signature": sign_payment(order_id, payment_id),
        "fullName": "Asha Nair",
        "email": "asha@example.com",
        "phone": "9876543210",
        "selectedTicketType": "day-pass",
        "quantity": 2,
        "totalAmount": 398,
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def db_session():
    await create_db_and_tables()
    async with async_session_maker() as session:
        yield session
    await drop_db_and_tables()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    asyncio.run(drop_db_and_tables())


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
