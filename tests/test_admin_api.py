from datetime import datetime, timedelta, timezone

import pytest

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, confirmation_payload
from gatepass.admin.auth_service import AdminAuthService
from gatepass.config import settings


def book(client, payment_id, ticket_type="day-pass", quantity=1, total=199):
    response = client.post(
        "/api/payment/verify-payment",
        json=confirmation_payload(
            order_id=f"order_{payment_id}",
            payment_id=payment_id,
            selectedTicketType=ticket_type,
            quantity=quantity,
            totalAmount=total,
        ),
    )
    assert response.status_code == 200
    return response.json()["booking"]


class TestAdminAuth:
    def test_login(self, client):
        response = client.post(
            "/api/admin/auth/login",
            json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] == settings.ADMIN_TOKEN_EXPIRE_HOURS * 3600
        assert AdminAuthService().verify_token(body["token"])["sub"] == ADMIN_USERNAME

    @pytest.mark.parametrize(
        "credentials",
        [
            {"username": ADMIN_USERNAME, "password": "wrong"},
            {"username": "someone", "password": ADMIN_PASSWORD},
        ],
    )
    def test_bad_credentials(self, client, credentials):
        response = client.post("/api/admin/auth/login", json=credentials)

        assert response.status_code == 401
        assert response.json() == {"status": "unauthorized", "message": "Invalid credentials"}

    def test_missing_token(self, client):
        response = client.get("/api/admin/bookings")

        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"

    def test_invalid_token(self, client):
        response = client.get("/api/admin/bookings", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_expired_token(self, client):
        issued = datetime.now(timezone.utc) - timedelta(hours=settings.ADMIN_TOKEN_EXPIRE_HOURS + 1)
        token = AdminAuthService().create_access_token(now=issued)

        response = client.get("/api/admin/bookings", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    @pytest.mark.parametrize(
        "method,path",
        [
            ("delete", "/api/admin/bookings"),
            ("post", "/api/admin/update-prices"),
            ("post", "/api/admin/verify-qr"),
            ("get", "/api/admin/download-ticket/DP-0001"),
        ],
    )
    def test_every_admin_route_needs_token(self, client, method, path):
        response = client.request(method.upper(), path)
        assert response.status_code == 401


class TestBookingReport:
    def test_empty_report(self, client, admin_headers):
        response = client.get("/api/admin/bookings", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["bookings"] == []
        assert body["totalRevenue"] == 0
        assert body["totalTickets"] == 0
        assert body["totalBookings"] == 0
        assert body["tiers"]["day-pass"] == {"revenue": 0, "tickets": 0, "bookings": 0}
        assert body["prices"]["dayPass"] == 199

    def test_report_aggregates(self, client, admin_headers):
        book(client, "pay_1", quantity=2, total=398)
        book(client, "pay_2", ticket_type="season-pass", quantity=1, total=699)
        book(client, "pay_3", quantity=1, total=199)

        body = client.get("/api/admin/bookings", headers=admin_headers).json()

        assert body["totalBookings"] == 3
        assert body["totalTickets"] == 4
        assert body["totalRevenue"] == 1296
        assert body["dayPassRevenue"] == 597
        assert body["seasonPassRevenue"] == 699
        assert body["tiers"]["day-pass"] == {"revenue": 597, "tickets": 3, "bookings": 2}
        assert body["tiers"]["season-pass"] == {"revenue": 699, "tickets": 1, "bookings": 1}
        assert [b["serialNumber"] for b in body["bookings"]] == ["DP-0002", "SP-0001", "DP-0001"]

    def test_bulk_delete(self, client, admin_headers):
        book(client, "pay_1")
        book(client, "pay_2")

        response = client.delete("/api/admin/bookings", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["deleted"] == 2
        body = client.get("/api/admin/bookings", headers=admin_headers).json()
        assert body["totalBookings"] == 0
        assert book(client, "pay_3")["serialNumber"] == "DP-0001"


class TestPriceUpdate:
    def test_update_prices(self, client, admin_headers):
        response = client.post(
            "/api/admin/update-prices",
            json={"dayPass": 249, "seasonPass": 799},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["prices"]["dayPass"] == 249
        assert client.get("/api/public/prices").json()["seasonPass"] == 799

    @pytest.mark.parametrize("body", [{"dayPass": 0, "seasonPass": 799}, {"dayPass": "abc", "seasonPass": 799}])
    def test_invalid_update_leaves_prices(self, client, admin_headers, body):
        response = client.post("/api/admin/update-prices", json=body, headers=admin_headers)

        assert response.status_code == 400
        assert client.get("/api/public/prices").json() == {"dayPass": 199, "seasonPass": 699}


class TestGateScan:
    def test_scan_valid_ticket(self, client, admin_headers):
        booking = book(client, "pay_1")
        qr_data = f'{{"serialNumber":"{booking["serialNumber"]}","paymentId":"pay_1"}}'

        response = client.post("/api/admin/verify-qr", json={"qrData": qr_data}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "valid"
        assert response.json()["booking"]["serialNumber"] == "DP-0001"

    def test_scan_unknown_ticket(self, client, admin_headers):
        response = client.post("/api/admin/verify-qr", json={"qrData": {"serialNumber": "DP-0404"}}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "status": "invalid",
            "reason": "not_found",
            "message": "Invalid ticket: ticket not found",
        }

    def test_scan_garbage(self, client, admin_headers):
        response = client.post("/api/admin/verify-qr", json={"qrData": "   "}, headers=admin_headers)
        assert response.status_code == 400

    def test_admin_ticket_download(self, client, admin_headers):
        book(client, "pay_1")

        response = client.get("/api/admin/download-ticket/DP-0001", headers=admin_headers)

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
