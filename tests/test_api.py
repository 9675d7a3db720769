"""Test the REST and WebSocket surface end to end."""
from decimal import Decimal

import pytest
from starlette.websockets import WebSocketDisconnect

from dependencies import RequestContext
from models import House, HouseAvailability, RentalPaymentStatus
from services.receipt_service import build_receipt, receipt_rows, summary_rows
from services import payment_service
from services.notification_hub import QueueConnection


def submit_cash(client, rental, headers, **overrides):
    body = {"rentalId": rental.id, "method": "cash", "month": "2025-11", "amount": 15000}
    body.update(overrides)
    return client.post("/api/payment/add", json=body, headers=headers)


class TestAuth:

    def test_missing_token(self, client, rental):
        response = client.post("/api/payment/add", json={"rentalId": rental.id})
        assert response.status_code == 401
        assert response.json() == {"error": "Missing token"}

    def test_invalid_token(self, client):
        response = client.get("/api/payment/my", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 403

    def test_admin_only_route(self, client, tenant_headers):
        response = client.get("/api/payment/all", headers=tenant_headers)
        assert response.status_code == 403

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}


class TestPaymentRoutes:

    def test_cash_payment_pending(self, client, rental, tenant_headers):
        response = submit_cash(client, rental, tenant_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["outcome"] == "pending_approval"
        assert body["message"] == "Your payment is pending admin approval."
        assert body["payment"]["status"] == "pending"
        assert Decimal(str(body["payment"]["amount"])) == Decimal("15000")

    def test_mpesa_without_phone(self, client, rental, tenant_headers):
        response = submit_cash(client, rental, tenant_headers, method="mpesa")
        assert response.status_code == 400
        assert response.json() == {"error": "Enter Mpesa phone number."}

    def test_duplicate_is_conflict(self, client, rental, tenant_headers):
        submit_cash(client, rental, tenant_headers)
        response = submit_cash(client, rental, tenant_headers)
        assert response.status_code == 409

    def test_unknown_rental(self, client, tenant_headers):
        response = client.post(
            "/api/payment/add",
            json={"rentalId": 999, "method": "cash", "month": "2025-11"},
            headers=tenant_headers,
        )
        assert response.status_code == 404

    def test_my_payments(self, client, rental, tenant_headers):
        submit_cash(client, rental, tenant_headers)
        response = client.get("/api/payment/my", headers=tenant_headers)
        assert response.status_code == 200
        assert [p["month"] for p in response.json()["payments"]] == ["2025-11"]

    def test_receipt_not_ready_while_pending(self, client, rental, tenant_headers):
        payment_id = submit_cash(client, rental, tenant_headers).json()["payment"]["id"]
        response = client.get(f"/api/payment/{payment_id}/receipt", headers=tenant_headers)
        assert response.status_code == 400


class TestApprovalFlow:

    def test_cash_approval_pushes_and_produces_receipt(
        self, client, db, rental, tenant, tenant_token, tenant_headers, admin_headers
    ):
        payment_id = submit_cash(client, rental, tenant_headers).json()["payment"]["id"]

        with client.websocket_connect(f"/ws/payments?token={tenant_token}") as websocket:
            websocket.send_json({"event": "registerTenant", "tenantId": tenant.id})
            assert websocket.receive_json()["event"] == "registered"

            response = client.patch(f"/api/payment/{payment_id}/approve", headers=admin_headers)
            assert response.status_code == 200
            assert response.json()["payment"]["status"] == "successful"

            message = websocket.receive_json()
            assert message["event"] == "paymentApproved"
            assert message["payment"]["id"] == payment_id
            assert message["payment"]["status"] == "successful"

        polled = client.get(f"/api/payment/{payment_id}", headers=tenant_headers).json()
        assert polled["payment"]["status"] == "successful"

        receipt = build_receipt(payment_service.get_payment(db, RequestContext(user_id=tenant.id, role=tenant.role), payment_id))
        rows = dict(receipt_rows(receipt) + summary_rows(receipt))
        assert rows["Tenant Name:"] == "Jane Wanjiku"
        assert rows["House:"] == "A12"
        assert rows["Payment Month:"] == "November 2025"
        assert rows["Payment Method:"] == "cash"
        assert rows["Amount Paid:"] == "Ksh 15,000"

        pdf = client.get(f"/api/payment/{payment_id}/receipt", headers=tenant_headers)
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert "Rent_Receipt_Jane_Wanjiku_2025-11.pdf" in pdf.headers["content-disposition"]
        assert pdf.content.startswith(b"%PDF")

    def test_repeat_approval_pushes_nothing(self, client, hub, rental, tenant, tenant_headers, admin_headers):
        payment_id = submit_cash(client, rental, tenant_headers).json()["payment"]["id"]
        client.patch(f"/api/payment/{payment_id}/approve", headers=admin_headers)

        connection = QueueConnection()
        hub.subscribe(tenant.id, connection)
        response = client.patch(f"/api/payment/{payment_id}/approve", headers=admin_headers)

        assert response.status_code == 200
        assert connection.queue.empty()

    def test_reject_then_approve_is_refused(self, client, rental, tenant_headers, admin_headers):
        payment_id = submit_cash(client, rental, tenant_headers).json()["payment"]["id"]
        assert client.patch(f"/api/payment/{payment_id}/reject", headers=admin_headers).status_code == 200
        response = client.patch(f"/api/payment/{payment_id}/approve", headers=admin_headers)
        assert response.status_code == 400

    def test_websocket_rejects_bad_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/payments?token=bogus") as websocket:
                websocket.receive_json()

    def test_register_for_other_tenant_refused(self, client, tenant_token, other_tenant):
        with client.websocket_connect(f"/ws/payments?token={tenant_token}") as websocket:
            websocket.send_json({"event": "registerTenant", "tenantId": other_tenant.id})
            assert websocket.receive_json()["event"] == "error"


class TestRentalRoutes:

    def test_tenant_rentals_refreshed(self, client, rental, tenant, tenant_headers):
        response = client.get(f"/api/rental/tenant/{tenant.id}", headers=tenant_headers)
        assert response.status_code == 200
        rentals = response.json()
        assert rentals[0]["house"]["house_no"] == "A12"
        assert rentals[0]["payment_status"] in {s.value for s in RentalPaymentStatus}

    def test_other_tenants_rentals_forbidden(self, client, rental, other_tenant, tenant_headers):
        response = client.get(f"/api/rental/tenant/{other_tenant.id}", headers=tenant_headers)
        assert response.status_code == 403

    def test_no_rentals(self, client, tenant, tenant_headers):
        response = client.get(f"/api/rental/tenant/{tenant.id}", headers=tenant_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "No rentals found for this tenant."}

    def test_create_and_end_rental(self, client, db, tenant, admin_headers):
        house = client.post(
            "/api/house/add", json={"houseNo": "B7", "price": 12000}, headers=admin_headers
        ).json()

        created = client.post(
            "/api/rental/add", json={"tenantId": tenant.id, "houseId": house["id"]}, headers=admin_headers
        )
        assert created.status_code == 201
        rental = created.json()["rental"]
        assert Decimal(str(rental["amount"])) == Decimal("12000")
        assert db.get(House, house["id"]).availability == HouseAvailability.RENTED

        again = client.post(
            "/api/rental/add", json={"tenantId": tenant.id, "houseId": house["id"]}, headers=admin_headers
        )
        assert again.status_code == 400

        ended = client.put(f"/api/rental/{rental['id']}/status", json={"status": "ended"}, headers=admin_headers)
        assert ended.json() == {"message": "Rental marked as ended"}
        assert db.get(House, house["id"]).availability == HouseAvailability.AVAILABLE

    def test_available_houses(self, client, house, admin_headers):
        client.post("/api/house/add", json={"houseNo": "C1", "price": 9000}, headers=admin_headers)
        response = client.get("/api/house/available", headers=admin_headers)
        assert [h["house_no"] for h in response.json()] == ["C1"]

    def test_rented_tenants(self, client, rental, admin_headers):
        response = client.get("/api/rental/tenants", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == [
            {"id": rental.tenant_id, "name": "Jane Wanjiku", "email": "jane@example.com", "house_no": "A12"}
        ]

    def test_rented_tenants_admin_only(self, client, rental, tenant_headers):
        assert client.get("/api/rental/tenants", headers=tenant_headers).status_code == 403

    def test_get_rental_by_id(self, client, rental, admin_headers):
        response = client.get(f"/api/rental/{rental.id}", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()["rental"]
        assert body["id"] == rental.id
        assert body["tenant_name"] == "Jane Wanjiku"
        assert body["house"]["house_no"] == "A12"

    def test_get_unknown_rental(self, client, admin_headers):
        response = client.get("/api/rental/999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Rental not found!!"}


class TestHouseRoutes:

    def test_edit_house(self, client, house, admin_headers):
        response = client.put(f"/api/house/edit/{house.id}", json={"price": 17500}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["house_no"] == "A12"
        assert Decimal(str(response.json()["price"])) == Decimal("17500")

    def test_edit_house_admin_only(self, client, house, tenant_headers):
        response = client.put(f"/api/house/edit/{house.id}", json={"houseNo": "A13"}, headers=tenant_headers)
        assert response.status_code == 403

    def test_delete_rented_house_refused(self, client, rental, house, admin_headers):
        response = client.delete(f"/api/house/delete/{house.id}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Cannot delete a house with an active rental"}

    def test_delete_house(self, client, admin_headers):
        house = client.post(
            "/api/house/add", json={"houseNo": "D2", "price": 8000}, headers=admin_headers
        ).json()

        response = client.delete(f"/api/house/delete/{house['id']}", headers=admin_headers)
        assert response.json() == {"message": "House deleted successfully"}
        assert client.get(f"/api/house/{house['id']}", headers=admin_headers).status_code == 404
