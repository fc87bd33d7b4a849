"""
API route tests.

Verifies status codes and JSON error bodies for settlement, cancellation,
GL posting and configuration endpoints, including actor and business-unit
scoping.
"""

from ledgerpos.models import AccountingPeriod, Payment
from ledgerpos.models.accounting import PERIOD_STATUS_CLOSED


def _settle_body(pos, order, tendered=25000, **extra):
    body = {
        "order_id": order.id,
        "payment_method_id": pos.cash_method.id,
        "amount_tendered_cents": tendered,
    }
    body.update(extra)
    return body


# =============================================================================
# SETTLEMENTS
# =============================================================================


class TestSettlementRoute:

    def test_settle_returns_201(self, client, db_session, pos, make_order, headers):
        order = make_order()

        resp = client.post(f"/api/{pos.bu.id}/pos/settlements", json=_settle_body(pos, order), headers=headers)

        assert resp.status_code == 201
        data = resp.get_json()
        assert data["order_id"] == order.id
        assert data["status"] == "PAID"
        assert data["total_amount_cents"] == 22400
        assert data["change_cents"] == 2600
        assert data["posting"]["posted"] is True
        assert data["posting"]["document_number"] == "JE000001"

    def test_missing_actor_is_401(self, client, db_session, pos, make_order):
        order = make_order()

        resp = client.post(f"/api/{pos.bu.id}/pos/settlements", json=_settle_body(pos, order))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "UNAUTHORIZED"

    def test_business_unit_header_mismatch_is_400(self, client, db_session, pos, make_order):
        order = make_order()
        headers = {"X-User-Id": "7", "X-Business-Unit-Id": str(pos.bu.id + 1)}

        resp = client.post(f"/api/{pos.bu.id}/pos/settlements", json=_settle_body(pos, order), headers=headers)

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "BUSINESS_UNIT_MISMATCH"

    def test_unknown_business_unit_is_404(self, client, db_session, pos):
        resp = client.post("/api/9999/pos/settlements", json={}, headers={"X-User-Id": "7"})

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "BUSINESS_UNIT_NOT_FOUND"

    def test_double_settlement_is_409(self, client, db_session, pos, make_order, headers):
        order = make_order()
        url = f"/api/{pos.bu.id}/pos/settlements"
        client.post(url, json=_settle_body(pos, order), headers=headers)

        resp = client.post(url, json=_settle_body(pos, order), headers=headers)

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "ALREADY_SETTLED"
        assert db_session.query(Payment).filter_by(order_id=order.id).count() == 1

    def test_insufficient_payment_is_400(self, client, db_session, pos, make_order, headers):
        order = make_order()

        resp = client.post(
            f"/api/{pos.bu.id}/pos/settlements",
            json=_settle_body(pos, order, tendered=100),
            headers=headers,
        )

        assert resp.status_code == 400
        data = resp.get_json()
        assert data["code"] == "INSUFFICIENT_PAYMENT"
        assert data["details"]["shortfall_cents"] == 22300

    def test_missing_field_is_400(self, client, db_session, pos, headers):
        resp = client.post(f"/api/{pos.bu.id}/pos/settlements", json={"order_id": 1}, headers=headers)

        assert resp.status_code == 400
        assert resp.get_json()["details"]["field"] == "payment_method_id"

    def test_unknown_order_is_404(self, client, db_session, pos, headers):
        body = {"order_id": 9999, "payment_method_id": pos.cash_method.id, "amount_tendered_cents": 100}

        resp = client.post(f"/api/{pos.bu.id}/pos/settlements", json=body, headers=headers)

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "ORDER_NOT_FOUND"


# =============================================================================
# ORDERS
# =============================================================================


class TestOrderRoutes:

    def test_cancel(self, client, db_session, pos, make_order, headers):
        order = make_order()

        resp = client.post(
            f"/api/{pos.bu.id}/pos/orders/{order.id}/cancel",
            json={"reason": "Duplicate ticket"},
            headers=headers,
        )

        assert resp.status_code == 200
        assert resp.get_json()["order"]["status"] == "CANCELLED"

    def test_post_to_gl_after_failure(self, client, db_session, pos, make_order, headers):
        period = db_session.query(AccountingPeriod).filter_by(id=pos.period.id).first()
        period.status = PERIOD_STATUS_CLOSED
        db_session.commit()
        order = make_order()
        settle = client.post(f"/api/{pos.bu.id}/pos/settlements", json=_settle_body(pos, order), headers=headers)
        assert settle.status_code == 201
        assert settle.get_json()["posting"]["requires_manual_posting"] is True

        url = f"/api/{pos.bu.id}/pos/orders/{order.id}/post-to-gl"
        failed = client.post(url, headers=headers)
        assert failed.status_code == 422
        assert failed.get_json()["code"] == "NO_OPEN_PERIOD"
        assert failed.get_json()["posting"]["status"] == "FAILED"

        period = db_session.query(AccountingPeriod).filter_by(id=pos.period.id).first()
        period.status = "OPEN"
        db_session.commit()

        posted = client.post(url, headers=headers)
        assert posted.status_code == 200
        assert posted.get_json()["posting"]["document_number"] == "JE000001"

    def test_post_to_gl_open_order_is_422(self, client, db_session, pos, make_order, headers):
        order = make_order()

        resp = client.post(f"/api/{pos.bu.id}/pos/orders/{order.id}/post-to-gl", headers=headers)

        assert resp.status_code == 422
        assert resp.get_json()["code"] == "ORDER_NOT_POSTABLE"

    def test_accounting_summary(self, client, db_session, pos, make_order, headers):
        order = make_order()
        client.post(f"/api/{pos.bu.id}/pos/settlements", json=_settle_body(pos, order), headers=headers)

        resp = client.get(f"/api/{pos.bu.id}/pos/orders/{order.id}/accounting-summary", headers=headers)

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["is_posted"] is True
        assert data["total_debit_cents"] == 23000


# =============================================================================
# CONFIGURATION
# =============================================================================


class TestConfigurationRoute:

    def test_validate_configuration(self, client, db_session, pos, headers):
        resp = client.get(f"/api/{pos.bu.id}/pos/validate-configuration", headers=headers)

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["is_valid"] is True
        assert data["message"] == "POS configuration is valid"
