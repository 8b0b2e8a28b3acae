# tests/test_api.py
"""
HTTP tests for the ledger API.

Views are thin; these tests check routing, status codes, error payloads,
pagination and role enforcement rather than re-testing command logic.
"""

import pytest

from accounting.models import Account, Transaction, Voucher


ACCOUNTS_URL = "/api/accounting/accounts/"
TRANSACTIONS_URL = "/api/accounting/transactions/"
VOUCHERS_URL = "/api/accounting/vouchers/"


def transaction_payload(debit_account, credit_account, amount="500.00", **overrides):
    payload = {
        "date": "2024-01-15",
        "description": "Office supplies",
        "entries": [
            {"account_id": debit_account.pk, "debit_amount": amount},
            {"account_id": credit_account.pk, "credit_amount": amount},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestAuthRequired:

    @pytest.mark.parametrize("url", [
        ACCOUNTS_URL,
        TRANSACTIONS_URL,
        VOUCHERS_URL,
        "/api/reports/trial-balance/",
        "/api/inventory/items/",
        "/api/migration/status/",
    ])
    def test_anonymous_rejected(self, api_client, url):
        response = api_client.get(url)

        assert response.status_code == 401


@pytest.mark.django_db
class TestAccountEndpoints:

    def test_create_and_list(self, admin_client):
        response = admin_client.post(
            ACCOUNTS_URL, {"code": "1110", "name": "Cash", "type": "asset", "role": "cash"}, format="json",
        )

        assert response.status_code == 201
        assert response.data["type"] == "asset"
        assert response.data["balance"] == "0.00"

        listing = admin_client.get(ACCOUNTS_URL)
        assert [a["code"] for a in listing.data] == ["1110"]

    def test_list_hides_inactive_unless_asked(self, admin_client, cash_account, inactive_account):
        assert [a["code"] for a in admin_client.get(ACCOUNTS_URL).data] == ["1110"]

        listing = admin_client.get(ACCOUNTS_URL, {"include_inactive": "true"})
        assert [a["code"] for a in listing.data] == ["1110", "1990"]

    def test_duplicate_code_is_conflict(self, admin_client, cash_account):
        response = admin_client.post(
            ACCOUNTS_URL, {"code": "1110", "name": "Cash 2", "type": "asset"}, format="json",
        )

        assert response.status_code == 409
        assert response.data["code"] == "duplicate_code"

    def test_update_and_deactivate(self, admin_client, bank_account):
        url = f"{ACCOUNTS_URL}{bank_account.pk}/"

        updated = admin_client.put(url, {"code": "1116", "name": "Main Bank", "type": "asset"}, format="json")
        assert updated.status_code == 200
        assert updated.data["code"] == "1116"

        deleted = admin_client.delete(url)
        assert deleted.status_code == 200
        bank_account.refresh_from_db()
        assert bank_account.is_active is False

    def test_deactivate_with_entries_is_conflict(self, admin_client, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=1), make_entry(revenue_account, credit=1)])

        response = admin_client.delete(f"{ACCOUNTS_URL}{cash_account.pk}/")

        assert response.status_code == 409
        assert response.data["code"] == "has_entries"

    def test_missing_account_is_404(self, admin_client):
        assert admin_client.get(f"{ACCOUNTS_URL}999999/").status_code == 404

    def test_balance_summary(self, admin_client, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=70), make_entry(revenue_account, credit=70)])
        post([make_entry(revenue_account, debit=20), make_entry(cash_account, credit=20)])

        response = admin_client.get(f"{ACCOUNTS_URL}{cash_account.pk}/balance/")

        assert response.status_code == 200
        assert response.data["total_debits"] == "70.00"
        assert response.data["total_credits"] == "20.00"
        assert response.data["balance"] == response.data["stored_balance"] == "50.00"

    def test_viewer_cannot_create(self, viewer_client):
        response = viewer_client.post(ACCOUNTS_URL, {"code": "1", "name": "x", "type": "asset"}, format="json")

        assert response.status_code == 403

    @pytest.mark.parametrize("export_format,content_type", [
        ("csv", "text/csv"),
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    ])
    def test_export(self, admin_client, cash_account, export_format, content_type):
        response = admin_client.get(f"{ACCOUNTS_URL}export/", {"format": export_format})

        assert response.status_code == 200
        assert response["Content-Type"].startswith(content_type)
        assert "attachment" in response["Content-Disposition"]

    def test_export_rejects_unknown_format(self, admin_client):
        assert admin_client.get(f"{ACCOUNTS_URL}export/", {"format": "pdf"}).status_code == 400

    def test_viewer_cannot_export(self, viewer_client):
        assert viewer_client.get(f"{ACCOUNTS_URL}export/").status_code == 403


@pytest.mark.django_db
class TestTransactionEndpoints:

    def test_post_returns_resolved_entries(self, accountant_client, cash_account, expense_account):
        response = accountant_client.post(
            TRANSACTIONS_URL, transaction_payload(cash_account, expense_account), format="json",
        )

        assert response.status_code == 201
        assert response.data["transaction_number"] == "TXN000001"
        assert response.data["total_amount"] == "500.00"
        assert response.data["created_by_name"] == "Test Accountant"
        codes = [e["account_code"] for e in response.data["entries"]]
        assert codes == ["1110", "5210"]

    def test_unbalanced_is_400_with_code(self, admin_client, cash_account, expense_account):
        payload = transaction_payload(cash_account, expense_account)
        payload["entries"][1]["credit_amount"] = "499.00"

        response = admin_client.post(TRANSACTIONS_URL, payload, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "unbalanced_entries"
        assert Transaction.objects.count() == 0

    def test_missing_entries_is_too_few(self, admin_client):
        response = admin_client.post(
            TRANSACTIONS_URL, {"date": "2024-01-15", "description": "Empty"}, format="json",
        )

        assert response.status_code == 400
        assert response.data["code"] == "too_few_entries"

    def test_pagination(self, admin_client, post, make_entry, cash_account, revenue_account):
        for _ in range(3):
            post([make_entry(cash_account, debit=1), make_entry(revenue_account, credit=1)])

        response = admin_client.get(TRANSACTIONS_URL, {"page": 2, "limit": 2})

        assert response.status_code == 200
        assert len(response.data["transactions"]) == 1
        assert response.data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    def test_amend_and_void(self, admin_client, post, make_entry, cash_account, bank_account, revenue_account):
        txn = post([make_entry(cash_account, debit=10), make_entry(revenue_account, credit=10)])
        url = f"{TRANSACTIONS_URL}{txn.pk}/"

        amended = admin_client.put(url, transaction_payload(bank_account, revenue_account, amount="15"), format="json")
        assert amended.status_code == 200
        assert amended.data["total_amount"] == "15.00"
        assert amended.data["transaction_number"] == txn.transaction_number

        voided = admin_client.delete(url)
        assert voided.status_code == 200
        assert voided.data["voided"] is True
        assert admin_client.get(url).status_code == 404

    def test_viewer_cannot_void(self, viewer_client, post, make_entry, cash_account, revenue_account):
        txn = post([make_entry(cash_account, debit=10), make_entry(revenue_account, credit=10)])

        assert viewer_client.delete(f"{TRANSACTIONS_URL}{txn.pk}/").status_code == 403

    def test_export_entries_csv(self, admin_client, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=10), make_entry(revenue_account, credit=10)])

        response = admin_client.get(
            f"{TRANSACTIONS_URL}export/",
            {"format": "csv", "detail": "entries", "date_from": "2024-01-01", "date_to": "2024-01-31"},
        )

        assert response.status_code == 200
        body = response.content.decode("utf-8-sig")
        assert "TXN000001" in body
        assert "1110" in body


@pytest.mark.django_db
class TestVoucherEndpoints:

    def test_full_workflow(self, admin_client, cash_account, expense_account):
        created = admin_client.post(
            VOUCHERS_URL,
            {"type": "payment", "date": "2024-03-01", "amount": "150.00", "payee": "Landlord"},
            format="json",
        )
        assert created.status_code == 201
        assert created.data["voucher_number"] == "PV000001"
        url = f"{VOUCHERS_URL}{created.data['id']}/"

        approve = admin_client.post(f"{url}approve/")
        assert approve.data["status"] == "approved"
        assert admin_client.post(f"{url}approve/").status_code == 409

        posted = admin_client.post(
            f"{url}post/",
            {"debit_account_id": expense_account.pk, "credit_account_id": cash_account.pk},
            format="json",
        )
        assert posted.status_code == 200
        assert posted.data["status"] == "posted"
        assert posted.data["transaction_number"] == "TXN000001"

        assert admin_client.delete(url).status_code == 409

    def test_list_filters_by_type(self, admin_client, actor):
        from accounting.commands import create_voucher

        create_voucher(actor, voucher_type="payment", date="2024-03-01", amount=1).unwrap()
        create_voucher(actor, voucher_type="receipt", date="2024-03-01", amount=1).unwrap()

        response = admin_client.get(VOUCHERS_URL, {"type": "receipt"})

        assert [v["voucher_number"] for v in response.data["vouchers"]] == ["RV000001"]
        assert response.data["pagination"]["total"] == 1
        assert Voucher.objects.count() == 2


@pytest.mark.django_db
class TestReportEndpoints:

    def test_trial_balance(self, viewer_client, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=10), make_entry(revenue_account, credit=10)])

        response = viewer_client.get("/api/reports/trial-balance/", {"as_of_date": "2024-12-31"})

        assert response.status_code == 200
        assert response.data["is_balanced"] is True

    def test_profit_loss_requires_from_date(self, viewer_client):
        response = viewer_client.get("/api/reports/profit-loss/")

        assert response.status_code == 400
        assert response.data["code"] == "missing_parameter"

    def test_ledger_unknown_account(self, viewer_client):
        assert viewer_client.get("/api/reports/ledger/999999/").status_code == 404

    def test_aging_bad_type(self, viewer_client):
        assert viewer_client.get("/api/reports/aging/", {"type": "stock"}).status_code == 400

    @pytest.mark.parametrize("url", [
        "/api/reports/balance-sheet/",
        "/api/reports/cash-flow/?from_date=2024-01-01",
        "/api/reports/aging/",
    ])
    def test_other_reports_render(self, viewer_client, url):
        assert viewer_client.get(url).status_code == 200


@pytest.mark.django_db
class TestInventoryEndpoints:

    def test_item_and_movements(self, admin_client):
        created = admin_client.post(
            "/api/inventory/items/",
            {"code": "W-1", "name": "Widget", "cost_price": "2.50", "opening_stock": 10, "minimum_stock": 5},
            format="json",
        )
        assert created.status_code == 201
        assert created.data["current_stock"] == "10.000"
        item_id = created.data["id"]

        out = admin_client.post(
            "/api/inventory/movements/", {"item_id": item_id, "movement_type": "out", "quantity": 8}, format="json",
        )
        assert out.status_code == 201

        too_many = admin_client.post(
            "/api/inventory/movements/", {"item_id": item_id, "movement_type": "out", "quantity": 3}, format="json",
        )
        assert too_many.status_code == 409
        assert too_many.data["code"] == "insufficient_stock"

        low = admin_client.get("/api/inventory/low-stock/")
        assert [i["code"] for i in low.data] == ["W-1"]

        movements = admin_client.get("/api/inventory/movements/", {"item_id": item_id})
        assert movements.data["pagination"]["total"] == 2

        valuation = admin_client.get("/api/inventory/valuation/")
        assert valuation.data["totals"]["total_cost_value"] == "5.00"

    def test_viewer_cannot_create_item(self, viewer_client):
        response = viewer_client.post("/api/inventory/items/", {"code": "X", "name": "X"}, format="json")

        assert response.status_code == 403
