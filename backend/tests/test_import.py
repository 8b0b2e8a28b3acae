# tests/test_import.py
"""
Tests for legacy data import.

Tests cover:
- CSV / XLSX parsing and table type detection
- Field mapping (aliases, amounts, dates)
- Importers go through the ledger commands and skip bad rows
- Migration endpoints and their permissions
"""

import io
import json

import openpyxl
import pytest
from datetime import date
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile

from accounting.exceptions import ValidationError
from accounting.models import Account, Transaction, Voucher
from dataimport.importers import import_rows, migration_status
from dataimport.mappers import clean_amount, detect_table_type, parse_date, pick
from dataimport.parsers import detect_and_parse, parse_csv, parse_xlsx
from inventory.models import InventoryItem


IMPORT_URL = "/api/migration/import-csv/"


def xlsx_bytes(rows):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# =============================================================================
# Parsing & mapping
# =============================================================================

class TestParsers:

    def test_parse_csv_strips_bom_and_blank_rows(self):
        content = "\ufeffCode, Name \n1000, Assets \n,\n1100,Current\n".encode("utf-8")

        rows = parse_csv(content)

        assert rows == [
            {"Code": "1000", "Name": "Assets"},
            {"Code": "1100", "Name": "Current"},
        ]

    def test_parse_xlsx_uses_first_row_as_header(self):
        content = xlsx_bytes([
            ["ItemCode", "ItemName", "Stock"],
            ["W-1", "Widget", 10],
            [None, None, None],
            ["G-1", "Gadget", 2.5],
        ])

        rows = parse_xlsx(content)

        assert rows == [
            {"ItemCode": "W-1", "ItemName": "Widget", "Stock": "10"},
            {"ItemCode": "G-1", "ItemName": "Gadget", "Stock": "2.5"},
        ]

    def test_detect_and_parse_rejects_unknown_extension(self):
        with pytest.raises(ValueError):
            detect_and_parse(b"data", "ledger.mdb")


class TestMappers:

    @pytest.mark.parametrize("headers,expected", [
        (["TransactionNumber", "Date", "AccountCode", "Debit", "Credit"], "transactions"),
        (["AccountCode", "AccountName", "AccountType"], "accounts"),
        (["VoucherType", "Date", "Payee", "Amount"], "vouchers"),
        (["ItemCode", "ItemName", "Stock"], "inventory"),
        (["Foo", "Bar"], "accounts"),
    ])
    def test_detect_table_type(self, headers, expected):
        assert detect_table_type(headers) == expected

    def test_pick_first_populated_alias(self):
        row = {"accountcode": "", "Code": "1000"}

        assert pick(row, ("AccountCode", "Code")) == "1000"
        assert pick(row, ("Missing",), default="x") == "x"

    @pytest.mark.parametrize("raw,expected", [
        ("$1,234.50", "1234.50"),
        ("", "0"),
        ("(25.00)", "-25.00"),
        (None, "0"),
    ])
    def test_clean_amount(self, raw, expected):
        assert Decimal(clean_amount(raw)) == Decimal(expected)

    def test_clean_amount_rejects_text(self):
        with pytest.raises(ValueError):
            clean_amount("ten")

    @pytest.mark.parametrize("raw", ["2024-01-15", "01/15/2024", "2024/01/15", "20240115", "2024-01-15 00:00:00"])
    def test_parse_date(self, raw):
        assert parse_date(raw) == "2024-01-15"

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("sometime")


# =============================================================================
# Importers
# =============================================================================

@pytest.mark.django_db
class TestImporters:

    def test_accounts_link_parents_in_second_pass(self, actor):
        rows = [
            {"AccountCode": "1110", "AccountName": "Cash", "AccountType": "Current Asset", "ParentCode": "1000"},
            {"AccountCode": "1000", "AccountName": "Assets", "AccountType": "Asset"},
            {"AccountCode": "4000", "AccountName": "Sales", "AccountType": "Revenue"},
            {"AccountCode": "", "AccountName": "No code", "AccountType": "Asset"},
        ]

        report = import_rows(actor, "accounts", rows)

        assert report.imported == 3
        assert report.skipped == 1
        assert report.errors[0]["row"] == 5
        assert Account.objects.get(code="1110").parent.code == "1000"
        assert Account.objects.get(code="4000").account_type == Account.AccountType.INCOME

    def test_transactions_grouped_and_posted(self, actor, cash_account, revenue_account, expense_account):
        rows = [
            {"TransactionNumber": "L-1", "Date": "01/15/2024", "Description": "Sale",
             "AccountCode": "1110", "Debit": "$1,000.00", "Credit": ""},
            {"TransactionNumber": "L-1", "Date": "01/15/2024", "Description": "Sale",
             "AccountCode": "4100", "Debit": "", "Credit": "1000"},
            {"TransactionNumber": "L-2", "Date": "2024-01-20", "Description": "Broken",
             "AccountCode": "5210", "Debit": "50", "Credit": ""},
            {"TransactionNumber": "L-2", "Date": "2024-01-20", "Description": "Broken",
             "AccountCode": "1110", "Debit": "", "Credit": "40"},
            {"TransactionNumber": "L-3", "Date": "2024-01-21", "Description": "Unknown",
             "AccountCode": "9999", "Debit": "5", "Credit": ""},
        ]

        report = import_rows(actor, "transactions", rows)

        assert report.imported == 1
        assert report.skipped == 2
        txn = Transaction.objects.get()
        assert txn.reference == "L-1"
        assert txn.date == date(2024, 1, 15)
        assert txn.total_amount == Decimal("1000.00")
        cash_account.refresh_from_db()
        assert cash_account.balance == Decimal("1000.00")

    def test_vouchers_follow_legacy_status(self, actor):
        rows = [
            {"VoucherType": "Payment", "Date": "2024-02-01", "Payee": "Landlord", "Amount": "500"},
            {"VoucherType": "Receipt", "Date": "2024-02-02", "Amount": "75", "Status": "Draft"},
            {"VoucherType": "JV", "Date": "2024-02-03", "Amount": "10", "Status": "Approved"},
            {"VoucherType": "Payment", "Date": "2024-02-04", "Amount": "0"},
        ]

        report = import_rows(actor, "vouchers", rows)

        assert report.imported == 3
        assert report.skipped == 1
        statuses = dict(Voucher.objects.values_list("voucher_number", "status"))
        assert statuses == {"PV000001": "posted", "RV000001": "draft", "JV000001": "approved"}
        assert Transaction.objects.count() == 0

    def test_inventory_opening_stock(self, actor):
        rows = [
            {"ItemCode": "W-1", "ItemName": "Widget", "CostPrice": "2.50", "Stock": "10"},
            {"ItemCode": "W-1", "ItemName": "Duplicate", "Stock": "1"},
        ]

        report = import_rows(actor, "inventory", rows)

        assert report.imported == 1
        assert report.skipped == 1
        item = InventoryItem.objects.get(code="W-1")
        assert item.current_stock == Decimal("10.000")
        assert item.movements.count() == 1

    def test_unknown_table_type(self, actor):
        with pytest.raises(ValidationError):
            import_rows(actor, "payroll", [])

    def test_status_counts(self, actor, cash_account, inactive_account):
        status = migration_status()

        assert status["database_status"] == "connected"
        assert status["migration_ready"] is True
        assert status["total_records"]["accounts"] == 1
        assert status["total_records"]["users"] == 1


# =============================================================================
# Endpoints
# =============================================================================

@pytest.mark.django_db
class TestMigrationEndpoints:

    def test_import_csv_detects_table(self, admin_client):
        upload = SimpleUploadedFile(
            "accounts.csv",
            b"AccountCode,AccountName,AccountType\n1000,Assets,Asset\n2000,Liabilities,Liability\n",
            content_type="text/csv",
        )

        response = admin_client.post(IMPORT_URL, {"file": upload}, format="multipart")

        assert response.status_code == 201
        assert response.data["table_type"] == "accounts"
        assert response.data["records_imported"] == 2
        assert response.data["columns"] == ["AccountCode", "AccountName", "AccountType"]

    def test_import_xlsx_with_explicit_type(self, admin_client):
        upload = SimpleUploadedFile(
            "items.xlsx",
            xlsx_bytes([["Code", "Name", "Stock"], ["W-1", "Widget", 4]]),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

        response = admin_client.post(
            IMPORT_URL, {"file": upload, "table_type": "inventory"}, format="multipart",
        )

        assert response.status_code == 201
        assert InventoryItem.objects.get(code="W-1").current_stock == Decimal("4.000")

    def test_import_rejects_unsupported_file(self, admin_client):
        upload = SimpleUploadedFile("ledger.txt", b"hello", content_type="text/plain")

        response = admin_client.post(IMPORT_URL, {"file": upload}, format="multipart")

        assert response.status_code == 400

    def test_import_rejects_empty_file(self, admin_client):
        upload = SimpleUploadedFile("empty.csv", b"AccountCode,AccountName\n", content_type="text/csv")

        response = admin_client.post(IMPORT_URL, {"file": upload}, format="multipart")

        assert response.status_code == 400

    def test_accountant_cannot_import(self, accountant_client):
        upload = SimpleUploadedFile("a.csv", b"Code,Name\n1,A\n", content_type="text/csv")

        response = accountant_client.post(IMPORT_URL, {"file": upload}, format="multipart")

        assert response.status_code == 403

    def test_export_is_json_attachment(self, admin_client, cash_account):
        response = admin_client.get("/api/migration/export/")

        assert response.status_code == 200
        assert response["Content-Disposition"].startswith("attachment;")
        payload = json.loads(response.content)
        assert [a["code"] for a in payload["accounts"]] == ["1110"]
        assert payload["transactions"] == []

    def test_viewer_can_read_instructions_and_status(self, viewer_client):
        assert viewer_client.get("/api/migration/instructions/").status_code == 200
        assert viewer_client.get("/api/migration/status/").status_code == 200
        assert viewer_client.get("/api/migration/export/").status_code == 403
