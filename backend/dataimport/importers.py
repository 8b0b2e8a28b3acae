# dataimport/importers.py
"""
Legacy data import and export.

Every imported row goes through the same commands the API uses, so
imported data obeys the same rules as data entered by hand: balanced
transactions, unique codes, voucher state transitions and the balance
invariant. A row that fails is skipped and reported; it never aborts
the rows around it.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List

from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounting.commands import (
    approve_voucher,
    create_account,
    create_voucher,
    post_transaction,
    post_voucher,
    update_account,
)
from accounting.exceptions import LedgerError, ValidationError
from accounting.models import Account, Transaction, Voucher
from accounting.serializers import AccountSerializer, TransactionSerializer, VoucherSerializer
from inventory.commands import create_item
from inventory.models import InventoryItem
from inventory.serializers import InventoryItemSerializer

from .mappers import (
    ACCOUNT_FIELDS,
    ITEM_FIELDS,
    TABLE_TYPES,
    TRANSACTION_FIELDS,
    VOUCHER_FIELDS,
    clean_amount,
    map_account_type,
    map_row,
    map_voucher_status,
    map_voucher_type,
    parse_date,
)

logger = logging.getLogger(__name__)


INSTRUCTIONS = {
    "message": "Legacy data migration",
    "instructions": [
        "1. Export each table from the legacy system to CSV or XLSX.",
        "2. Import accounts first so transactions can resolve account codes.",
        "3. Upload each file to import_csv, optionally naming its table_type.",
        "4. Check the result counts with status.",
        "5. Download a full copy of the ledger with export_data.",
    ],
    "supported_tables": list(TABLE_TYPES),
    "endpoints": {
        "import_csv": "/api/migration/import-csv/",
        "export_data": "/api/migration/export/",
        "status": "/api/migration/status/",
    },
}


@dataclass
class ImportReport:
    table_type: str
    imported: int = 0
    skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def skip(self, row_number, message: str) -> None:
        self.skipped += 1
        self.errors.append({"row": row_number, "error": message})
        logger.warning(
            "Import row skipped",
            extra={"table_type": self.table_type, "row": row_number, "error": message},
        )

    def to_dict(self) -> dict:
        return {
            "table_type": self.table_type,
            "records_imported": self.imported,
            "records_skipped": self.skipped,
            "errors": self.errors,
        }


def _error_text(exc: Exception) -> str:
    if isinstance(exc, LedgerError):
        return exc.message
    return str(exc)


# =============================================================================
# Importers
# =============================================================================

def import_accounts(actor: ActorContext, rows: List[dict]) -> ImportReport:
    """
    Two passes: create every account, then link parents by code so that
    a child may appear before its parent in the file.
    """
    report = ImportReport("accounts")
    parents = []

    for number, row in enumerate(rows, start=2):
        data = map_row(row, ACCOUNT_FIELDS)
        result = create_account(
            actor,
            code=data["code"],
            name=data["name"],
            account_type=map_account_type(data["type"]),
        )
        if not result.success:
            report.skip(number, result.error.message)
            continue
        report.imported += 1
        if data["parent"]:
            parents.append((number, result.data, data["parent"]))

    for number, account, parent_code in parents:
        parent = Account.objects.filter(code=parent_code).first()
        if parent is None:
            report.errors.append({"row": number, "error": f"Parent account '{parent_code}' not found."})
            continue
        result = update_account(
            actor,
            account.pk,
            code=account.code,
            name=account.name,
            account_type=account.account_type,
            parent_id=parent.pk,
        )
        if not result.success:
            report.errors.append({"row": number, "error": result.error.message})

    return report


def _group_transaction_rows(rows: List[dict]) -> "OrderedDict[str, list]":
    """Group entry lines by their transaction key, keeping file order."""
    groups = OrderedDict()
    for number, row in enumerate(rows, start=2):
        data = map_row(row, TRANSACTION_FIELDS)
        key = data["group"] or f"row-{number}"
        groups.setdefault(key, []).append((number, data))
    return groups


def import_transactions(actor: ActorContext, rows: List[dict]) -> ImportReport:
    """
    One row per entry line. Lines sharing a TransactionNumber (or
    VoucherNumber / Reference) form one transaction; the first line of a
    group supplies its date and description.
    """
    report = ImportReport("transactions")
    accounts = dict(Account.objects.filter(is_active=True).values_list("code", "pk"))

    for key, lines in _group_transaction_rows(rows).items():
        first_row, header = lines[0]
        try:
            entries = []
            for number, line in lines:
                account_id = accounts.get(line["account"])
                if account_id is None:
                    raise ValidationError(f"Unknown account code '{line['account']}' on row {number}.")
                entries.append({
                    "account_id": account_id,
                    "debit_amount": clean_amount(line["debit"]),
                    "credit_amount": clean_amount(line["credit"]),
                    "description": line["line_description"] or line["description"],
                })
            date = parse_date(header["date"])
        except (LedgerError, ValueError) as exc:
            report.skip(first_row, _error_text(exc))
            continue

        result = post_transaction(
            actor,
            date=date,
            description=header["description"] or f"Imported {key}",
            entries=entries,
            reference=header["reference"] or ("" if key.startswith("row-") else key),
        )
        if not result.success:
            report.skip(first_row, result.error.message)
            continue
        report.imported += 1

    return report


def import_vouchers(actor: ActorContext, rows: List[dict]) -> ImportReport:
    """
    Vouchers are created as drafts and then walked up to their legacy
    status (posted when the file has no status column). No ledger
    transaction is generated for them.
    """
    report = ImportReport("vouchers")

    for number, row in enumerate(rows, start=2):
        data = map_row(row, VOUCHER_FIELDS)
        try:
            date = parse_date(data["date"])
            amount = clean_amount(data["amount"])
        except ValueError as exc:
            report.skip(number, str(exc))
            continue

        result = create_voucher(
            actor,
            voucher_type=map_voucher_type(data["type"]),
            date=date,
            amount=amount,
            payee=data["payee"],
            description=data["description"],
        )
        if not result.success:
            report.skip(number, result.error.message)
            continue

        voucher = result.data
        target = map_voucher_status(data["status"])
        if target in (Voucher.Status.APPROVED, Voucher.Status.POSTED):
            result = approve_voucher(actor, voucher.pk)
        if result.success and target == Voucher.Status.POSTED:
            result = post_voucher(actor, voucher.pk)
        if not result.success:
            report.errors.append({"row": number, "error": result.error.message})
        report.imported += 1

    return report


def import_inventory(actor: ActorContext, rows: List[dict]) -> ImportReport:
    report = ImportReport("inventory")

    for number, row in enumerate(rows, start=2):
        data = map_row(row, ITEM_FIELDS)
        try:
            amounts = {
                key: clean_amount(data[key])
                for key in ("cost_price", "selling_price", "opening_stock", "minimum_stock")
            }
        except ValueError as exc:
            report.skip(number, str(exc))
            continue

        result = create_item(
            actor,
            code=data["code"],
            name=data["name"],
            description=data["description"],
            unit=data["unit"] or "pcs",
            **amounts,
        )
        if not result.success:
            report.skip(number, result.error.message)
            continue
        report.imported += 1

    return report


IMPORTERS = {
    "accounts": import_accounts,
    "transactions": import_transactions,
    "vouchers": import_vouchers,
    "inventory": import_inventory,
}


def import_rows(actor: ActorContext, table_type: str, rows: List[dict]) -> ImportReport:
    """Dispatch parsed rows to the importer for ``table_type``."""
    try:
        importer = IMPORTERS[table_type]
    except KeyError:
        raise ValidationError(
            f"Invalid table_type '{table_type}'. Must be one of: {', '.join(TABLE_TYPES)}.",
        )

    report = importer(actor, rows)
    logger.info(
        "Legacy import finished",
        extra={
            "table_type": table_type,
            "imported": report.imported,
            "skipped": report.skipped,
        },
    )
    return report


# =============================================================================
# Export and status
# =============================================================================

def export_all() -> dict:
    """Every ledger table as plain JSON-ready data."""
    transactions = (
        Transaction.objects
        .select_related("created_by")
        .prefetch_related("entries__account")
        .order_by("date", "id")
    )
    return {
        "accounts": AccountSerializer(
            Account.objects.select_related("parent").order_by("code"), many=True,
        ).data,
        "transactions": TransactionSerializer(transactions, many=True).data,
        "vouchers": VoucherSerializer(
            Voucher.objects.select_related("transaction").order_by("date", "id"), many=True,
        ).data,
        "inventory_items": InventoryItemSerializer(
            InventoryItem.objects.order_by("code"), many=True,
        ).data,
    }


def migration_status() -> dict:
    return {
        "database_status": "connected",
        "total_records": {
            "accounts": Account.objects.filter(is_active=True).count(),
            "transactions": Transaction.objects.count(),
            "vouchers": Voucher.objects.count(),
            "inventory_items": InventoryItem.objects.filter(is_active=True).count(),
            "users": get_user_model().objects.count(),
        },
        "migration_ready": True,
    }
