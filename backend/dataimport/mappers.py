# dataimport/mappers.py
"""
Legacy field mapping.

Exports from older bookkeeping systems name the same field in several
ways (AccountCode / Code / account_code ...). The helpers here pick the
first populated alias and normalise values into what the ledger
commands accept.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable

TABLE_TYPES = ("accounts", "transactions", "vouchers", "inventory")

# Field aliases per target field, in lookup order.
ACCOUNT_FIELDS = {
    "code": ("AccountCode", "Code", "account_code", "code"),
    "name": ("AccountName", "Name", "account_name", "name"),
    "type": ("AccountType", "Type", "account_type", "type"),
    "parent": ("ParentCode", "ParentAccount", "ParentID", "parent_code", "parent_id"),
}

TRANSACTION_FIELDS = {
    "group": ("TransactionNumber", "VoucherNumber", "transaction_number", "Reference", "reference"),
    "date": ("Date", "TransactionDate", "date"),
    "description": ("Description", "Narration", "Memo", "description"),
    "reference": ("Reference", "reference", "VoucherNumber"),
    "account": ("AccountCode", "Account", "account_code"),
    "debit": ("DebitAmount", "Debit", "debit_amount", "debit"),
    "credit": ("CreditAmount", "Credit", "credit_amount", "credit"),
    "line_description": ("LineDescription", "EntryDescription", "line_description"),
}

VOUCHER_FIELDS = {
    "type": ("VoucherType", "Type", "voucher_type", "type"),
    "date": ("Date", "VoucherDate", "date"),
    "payee": ("Payee", "Party", "payee"),
    "amount": ("Amount", "amount"),
    "description": ("Description", "Narration", "description"),
    "status": ("Status", "status"),
}

ITEM_FIELDS = {
    "code": ("ItemCode", "Code", "item_code", "code"),
    "name": ("ItemName", "Name", "item_name", "name"),
    "description": ("Description", "description"),
    "unit": ("Unit", "UOM", "unit"),
    "cost_price": ("CostPrice", "Cost", "cost_price"),
    "selling_price": ("SellingPrice", "Price", "selling_price"),
    "opening_stock": ("Stock", "Quantity", "CurrentStock", "current_stock"),
    "minimum_stock": ("MinimumStock", "ReorderLevel", "minimum_stock"),
}


def pick(row: Dict[str, Any], aliases: Iterable[str], default: str = "") -> str:
    """First non-empty value among the aliases (header match is case-insensitive)."""
    lowered = {str(key).strip().lower(): value for key, value in row.items()}
    for alias in aliases:
        value = lowered.get(alias.lower())
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return default


def map_row(row: Dict[str, Any], fields: Dict[str, Iterable[str]]) -> Dict[str, str]:
    return {target: pick(row, aliases) for target, aliases in fields.items()}


def detect_table_type(headers: Iterable[str]) -> str:
    """
    Guess what a file holds from its header row.

    Debit/credit columns mean transaction lines even when an account
    code column is also present.
    """
    lowered = [str(h).lower() for h in headers]

    def has(token):
        return any(token in h for h in lowered)

    if (has("debit") and has("credit")) or has("transaction") or has("journal"):
        return "transactions"
    if has("account") and (has("code") or has("name")):
        return "accounts"
    if has("voucher") or has("payment") or has("receipt") or has("payee"):
        return "vouchers"
    if has("item") or has("product") or has("stock"):
        return "inventory"
    return "accounts"


def clean_amount(value: Any) -> str:
    """Strip currency symbols and thousands separators. Blank is '0'."""
    text = str(value or "").replace("$", "").replace(",", "").strip()
    if text in ("", "-"):
        return "0"
    if text.startswith("(") and text.endswith(")"):
        text = "-" + text[1:-1]
    try:
        return str(Decimal(text))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value}")


DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%Y%m%d",
    "%d %b %Y",
    "%b %d, %Y",
)


def parse_date(value: Any) -> str:
    """Parse a legacy date into ISO format (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value or "").strip()
    if not text:
        raise ValueError("Missing date")
    # Access exports often append a midnight time.
    text = text.split(" 00:00")[0].split("T")[0]

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValueError(f"Unable to parse date: {value}")


def map_account_type(value: str) -> str:
    text = (value or "").lower()
    if "asset" in text:
        return "asset"
    if "liabil" in text:
        return "liability"
    if "equity" in text or "capital" in text:
        return "equity"
    if "income" in text or "revenue" in text:
        return "income"
    if "expense" in text or "cost" in text:
        return "expense"
    return "asset"


def map_voucher_type(value: str) -> str:
    text = (value or "").lower()
    if "payment" in text or text.startswith("pay") or text == "pv":
        return "payment"
    if "receipt" in text or text.startswith("receiv") or text == "rv":
        return "receipt"
    return "journal"


def map_voucher_status(value: str) -> str:
    text = (value or "").lower()
    if "draft" in text:
        return "draft"
    if "approv" in text:
        return "approved"
    return "posted"
