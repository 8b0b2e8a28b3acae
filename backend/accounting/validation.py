# accounting/validation.py
"""
Entry validation for the posting engine.

validate_transaction() checks a proposed transaction before it may touch
the ledger. It only reads the chart of accounts; it never writes.
Amounts are parsed into Decimal and rounded to cents, so the sums
compared here are exact.
"""

from dataclasses import dataclass, field
from datetime import date as date_type, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

from .exceptions import (
    NegativeAmountError,
    TooFewEntriesError,
    UnbalancedEntriesError,
    UnknownAccountError,
    ValidationError,
)
from .models import Account


MONEY_Q = Decimal("0.01")

# Money columns are max_digits=15, decimal_places=2.
MONEY_LIMIT = Decimal(10) ** 13


def to_money(value, field_name: str = "amount") -> Decimal:
    """Parse user input into a cent-rounded Decimal. Blank means zero."""
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValidationError(f"Invalid {field_name}: {value!r}.")
        amount = amount.quantize(MONEY_Q, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid {field_name}: {value!r}.")
    if abs(amount) >= MONEY_LIMIT:
        raise ValidationError(f"{field_name} is too large: {value!r}.")
    return amount


def to_date(value, field_name: str = "date") -> date_type:
    """Accept a date, a datetime, or an ISO 'YYYY-MM-DD' string."""
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_type):
        return value
    try:
        return date_type.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}. Use YYYY-MM-DD.")


def balance_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "LEDGER_BALANCE_TOLERANCE", "0.00")))


@dataclass(frozen=True)
class ValidatedEntry:
    account: Account
    debit_amount: Decimal
    credit_amount: Decimal
    description: str = ""

    @property
    def net_amount(self) -> Decimal:
        return self.debit_amount - self.credit_amount


@dataclass(frozen=True)
class ValidatedTransaction:
    date: date_type
    description: str
    entries: list = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((e.debit_amount for e in self.entries), Decimal("0.00"))

    @property
    def total_credit(self) -> Decimal:
        return sum((e.credit_amount for e in self.entries), Decimal("0.00"))


def _account_id(raw, index: int) -> int:
    if isinstance(raw, bool):
        raise UnknownAccountError(f"Entry {index}: account_id must be an integer.", index=index)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    raise UnknownAccountError(f"Entry {index}: account_id must be an integer.", index=index)


def validate_transaction(date, description, entries) -> ValidatedTransaction:
    """
    Validate a proposed transaction.

    Args:
        date: Transaction date (date or ISO string)
        description: Required free text
        entries: list of {account_id, debit_amount?, credit_amount?, description?}

    Returns:
        ValidatedTransaction with resolved accounts and Decimal amounts

    Raises:
        TooFewEntriesError: fewer than two entries
        ValidationError: missing/invalid date or description, bad amounts
        UnknownAccountError: account missing or inactive
        NegativeAmountError: negative debit or credit
        UnbalancedEntriesError: debits and credits differ by more than the tolerance
    """
    entries = list(entries or [])
    if len(entries) < 2:
        raise TooFewEntriesError(count=len(entries))

    txn_date = to_date(date)
    description = (description or "").strip()
    if not description:
        raise ValidationError("description is required.")

    account_ids = [_account_id(e.get("account_id"), i) for i, e in enumerate(entries, 1)]
    accounts = {
        account.pk: account
        for account in Account.objects.filter(pk__in=set(account_ids), is_active=True)
    }

    validated = []
    for index, (account_id, raw) in enumerate(zip(account_ids, entries), 1):
        account = accounts.get(account_id)
        if account is None:
            raise UnknownAccountError(
                f"Entry {index}: account {account_id} does not exist or is inactive.",
                account_id=account_id,
            )

        debit = to_money(raw.get("debit_amount"), "debit_amount")
        credit = to_money(raw.get("credit_amount"), "credit_amount")
        if debit < 0 or credit < 0:
            raise NegativeAmountError(
                f"Entry {index}: debit and credit amounts cannot be negative.",
                index=index,
            )

        validated.append(ValidatedEntry(
            account=account,
            debit_amount=debit,
            credit_amount=credit,
            description=(raw.get("description") or "").strip(),
        ))

    result = ValidatedTransaction(date=txn_date, description=description, entries=validated)
    if max(result.total_debit, result.total_credit) >= MONEY_LIMIT:
        raise ValidationError("Transaction total is too large.")

    difference = abs(result.total_debit - result.total_credit)
    if difference > balance_tolerance():
        raise UnbalancedEntriesError(
            f"Total debits ({result.total_debit}) must equal total credits ({result.total_credit}).",
            total_debit=str(result.total_debit),
            total_credit=str(result.total_credit),
        )

    return result
