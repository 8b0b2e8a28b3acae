# reports/statements.py
"""
Financial statements computed from the entry log.

Every function here is a pure read: it aggregates Entry rows joined to
their Transaction (for the date) and Account (for type and role), and
never touches Account.balance. A statement therefore reflects exactly
the committed transactions dated within its window.

Amounts are computed as Decimal and emitted as strings with two decimal
places. Every total in a payload equals the sum of the line items
returned next to it.

Sign conventions:
    balance = debits - credits        (as stored on Account.balance)
    income / liabilities / equity are reported credit-positive
    assets / expenses are reported debit-positive
"""

from collections import OrderedDict
from decimal import Decimal

from django.conf import settings
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.exceptions import MissingParameterError, NotFoundError, ValidationError
from accounting.models import Account, Entry
from accounting.validation import MONEY_Q, to_date


ZERO = Decimal("0.00")

AGING_KINDS = ("receivable", "payable")

# (bucket, inclusive upper bound in days); None is unbounded.
AGING_BUCKETS = (
    ("current", 30),
    ("days_30", 60),
    ("days_60", 90),
    ("days_90", 120),
    ("over_90", None),
)


def money(value: Decimal) -> str:
    return str(Decimal(value).quantize(MONEY_Q))


def _as_of(value):
    return to_date(value, "as_of_date") if value else timezone.localdate()


def _period(from_date, to_date_value):
    """Parse a reporting window. from_date is mandatory."""
    if not from_date:
        raise MissingParameterError("from_date is required.", parameter="from_date")
    start = to_date(from_date, "from_date")
    end = to_date(to_date_value, "to_date") if to_date_value else timezone.localdate()
    if start > end:
        raise ValidationError("from_date must be on or before to_date.")
    return start, end


def _totals_by_account(entries) -> dict:
    """{account_id: (debits, credits)} for an Entry queryset."""
    rows = entries.values("account_id").annotate(
        debits=Coalesce(Sum("debit_amount"), ZERO),
        credits=Coalesce(Sum("credit_amount"), ZERO),
    )
    return {row["account_id"]: (row["debits"], row["credits"]) for row in rows}


def role_accounts(role: str, name_token: str):
    """
    Accounts carrying ``role``.

    With LEDGER_NAME_MATCH_FALLBACK, accounts with no role whose name
    contains ``name_token`` are included as well.
    """
    condition = Q(role=role)
    if getattr(settings, "LEDGER_NAME_MATCH_FALLBACK", True):
        condition |= Q(role=Account.Role.NONE, name__icontains=name_token)
    return Account.objects.filter(condition).order_by("code")


def _account_ref(account: Account) -> dict:
    return {
        "account_id": account.pk,
        "code": account.code,
        "name": account.name,
        "type": account.account_type,
    }


# =============================================================================
# Trial Balance
# =============================================================================

def trial_balance(as_of_date=None) -> dict:
    """
    Net debit/credit position of every active account as of a date.

    Accounts with no debits, no credits and no net balance are omitted.
    The debit column holds positive net balances and the credit column
    negative ones, so the two column totals agree whenever the ledger is
    balanced.
    """
    as_of = _as_of(as_of_date)
    totals = _totals_by_account(
        Entry.objects.filter(transaction__date__lte=as_of, account__is_active=True)
    )

    lines = []
    total_debit = ZERO
    total_credit = ZERO
    for account in Account.objects.filter(pk__in=totals.keys()).order_by("code"):
        debits, credits = totals[account.pk]
        balance = debits - credits
        if not (debits or credits or balance):
            continue
        debit = balance if balance > 0 else ZERO
        credit = -balance if balance < 0 else ZERO
        total_debit += debit
        total_credit += credit
        lines.append({
            **_account_ref(account),
            "total_debits": money(debits),
            "total_credits": money(credits),
            "balance": money(balance),
            "debit": money(debit),
            "credit": money(credit),
        })

    return {
        "as_of_date": as_of.isoformat(),
        "accounts": lines,
        "total_debit": money(total_debit),
        "total_credit": money(total_credit),
        "is_balanced": total_debit == total_credit,
    }


# =============================================================================
# Balance Sheet
# =============================================================================

def balance_sheet(as_of_date=None) -> dict:
    """
    Assets against liabilities plus equity as of a date.

    Income and expense activity not yet closed to an equity account is
    shown as a "Current Earnings" line inside equity, which is what makes
    assets equal liabilities plus equity.
    """
    as_of = _as_of(as_of_date)
    totals = _totals_by_account(Entry.objects.filter(transaction__date__lte=as_of))

    sections = OrderedDict(
        (account_type, {"accounts": [], "total": ZERO})
        for account_type in Account.BALANCE_SHEET_TYPES
    )
    current_earnings = ZERO

    for account in Account.objects.filter(pk__in=totals.keys()).order_by("code"):
        debits, credits = totals[account.pk]
        balance = debits - credits

        if account.account_type in Account.PROFIT_AND_LOSS_TYPES:
            current_earnings -= balance
            continue

        amount = balance if account.is_debit_normal else -balance
        if not amount:
            continue
        section = sections[account.account_type]
        section["accounts"].append({**_account_ref(account), "balance": money(amount)})
        section["total"] += amount

    equity = sections[Account.AccountType.EQUITY]
    if current_earnings:
        equity["accounts"].append({
            "account_id": None,
            "code": None,
            "name": "Current Earnings",
            "type": Account.AccountType.EQUITY,
            "balance": money(current_earnings),
        })
        equity["total"] += current_earnings

    total_assets = sections[Account.AccountType.ASSET]["total"]
    total_liabilities = sections[Account.AccountType.LIABILITY]["total"]
    total_equity = equity["total"]
    total_liabilities_and_equity = total_liabilities + total_equity

    def render(section):
        return {"accounts": section["accounts"], "total": money(section["total"])}

    return {
        "as_of_date": as_of.isoformat(),
        "assets": render(sections[Account.AccountType.ASSET]),
        "liabilities": render(sections[Account.AccountType.LIABILITY]),
        "equity": render(equity),
        "current_earnings": money(current_earnings),
        "total_assets": money(total_assets),
        "total_liabilities": money(total_liabilities),
        "total_equity": money(total_equity),
        "total_liabilities_and_equity": money(total_liabilities_and_equity),
        "is_balanced": total_assets == total_liabilities_and_equity,
    }


# =============================================================================
# Profit and Loss
# =============================================================================

def profit_and_loss(from_date=None, to_date_value=None) -> dict:
    """
    Income and expenses over [from_date, to_date].

    Raises:
        MissingParameterError: from_date not given
    """
    start, end = _period(from_date, to_date_value)
    totals = _totals_by_account(
        Entry.objects.filter(
            transaction__date__gte=start,
            transaction__date__lte=end,
            account__account_type__in=Account.PROFIT_AND_LOSS_TYPES,
        )
    )

    income = {"accounts": [], "total": ZERO}
    expenses = {"accounts": [], "total": ZERO}
    for account in Account.objects.filter(pk__in=totals.keys()).order_by("code"):
        debits, credits = totals[account.pk]
        if account.account_type == Account.AccountType.INCOME:
            section, amount = income, credits - debits
        else:
            section, amount = expenses, debits - credits
        section["accounts"].append({**_account_ref(account), "amount": money(amount)})
        section["total"] += amount

    net_income = income["total"] - expenses["total"]

    return {
        "period": {"from": start.isoformat(), "to": end.isoformat()},
        "income": {"accounts": income["accounts"], "total": money(income["total"])},
        "expenses": {"accounts": expenses["accounts"], "total": money(expenses["total"])},
        "net_income": money(net_income),
    }


# =============================================================================
# Cash Flow
# =============================================================================

def cash_flow(from_date=None, to_date_value=None) -> dict:
    """
    Gross cash in and out over [from_date, to_date].

    Cash accounts are those with the cash role (plus name matches when
    the fallback is on). Debits to them count as cash in, credits as
    cash out. Transfers between two cash accounts appear on both sides.
    """
    start, end = _period(from_date, to_date_value)
    cash_accounts = list(role_accounts(Account.Role.CASH, "cash"))

    entries = (
        Entry.objects.filter(
            account__in=cash_accounts,
            transaction__date__gte=start,
            transaction__date__lte=end,
        )
        .select_related("transaction", "account")
        .order_by("transaction__date", "transaction_id", "id")
    )

    lines = []
    cash_in = ZERO
    cash_out = ZERO
    for entry in entries:
        cash_in += entry.debit_amount
        cash_out += entry.credit_amount
        lines.append({
            "date": entry.transaction.date.isoformat(),
            "transaction_number": entry.transaction.transaction_number,
            "description": entry.transaction.description,
            "account_code": entry.account.code,
            "account_name": entry.account.name,
            "cash_in": money(entry.debit_amount),
            "cash_out": money(entry.credit_amount),
        })

    return {
        "period": {"from": start.isoformat(), "to": end.isoformat()},
        "accounts": [{"code": a.code, "name": a.name} for a in cash_accounts],
        "entries": lines,
        "summary": {
            "cash_in": money(cash_in),
            "cash_out": money(cash_out),
            "net_cash_flow": money(cash_in - cash_out),
        },
    }


# =============================================================================
# Account Ledger
# =============================================================================

def account_ledger(account_id, from_date=None, to_date_value=None) -> dict:
    """
    Chronological entries for one account with a running balance.

    When from_date is given, activity before it is folded into
    opening_balance so the running balance still ends at the true
    balance as of to_date.

    Raises:
        NotFoundError: unknown account
    """
    try:
        account = Account.objects.get(pk=account_id)
    except Account.DoesNotExist:
        raise NotFoundError("Account not found.", account_id=account_id)

    entries = Entry.objects.filter(account=account)
    opening = ZERO
    start = to_date(from_date, "from_date") if from_date else None
    end = to_date(to_date_value, "to_date") if to_date_value else None

    if start:
        before = entries.filter(transaction__date__lt=start).aggregate(
            debits=Coalesce(Sum("debit_amount"), ZERO),
            credits=Coalesce(Sum("credit_amount"), ZERO),
        )
        opening = before["debits"] - before["credits"]
        entries = entries.filter(transaction__date__gte=start)
    if end:
        entries = entries.filter(transaction__date__lte=end)

    running = opening
    lines = []
    for entry in entries.select_related("transaction").order_by("transaction__date", "transaction_id", "id"):
        running += entry.debit_amount - entry.credit_amount
        lines.append({
            "entry_id": entry.pk,
            "date": entry.transaction.date.isoformat(),
            "transaction_id": entry.transaction_id,
            "transaction_number": entry.transaction.transaction_number,
            "description": entry.transaction.description,
            "entry_description": entry.description,
            "debit_amount": money(entry.debit_amount),
            "credit_amount": money(entry.credit_amount),
            "running_balance": money(running),
        })

    return {
        "account": _account_ref(account),
        "from_date": start.isoformat() if start else None,
        "to_date": end.isoformat() if end else None,
        "opening_balance": money(opening),
        "entries": lines,
        "final_balance": money(running),
    }


# =============================================================================
# Aging
# =============================================================================

def _bucket_for(days: int) -> str:
    for bucket, upper in AGING_BUCKETS:
        if upper is None or days <= upper:
            return bucket
    return AGING_BUCKETS[-1][0]


def aging(as_of_date=None, kind: str = "receivable") -> dict:
    """
    Bucket receivable (debit side) or payable (credit side) entries by age.

    Age is the number of days between the transaction date and as_of.
    This ages gross postings; it does not match payments to invoices.
    """
    if kind not in AGING_KINDS:
        raise ValidationError(f"type must be one of: {', '.join(AGING_KINDS)}.")
    as_of = _as_of(as_of_date)

    if kind == "receivable":
        accounts = role_accounts(Account.Role.RECEIVABLE, "accounts receivable")
        amount_field = "debit_amount"
    else:
        accounts = role_accounts(Account.Role.PAYABLE, "accounts payable")
        amount_field = "credit_amount"

    entries = (
        Entry.objects.filter(
            account__in=list(accounts),
            transaction__date__lte=as_of,
            **{f"{amount_field}__gt": 0},
        )
        .select_related("transaction", "account")
        .order_by("transaction__date", "transaction_id", "id")
    )

    buckets = OrderedDict((name, []) for name, _ in AGING_BUCKETS)
    totals = OrderedDict((name, ZERO) for name, _ in AGING_BUCKETS)
    for entry in entries:
        amount = getattr(entry, amount_field)
        days = (as_of - entry.transaction.date).days
        bucket = _bucket_for(days)
        totals[bucket] += amount
        buckets[bucket].append({
            "date": entry.transaction.date.isoformat(),
            "transaction_number": entry.transaction.transaction_number,
            "description": entry.transaction.description,
            "reference": entry.transaction.reference,
            "account_code": entry.account.code,
            "amount": money(amount),
            "days_old": days,
        })

    return {
        "type": kind,
        "as_of_date": as_of.isoformat(),
        "aging": buckets,
        "totals": {name: money(total) for name, total in totals.items()},
        "grand_total": money(sum(totals.values(), ZERO)),
    }
