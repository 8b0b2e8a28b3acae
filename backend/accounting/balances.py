# accounting/balances.py
"""
Entry-derived balances.

Account.balance is a denormalized running total kept by the posting
engine. The helpers here recompute it from the entry log, which is the
source of truth, and compare or repair the stored value.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from .models import Account, Entry

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class BalanceDrift:
    account_id: int
    code: str
    stored: Decimal
    computed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored - self.computed

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "code": self.code,
            "stored": str(self.stored),
            "computed": str(self.computed),
            "difference": str(self.difference),
        }


def entry_totals(account_ids=None) -> dict:
    """
    Sum debits and credits per account over every entry.

    Returns:
        {account_id: (total_debits, total_credits)}
    """
    entries = Entry.objects.all()
    if account_ids is not None:
        entries = entries.filter(account_id__in=account_ids)

    rows = entries.values("account_id").annotate(
        debits=Coalesce(Sum("debit_amount"), ZERO),
        credits=Coalesce(Sum("credit_amount"), ZERO),
    )
    return {row["account_id"]: (row["debits"], row["credits"]) for row in rows}


def account_summary(account: Account) -> dict:
    """Totals for one account, with the balance recomputed from its entries."""
    debits, credits = entry_totals([account.pk]).get(account.pk, (ZERO, ZERO))
    return {
        "account_id": account.pk,
        "code": account.code,
        "name": account.name,
        "total_debits": str(debits),
        "total_credits": str(credits),
        "balance": str(debits - credits),
        "stored_balance": str(account.balance),
    }


def find_drift() -> list[BalanceDrift]:
    """Every account whose stored balance differs from its entry log."""
    totals = entry_totals()
    drift = []
    for account in Account.objects.order_by("pk"):
        debits, credits = totals.get(account.pk, (ZERO, ZERO))
        computed = debits - credits
        if account.balance != computed:
            drift.append(BalanceDrift(account.pk, account.code, account.balance, computed))
    return drift


@transaction.atomic
def rebuild_balances(dry_run: bool = False) -> list[BalanceDrift]:
    """
    Rewrite drifted balances from the entry log.

    Accounts are locked before totals are read so no post can slip in
    between the read and the write.
    """
    list(Account.objects.select_for_update().order_by("pk").values_list("pk", flat=True))
    drift = find_drift()

    if dry_run:
        return drift

    for item in drift:
        Account.objects.filter(pk=item.account_id).update(balance=item.computed)
        logger.warning(
            "Account balance rebuilt",
            extra={
                "account_id": item.account_id,
                "code": item.code,
                "stored": str(item.stored),
                "computed": str(item.computed),
            },
        )
    return drift
