# accounting/chart.py
"""
Default chart of accounts.

A small general-purpose chart: five top-level headings with the usual
current/fixed/operating breakdown underneath. Cash, receivables and
payables carry explicit roles so reports do not depend on names.
"""

import logging

from django.db import transaction

from .models import Account

logger = logging.getLogger(__name__)

A = Account.AccountType
R = Account.Role

# (code, name, type, parent code, role)
DEFAULT_CHART = [
    ("1000", "Assets", A.ASSET, None, R.NONE),
    ("1100", "Current Assets", A.ASSET, "1000", R.NONE),
    ("1110", "Cash", A.ASSET, "1100", R.CASH),
    ("1120", "Accounts Receivable", A.ASSET, "1100", R.RECEIVABLE),
    ("1130", "Inventory", A.ASSET, "1100", R.NONE),
    ("1200", "Fixed Assets", A.ASSET, "1000", R.NONE),
    ("1210", "Equipment", A.ASSET, "1200", R.NONE),

    ("2000", "Liabilities", A.LIABILITY, None, R.NONE),
    ("2100", "Current Liabilities", A.LIABILITY, "2000", R.NONE),
    ("2110", "Accounts Payable", A.LIABILITY, "2100", R.PAYABLE),
    ("2120", "Accrued Expenses", A.LIABILITY, "2100", R.NONE),

    ("3000", "Equity", A.EQUITY, None, R.NONE),
    ("3100", "Owner's Equity", A.EQUITY, "3000", R.NONE),
    ("3200", "Retained Earnings", A.EQUITY, "3000", R.NONE),

    ("4000", "Revenue", A.INCOME, None, R.NONE),
    ("4100", "Sales Revenue", A.INCOME, "4000", R.NONE),
    ("4200", "Service Revenue", A.INCOME, "4000", R.NONE),

    ("5000", "Expenses", A.EXPENSE, None, R.NONE),
    ("5100", "Cost of Goods Sold", A.EXPENSE, "5000", R.NONE),
    ("5200", "Operating Expenses", A.EXPENSE, "5000", R.NONE),
    ("5210", "Rent Expense", A.EXPENSE, "5200", R.NONE),
    ("5220", "Utilities Expense", A.EXPENSE, "5200", R.NONE),
    ("5230", "Office Supplies", A.EXPENSE, "5200", R.NONE),
]


@transaction.atomic
def seed_default_chart(force: bool = False) -> int:
    """
    Create the default chart when the registry is empty.

    New accounts start at a zero balance, so no posting is involved.
    With ``force`` the accounts whose codes are missing are added to a
    non-empty registry; existing codes are left alone.

    Returns:
        Number of accounts created
    """
    if Account.objects.exists() and not force:
        return 0

    by_code = {account.code: account for account in Account.objects.all()}
    created = 0
    for code, name, account_type, parent_code, role in DEFAULT_CHART:
        if code in by_code:
            continue
        by_code[code] = Account.objects.create(
            code=code,
            name=name,
            account_type=account_type,
            role=role,
            parent=by_code.get(parent_code) if parent_code else None,
        )
        created += 1

    logger.info("Default chart seeded", extra={"created": created})
    return created
