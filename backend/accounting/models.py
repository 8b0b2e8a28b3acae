# accounting/models.py
"""
Ledger models.

All writes go through the command layer (accounting/commands.py), which
validates input, serializes concurrent writers with row locks, and keeps
every Account.balance equal to the sum of (debit - credit) over the
entries that reference it.

Models:
- LedgerSequence: named counters for transaction and voucher numbers
- Account: Chart of Accounts node with denormalized running balance
- Transaction: posted journal header
- Entry: one debit/credit line of a transaction
- Voucher: payment/receipt/journal document with a draft->approved->posted workflow
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q


class LedgerSequence(models.Model):
    """
    Named counters for sequential identifiers.

    Commands lock the row with select_for_update() and increment it inside
    the same atomic unit as the insert that consumes the number.
    """

    name = models.CharField(max_length=100, unique=True)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}={self.next_value}"


class Account(models.Model):
    """
    Chart of Accounts entry.

    Accounts form a tree through ``parent``. Reports roll up by
    ``account_type``; the tree is only used for display.
    """

    class AccountType(models.TextChoices):
        ASSET = "asset", "Asset"
        LIABILITY = "liability", "Liability"
        EQUITY = "equity", "Equity"
        INCOME = "income", "Income"
        EXPENSE = "expense", "Expense"

    class Role(models.TextChoices):
        NONE = "none", "None"
        CASH = "cash", "Cash"
        RECEIVABLE = "receivable", "Accounts Receivable"
        PAYABLE = "payable", "Accounts Payable"

    BALANCE_SHEET_TYPES = (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)
    PROFIT_AND_LOSS_TYPES = (AccountType.INCOME, AccountType.EXPENSE)
    DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_column="type",
    )

    # Report semantics (cash flow, aging) key off the role, not the name.
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.NONE,
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    # Signed: sum of (debit - credit) over all entries for this account.
    balance = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        indexes = [
            models.Index(fields=["account_type", "is_active"], name="account_type_active_idx"),
            models.Index(fields=["role"], name="account_role_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_debit_normal(self) -> bool:
        return self.account_type in self.DEBIT_NORMAL_TYPES

    def ancestor_ids(self) -> list[int]:
        """Ids of every ancestor, nearest first. Stops if the chain loops."""
        seen = []
        current = self.parent
        while current is not None and current.pk not in seen:
            seen.append(current.pk)
            current = current.parent
        return seen


class Transaction(models.Model):
    """
    A posted journal transaction.

    Exists only in the posted state: created together with its entries,
    amended by replacing every entry, voided by deleting the whole thing.
    """

    transaction_number = models.CharField(max_length=20, unique=True)
    date = models.DateField()
    description = models.CharField(max_length=500)
    reference = models.CharField(max_length=100, blank=True, default="")

    # Sum of debit_amount across entries.
    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_transactions",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["date"], name="transaction_date_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_number} ({self.date})"


class Entry(models.Model):
    """One debit/credit line of a transaction."""

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="entries",
    )
    # PROTECT: an account with entries can be deactivated, never deleted.
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="entries",
    )
    debit_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    credit_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "entries"
        constraints = [
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0) & Q(credit_amount__gte=0),
                name="entry_amounts_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.account_id}: Dr {self.debit_amount} / Cr {self.credit_amount}"

    @property
    def net_amount(self) -> Decimal:
        """Balance effect of this entry on its account."""
        return self.debit_amount - self.credit_amount


class Voucher(models.Model):
    """
    Payment, receipt or journal voucher.

    Workflow: draft -> approved -> posted, forward only. Posted vouchers
    are frozen and may link to the ledger transaction they produced.
    """

    class VoucherType(models.TextChoices):
        PAYMENT = "payment", "Payment"
        RECEIPT = "receipt", "Receipt"
        JOURNAL = "journal", "Journal"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        APPROVED = "approved", "Approved"
        POSTED = "posted", "Posted"

    NUMBER_PREFIXES = {
        VoucherType.PAYMENT: "PV",
        VoucherType.RECEIPT: "RV",
        VoucherType.JOURNAL: "JV",
    }

    voucher_number = models.CharField(max_length=20, unique=True)
    voucher_type = models.CharField(
        max_length=20,
        choices=VoucherType.choices,
        db_column="type",
    )
    date = models.DateField()
    payee = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    description = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["voucher_type", "status"], name="voucher_type_status_idx"),
        ]

    def __str__(self):
        return f"{self.voucher_number} [{self.status}]"
