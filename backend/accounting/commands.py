# accounting/commands.py
"""
Command layer for ledger operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and keep balances consistent.

Pattern:
1. Validate permissions (require)
2. Validate input and apply business policies (can_*)
3. Lock the rows the operation touches (select_for_update)
4. Perform the operation (model changes)
5. Return CommandResult

Every command runs inside @transaction.atomic. Failures detected before
any write come back as CommandResult.fail(<LedgerError>); anything raised
after writes have started propagates and rolls the whole unit back.

Account.balance is only ever changed by adjust_balance(), and
adjust_balance() is only called from the transaction commands below.
"""

import logging
from collections import defaultdict
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from accounts.authz import ActorContext, require
from .exceptions import (
    CyclicParentError,
    DuplicateCodeError,
    HasEntriesError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    UnknownAccountError,
    ValidationError,
)
from .models import Account, Entry, LedgerSequence, Transaction, Voucher
from .policies import (
    can_approve_voucher,
    can_deactivate_account,
    can_delete_voucher,
    can_edit_voucher,
    can_post_voucher,
    can_set_parent,
)
from .validation import to_date, to_money, validate_transaction

logger = logging.getLogger(__name__)


TRANSACTION_SEQUENCE = "transaction"


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = post_transaction(actor, date=..., description=..., entries=[...])
        if result.success:
            txn = result.data
        else:
            error = result.error          # a LedgerError
            message = result.error.message
    """

    def __init__(self, success: bool, data=None, error: LedgerError = None):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: LedgerError):
        return cls(success=False, error=error)

    def unwrap(self):
        """Return data, or raise the failure (rolls back an enclosing atomic block)."""
        if not self.success:
            raise self.error
        return self.data


def _next_sequence(name: str) -> int:
    """
    Allocate the next value of a named counter.
    Uses select_for_update to avoid concurrent duplicates.
    """
    try:
        seq = LedgerSequence.objects.select_for_update().get(name=name)
    except LedgerSequence.DoesNotExist:
        try:
            with transaction.atomic():
                seq = LedgerSequence.objects.create(name=name, next_value=1)
        except IntegrityError:
            seq = LedgerSequence.objects.select_for_update().get(name=name)

    value = seq.next_value
    seq.next_value = value + 1
    seq.save(update_fields=["next_value", "updated_at"])
    return value


def format_number(prefix: str, value: int) -> str:
    return f"{prefix}{value:06d}"


# =============================================================================
# Account Commands
# =============================================================================

def _resolve_parent(parent_id) -> Account:
    try:
        return Account.objects.get(pk=parent_id)
    except Account.DoesNotExist:
        raise NotFoundError(f"Parent account {parent_id} not found.", parent_id=parent_id)


@transaction.atomic
def create_account(
    actor: ActorContext,
    code: str,
    name: str,
    account_type: str,
    parent_id: int = None,
    role: str = Account.Role.NONE,
) -> CommandResult:
    """
    Create a new account in the chart of accounts.

    Args:
        actor: The actor context
        code: Account code (unique across active and inactive accounts)
        name: Account name
        account_type: One of Account.AccountType values
        parent_id: Optional parent account ID
        role: Reporting role (cash / receivable / payable)

    Returns:
        CommandResult with the created Account or error
    """
    require(actor, "accounts.manage")

    code = (code or "").strip()
    name = (name or "").strip()
    if not code or not name:
        return CommandResult.fail(ValidationError("Account code and name are required."))
    if account_type not in Account.AccountType.values:
        return CommandResult.fail(ValidationError(
            f"Invalid account type '{account_type}'. "
            f"Must be one of: {', '.join(Account.AccountType.values)}.",
        ))
    if role not in Account.Role.values:
        return CommandResult.fail(ValidationError(f"Invalid account role '{role}'."))

    if Account.objects.filter(code=code).exists():
        return CommandResult.fail(DuplicateCodeError(f"Account code '{code}' already exists."))

    parent = None
    if parent_id:
        try:
            parent = _resolve_parent(parent_id)
        except NotFoundError as exc:
            return CommandResult.fail(exc)

    account = Account.objects.create(
        code=code,
        name=name,
        account_type=account_type,
        role=role,
        parent=parent,
    )

    logger.info(
        "Account created",
        extra={"account_id": account.id, "code": code, "user_id": actor.user.pk},
    )
    return CommandResult.ok(account)


@transaction.atomic
def update_account(
    actor: ActorContext,
    account_id: int,
    code: str,
    name: str,
    account_type: str,
    parent_id: int = None,
    role: str = None,
) -> CommandResult:
    """
    Replace an account's code, name, type and parent.

    ``role`` is left unchanged when None. The balance is never touched.

    Returns:
        CommandResult with updated Account or error
    """
    require(actor, "accounts.manage")

    try:
        account = Account.objects.select_for_update().get(pk=account_id)
    except Account.DoesNotExist:
        return CommandResult.fail(NotFoundError("Account not found.", account_id=account_id))

    code = (code or "").strip()
    name = (name or "").strip()
    if not code or not name:
        return CommandResult.fail(ValidationError("Account code and name are required."))
    if account_type not in Account.AccountType.values:
        return CommandResult.fail(ValidationError(f"Invalid account type '{account_type}'."))
    if role is not None and role not in Account.Role.values:
        return CommandResult.fail(ValidationError(f"Invalid account role '{role}'."))

    if Account.objects.filter(code=code).exclude(pk=account.pk).exists():
        return CommandResult.fail(DuplicateCodeError(f"Account code '{code}' already exists."))

    parent = None
    if parent_id:
        try:
            parent = _resolve_parent(parent_id)
        except NotFoundError as exc:
            return CommandResult.fail(exc)
        allowed, reason = can_set_parent(account, parent)
        if not allowed:
            return CommandResult.fail(CyclicParentError(reason))

    account.code = code
    account.name = name
    account.account_type = account_type
    account.parent = parent
    if role is not None:
        account.role = role
    account.save(update_fields=["code", "name", "account_type", "parent", "role", "updated_at"])

    logger.info("Account updated", extra={"account_id": account.id, "code": code})
    return CommandResult.ok(account)


@transaction.atomic
def deactivate_account(actor: ActorContext, account_id: int) -> CommandResult:
    """
    Soft-delete an account (is_active=False).

    Blocked while any entry references the account.
    """
    require(actor, "accounts.manage")

    try:
        account = Account.objects.select_for_update().get(pk=account_id)
    except Account.DoesNotExist:
        return CommandResult.fail(NotFoundError("Account not found.", account_id=account_id))

    allowed, reason = can_deactivate_account(account)
    if not allowed:
        return CommandResult.fail(HasEntriesError(reason, account_id=account.id))

    account.is_active = False
    account.save(update_fields=["is_active", "updated_at"])

    logger.info("Account deactivated", extra={"account_id": account.id, "code": account.code})
    return CommandResult.ok(account)


def adjust_balance(account_id: int, delta: Decimal) -> None:
    """
    Add ``delta`` to an account's running balance.

    Internal to the posting engine. Must run inside the caller's atomic
    block; raises NotFoundError (rolling that block back) if the account
    row is gone.
    """
    if not delta:
        return
    updated = Account.objects.filter(pk=account_id).update(
        balance=F("balance") + delta,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise NotFoundError(f"Account {account_id} disappeared during posting.", account_id=account_id)


# =============================================================================
# Transaction Commands
# =============================================================================

def _lock_accounts(account_ids) -> dict:
    """Lock account rows in primary-key order so concurrent posts cannot deadlock."""
    return {
        account.pk: account
        for account in Account.objects.select_for_update().filter(pk__in=set(account_ids)).order_by("pk")
    }


def _check_still_active(locked: dict, validated) -> None:
    for entry in validated.entries:
        account = locked.get(entry.account.pk)
        if account is None or not account.is_active:
            raise UnknownAccountError(
                f"Account {entry.account.pk} is no longer active.",
                account_id=entry.account.pk,
            )


def _deltas(pairs) -> dict:
    """Sum (account_id, amount) pairs per account."""
    totals = defaultdict(lambda: Decimal("0.00"))
    for account_id, amount in pairs:
        totals[account_id] += amount
    return totals


def _apply_deltas(deltas: dict) -> None:
    for account_id in sorted(deltas):
        adjust_balance(account_id, deltas[account_id])


def _insert_entries(txn: Transaction, validated) -> None:
    Entry.objects.bulk_create([
        Entry(
            transaction=txn,
            account=entry.account,
            debit_amount=entry.debit_amount,
            credit_amount=entry.credit_amount,
            description=entry.description,
        )
        for entry in validated.entries
    ])
    _apply_deltas(_deltas((e.account.pk, e.net_amount) for e in validated.entries))


def _reverse_entries(txn: Transaction) -> int:
    """Undo the balance effect of a transaction's entries, then delete them."""
    old_entries = list(txn.entries.all())
    _apply_deltas(_deltas((e.account_id, -e.net_amount) for e in old_entries))
    txn.entries.all().delete()
    return len(old_entries)


@transaction.atomic
def post_transaction(
    actor: ActorContext,
    date,
    description: str,
    entries: list,
    reference: str = "",
) -> CommandResult:
    """
    Post a new transaction.

    Validates the entry set, allocates the next TXN number, inserts the
    header and entries, and applies each entry's (debit - credit) to its
    account, all in one atomic unit.

    Returns:
        CommandResult with the Transaction or error
    """
    require(actor, "journal.post")

    try:
        validated = validate_transaction(date, description, entries)
    except LedgerError as exc:
        logger.warning("Transaction rejected", extra={"code": exc.code, "error": exc.message})
        return CommandResult.fail(exc)

    locked = _lock_accounts(e.account.pk for e in validated.entries)
    _check_still_active(locked, validated)

    number = format_number("TXN", _next_sequence(TRANSACTION_SEQUENCE))
    txn = Transaction.objects.create(
        transaction_number=number,
        date=validated.date,
        description=validated.description,
        reference=(reference or "").strip(),
        total_amount=validated.total_debit,
        created_by=actor.user,
    )
    _insert_entries(txn, validated)

    logger.info(
        "Transaction posted",
        extra={
            "transaction_id": txn.id,
            "transaction_number": number,
            "total_amount": str(txn.total_amount),
            "entry_count": len(validated.entries),
            "user_id": actor.user.pk,
        },
    )
    return CommandResult.ok(txn)


@transaction.atomic
def amend_transaction(
    actor: ActorContext,
    transaction_id: int,
    date,
    description: str,
    entries: list,
    reference: str = "",
) -> CommandResult:
    """
    Replace a transaction's header fields and its whole entry set.

    Old entries are reversed and deleted and the new ones inserted and
    applied inside one atomic unit; readers never see one half without
    the other. The transaction number is kept.
    """
    require(actor, "journal.post")

    try:
        txn = Transaction.objects.select_for_update().get(pk=transaction_id)
    except Transaction.DoesNotExist:
        return CommandResult.fail(NotFoundError("Transaction not found.", transaction_id=transaction_id))

    try:
        validated = validate_transaction(date, description, entries)
    except LedgerError as exc:
        logger.warning(
            "Transaction amendment rejected",
            extra={"transaction_id": txn.id, "code": exc.code, "error": exc.message},
        )
        return CommandResult.fail(exc)

    old_account_ids = list(txn.entries.values_list("account_id", flat=True))
    locked = _lock_accounts(old_account_ids + [e.account.pk for e in validated.entries])
    _check_still_active(locked, validated)

    reversed_count = _reverse_entries(txn)

    txn.date = validated.date
    txn.description = validated.description
    txn.reference = (reference or "").strip()
    txn.total_amount = validated.total_debit
    txn.save(update_fields=["date", "description", "reference", "total_amount", "updated_at"])

    _insert_entries(txn, validated)

    logger.info(
        "Transaction amended",
        extra={
            "transaction_id": txn.id,
            "transaction_number": txn.transaction_number,
            "reversed_entries": reversed_count,
            "entry_count": len(validated.entries),
            "total_amount": str(txn.total_amount),
        },
    )
    return CommandResult.ok(txn)


@transaction.atomic
def void_transaction(actor: ActorContext, transaction_id: int) -> CommandResult:
    """
    Reverse every entry of a transaction and delete it.

    Vouchers linked to the transaction keep their status; the link is cleared.
    """
    require(actor, "journal.void")

    try:
        txn = Transaction.objects.select_for_update().get(pk=transaction_id)
    except Transaction.DoesNotExist:
        return CommandResult.fail(NotFoundError("Transaction not found.", transaction_id=transaction_id))

    _lock_accounts(txn.entries.values_list("account_id", flat=True))
    reversed_count = _reverse_entries(txn)

    number = txn.transaction_number
    txn.delete()

    logger.info(
        "Transaction voided",
        extra={"transaction_number": number, "reversed_entries": reversed_count},
    )
    return CommandResult.ok({"voided": True, "transaction_number": number})


# =============================================================================
# Voucher Commands
# =============================================================================

def _voucher_fields(date, amount) -> tuple:
    voucher_date = to_date(date)
    voucher_amount = to_money(amount)
    if voucher_amount <= 0:
        raise ValidationError("Voucher amount must be greater than zero.")
    return voucher_date, voucher_amount


@transaction.atomic
def create_voucher(
    actor: ActorContext,
    voucher_type: str,
    date,
    amount,
    payee: str = "",
    description: str = "",
) -> CommandResult:
    """
    Create a draft voucher numbered from its type's own counter (PV/RV/JV).
    """
    require(actor, "vouchers.manage")

    if voucher_type not in Voucher.VoucherType.values:
        return CommandResult.fail(ValidationError(
            f"Invalid voucher type '{voucher_type}'. "
            f"Must be one of: {', '.join(Voucher.VoucherType.values)}.",
        ))
    try:
        voucher_date, voucher_amount = _voucher_fields(date, amount)
    except LedgerError as exc:
        return CommandResult.fail(exc)

    prefix = Voucher.NUMBER_PREFIXES[voucher_type]
    number = format_number(prefix, _next_sequence(f"voucher.{voucher_type}"))

    voucher = Voucher.objects.create(
        voucher_number=number,
        voucher_type=voucher_type,
        date=voucher_date,
        payee=(payee or "").strip(),
        amount=voucher_amount,
        description=description or "",
        status=Voucher.Status.DRAFT,
        created_by=actor.user,
    )

    logger.info("Voucher created", extra={"voucher_id": voucher.id, "voucher_number": number})
    return CommandResult.ok(voucher)


def _lock_voucher(voucher_id: int) -> Voucher:
    try:
        return Voucher.objects.select_for_update().get(pk=voucher_id)
    except Voucher.DoesNotExist:
        raise NotFoundError("Voucher not found.", voucher_id=voucher_id)


@transaction.atomic
def update_voucher(
    actor: ActorContext,
    voucher_id: int,
    date,
    amount,
    payee: str = "",
    description: str = "",
    voucher_type: str = None,
) -> CommandResult:
    """
    Edit a voucher that has not been posted.

    The type is fixed at creation because it determines the number prefix.
    Status changes only through approve_voucher / post_voucher.
    """
    require(actor, "vouchers.manage")

    try:
        voucher = _lock_voucher(voucher_id)
    except NotFoundError as exc:
        return CommandResult.fail(exc)

    allowed, reason = can_edit_voucher(voucher)
    if not allowed:
        return CommandResult.fail(InvalidStateError(reason, status=voucher.status))

    if voucher_type is not None and voucher_type != voucher.voucher_type:
        return CommandResult.fail(ValidationError("Voucher type cannot be changed."))

    try:
        voucher_date, voucher_amount = _voucher_fields(date, amount)
    except LedgerError as exc:
        return CommandResult.fail(exc)

    voucher.date = voucher_date
    voucher.amount = voucher_amount
    voucher.payee = (payee or "").strip()
    voucher.description = description or ""
    voucher.save(update_fields=["date", "amount", "payee", "description", "updated_at"])

    logger.info("Voucher updated", extra={"voucher_id": voucher.id})
    return CommandResult.ok(voucher)


@transaction.atomic
def delete_voucher(actor: ActorContext, voucher_id: int) -> CommandResult:
    require(actor, "vouchers.manage")

    try:
        voucher = _lock_voucher(voucher_id)
    except NotFoundError as exc:
        return CommandResult.fail(exc)

    allowed, reason = can_delete_voucher(voucher)
    if not allowed:
        return CommandResult.fail(InvalidStateError(reason, status=voucher.status))

    number = voucher.voucher_number
    voucher.delete()

    logger.info("Voucher deleted", extra={"voucher_number": number})
    return CommandResult.ok({"deleted": True, "voucher_number": number})


@transaction.atomic
def approve_voucher(actor: ActorContext, voucher_id: int) -> CommandResult:
    """draft -> approved."""
    require(actor, "vouchers.approve")

    try:
        voucher = _lock_voucher(voucher_id)
    except NotFoundError as exc:
        return CommandResult.fail(exc)

    allowed, reason = can_approve_voucher(voucher)
    if not allowed:
        return CommandResult.fail(InvalidStateError(reason, status=voucher.status))

    voucher.status = Voucher.Status.APPROVED
    voucher.save(update_fields=["status", "updated_at"])

    logger.info("Voucher approved", extra={"voucher_id": voucher.id, "voucher_number": voucher.voucher_number})
    return CommandResult.ok(voucher)


@transaction.atomic
def post_voucher(
    actor: ActorContext,
    voucher_id: int,
    debit_account_id: int = None,
    credit_account_id: int = None,
) -> CommandResult:
    """
    approved -> posted.

    When both account ids are given, also posts a two-entry ledger
    transaction for the voucher amount (debit one account, credit the
    other) and links it to the voucher. Without them only the status
    changes.
    """
    require(actor, "vouchers.post")

    try:
        voucher = _lock_voucher(voucher_id)
    except NotFoundError as exc:
        return CommandResult.fail(exc)

    allowed, reason = can_post_voucher(voucher)
    if not allowed:
        return CommandResult.fail(InvalidStateError(reason, status=voucher.status))

    if bool(debit_account_id) != bool(credit_account_id):
        return CommandResult.fail(ValidationError(
            "Provide both debit_account_id and credit_account_id, or neither.",
        ))

    if debit_account_id:
        result = post_transaction(
            actor,
            date=voucher.date,
            description=voucher.description or f"{voucher.get_voucher_type_display()} voucher {voucher.voucher_number}",
            reference=voucher.voucher_number,
            entries=[
                {"account_id": debit_account_id, "debit_amount": voucher.amount, "description": voucher.payee},
                {"account_id": credit_account_id, "credit_amount": voucher.amount, "description": voucher.payee},
            ],
        )
        if not result.success:
            return result
        voucher.transaction = result.data

    voucher.status = Voucher.Status.POSTED
    voucher.save(update_fields=["status", "transaction", "updated_at"])

    logger.info(
        "Voucher posted",
        extra={
            "voucher_id": voucher.id,
            "voucher_number": voucher.voucher_number,
            "transaction_id": voucher.transaction_id,
        },
    )
    return CommandResult.ok(voucher)
