# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Usage:
    allowed, reason = can_approve_voucher(voucher)
    if not allowed:
        return CommandResult.fail(InvalidStateError(reason))

Design Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples for clear error messages
3. Commands compose policies as needed
"""

from .models import Account, Voucher


# =============================================================================
# Account Policies
# =============================================================================

def can_deactivate_account(account: Account) -> tuple[bool, str]:
    """
    Rules:
    - Cannot deactivate an account that any entry references
    """
    if account.entries.exists():
        return False, f"Account {account.code} has entries and cannot be deactivated."
    return True, ""


def can_set_parent(account: Account | None, parent: Account) -> tuple[bool, str]:
    """
    Check that ``parent`` may become the parent of ``account``.

    ``account`` is None when creating. Rules:
    - An account cannot be its own parent
    - The new parent cannot be a descendant of the account
    """
    if account is None:
        return True, ""
    if parent.pk == account.pk:
        return False, "An account cannot be its own parent."
    if account.pk in parent.ancestor_ids():
        return False, (
            f"Account {parent.code} is a descendant of {account.code}; "
            "reparenting would create a cycle."
        )
    return True, ""


# =============================================================================
# Voucher Policies
# =============================================================================

def can_edit_voucher(voucher: Voucher) -> tuple[bool, str]:
    if voucher.status == Voucher.Status.POSTED:
        return False, "Cannot edit posted vouchers."
    return True, ""


def can_delete_voucher(voucher: Voucher) -> tuple[bool, str]:
    if voucher.status == Voucher.Status.POSTED:
        return False, "Cannot delete posted vouchers."
    return True, ""


def can_approve_voucher(voucher: Voucher) -> tuple[bool, str]:
    if voucher.status != Voucher.Status.DRAFT:
        return False, "Only draft vouchers can be approved."
    return True, ""


def can_post_voucher(voucher: Voucher) -> tuple[bool, str]:
    if voucher.status != Voucher.Status.APPROVED:
        return False, "Only approved vouchers can be posted."
    return True, ""
