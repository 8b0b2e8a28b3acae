# tests/conftest.py
"""
Pytest fixtures for ledger tests.

Users are created per role; commands take an ActorContext built from
the user, views get an APIClient authenticated as that user.
"""

import pytest
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import actor_for_user
from accounting.models import Account


User = get_user_model()


# =============================================================================
# User & Actor Fixtures
# =============================================================================

@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        name="Test Admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def accountant_user(db):
    return User.objects.create_user(
        email="accountant@test.com",
        password="testpass123",
        name="Test Accountant",
        role=User.Role.ACCOUNTANT,
    )


@pytest.fixture
def viewer_user(db):
    return User.objects.create_user(
        email="viewer@test.com",
        password="testpass123",
        name="Test Viewer",
        role=User.Role.VIEWER,
    )


@pytest.fixture
def actor(admin_user):
    return actor_for_user(admin_user)


@pytest.fixture
def accountant_actor(accountant_user):
    return actor_for_user(accountant_user)


@pytest.fixture
def viewer_actor(viewer_user):
    return actor_for_user(viewer_user)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def accountant_client(accountant_user):
    client = APIClient()
    client.force_authenticate(user=accountant_user)
    return client


@pytest.fixture
def viewer_client(viewer_user):
    client = APIClient()
    client.force_authenticate(user=viewer_user)
    return client


# =============================================================================
# Account Fixtures
# =============================================================================

def _account(code, name, account_type, role=Account.Role.NONE, **kwargs):
    return Account.objects.create(
        code=code,
        name=name,
        account_type=account_type,
        role=role,
        **kwargs,
    )


@pytest.fixture
def cash_account(db):
    return _account("1110", "Cash", Account.AccountType.ASSET, Account.Role.CASH)


@pytest.fixture
def bank_account(db):
    return _account("1115", "Bank", Account.AccountType.ASSET, Account.Role.CASH)


@pytest.fixture
def receivable_account(db):
    return _account("1120", "Accounts Receivable", Account.AccountType.ASSET, Account.Role.RECEIVABLE)


@pytest.fixture
def payable_account(db):
    return _account("2110", "Accounts Payable", Account.AccountType.LIABILITY, Account.Role.PAYABLE)


@pytest.fixture
def equity_account(db):
    return _account("3100", "Owner's Equity", Account.AccountType.EQUITY)


@pytest.fixture
def revenue_account(db):
    return _account("4100", "Sales Revenue", Account.AccountType.INCOME)


@pytest.fixture
def expense_account(db):
    return _account("5210", "Rent Expense", Account.AccountType.EXPENSE)


@pytest.fixture
def inactive_account(db):
    return _account("1990", "Old Suspense", Account.AccountType.ASSET, is_active=False)


# =============================================================================
# Helpers
# =============================================================================

def entry(account, debit=None, credit=None, description=""):
    """Build one entry payload for post_transaction()."""
    payload = {"account_id": account.pk, "description": description}
    if debit is not None:
        payload["debit_amount"] = debit
    if credit is not None:
        payload["credit_amount"] = credit
    return payload


def balance_of(account) -> Decimal:
    account.refresh_from_db()
    return account.balance


@pytest.fixture
def balance():
    return balance_of


@pytest.fixture
def make_entry():
    return entry


@pytest.fixture
def post(actor):
    """Post a transaction as the admin actor and return it; fails the test on error."""
    from accounting.commands import post_transaction

    def _post(entries, txn_date=date(2024, 1, 15), description="Test transaction", reference=""):
        result = post_transaction(
            actor,
            date=txn_date,
            description=description,
            entries=entries,
            reference=reference,
        )
        assert result.success, result.error and result.error.message
        return result.data

    return _post
