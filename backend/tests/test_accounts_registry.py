# tests/test_accounts_registry.py
"""
Tests for the chart of accounts.

Tests cover:
- Create / update / deactivate commands
- Unique codes and the parent cycle check
- Default chart seeding
"""

import pytest
from decimal import Decimal

from django.core.exceptions import PermissionDenied

from accounting.chart import DEFAULT_CHART, seed_default_chart
from accounting.commands import create_account, deactivate_account, update_account
from accounting.exceptions import (
    CyclicParentError,
    DuplicateCodeError,
    HasEntriesError,
    NotFoundError,
    ValidationError,
)
from accounting.models import Account


@pytest.mark.django_db
class TestCreateAccount:

    def test_create_account(self, actor):
        result = create_account(actor, code="1000", name="Assets", account_type="asset")

        assert result.success
        account = result.data
        assert account.code == "1000"
        assert account.balance == Decimal("0.00")
        assert account.is_active is True
        assert account.role == Account.Role.NONE

    def test_create_with_parent_and_role(self, actor):
        parent = create_account(actor, code="1000", name="Assets", account_type="asset").data

        result = create_account(
            actor, code="1110", name="Petty Cash", account_type="asset",
            parent_id=parent.pk, role=Account.Role.CASH,
        )

        assert result.success
        assert result.data.parent == parent
        assert result.data.role == Account.Role.CASH

    def test_duplicate_code_rejected(self, actor, cash_account):
        result = create_account(actor, code=cash_account.code, name="Another", account_type="asset")

        assert isinstance(result.error, DuplicateCodeError)
        assert result.error.status_code == 409

    def test_duplicate_of_inactive_code_rejected(self, actor, inactive_account):
        result = create_account(actor, code=inactive_account.code, name="Reuse", account_type="asset")

        assert isinstance(result.error, DuplicateCodeError)

    def test_invalid_type_rejected(self, actor):
        result = create_account(actor, code="9000", name="Odd", account_type="memo")

        assert isinstance(result.error, ValidationError)

    def test_missing_name_rejected(self, actor):
        result = create_account(actor, code="9000", name="  ", account_type="asset")

        assert isinstance(result.error, ValidationError)

    def test_unknown_parent_rejected(self, actor):
        result = create_account(actor, code="9000", name="Orphan", account_type="asset", parent_id=999999)

        assert isinstance(result.error, NotFoundError)

    def test_viewer_cannot_create(self, viewer_actor):
        with pytest.raises(PermissionDenied):
            create_account(viewer_actor, code="9000", name="Nope", account_type="asset")


@pytest.mark.django_db
class TestUpdateAccount:

    def test_update_keeps_balance(self, actor, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=80), make_entry(revenue_account, credit=80)])

        result = update_account(
            actor, cash_account.pk, code="1111", name="Cash on Hand", account_type="asset",
        )

        assert result.success
        cash_account.refresh_from_db()
        assert cash_account.code == "1111"
        assert cash_account.name == "Cash on Hand"
        assert cash_account.balance == Decimal("80.00")
        assert cash_account.role == Account.Role.CASH

    def test_update_to_existing_code_rejected(self, actor, cash_account, bank_account):
        result = update_account(actor, bank_account.pk, code=cash_account.code, name="Bank", account_type="asset")

        assert isinstance(result.error, DuplicateCodeError)

    def test_self_parent_rejected(self, actor, cash_account):
        result = update_account(
            actor, cash_account.pk, code=cash_account.code, name=cash_account.name,
            account_type="asset", parent_id=cash_account.pk,
        )

        assert isinstance(result.error, CyclicParentError)

    def test_descendant_parent_rejected(self, actor):
        root = create_account(actor, code="1000", name="Assets", account_type="asset").data
        child = create_account(actor, code="1100", name="Current", account_type="asset", parent_id=root.pk).data
        grandchild = create_account(
            actor, code="1110", name="Cash", account_type="asset", parent_id=child.pk,
        ).data

        result = update_account(
            actor, root.pk, code="1000", name="Assets", account_type="asset", parent_id=grandchild.pk,
        )

        assert isinstance(result.error, CyclicParentError)
        root.refresh_from_db()
        assert root.parent_id is None

    def test_update_missing_account(self, actor):
        result = update_account(actor, 999999, code="1", name="x", account_type="asset")

        assert isinstance(result.error, NotFoundError)


@pytest.mark.django_db
class TestDeactivateAccount:

    def test_deactivate_unused_account(self, actor, bank_account):
        result = deactivate_account(actor, bank_account.pk)

        assert result.success
        bank_account.refresh_from_db()
        assert bank_account.is_active is False

    def test_deactivate_with_entries_rejected(self, actor, post, make_entry, cash_account, revenue_account):
        post([make_entry(cash_account, debit=5), make_entry(revenue_account, credit=5)])

        result = deactivate_account(actor, cash_account.pk)

        assert isinstance(result.error, HasEntriesError)
        cash_account.refresh_from_db()
        assert cash_account.is_active is True


@pytest.mark.django_db
class TestSeedChart:

    def test_seed_empty_registry(self):
        created = seed_default_chart()

        assert created == len(DEFAULT_CHART)
        cash = Account.objects.get(code="1110")
        assert cash.role == Account.Role.CASH
        assert cash.parent.code == "1100"
        assert Account.objects.get(code="2110").role == Account.Role.PAYABLE
        assert all(balance == 0 for balance in Account.objects.values_list("balance", flat=True))

    def test_seed_skips_non_empty_registry(self, cash_account):
        assert seed_default_chart() == 0
        assert Account.objects.count() == 1

    def test_seed_force_adds_missing_codes(self, cash_account):
        created = seed_default_chart(force=True)

        assert created == len(DEFAULT_CHART) - 1
        assert Account.objects.filter(code="1110").count() == 1
