# accounting/admin.py
"""
Django admin configuration for ledger models.

The admin is for viewing only. Account balances are maintained by the
command layer (accounting/commands.py); editing a balance, an entry or
a transaction here would break the invariant that every balance equals
the sum of its entries.
"""

from django.contrib import admin

from .models import Account, Entry, LedgerSequence, Transaction, Voucher


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Base admin class for ledger models. Changes go through the API."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class EntryInline(admin.TabularInline):
    model = Entry
    extra = 0
    fields = ["account", "description", "debit_amount", "credit_amount"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# Accounts
# =============================================================================

@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    list_display = ["code", "name", "account_type", "role", "parent", "balance", "is_active"]
    list_filter = ["account_type", "role", "is_active"]
    search_fields = ["code", "name"]
    list_select_related = ["parent"]
    ordering = ["code"]


# =============================================================================
# Transactions
# =============================================================================

@admin.register(Transaction)
class TransactionAdmin(ReadOnlyModelAdmin):
    list_display = ["transaction_number", "date", "description", "reference", "total_amount", "created_by"]
    search_fields = ["transaction_number", "description", "reference"]
    date_hierarchy = "date"
    list_select_related = ["created_by"]
    inlines = [EntryInline]


@admin.register(Voucher)
class VoucherAdmin(ReadOnlyModelAdmin):
    list_display = ["voucher_number", "voucher_type", "date", "payee", "amount", "status", "transaction"]
    list_filter = ["voucher_type", "status"]
    search_fields = ["voucher_number", "payee", "description"]
    date_hierarchy = "date"


@admin.register(LedgerSequence)
class LedgerSequenceAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "next_value", "updated_at"]
