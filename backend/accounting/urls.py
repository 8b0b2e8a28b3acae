# accounting/urls.py
"""
URL configuration for accounting API.

Endpoints:
- /accounts/ - Chart of Accounts CRUD, export, balance summary
- /transactions/ - Post, amend, void and list ledger transactions
- /vouchers/ - Voucher CRUD with approve/post workflow actions
"""

from django.urls import path

from .views import (
    # Account views
    AccountListCreateView,
    AccountDetailView,
    AccountBalanceView,
    AccountExportView,
    # Transaction views
    TransactionListCreateView,
    TransactionDetailView,
    TransactionExportView,
    # Voucher views
    VoucherListCreateView,
    VoucherDetailView,
    VoucherApproveView,
    VoucherPostView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Accounts (Chart of Accounts)
    # ==========================================================================
    path(
        "accounts/",
        AccountListCreateView.as_view(),
        name="account-list-create",
    ),
    path(
        "accounts/export/",
        AccountExportView.as_view(),
        name="account-export",
    ),
    path(
        "accounts/<int:pk>/",
        AccountDetailView.as_view(),
        name="account-detail",
    ),
    path(
        "accounts/<int:pk>/balance/",
        AccountBalanceView.as_view(),
        name="account-balance",
    ),

    # ==========================================================================
    # Transactions
    # ==========================================================================
    path(
        "transactions/",
        TransactionListCreateView.as_view(),
        name="transaction-list-create",
    ),
    path(
        "transactions/export/",
        TransactionExportView.as_view(),
        name="transaction-export",
    ),
    path(
        "transactions/<int:pk>/",
        TransactionDetailView.as_view(),
        name="transaction-detail",
    ),

    # ==========================================================================
    # Vouchers
    # ==========================================================================
    path(
        "vouchers/",
        VoucherListCreateView.as_view(),
        name="voucher-list-create",
    ),
    path(
        "vouchers/<int:pk>/",
        VoucherDetailView.as_view(),
        name="voucher-detail",
    ),
    path(
        "vouchers/<int:pk>/approve/",
        VoucherApproveView.as_view(),
        name="voucher-approve",
    ),
    path(
        "vouchers/<int:pk>/post/",
        VoucherPostView.as_view(),
        name="voucher-post",
    ),
]
