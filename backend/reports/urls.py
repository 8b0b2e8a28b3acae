# reports/urls.py

from django.urls import path

from .views import (
    AccountLedgerView,
    AgingView,
    BalanceSheetView,
    CashFlowView,
    ProfitAndLossView,
    TrialBalanceView,
)

app_name = "reports"

urlpatterns = [
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("profit-loss/", ProfitAndLossView.as_view(), name="profit-loss"),
    path("cash-flow/", CashFlowView.as_view(), name="cash-flow"),
    path("aging/", AgingView.as_view(), name="aging"),
    path("ledger/<int:account_id>/", AccountLedgerView.as_view(), name="ledger"),
]
