# reports/views.py
"""
Report endpoints.

Thin wrappers around reports.statements. Query parameters are passed
through as strings; the statement functions parse them and raise
LedgerError subclasses, which the exception handler renders.
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from . import statements


class ReportView(APIView):
    """Base class: authenticated, requires reports.view."""
    permission_classes = [IsAuthenticated]

    def check_report_permission(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        return actor


class TrialBalanceView(ReportView):
    """
    GET /api/reports/trial-balance/?as_of_date=YYYY-MM-DD

    as_of_date defaults to today.
    """

    def get(self, request):
        self.check_report_permission(request)
        return Response(statements.trial_balance(request.query_params.get("as_of_date")))


class BalanceSheetView(ReportView):
    """GET /api/reports/balance-sheet/?as_of_date=YYYY-MM-DD"""

    def get(self, request):
        self.check_report_permission(request)
        return Response(statements.balance_sheet(request.query_params.get("as_of_date")))


class ProfitAndLossView(ReportView):
    """
    GET /api/reports/profit-loss/?from_date=YYYY-MM-DD&to_date=YYYY-MM-DD

    from_date is required; to_date defaults to today.
    """

    def get(self, request):
        self.check_report_permission(request)
        return Response(statements.profit_and_loss(
            request.query_params.get("from_date"),
            request.query_params.get("to_date"),
        ))


class CashFlowView(ReportView):
    """GET /api/reports/cash-flow/?from_date=&to_date="""

    def get(self, request):
        self.check_report_permission(request)
        return Response(statements.cash_flow(
            request.query_params.get("from_date"),
            request.query_params.get("to_date"),
        ))


class AccountLedgerView(ReportView):
    """GET /api/reports/ledger/<account_id>/?from_date=&to_date="""

    def get(self, request, account_id):
        self.check_report_permission(request)
        return Response(statements.account_ledger(
            account_id,
            request.query_params.get("from_date"),
            request.query_params.get("to_date"),
        ))


class AgingView(ReportView):
    """GET /api/reports/aging/?type=receivable|payable&as_of_date="""

    def get(self, request):
        self.check_report_permission(request)
        return Response(statements.aging(
            request.query_params.get("as_of_date"),
            request.query_params.get("type", "receivable"),
        ))
