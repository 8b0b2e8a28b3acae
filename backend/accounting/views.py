# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, balance maintenance.

All mutations (create, update, delete, post, void) go through commands
so that balances stay consistent with entries. Views never call .save()
on ledger models.
"""

import math

from django.conf import settings
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from .balances import account_summary
from .commands import (
    # Account commands
    create_account,
    update_account,
    deactivate_account,
    # Transaction commands
    post_transaction,
    amend_transaction,
    void_transaction,
    # Voucher commands
    create_voucher,
    update_voucher,
    delete_voucher,
    approve_voucher,
    post_voucher,
)
from .exports import (
    ACCOUNT_EXPORT_COLUMNS,
    ENTRY_EXPORT_COLUMNS,
    TRANSACTION_EXPORT_COLUMNS,
    ExportFormat,
    account_export_rows,
    create_export_response,
    entry_export_rows,
    transaction_export_rows,
)
from .models import Account, Transaction, Voucher
from .serializers import (
    AccountInputSerializer,
    AccountSerializer,
    TransactionInputSerializer,
    TransactionSerializer,
    VoucherInputSerializer,
    VoucherPostSerializer,
    VoucherSerializer,
)
from .validation import to_date


def error_response(result) -> Response:
    """Render a failed CommandResult."""
    return Response(result.error.to_dict(), status=result.error.status_code)


def _positive_int(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def paginate(request, queryset, serializer_class, key: str) -> Response:
    """
    Page a queryset with ?page=&limit=.

    Response: {<key>: [...], "pagination": {page, limit, total, pages}}
    """
    page = _positive_int(request.query_params.get("page"), 1)
    limit = _positive_int(request.query_params.get("limit"), settings.LEDGER_PAGE_SIZE)
    offset = (page - 1) * limit

    total = queryset.count()
    items = queryset[offset:offset + limit]

    return Response({
        key: serializer_class(items, many=True).data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    })


def _export_format(request):
    export_format = request.query_params.get("format", ExportFormat.EXCEL)
    if export_format not in ExportFormat.CHOICES:
        return None, Response(
            {"detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return export_format, None


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounting/accounts/ -> list active accounts ordered by code
    POST /api/accounting/accounts/ -> create account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        accounts = Account.objects.select_related("parent").order_by("code")
        if request.query_params.get("include_inactive", "false").lower() != "true":
            accounts = accounts.filter(is_active=True)
        return Response(AccountSerializer(accounts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        # Permission check happens in command

        input_serializer = AccountInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.to_command_kwargs())
        if not result.success:
            return error_response(result)

        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDetailView(APIView):
    """
    GET /api/accounting/accounts/<pk>/ -> retrieve
    PUT /api/accounting/accounts/<pk>/ -> update (full replace)
    DELETE /api/accounting/accounts/<pk>/ -> deactivate
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        account = get_object_or_404(Account.objects.select_related("parent"), pk=pk)
        return Response(AccountSerializer(account).data)

    def put(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = AccountInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = update_account(actor, pk, **input_serializer.to_command_kwargs())
        if not result.success:
            return error_response(result)

        return Response(AccountSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = deactivate_account(actor, pk)
        if not result.success:
            return error_response(result)

        return Response({"detail": "Account deactivated."})


class AccountBalanceView(APIView):
    """GET /api/accounting/accounts/<pk>/balance/ -> totals recomputed from entries"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        account = get_object_or_404(Account, pk=pk)
        return Response(account_summary(account))


class AccountExportView(APIView):
    """
    GET /api/accounting/accounts/export/ -> export chart of accounts

    Query params:
        format: xlsx, csv (default: xlsx)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format, error = _export_format(request)
        if error:
            return error

        accounts = Account.objects.select_related("parent").order_by("code")
        return create_export_response(
            rows=account_export_rows(accounts),
            columns=ACCOUNT_EXPORT_COLUMNS,
            format=export_format,
            filename=f"chart_of_accounts_{timezone.now():%Y%m%d_%H%M%S}",
            title="Chart of Accounts",
        )


# =============================================================================
# Transaction Views
# =============================================================================

def _transactions():
    return Transaction.objects.select_related("created_by").prefetch_related("entries__account")


class TransactionListCreateView(APIView):
    """
    GET /api/accounting/transactions/?page=&limit= -> paginated, newest first
    POST /api/accounting/transactions/ -> post a transaction
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        return paginate(
            request,
            _transactions().order_by("-date", "-id"),
            TransactionSerializer,
            "transactions",
        )

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = TransactionInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = post_transaction(actor, **input_serializer.to_command_kwargs())
        if not result.success:
            return error_response(result)

        txn = _transactions().get(pk=result.data.pk)
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


class TransactionDetailView(APIView):
    """
    GET /api/accounting/transactions/<pk>/ -> retrieve
    PUT /api/accounting/transactions/<pk>/ -> amend (replace all entries)
    DELETE /api/accounting/transactions/<pk>/ -> void
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        txn = get_object_or_404(_transactions(), pk=pk)
        return Response(TransactionSerializer(txn).data)

    def put(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = TransactionInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = amend_transaction(actor, pk, **input_serializer.to_command_kwargs())
        if not result.success:
            return error_response(result)

        txn = _transactions().get(pk=result.data.pk)
        return Response(TransactionSerializer(txn).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = void_transaction(actor, pk)
        if not result.success:
            return error_response(result)

        return Response({"detail": "Transaction voided.", **result.data})


class TransactionExportView(APIView):
    """
    GET /api/accounting/transactions/export/ -> export transactions

    Query params:
        format: xlsx, csv (default: xlsx)
        detail: summary/entries (default: summary)
        date_from, date_to: optional YYYY-MM-DD bounds
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format, error = _export_format(request)
        if error:
            return error

        detail_level = request.query_params.get("detail", "summary")
        if detail_level not in ("summary", "entries"):
            return Response(
                {"detail": "Invalid detail level. Must be 'summary' or 'entries'."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        transactions = _transactions().order_by("date", "id")
        date_from = request.query_params.get("date_from")
        date_to = request.query_params.get("date_to")
        if date_from:
            transactions = transactions.filter(date__gte=to_date(date_from, "date_from"))
        if date_to:
            transactions = transactions.filter(date__lte=to_date(date_to, "date_to"))

        if detail_level == "entries":
            rows, columns, title = entry_export_rows(transactions), ENTRY_EXPORT_COLUMNS, "Transaction Entries"
        else:
            rows, columns, title = transaction_export_rows(transactions), TRANSACTION_EXPORT_COLUMNS, "Transactions"

        return create_export_response(
            rows=rows,
            columns=columns,
            format=export_format,
            filename=f"transactions_{timezone.now():%Y%m%d_%H%M%S}",
            title=title,
        )


# =============================================================================
# Voucher Views
# =============================================================================

class VoucherListCreateView(APIView):
    """
    GET /api/accounting/vouchers/?type=&page=&limit= -> paginated list
    POST /api/accounting/vouchers/ -> create draft voucher
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        vouchers = Voucher.objects.select_related("transaction").order_by("-date", "-id")
        voucher_type = request.query_params.get("type")
        if voucher_type:
            vouchers = vouchers.filter(voucher_type=voucher_type)
        return paginate(request, vouchers, VoucherSerializer, "vouchers")

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = VoucherInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = create_voucher(
            actor,
            voucher_type=data.get("type", ""),
            date=data["date"],
            amount=data["amount"],
            payee=data["payee"],
            description=data["description"],
        )
        if not result.success:
            return error_response(result)

        return Response(VoucherSerializer(result.data).data, status=status.HTTP_201_CREATED)


class VoucherDetailView(APIView):
    """
    GET /api/accounting/vouchers/<pk>/
    PUT /api/accounting/vouchers/<pk>/ -> edit (not once posted)
    DELETE /api/accounting/vouchers/<pk>/ -> delete (not once posted)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "vouchers.view")

        voucher = get_object_or_404(Voucher.objects.select_related("transaction"), pk=pk)
        return Response(VoucherSerializer(voucher).data)

    def put(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = VoucherInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = update_voucher(
            actor,
            pk,
            date=data["date"],
            amount=data["amount"],
            payee=data["payee"],
            description=data["description"],
            voucher_type=data.get("type"),
        )
        if not result.success:
            return error_response(result)

        return Response(VoucherSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = delete_voucher(actor, pk)
        if not result.success:
            return error_response(result)

        return Response({"detail": "Voucher deleted."})


class VoucherApproveView(APIView):
    """POST /api/accounting/vouchers/<pk>/approve/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = approve_voucher(actor, pk)
        if not result.success:
            return error_response(result)

        return Response(VoucherSerializer(result.data).data)


class VoucherPostView(APIView):
    """
    POST /api/accounting/vouchers/<pk>/post/

    Optional body {debit_account_id, credit_account_id} also posts the
    voucher amount to the ledger.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = VoucherPostSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = post_voucher(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        return Response(VoucherSerializer(result.data).data)
