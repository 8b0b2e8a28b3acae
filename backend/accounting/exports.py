"""
Spreadsheet export for ledger data.
Supports Excel (.xlsx) and CSV (.csv).

Column definitions are lists of {'key', 'header', 'width'?, 'numeric'?};
rows are plain dicts keyed by column key.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'

    CHOICES = [EXCEL, CSV]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
    }


def cell_value(value: Any, numeric: bool = False):
    """Normalize a value for a spreadsheet cell. Numeric columns stay numbers in xlsx."""
    if value is None:
        return ''
    if isinstance(value, Decimal):
        return float(value) if numeric else str(value)
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return value


def export_to_excel(rows: list[dict], columns: list[dict], title: str = 'Export') -> bytes:
    """Render rows as a single-sheet workbook with a title line and a bold header."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=13)
    ws.cell(row=2, column=1, value=f"Exported {timezone.now():%Y-%m-%d %H:%M} UTC").font = Font(
        italic=True, size=9, color='666666',
    )

    header_row = 4
    header_fill = PatternFill(start_color='DDEBF7', end_color='DDEBF7', fill_type='solid')
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = Font(bold=True)
        cell.fill = header_fill
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row in enumerate(rows, header_row + 1):
        for col_idx, col in enumerate(columns, 1):
            numeric = col.get('numeric', False)
            cell = ws.cell(row=row_idx, column=col_idx, value=cell_value(row.get(col['key']), numeric))
            if numeric:
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_to_csv(rows: list[dict], columns: list[dict]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([col['header'] for col in columns])
    for row in rows:
        writer.writerow([cell_value(row.get(col['key'])) for col in columns])
    return output.getvalue()


def create_export_response(
    rows: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
) -> HttpResponse:
    """
    Build a download response.

    Args:
        rows: Row dicts
        columns: Column definitions
        format: ExportFormat.EXCEL or ExportFormat.CSV
        filename: Base filename (without extension)
        title: Sheet title for Excel

    Raises:
        ValueError: unknown format
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    if format == ExportFormat.EXCEL:
        response = HttpResponse(
            export_to_excel(rows, columns, title=title),
            content_type=ExportFormat.CONTENT_TYPES[format],
        )
    else:
        response = HttpResponse(
            export_to_csv(rows, columns),
            content_type=ExportFormat.CONTENT_TYPES[format],
            charset='utf-8-sig',  # BOM for Excel
        )

    response['Content-Disposition'] = f'attachment; filename="{filename}.{format}"'
    return response


# =============================================================================
# Chart of Accounts
# =============================================================================

ACCOUNT_EXPORT_COLUMNS = [
    {'key': 'code', 'header': 'Account Code', 'width': 14},
    {'key': 'name', 'header': 'Account Name', 'width': 32},
    {'key': 'account_type', 'header': 'Type', 'width': 12},
    {'key': 'role', 'header': 'Role', 'width': 12},
    {'key': 'parent_code', 'header': 'Parent Code', 'width': 14},
    {'key': 'is_active', 'header': 'Active', 'width': 8},
    {'key': 'balance', 'header': 'Balance', 'width': 16, 'numeric': True},
]


def account_export_rows(accounts) -> list[dict]:
    return [
        {
            'code': account.code,
            'name': account.name,
            'account_type': account.account_type,
            'role': account.role,
            'parent_code': account.parent.code if account.parent_id else '',
            'is_active': account.is_active,
            'balance': account.balance,
        }
        for account in accounts
    ]


# =============================================================================
# Transactions
# =============================================================================

TRANSACTION_EXPORT_COLUMNS = [
    {'key': 'transaction_number', 'header': 'Transaction #', 'width': 14},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'description', 'header': 'Description', 'width': 36},
    {'key': 'reference', 'header': 'Reference', 'width': 16},
    {'key': 'total_amount', 'header': 'Total', 'width': 16, 'numeric': True},
    {'key': 'created_by', 'header': 'Created By', 'width': 24},
]

ENTRY_EXPORT_COLUMNS = [
    {'key': 'transaction_number', 'header': 'Transaction #', 'width': 14},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'account_code', 'header': 'Account Code', 'width': 14},
    {'key': 'account_name', 'header': 'Account Name', 'width': 30},
    {'key': 'description', 'header': 'Line Description', 'width': 30},
    {'key': 'debit_amount', 'header': 'Debit', 'width': 15, 'numeric': True},
    {'key': 'credit_amount', 'header': 'Credit', 'width': 15, 'numeric': True},
]


def transaction_export_rows(transactions) -> list[dict]:
    """One row per transaction header."""
    return [
        {
            'transaction_number': txn.transaction_number,
            'date': txn.date,
            'description': txn.description,
            'reference': txn.reference,
            'total_amount': txn.total_amount,
            'created_by': txn.created_by.email if txn.created_by_id else '',
        }
        for txn in transactions
    ]


def entry_export_rows(transactions) -> list[dict]:
    """One row per entry; expects entries__account to be prefetched."""
    rows = []
    for txn in transactions:
        for entry in txn.entries.all():
            rows.append({
                'transaction_number': txn.transaction_number,
                'date': txn.date,
                'account_code': entry.account.code,
                'account_name': entry.account.name,
                'description': entry.description,
                'debit_amount': entry.debit_amount,
                'credit_amount': entry.credit_amount,
            })
    return rows
