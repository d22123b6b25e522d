"""
Export utilities for ledger data.
Supports Excel (.xlsx), CSV (.csv), and Text (.txt) formats.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    TXT = 'txt'

    CHOICES = [EXCEL, CSV, TXT]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        TXT: 'text/plain',
    }


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def export_to_excel(data: list[dict], columns: list[dict], title: str = 'Export', sheet_name: str = 'Data') -> bytes:
    """
    Render rows as an .xlsx workbook: a title row, an export timestamp,
    then a styled header row with frozen panes below it.

    Numeric columns are written as numbers so totals can be summed in
    the spreadsheet.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='2F5597', end_color='2F5597', fill_type='solid')
    thin = Side(style='thin')
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    stamp = ws.cell(row=2, column=1, value=f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    stamp.alignment = Alignment(horizontal='center')
    stamp.font = Font(italic=True, size=10, color='666666')

    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        cell.border = border
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, col in enumerate(columns, 1):
            value = row_data.get(col['key'], '')
            if col.get('numeric') and isinstance(value, Decimal):
                cell = ws.cell(row=row_idx, column=col_idx, value=float(value))
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
            else:
                cell = ws.cell(row=row_idx, column=col_idx, value=format_value(value))
            cell.border = border

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_to_csv(data: list[dict], columns: list[dict], delimiter: str = ',') -> str:
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL)
    writer.writerow([col['header'] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])
    return output.getvalue()


def export_to_txt(data: list[dict], columns: list[dict], separator: str = '  ') -> str:
    """Fixed-width text table, columns capped at 50 characters."""
    widths = []
    for col in columns:
        width = max(
            [len(col['header'])] + [len(format_value(row.get(col['key'], ''))) for row in data]
        )
        widths.append(min(width, 50))

    def render(values):
        parts = []
        for value, width, col in zip(values, widths, columns):
            if len(value) > width:
                value = value[:width - 3] + '...'
            parts.append(value.rjust(width) if col.get('numeric') else value.ljust(width))
        return separator.join(parts).rstrip()

    lines = [
        render([col['header'] for col in columns]),
        separator.join('-' * width for width in widths),
    ]
    for row in data:
        lines.append(render([format_value(row.get(col['key'], '')) for col in columns]))
    return '\n'.join(lines)


def create_export_response(data: list[dict], columns: list[dict], format: str, filename: str, title: str = 'Export') -> HttpResponse:
    """
    Build an attachment response for ``format`` (xlsx, csv or txt).

    Raises:
        ValueError: unknown format
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]

    if format == ExportFormat.EXCEL:
        response = HttpResponse(export_to_excel(data, columns, title=title), content_type=content_type)
    elif format == ExportFormat.CSV:
        response = HttpResponse(export_to_csv(data, columns), content_type=content_type)
        response.charset = 'utf-8-sig'  # BOM for Excel
    else:
        response = HttpResponse(export_to_txt(data, columns), content_type=content_type)

    response['Content-Disposition'] = f'attachment; filename="{filename}.{format}"'
    return response


# =============================================================================
# Transaction Trail
# =============================================================================

TRAIL_EXPORT_COLUMNS = [
    {'key': 'transaction_number', 'header': 'Transaction #', 'width': 18},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'source', 'header': 'Source', 'width': 12},
    {'key': 'source_reference', 'header': 'Document', 'width': 16},
    {'key': 'description', 'header': 'Description', 'width': 40},
    {'key': 'debit_account', 'header': 'Debit Account', 'width': 28},
    {'key': 'credit_account', 'header': 'Credit Account', 'width': 28},
    {'key': 'amount', 'header': 'Amount', 'width': 15, 'numeric': True},
    {'key': 'currency', 'header': 'Currency', 'width': 8},
    {'key': 'reconciled', 'header': 'Reconciled', 'width': 10},
    {'key': 'reference', 'header': 'Reference', 'width': 16},
]


def prepare_trail_export_data(transactions) -> list[dict]:
    """Flatten trail rows (debit/credit accounts already joined)."""
    return [
        {
            'transaction_number': txn.transaction_number,
            'date': txn.date,
            'source': txn.get_source_display(),
            'source_reference': txn.source_reference,
            'description': txn.description,
            'debit_account': f"{txn.debit_account.code} - {txn.debit_account.name}",
            'credit_account': f"{txn.credit_account.code} - {txn.credit_account.name}",
            'amount': txn.total_amount,
            'currency': txn.currency,
            'reconciled': txn.reconciled,
            'reference': txn.reference,
        }
        for txn in transactions
    ]


# =============================================================================
# Chart of Accounts
# =============================================================================

ACCOUNT_EXPORT_COLUMNS = [
    {'key': 'code', 'header': 'Account Code', 'width': 14},
    {'key': 'name', 'header': 'Account Name', 'width': 30},
    {'key': 'account_type', 'header': 'Account Type', 'width': 14},
    {'key': 'normal_balance', 'header': 'Normal Balance', 'width': 14},
    {'key': 'is_active', 'header': 'Active', 'width': 8},
    {'key': 'opening_balance', 'header': 'Opening Balance', 'width': 16, 'numeric': True},
    {'key': 'balance', 'header': 'Balance', 'width': 16, 'numeric': True},
]


def prepare_account_export_data(balance_rows) -> list[dict]:
    """Rows from ledger.queries.account_balances."""
    return [
        {key: row[key] for key in (
            'code', 'name', 'account_type', 'normal_balance',
            'is_active', 'opening_balance', 'balance',
        )}
        for row in balance_rows
    ]
