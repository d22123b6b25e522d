# ledger/views.py
"""
Thin views over the ledger engine.

Views handle: HTTP parsing, authentication, response formatting.
Commands and queries handle: business rules, tenant scoping, persistence.

Ledger errors are mapped to HTTP responses in one place (ledger_error_response)
so every endpoint reports a misconfigured chart of accounts the same way.
"""

import logging

from django.http import Http404
from django.utils.dateparse import parse_date
from django.utils import timezone
from rest_framework import status
from rest_framework.negotiation import DefaultContentNegotiation
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.exceptions import ValidationError as DRFValidationError

from accounts.authz import resolve_actor, require
from .commands import create_ledger_account, deactivate_ledger_account, reconcile_transaction
from .exceptions import (
    ChartOfAccountsError,
    DocumentNotFoundError,
    DuplicatePostingError,
    InvalidPostingError,
    LedgerError,
    TransactionNotFoundError,
)
from .models import LedgerAccount, Transaction
from .queries import account_balances, query_trail, transaction_summary, trial_balance
from .serializers import (
    LedgerAccountBalanceSerializer,
    LedgerAccountCreateSerializer,
    LedgerAccountSerializer,
    TrailQuerySerializer,
    TransactionDetailSerializer,
    TransactionSerializer,
    TransactionSummarySerializer,
    TrialBalanceSerializer,
)


logger = logging.getLogger(__name__)


def ledger_error_response(exc: LedgerError) -> Response:
    if isinstance(exc, ChartOfAccountsError):
        return Response(
            {"detail": str(exc), "code": "chart_of_accounts_incomplete"},
            status=status.HTTP_409_CONFLICT,
        )
    if isinstance(exc, (DocumentNotFoundError, TransactionNotFoundError)):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, (InvalidPostingError, DuplicatePostingError)):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    logger.error("Ledger unavailable", exc_info=exc)
    return Response(
        {"detail": "The ledger could not complete the request. Please retry."},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


class LedgerAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        if isinstance(exc, LedgerError):
            return ledger_error_response(exc)
        return super().handle_exception(exc)


class ExportContentNegotiation(DefaultContentNegotiation):
    """Export views use ``?format=`` for the file type, not the renderer."""

    def select_renderer(self, request, renderers, format_suffix=None):
        renderer = renderers[0]
        return renderer, renderer.media_type


def _as_of(request):
    raw = request.query_params.get("as_of")
    if not raw:
        return None
    try:
        parsed = parse_date(raw)
    except ValueError:
        parsed = None
    if parsed is None:
        raise DRFValidationError({"as_of": "Expected a date in YYYY-MM-DD format."})
    return parsed


def _trail_filters(params: dict) -> dict:
    query = TrailQuerySerializer(data=params)
    query.is_valid(raise_exception=True)
    data = query.validated_data
    return {
        "date_from": data.get("start_date"),
        "date_to": data.get("end_date"),
        "source": data.get("source"),
        "search": data.get("search") or None,
        "reconciled": data.get("reconciled"),
    }


# =============================================================================
# Transaction Views
# =============================================================================

class TransactionTrailView(LedgerAPIView):
    """
    GET /api/ledger/transactions/ -> transaction trail for the active company

    Query params: start_date, end_date, source (or "all"), search, reconciled
    """

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "ledger.view")

        rows = query_trail(actor.company, **_trail_filters(request.query_params.dict()))
        return Response(TransactionSerializer(rows, many=True).data)


class TransactionSummaryView(LedgerAPIView):
    """GET /api/ledger/transactions/summary/ -> counts and totals per source"""

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "ledger.view")

        filters = _trail_filters(request.query_params.dict())
        summary = transaction_summary(
            actor.company,
            date_from=filters["date_from"],
            date_to=filters["date_to"],
        )
        return Response(TransactionSummarySerializer(summary).data)


class TransactionExportView(LedgerAPIView):
    """
    GET /api/ledger/transactions/export/ -> trail as a file

    Query params: format (xlsx, csv, txt; default xlsx) plus the trail filters
    """
    content_negotiation_class = ExportContentNegotiation

    def get(self, request):
        from .exports import (
            TRAIL_EXPORT_COLUMNS,
            ExportFormat,
            create_export_response,
            prepare_trail_export_data,
        )

        actor = resolve_actor(request)
        require(actor, "reports.export")

        params = request.query_params.copy()
        export_format = params.pop("format", [ExportFormat.EXCEL])[-1]
        if export_format not in ExportFormat.CHOICES:
            return Response(
                {"detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        rows = query_trail(actor.company, **_trail_filters(params.dict()))

        timestamp = timezone.now().strftime("%Y%m%d_%H%M%S")
        return create_export_response(
            data=prepare_trail_export_data(rows),
            columns=TRAIL_EXPORT_COLUMNS,
            format=export_format,
            filename=f"transaction_trail_{timestamp}",
            title="Transaction Trail",
        )


class TransactionDetailView(LedgerAPIView):
    """GET /api/ledger/transactions/<id>/ -> header with both lines"""

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "ledger.view")

        txn = (
            Transaction.objects.filter(company=actor.company, pk=pk)
            .select_related("debit_account", "credit_account", "reconciled_by")
            .prefetch_related("lines__account")
            .first()
        )
        if txn is None:
            raise TransactionNotFoundError(pk)
        return Response(TransactionDetailSerializer(txn).data)


class TransactionReconcileView(LedgerAPIView):
    """
    POST /api/ledger/transactions/<id>/reconcile/ -> mark reconciled

    Repeating the call is harmless and keeps the first reconciliation time.
    """

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "ledger.reconcile")

        txn = reconcile_transaction(pk, actor.user, company=actor.company)
        return Response(TransactionSerializer(txn).data)


# =============================================================================
# Chart of Accounts Views
# =============================================================================

class LedgerAccountListCreateView(LedgerAPIView):
    """
    GET /api/ledger/accounts/ -> accounts with computed balances
    POST /api/ledger/accounts/ -> create account
    """

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        as_of = _as_of(request)
        rows = account_balances(actor.company, as_of=as_of)
        return Response(LedgerAccountBalanceSerializer(rows, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        # Permission check happens in command

        input_serializer = LedgerAccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_ledger_account(actor, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(LedgerAccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class LedgerAccountDetailView(LedgerAPIView):
    """
    GET /api/ledger/accounts/<code>/ -> account with balance
    DELETE /api/ledger/accounts/<code>/ -> deactivate (accounts are never deleted)
    """

    def get(self, request, code):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        account = LedgerAccount.objects.filter(company=actor.company, code=code).first()
        if account is None:
            raise Http404
        data = LedgerAccountSerializer(account).data
        data["balance"] = str(account.get_balance())
        return Response(data)

    def delete(self, request, code):
        actor = resolve_actor(request)

        result = deactivate_ledger_account(actor, code)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_404_NOT_FOUND)
        return Response(LedgerAccountSerializer(result.data).data)


class LedgerAccountExportView(LedgerAPIView):
    """GET /api/ledger/accounts/export/?format=xlsx|csv|txt"""
    content_negotiation_class = ExportContentNegotiation

    def get(self, request):
        from .exports import (
            ACCOUNT_EXPORT_COLUMNS,
            ExportFormat,
            create_export_response,
            prepare_account_export_data,
        )

        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format = request.query_params.get("format", ExportFormat.EXCEL)
        if export_format not in ExportFormat.CHOICES:
            return Response(
                {"detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        timestamp = timezone.now().strftime("%Y%m%d_%H%M%S")
        return create_export_response(
            data=prepare_account_export_data(account_balances(actor.company)),
            columns=ACCOUNT_EXPORT_COLUMNS,
            format=export_format,
            filename=f"chart_of_accounts_{timestamp}",
            title="Chart of Accounts",
        )


class TrialBalanceView(LedgerAPIView):
    """GET /api/ledger/trial-balance/?as_of=YYYY-MM-DD"""

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        as_of = _as_of(request)
        return Response(TrialBalanceSerializer(trial_balance(actor.company, as_of=as_of)).data)
