"""
Views for daily production reports and the general report.

API Endpoints:
- /api/daily-reports/                               - List (?warehouse=) / integrated create
- /api/daily-reports/{id}/                          - Retrieve/update/delete
- /api/daily-reports/{id}/toggle-checked/           - Flip the reviewed flag
- /api/daily-reports/{id}/attachments/              - List/upload attachments
- /api/daily-reports/{id}/attachments/{att_id}/     - Delete an attachment
- /api/daily-reports/monthly-feed/                  - Monthly feed preview
- /api/daily-reports/chicks-before/                 - chicks_before for a new report
- /api/daily-reports/general/daily/                 - Daily summaries (paginated)
- /api/daily-reports/general/weekly/                - Weekly summaries
- /api/daily-reports/general/monthly/               - Monthly summaries
- /api/daily-reports/general/overall/               - Overall statistics
"""

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import generics, status, permissions
from rest_framework.pagination import PageNumberPagination
from rest_framework.views import APIView
from rest_framework.response import Response
from decimal import Decimal, InvalidOperation
import logging

from accounts.permissions import IsAdminOrFarmer, IsNotFarmer
from core.attachments import AttachmentViewMixin
from core.params import date_param, uuid_param
from farms.models import Warehouse
from farms.scoping import FarmScopedMixin, check_warehouse_access, check_warehouse_read_access
from inventory.services import InventoryError
from .models import DailyReport, DailyReportAttachment
from .reports import GeneralReportService, summarize_row
from .serializers import (
    DailyReportSerializer,
    DailyReportUpdateSerializer,
    IntegratedDailyReportSerializer,
)
from .services import IntegratedDailyReportService, get_chicks_before, get_monthly_feed

logger = logging.getLogger(__name__)


class ReportPagination(PageNumberPagination):
    """Ten reports per page."""
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100


def get_report(user, pk, write=False):
    report = get_object_or_404(DailyReport.objects.select_related('warehouse__farm'), pk=pk)
    if write:
        check_warehouse_access(user, report.warehouse)
    else:
        check_warehouse_read_access(user, report.warehouse)
    return report


def forbidden(e):
    return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)


# =============================================================================
# DAILY REPORTS
# =============================================================================

class DailyReportListCreateView(FarmScopedMixin, generics.ListCreateAPIView):
    """
    GET  /api/daily-reports/?warehouse=
    POST /api/daily-reports/   (integrated create)
    """
    queryset = DailyReport.objects.select_related('warehouse__farm').prefetch_related('attachments')
    serializer_class = DailyReportSerializer
    pagination_class = ReportPagination

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdminOrFarmer()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = super().get_queryset()
        warehouse_id = uuid_param(self.request, 'warehouse')
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)
        return queryset.order_by('-report_date', '-report_time')

    def create(self, request, *args, **kwargs):
        serializer = IntegratedDailyReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        try:
            result = IntegratedDailyReportService(request.user).create_report(**data)
        except PermissionDenied as e:
            return forbidden(e)
        except (ValueError, InventoryError) as e:
            logger.warning(f"Daily report for warehouse {data['warehouse'].pk} rejected: {e}")
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': 'Daily report and invoices created successfully',
            'report': DailyReportSerializer(result['report'], context={'request': request}).data,
            'invoice_ids': [str(invoice.id) for invoice in result['invoices']],
            'consumption_invoice_id': (
                str(result['consumption_invoice'].id) if result['consumption_invoice'] else None
            ),
        }, status=status.HTTP_201_CREATED)


class DailyReportDetailView(APIView):
    """
    GET    /api/daily-reports/{id}/
    PATCH  /api/daily-reports/{id}/   (admin or owning farmer)
    DELETE /api/daily-reports/{id}/   (not farmers)
    """

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [IsNotFarmer()]
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.IsAuthenticated()]
        return [IsAdminOrFarmer()]

    def get(self, request, pk):
        try:
            report = get_report(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return Response(DailyReportSerializer(report, context={'request': request}).data)

    def patch(self, request, pk):
        try:
            report = get_report(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        serializer = DailyReportUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        report = IntegratedDailyReportService(request.user).update_report(report, **serializer.validated_data)
        return Response(DailyReportSerializer(report, context={'request': request}).data)

    put = patch

    def delete(self, request, pk):
        report = get_object_or_404(DailyReport, pk=pk)
        report.delete()
        logger.info(f"Daily report {pk} deleted by {request.user.username}")
        return Response({'message': 'Daily report deleted successfully'})


class DailyReportToggleCheckedView(APIView):
    """POST /api/daily-reports/{id}/toggle-checked/"""
    permission_classes = [IsNotFarmer]

    def post(self, request, pk):
        report = get_object_or_404(DailyReport, pk=pk)
        report = IntegratedDailyReportService(request.user).toggle_checked(report)
        return Response({'message': 'Report status updated', 'checked': report.checked})


# =============================================================================
# PREVIEWS
# =============================================================================

class MonthlyFeedPreviewView(APIView):
    """
    GET /api/daily-reports/monthly-feed/?warehouse=&date=YYYY-MM-DD&daily_feed=

    What feed_monthly_kg would be for a report on ``date``.
    """

    def get(self, request):
        warehouse = get_object_or_404(Warehouse.objects.select_related('farm'),
                                      pk=uuid_param(request, 'warehouse', required=True))
        try:
            check_warehouse_read_access(request.user, warehouse)
        except PermissionDenied as e:
            return forbidden(e)

        report_date = date_param(request, 'date', required=True)

        try:
            daily_feed = Decimal(request.query_params.get('daily_feed') or '0')
        except InvalidOperation:
            return Response({'error': 'daily_feed must be a number'}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'feed_monthly_kg': get_monthly_feed(warehouse, report_date, daily_feed)})


class ChicksBeforePreviewView(APIView):
    """GET /api/daily-reports/chicks-before/?warehouse="""
    permission_classes = [IsAdminOrFarmer]

    def get(self, request):
        warehouse = get_object_or_404(Warehouse.objects.select_related('farm'),
                                      pk=uuid_param(request, 'warehouse', required=True))
        try:
            check_warehouse_access(request.user, warehouse)
        except PermissionDenied as e:
            return forbidden(e)
        return Response({'chicks_before': get_chicks_before(warehouse)})


# =============================================================================
# ATTACHMENTS
# =============================================================================

class DailyReportAttachmentsView(AttachmentViewMixin, APIView):
    attachment_model = DailyReportAttachment
    owner_field = 'daily_report'

    def get(self, request, pk):
        try:
            report = get_report(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return self.list_attachments(request, report)

    def post(self, request, pk):
        try:
            report = get_report(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.upload_attachment(request, report)


class DailyReportAttachmentDeleteView(AttachmentViewMixin, APIView):
    permission_classes = [IsAdminOrFarmer]
    attachment_model = DailyReportAttachment
    owner_field = 'daily_report'

    def delete(self, request, pk, attachment_id):
        try:
            report = get_report(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.delete_attachment(request, report, attachment_id)


# =============================================================================
# GENERAL REPORT
# =============================================================================

class GeneralReportMixin:
    """Builds a GeneralReportService from ?farm=&start_date=&end_date=&period=."""

    def get_service(self, request):
        params = request.query_params
        return GeneralReportService(
            request.user,
            farm_id=uuid_param(request, 'farm'),
            start_date=date_param(request, 'start_date'),
            end_date=date_param(request, 'end_date'),
            period=params.get('period') or None,
        )


class GeneralDailySummaryView(GeneralReportMixin, APIView):
    """GET /api/daily-reports/general/daily/"""

    def get(self, request):
        try:
            service = self.get_service(request)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        paginator = ReportPagination()
        page = paginator.paginate_queryset(service.get_queryset(), request, view=self)
        return paginator.get_paginated_response([summarize_row(report) for report in page])


class GeneralWeeklySummaryView(GeneralReportMixin, APIView):
    """GET /api/daily-reports/general/weekly/"""

    def get(self, request):
        try:
            return Response(self.get_service(request).get_weekly())
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class GeneralMonthlySummaryView(GeneralReportMixin, APIView):
    """GET /api/daily-reports/general/monthly/"""

    def get(self, request):
        try:
            return Response(self.get_service(request).get_monthly())
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class GeneralOverallView(GeneralReportMixin, APIView):
    """GET /api/daily-reports/general/overall/"""

    def get(self, request):
        try:
            return Response(self.get_service(request).get_overall())
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
