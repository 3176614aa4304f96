"""
Views for medicine consumption invoices and medication alerts.

API Endpoints:
- /api/medications/consumption/                             - List/create consumption invoices
- /api/medications/consumption/{id}/                        - Retrieve/update/delete
- /api/medications/consumption/{id}/items/                  - List/create items
- /api/medications/consumption/items/{item_id}/             - Delete an item
- /api/medications/consumption/{id}/expenses/               - List/create expenses
- /api/medications/consumption/expenses/{expense_id}/       - Delete an expense
- /api/medications/consumption/{id}/attachments/            - List/upload attachments
- /api/medications/consumption/{id}/attachments/{att_id}/   - Delete an attachment
- /api/medications/alerts/                                  - Admin list (?farm=)
- /api/medications/alerts/summary/                          - Per-farm summary
- /api/medications/alerts/active/                           - Active alerts of a farm
- /api/medications/alerts/upcoming/                         - Upcoming alerts of the caller
- /api/medications/alerts/stats/                            - Farm alert stats
- /api/medications/alerts/chick-age/                        - Chick age in days
- /api/medications/alerts/{id}/                             - Retrieve/update notes
- /api/medications/alerts/{id}/administer/                  - Mark administered
- /api/medications/alerts/{id}/unadminister/                - Clear administered flag
"""

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import generics, status, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
import logging

from accounts.permissions import IsAdmin, IsAdminOrFarmer, IsAdminOrSubAdmin
from core.attachments import AttachmentViewMixin
from core.params import date_param, uuid_param
from farms.models import Farm
from farms.scoping import FarmScopedMixin, check_warehouse_access, check_warehouse_read_access, get_user_farm
from inventory.services import InventoryError
from .alerts import AlertError, MedicationAlertService, chick_age
from .models import (
    MedicineConsumptionInvoice,
    MedicineConsumptionItem,
    MedicineConsumptionExpense,
    MedicineConsumptionAttachment,
    MedicationAlert,
)
from .serializers import (
    MedicineConsumptionInvoiceSerializer,
    MedicineConsumptionInvoiceDetailSerializer,
    MedicineConsumptionItemSerializer,
    MedicineConsumptionItemCreateSerializer,
    MedicineConsumptionExpenseSerializer,
    MedicationAlertSerializer,
)
from .services import MedicineConsumptionService

logger = logging.getLogger(__name__)


def get_consumption_invoice(user, pk, write=False):
    invoice = get_object_or_404(
        MedicineConsumptionInvoice.objects.select_related('warehouse__farm', 'poultry_status'),
        pk=pk
    )
    if write:
        check_warehouse_access(user, invoice.warehouse)
    else:
        check_warehouse_read_access(user, invoice.warehouse)
    return invoice


def forbidden(e):
    return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)


# =============================================================================
# CONSUMPTION INVOICES
# =============================================================================

class ConsumptionInvoiceListCreateView(FarmScopedMixin, generics.ListCreateAPIView):
    """
    GET  /api/medications/consumption/   (?warehouse=)
    POST /api/medications/consumption/
    """
    queryset = MedicineConsumptionInvoice.objects.select_related('warehouse__farm', 'poultry_status')
    serializer_class = MedicineConsumptionInvoiceSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        warehouse_id = uuid_param(self.request, 'warehouse')
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)
        return queryset.order_by('-invoice_date', '-created_at')

    def create(self, request, *args, **kwargs):
        if request.user.role not in ('ADMIN', 'FARMER'):
            return Response(
                {'error': 'Unauthorized - Access denied'},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = MedicineConsumptionInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = MedicineConsumptionService(request.user).create_invoice(**serializer.validated_data)
        except PermissionDenied as e:
            return forbidden(e)

        return Response(
            MedicineConsumptionInvoiceDetailSerializer(invoice, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class ConsumptionInvoiceDetailView(APIView):
    """
    GET          /api/medications/consumption/{id}/
    PATCH/PUT    /api/medications/consumption/{id}/   (admin)
    DELETE       /api/medications/consumption/{id}/   (admin, reverses stock)
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def get(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return Response(MedicineConsumptionInvoiceDetailSerializer(invoice, context={'request': request}).data)

    def patch(self, request, pk):
        invoice = get_object_or_404(MedicineConsumptionInvoice, pk=pk)
        serializer = MedicineConsumptionInvoiceSerializer(invoice, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            invoice = MedicineConsumptionService(request.user).update_invoice(invoice, **serializer.validated_data)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MedicineConsumptionInvoiceDetailSerializer(invoice, context={'request': request}).data)

    put = patch

    def delete(self, request, pk):
        invoice = get_object_or_404(MedicineConsumptionInvoice.objects.select_related('warehouse'), pk=pk)
        try:
            MedicineConsumptionService(request.user).delete_invoice(invoice)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Medicine consumption invoice deleted successfully'})


# =============================================================================
# ITEMS
# =============================================================================

class ConsumptionItemListCreateView(APIView):
    """
    GET  /api/medications/consumption/{id}/items/
    POST /api/medications/consumption/{id}/items/
    """

    def get(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        items = invoice.items.select_related('medicine', 'unit')
        return Response(MedicineConsumptionItemSerializer(items, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        serializer = MedicineConsumptionItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = MedicineConsumptionService(request.user).add_item(invoice, **serializer.validated_data)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(MedicineConsumptionItemSerializer(item).data, status=status.HTTP_201_CREATED)


class ConsumptionItemDeleteView(APIView):
    """
    DELETE /api/medications/consumption/items/{item_id}/
    """
    permission_classes = [IsAdminOrFarmer]

    def delete(self, request, item_id):
        item = get_object_or_404(
            MedicineConsumptionItem.objects.select_related('consumption_invoice__warehouse__farm', 'medicine'),
            pk=item_id
        )
        try:
            check_warehouse_access(request.user, item.consumption_invoice.warehouse)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            MedicineConsumptionService(request.user).delete_item(item)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Item deleted successfully'})


# =============================================================================
# EXPENSES
# =============================================================================

class ConsumptionExpenseListCreateView(APIView):
    """
    GET  /api/medications/consumption/{id}/expenses/
    POST /api/medications/consumption/{id}/expenses/
    """

    def get(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        expenses = invoice.expenses.select_related('expense_type')
        return Response(MedicineConsumptionExpenseSerializer(expenses, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        serializer = MedicineConsumptionExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = serializer.save(consumption_invoice=invoice)
        return Response(MedicineConsumptionExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ConsumptionExpenseDeleteView(APIView):
    """
    DELETE /api/medications/consumption/expenses/{expense_id}/
    """
    permission_classes = [IsAdminOrFarmer]

    def delete(self, request, expense_id):
        expense = get_object_or_404(
            MedicineConsumptionExpense.objects.select_related('consumption_invoice__warehouse__farm'),
            pk=expense_id
        )
        try:
            check_warehouse_access(request.user, expense.consumption_invoice.warehouse)
        except PermissionDenied as e:
            return forbidden(e)
        expense.delete()
        return Response({'message': 'Expense deleted successfully'})


# =============================================================================
# ATTACHMENTS
# =============================================================================

class ConsumptionAttachmentsView(AttachmentViewMixin, APIView):
    attachment_model = MedicineConsumptionAttachment
    owner_field = 'consumption_invoice'

    def get(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return self.list_attachments(request, invoice)

    def post(self, request, pk):
        try:
            invoice = get_consumption_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.upload_attachment(request, invoice)


class ConsumptionAttachmentDeleteView(AttachmentViewMixin, APIView):
    permission_classes = [IsAdminOrFarmer]
    attachment_model = MedicineConsumptionAttachment
    owner_field = 'consumption_invoice'

    def delete(self, request, pk, attachment_id):
        try:
            invoice = get_consumption_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.delete_attachment(request, invoice, attachment_id)


# =============================================================================
# MEDICATION ALERTS
# =============================================================================

def resolve_alert_farm(request):
    """
    Farm whose alerts the caller asks for.

    Admins and sub-admins pass ?farm=; farmers always get their own farm.
    """
    user = request.user
    if user.role in ('ADMIN', 'SUB_ADMIN'):
        farm_id = uuid_param(request, 'farm')
        if not farm_id:
            raise ValueError("Farm is required")
        return get_object_or_404(Farm, pk=farm_id)

    farm = get_user_farm(user)
    if farm is None:
        raise PermissionDenied('No farm assigned to your account')
    return farm


def get_alert(user, pk, write=False):
    alert = get_object_or_404(
        MedicationAlert.objects.select_related('farm', 'medicine', 'poultry_status'), pk=pk
    )
    if user.role == 'ADMIN' or (user.role == 'SUB_ADMIN' and not write):
        return alert
    if user.role == 'FARMER' and alert.farm.user_id == user.pk:
        return alert
    raise PermissionDenied('Unauthorized - Alert does not belong to your farm')


class AlertListView(generics.ListAPIView):
    """
    GET /api/medications/alerts/   (?farm=)

    Every alert, newest schedule first.
    """
    serializer_class = MedicationAlertSerializer
    permission_classes = [IsAdminOrSubAdmin]

    def get_queryset(self):
        return MedicationAlertService(self.request.user).list_for_admin(
            uuid_param(self.request, 'farm')
        ).select_related('poultry_status')


class AlertSummaryView(APIView):
    """GET /api/medications/alerts/summary/"""
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(MedicationAlertService(request.user).get_summary())


class ActiveAlertsView(APIView):
    """
    GET /api/medications/alerts/active/   (?farm=&days_ahead=)
    """

    def get(self, request):
        try:
            farm = resolve_alert_farm(request)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PermissionDenied as e:
            return forbidden(e)

        days_ahead = request.query_params.get('days_ahead')
        if days_ahead is not None:
            if not days_ahead.isdigit():
                return Response(
                    {'error': 'days_ahead must be a non-negative integer'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            days_ahead = int(days_ahead)

        return Response(MedicationAlertService(request.user).get_active_alerts(farm, days_ahead))


class UpcomingAlertsView(APIView):
    """GET /api/medications/alerts/upcoming/"""

    def get(self, request):
        return Response(MedicationAlertService(request.user).get_upcoming_for_user(request.user))


class FarmAlertStatsView(APIView):
    """GET /api/medications/alerts/stats/   (?farm=)"""

    def get(self, request):
        try:
            farm = resolve_alert_farm(request)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PermissionDenied as e:
            return forbidden(e)
        return Response(MedicationAlertService(request.user).get_farm_stats(farm))


class ChickAgeView(APIView):
    """GET /api/medications/alerts/chick-age/?birth_date=YYYY-MM-DD[&reference_date=]"""

    def get(self, request):
        birth_date = date_param(request, 'birth_date', required=True)
        reference_date = date_param(request, 'reference_date')
        return Response({'age_days': chick_age(birth_date, reference_date)})


class AlertDetailView(APIView):
    """
    GET   /api/medications/alerts/{id}/
    PATCH /api/medications/alerts/{id}/   {"notes": "..."}
    """

    def get(self, request, pk):
        try:
            alert = get_alert(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return Response(MedicationAlertSerializer(alert).data)

    def patch(self, request, pk):
        try:
            alert = get_alert(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        alert = MedicationAlertService(request.user).update_notes(alert, request.data.get('notes', ''))
        return Response(MedicationAlertSerializer(alert).data)


class AlertAdministerView(APIView):
    """POST /api/medications/alerts/{id}/administer/   {"notes": "..."}"""

    def post(self, request, pk):
        try:
            get_alert(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            alert = MedicationAlertService(request.user).mark_administered(pk, request.data.get('notes'))
        except AlertError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MedicationAlertSerializer(alert).data)


class AlertUnadministerView(APIView):
    """POST /api/medications/alerts/{id}/unadminister/"""

    def post(self, request, pk):
        try:
            get_alert(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            alert = MedicationAlertService(request.user).unmark_administered(pk)
        except AlertError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MedicationAlertSerializer(alert).data)
