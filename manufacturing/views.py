"""
Views for manufacturing (feed blending) invoices.

API Endpoints:
- /api/manufacturing/                               - List/create invoices
- /api/manufacturing/{id}/                          - Retrieve/delete (delete reverses stock)
- /api/manufacturing/{id}/rollback/                 - Delete an invoice that never moved stock
- /api/manufacturing/{id}/post-output/              - Add the blended output to stock
- /api/manufacturing/{id}/items/                    - List/create input items
- /api/manufacturing/items/{item_id}/               - Delete an input item
- /api/manufacturing/{id}/expenses/                 - List/create expenses
- /api/manufacturing/expenses/{expense_id}/         - Delete an expense
- /api/manufacturing/{id}/attachments/              - List/upload attachments
- /api/manufacturing/{id}/attachments/{attachment_id}/ - Delete an attachment
"""

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import generics, status, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
import logging

from accounts.permissions import IsAdmin, IsAdminOrFarmer
from core.attachments import AttachmentViewMixin
from core.params import uuid_param
from farms.scoping import FarmScopedMixin, check_warehouse_read_access
from inventory.services import InventoryError
from .models import (
    ManufacturingInvoice,
    ManufacturingItem,
    ManufacturingExpense,
    ManufacturingAttachment,
)
from .serializers import (
    ManufacturingInvoiceSerializer,
    ManufacturingInvoiceDetailSerializer,
    ManufacturingItemSerializer,
    ManufacturingItemCreateSerializer,
    ManufacturingExpenseSerializer,
)
from .services import ManufacturingService

logger = logging.getLogger(__name__)


def get_manufacturing_invoice(user, pk, write=False):
    invoice = get_object_or_404(
        ManufacturingInvoice.objects.select_related('warehouse__farm', 'material_name', 'unit'),
        pk=pk
    )
    if write:
        ManufacturingService(user).check_warehouse(invoice.warehouse)
    else:
        check_warehouse_read_access(user, invoice.warehouse)
    return invoice


def forbidden(e):
    return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)


# =============================================================================
# INVOICES
# =============================================================================

class ManufacturingInvoiceListCreateView(FarmScopedMixin, generics.ListCreateAPIView):
    """
    GET  /api/manufacturing/   (?warehouse=)
    POST /api/manufacturing/
    """
    queryset = ManufacturingInvoice.objects.select_related('warehouse__farm', 'material_name', 'unit')
    serializer_class = ManufacturingInvoiceSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()

        warehouse_id = uuid_param(self.request, 'warehouse')
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)

        return queryset.order_by('-manufacturing_date', '-created_at')

    def create(self, request, *args, **kwargs):
        serializer = ManufacturingInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = ManufacturingService(request.user).create_invoice(**serializer.validated_data)
        except PermissionDenied as e:
            return forbidden(e)

        return Response(
            ManufacturingInvoiceDetailSerializer(invoice, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class ManufacturingInvoiceDetailView(APIView):
    """
    GET    /api/manufacturing/{id}/
    DELETE /api/manufacturing/{id}/   (admin)
    """
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return Response(ManufacturingInvoiceDetailSerializer(invoice, context={'request': request}).data)

    def delete(self, request, pk):
        invoice = get_object_or_404(ManufacturingInvoice.objects.select_related('warehouse'), pk=pk)
        try:
            ManufacturingService(request.user).delete_invoice(invoice)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Manufacturing invoice deleted successfully'})


class ManufacturingRollbackView(APIView):
    """
    POST /api/manufacturing/{id}/rollback/
    """
    permission_classes = [IsAdminOrFarmer]

    def post(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            ManufacturingService(request.user).rollback_invoice(invoice)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Manufacturing invoice rolled back'})


class ManufacturingPostOutputView(APIView):
    """
    POST /api/manufacturing/{id}/post-output/
    """
    permission_classes = [IsAdminOrFarmer]

    def post(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            invoice = ManufacturingService(request.user).post_output(invoice)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': 'Output added to inventory',
            'invoice': ManufacturingInvoiceSerializer(invoice).data,
        })


# =============================================================================
# INPUT ITEMS
# =============================================================================

class ManufacturingItemListCreateView(APIView):
    """
    GET  /api/manufacturing/{id}/items/
    POST /api/manufacturing/{id}/items/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        items = invoice.items.select_related('material_name', 'unit')
        return Response(ManufacturingItemSerializer(items, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        serializer = ManufacturingItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = ManufacturingService(request.user).add_item(invoice, **serializer.validated_data)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ManufacturingItemSerializer(item).data, status=status.HTTP_201_CREATED)


class ManufacturingItemDeleteView(APIView):
    """
    DELETE /api/manufacturing/items/{item_id}/
    """
    permission_classes = [IsAdminOrFarmer]

    def delete(self, request, item_id):
        item = get_object_or_404(
            ManufacturingItem.objects.select_related('manufacturing_invoice__warehouse__farm', 'material_name'),
            pk=item_id
        )
        try:
            get_manufacturing_invoice(request.user, item.manufacturing_invoice_id, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        try:
            ManufacturingService(request.user).delete_item(item)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Item deleted successfully'})


# =============================================================================
# EXPENSES
# =============================================================================

class ManufacturingExpenseListCreateView(APIView):
    """
    GET  /api/manufacturing/{id}/expenses/
    POST /api/manufacturing/{id}/expenses/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        expenses = invoice.expenses.select_related('expense_type')
        return Response(ManufacturingExpenseSerializer(expenses, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)

        serializer = ManufacturingExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = serializer.save(manufacturing_invoice=invoice)
        return Response(ManufacturingExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ManufacturingExpenseDeleteView(APIView):
    """
    DELETE /api/manufacturing/expenses/{expense_id}/
    """
    permission_classes = [IsAdminOrFarmer]

    def delete(self, request, expense_id):
        expense = get_object_or_404(ManufacturingExpense, pk=expense_id)
        try:
            get_manufacturing_invoice(request.user, expense.manufacturing_invoice_id, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        expense.delete()
        return Response({'message': 'Expense deleted successfully'})


# =============================================================================
# ATTACHMENTS
# =============================================================================

class ManufacturingAttachmentsView(AttachmentViewMixin, APIView):
    """
    GET  /api/manufacturing/{id}/attachments/
    POST /api/manufacturing/{id}/attachments/
    """
    permission_classes = [permissions.IsAuthenticated]
    attachment_model = ManufacturingAttachment
    owner_field = 'manufacturing_invoice'

    def get(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk)
        except PermissionDenied as e:
            return forbidden(e)
        return self.list_attachments(request, invoice)

    def post(self, request, pk):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.upload_attachment(request, invoice)


class ManufacturingAttachmentDeleteView(AttachmentViewMixin, APIView):
    """
    DELETE /api/manufacturing/{id}/attachments/{attachment_id}/
    """
    permission_classes = [IsAdminOrFarmer]
    attachment_model = ManufacturingAttachment
    owner_field = 'manufacturing_invoice'

    def delete(self, request, pk, attachment_id):
        try:
            invoice = get_manufacturing_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return forbidden(e)
        return self.delete_attachment(request, invoice, attachment_id)
