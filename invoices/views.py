"""
Views for buy/sell invoices.

Admins and sub-admins read every invoice; farmers read and create invoices
for their own warehouse. Updates, deletes and review flags are admin-only.

API Endpoints:
- /api/invoices/                                 - List/create invoices (?type=&warehouse=&checked=)
- /api/invoices/{id}/                            - Retrieve/update/delete invoice
- /api/invoices/{id}/items/                      - List/create invoice items
- /api/invoices/items/{item_id}/                 - Update/delete an item
- /api/invoices/{id}/expenses/                   - List/create expenses
- /api/invoices/expenses/{expense_id}/           - Update/delete an expense
- /api/invoices/{id}/attachments/                - List/upload attachments
- /api/invoices/{id}/attachments/{attachment_id}/ - Delete an attachment
"""

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import generics, status, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
import logging

from accounts.permissions import IsAdmin
from core.attachments import AttachmentViewMixin
from core.params import uuid_param
from farms.scoping import (
    FarmScopedMixin,
    check_warehouse_access,
    check_warehouse_read_access,
)
from inventory.services import InventoryError
from .models import Invoice, InvoiceItem, InvoiceExpense, InvoiceAttachment
from .serializers import (
    InvoiceListSerializer,
    InvoiceDetailSerializer,
    InvoiceWriteSerializer,
    InvoiceItemSerializer,
    InvoiceItemCreateSerializer,
    InvoiceItemUpdateSerializer,
    InvoiceExpenseSerializer,
)
from .services import InvoiceService

logger = logging.getLogger(__name__)


def get_invoice(user, pk, write=False):
    """
    Fetch an invoice the user may read (or write, when ``write``).

    Raises Http404 or PermissionDenied.
    """
    invoice = get_object_or_404(
        Invoice.objects.select_related('warehouse__farm', 'client'), pk=pk
    )
    if write:
        if invoice.warehouse is None:
            if user.role != 'ADMIN':
                raise PermissionDenied('Unauthorized - Admin access required')
        else:
            check_warehouse_access(user, invoice.warehouse)
    else:
        check_warehouse_read_access(user, invoice.warehouse)
    return invoice


# =============================================================================
# INVOICES
# =============================================================================

class InvoiceListCreateView(FarmScopedMixin, generics.ListCreateAPIView):
    """
    GET  /api/invoices/
    POST /api/invoices/
    """
    queryset = Invoice.objects.select_related('warehouse__farm', 'client')
    permission_classes = [permissions.IsAuthenticated]
    search_fields = ['invoice_number', 'notes']

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return InvoiceWriteSerializer
        return InvoiceListSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        invoice_type = self.request.query_params.get('type')
        if invoice_type:
            queryset = queryset.filter(invoice_type=invoice_type)

        warehouse_id = uuid_param(self.request, 'warehouse')
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)

        checked = self.request.query_params.get('checked')
        if checked is not None:
            queryset = queryset.filter(checked=checked.lower() == 'true')

        return queryset.order_by('-invoice_date', '-created_at')

    def create(self, request, *args, **kwargs):
        if request.user.role not in ('ADMIN', 'FARMER'):
            return Response(
                {'error': 'Unauthorized - Admin access required'},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = InvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        warehouse = serializer.validated_data.get('warehouse')
        if request.user.role == 'FARMER':
            if warehouse is None:
                return Response({'error': 'Warehouse is required'}, status=status.HTTP_400_BAD_REQUEST)
            try:
                check_warehouse_access(request.user, warehouse)
            except PermissionDenied as e:
                return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        invoice = serializer.save(created_by=request.user)
        logger.info(f"Invoice {invoice.invoice_number} ({invoice.invoice_type}) created by {request.user.username}")
        return Response(
            InvoiceDetailSerializer(invoice, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class InvoiceDetailView(APIView):
    """
    GET    /api/invoices/{id}/
    PATCH  /api/invoices/{id}/   (admin)
    DELETE /api/invoices/{id}/   (admin; reverses stock)
    """
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def get(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(InvoiceDetailSerializer(invoice, context={'request': request}).data)

    def patch(self, request, pk):
        invoice = get_object_or_404(Invoice, pk=pk)
        serializer = InvoiceWriteSerializer(invoice, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            invoice = InvoiceService(request.user).update_invoice(invoice, **serializer.validated_data)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(InvoiceDetailSerializer(invoice, context={'request': request}).data)

    put = patch

    def delete(self, request, pk):
        invoice = get_object_or_404(Invoice, pk=pk)
        try:
            InvoiceService(request.user).delete_invoice(invoice)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Invoice deleted successfully'})


# =============================================================================
# ITEMS
# =============================================================================

class InvoiceItemListCreateView(APIView):
    """
    GET  /api/invoices/{id}/items/
    POST /api/invoices/{id}/items/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        items = invoice.items.select_related('material_name', 'medicine', 'unit', 'egg_weight')
        return Response(InvoiceItemSerializer(items, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        serializer = InvoiceItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = InvoiceService(request.user).add_item(invoice, **serializer.validated_data)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(InvoiceItemSerializer(item).data, status=status.HTTP_201_CREATED)


class InvoiceItemDetailView(APIView):
    """
    PATCH  /api/invoices/items/{item_id}/   - recomputes value only
    DELETE /api/invoices/items/{item_id}/   - reverses the stock movement
    """
    permission_classes = [permissions.IsAuthenticated]

    def _get_item(self, request, item_id):
        item = get_object_or_404(
            InvoiceItem.objects.select_related('invoice__warehouse__farm', 'material_name', 'medicine'),
            pk=item_id
        )
        get_invoice(request.user, item.invoice_id, write=True)
        return item

    def patch(self, request, item_id):
        try:
            item = self._get_item(request, item_id)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        serializer = InvoiceItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = InvoiceService(request.user).update_item(item, **serializer.validated_data)
        return Response(InvoiceItemSerializer(item).data)

    def delete(self, request, item_id):
        try:
            item = self._get_item(request, item_id)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        try:
            InvoiceService(request.user).delete_item(item)
        except (ValueError, InventoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Item deleted successfully'})


# =============================================================================
# EXPENSES
# =============================================================================

class InvoiceExpenseListCreateView(APIView):
    """
    GET  /api/invoices/{id}/expenses/
    POST /api/invoices/{id}/expenses/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        expenses = invoice.expenses.select_related('expense_type')
        return Response(InvoiceExpenseSerializer(expenses, many=True).data)

    def post(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        serializer = InvoiceExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = serializer.save(invoice=invoice)
        return Response(InvoiceExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class InvoiceExpenseDetailView(generics.UpdateAPIView, generics.DestroyAPIView):
    """
    PATCH  /api/invoices/expenses/{id}/
    DELETE /api/invoices/expenses/{id}/
    """
    queryset = InvoiceExpense.objects.select_related('expense_type')
    serializer_class = InvoiceExpenseSerializer
    permission_classes = [IsAdmin]

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({'message': 'Expense deleted successfully'})


# =============================================================================
# ATTACHMENTS
# =============================================================================

class InvoiceAttachmentsView(AttachmentViewMixin, APIView):
    """
    GET  /api/invoices/{id}/attachments/
    POST /api/invoices/{id}/attachments/   (multipart, field "file")
    """
    permission_classes = [permissions.IsAuthenticated]
    attachment_model = InvoiceAttachment
    owner_field = 'invoice'

    def get(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return self.list_attachments(request, invoice)

    def post(self, request, pk):
        try:
            invoice = get_invoice(request.user, pk, write=True)
        except PermissionDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return self.upload_attachment(request, invoice)


class InvoiceAttachmentDeleteView(AttachmentViewMixin, APIView):
    """
    DELETE /api/invoices/{id}/attachments/{attachment_id}/
    """
    permission_classes = [IsAdmin]
    attachment_model = InvoiceAttachment
    owner_field = 'invoice'

    def delete(self, request, pk, attachment_id):
        invoice = get_object_or_404(Invoice, pk=pk)
        return self.delete_attachment(request, invoice, attachment_id)
