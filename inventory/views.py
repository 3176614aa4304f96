"""
Views for warehouse inventory.

Admins manage stock rows; sub-admins read everything; farmers read the
stock of their own warehouse.

API Endpoints:
- /api/inventory/materials/                       - List/create stock rows (?warehouse=)
- /api/inventory/materials/{id}/                  - Retrieve/update/delete a stock row
- /api/inventory/materials/{id}/movements/        - Movement history of a stock row
- /api/inventory/materials/aggregated/            - Rows grouped by item and unit
- /api/inventory/materials/summary/               - Low / out of stock counters
- /api/inventory/materials/lookup/                - Balance of one item in a warehouse
- /api/inventory/warehouses/                      - Warehouses available for stock
- /api/inventory/warehouses/{id}/medicines/       - Medicines in stock in a warehouse
- /api/inventory/warehouses/{id}/medicines/{medicine_id}/available/
- /api/inventory/reports/                         - Full inventory report
- /api/inventory/reports/warehouse/{id}/          - Inventory report of one warehouse
- /api/inventory/reports/summary/                 - Balance column totals
"""

from rest_framework import generics, status, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from decimal import Decimal
import logging

from accounts.permissions import IsAdmin, IsAdminOrSubAdmin
from core.params import uuid_param
from catalog.models import Medicine
from farms.scoping import FarmScopedMixin, get_user_warehouses
from .models import Material, StockMovement
from .reports import InventoryReportService
from .serializers import (
    MaterialSerializer,
    MaterialCreateSerializer,
    MaterialUpdateSerializer,
    StockMovementSerializer,
)
from .services import MaterialService

logger = logging.getLogger(__name__)


def get_visible_warehouse(user, warehouse_id):
    """Fetch a warehouse the user may read, or raise Http404."""
    return get_object_or_404(get_user_warehouses(user), pk=warehouse_id)


# =============================================================================
# STOCK ROWS
# =============================================================================

class MaterialListCreateView(FarmScopedMixin, generics.ListCreateAPIView):
    """
    GET  /api/inventory/materials/
    POST /api/inventory/materials/
    """
    queryset = Material.objects.select_related(
        'warehouse__farm', 'material_name', 'medicine', 'unit'
    )
    serializer_class = MaterialSerializer

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = super().get_queryset()

        warehouse_id = uuid_param(self.request, 'warehouse')
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)

        kind = self.request.query_params.get('kind')
        if kind == 'medicine':
            queryset = queryset.filter(medicine__isnull=False)
        elif kind == 'material':
            queryset = queryset.filter(material_name__isnull=False)

        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        serializer = MaterialCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            material = MaterialService(request.user).create_material(
                warehouse=data['warehouse'],
                unit=data.get('unit'),
                opening_balance=data.get('opening_balance', 0),
                material_name=data.get('material_name'),
                medicine=data.get('medicine'),
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(MaterialSerializer(material).data, status=status.HTTP_201_CREATED)


class MaterialDetailView(FarmScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET    /api/inventory/materials/{id}/
    PATCH  /api/inventory/materials/{id}/   - unit and/or opening_balance
    DELETE /api/inventory/materials/{id}/
    """
    queryset = Material.objects.select_related(
        'warehouse__farm', 'material_name', 'medicine', 'unit'
    )
    serializer_class = MaterialSerializer

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.IsAuthenticated()]
        return [IsAdmin()]

    def update(self, request, *args, **kwargs):
        material = self.get_object()
        serializer = MaterialUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            material = MaterialService(request.user).update_material(
                material, **serializer.validated_data
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(MaterialSerializer(material).data)

    def perform_destroy(self, instance):
        logger.info(f"Stock row {instance.item_name} deleted by {self.request.user.username}")
        instance.delete()


class MaterialMovementsView(generics.ListAPIView):
    """
    GET /api/inventory/materials/{id}/movements/

    Audit trail of one stock row, newest first.
    """
    serializer_class = StockMovementSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        warehouses = get_user_warehouses(self.request.user)
        material = get_object_or_404(
            Material.objects.filter(warehouse__in=warehouses),
            pk=self.kwargs['pk']
        )
        return StockMovement.objects.filter(material=material).select_related('recorded_by')


class MaterialAggregatedView(APIView):
    """
    GET /api/inventory/materials/aggregated/

    Stock rows grouped by item and unit across warehouses.
    """
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(InventoryReportService().get_aggregated())


class MaterialSummaryView(APIView):
    """
    GET /api/inventory/materials/summary/
    """
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(InventoryReportService().get_stock_summary())


class MaterialLookupView(APIView):
    """
    GET /api/inventory/materials/lookup/?warehouse=&material_name=
    GET /api/inventory/materials/lookup/?warehouse=&medicine=

    Current balance and unit of one item; zero when the warehouse has no row.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        warehouse_id = uuid_param(request, 'warehouse')
        material_name_id = uuid_param(request, 'material_name')
        medicine_id = uuid_param(request, 'medicine')

        if not warehouse_id or not (material_name_id or medicine_id):
            return Response(
                {'error': 'warehouse and material_name or medicine are required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        warehouse = get_visible_warehouse(request.user, warehouse_id)
        queryset = Material.objects.select_related('unit').filter(warehouse=warehouse)
        if material_name_id:
            queryset = queryset.filter(material_name_id=material_name_id)
        else:
            queryset = queryset.filter(medicine_id=medicine_id)

        material = queryset.first()
        if material is None:
            return Response({'current_balance': Decimal('0.00'), 'unit_name': ''})

        return Response({
            'material_id': str(material.id),
            'current_balance': material.current_balance,
            'unit_id': str(material.unit_id) if material.unit_id else None,
            'unit_name': material.unit.unit_name if material.unit_id else '',
        })


# =============================================================================
# WAREHOUSE LOOKUPS
# =============================================================================

class MaterialWarehousesView(APIView):
    """
    GET /api/inventory/warehouses/

    Warehouses (with farm name) that stock rows can be created in.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        warehouses = get_user_warehouses(request.user).order_by('name')
        return Response([
            {
                'id': str(w.id),
                'name': w.name,
                'farm_name': w.farm.name,
            }
            for w in warehouses
        ])


class WarehouseMedicinesView(APIView):
    """
    GET /api/inventory/warehouses/{warehouse_id}/medicines/

    Medicines with a positive balance in the warehouse.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, warehouse_id):
        warehouse = get_visible_warehouse(request.user, warehouse_id)
        rows = Material.objects.select_related('medicine', 'unit').filter(
            warehouse=warehouse,
            medicine__isnull=False,
            current_balance__gt=0,
        ).order_by('medicine__name')

        return Response([
            {
                'id': str(row.id),
                'medicine_id': str(row.medicine_id),
                'medicine_name': row.medicine.name,
                'day_of_age': row.medicine.day_of_age,
                'unit_id': str(row.unit_id) if row.unit_id else None,
                'unit_name': row.unit.unit_name if row.unit_id else '',
                'current_balance': row.current_balance,
            }
            for row in rows
        ])


class AvailableMedicineQuantityView(APIView):
    """
    GET /api/inventory/warehouses/{warehouse_id}/medicines/{medicine_id}/available/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, warehouse_id, medicine_id):
        warehouse = get_visible_warehouse(request.user, warehouse_id)
        medicine = get_object_or_404(Medicine, pk=medicine_id)
        row = Material.objects.filter(warehouse=warehouse, medicine=medicine).first()
        return Response({
            'warehouse_id': str(warehouse.id),
            'medicine_id': str(medicine.id),
            'available': row.current_balance if row else Decimal('0.00'),
        })


# =============================================================================
# INVENTORY REPORTS
# =============================================================================

class InventoryReportView(APIView):
    """
    GET /api/inventory/reports/
    """
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(InventoryReportService().get_full_report())


class WarehouseInventoryReportView(APIView):
    """
    GET /api/inventory/reports/warehouse/{warehouse_id}/
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, warehouse_id):
        warehouse = get_visible_warehouse(request.user, warehouse_id)
        return Response(InventoryReportService().get_warehouse_report(warehouse))


class InventorySummaryView(APIView):
    """
    GET /api/inventory/reports/summary/
    """
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(InventoryReportService().get_summary())
