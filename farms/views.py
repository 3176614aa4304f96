"""
Farm Management Views

Provides endpoints for:
- Farms (admin CRUD, farmer's own farm)
- Warehouses (admin CRUD, farmer's own warehouses, farms without a warehouse)
- Poultry batches (admin CRUD, farms without a batch)
- Complete farm setup wizard

API Endpoints:
- /api/farms/                              - List/create farms
- /api/farms/{id}/                         - Retrieve/update/delete farm
- /api/farms/mine/                         - Current farmer's farm
- /api/farms/without-warehouses/           - Farms that have no warehouse yet
- /api/farms/available-for-poultry/        - Farms that have no poultry batch yet
- /api/farms/warehouses/                   - List/create warehouses
- /api/farms/warehouses/{id}/              - Retrieve/update/delete warehouse
- /api/farms/warehouses/mine/              - Current farmer's warehouses
- /api/farms/poultry/                      - List/create poultry batches
- /api/farms/poultry/{id}/                 - Retrieve/update/delete batch
- /api/farms/setup/                        - Complete farm setup
"""

from rest_framework import generics, status, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
import logging

from accounts.permissions import IsAdmin, IsAdminOrSubAdmin
from core.params import uuid_param
from .models import Farm, Warehouse, PoultryStatus
from .scoping import get_user_farm
from .serializers import (
    FarmSerializer,
    WarehouseSerializer,
    PoultryStatusSerializer,
    CompleteFarmSetupSerializer,
)
from .services import FarmSetupService, FarmSetupError

logger = logging.getLogger(__name__)


class AdminWriteMixin:
    """Admins and sub-admins read; only admins write."""

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [IsAdminOrSubAdmin()]
        return [IsAdmin()]


# =============================================================================
# FARMS
# =============================================================================

class FarmListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    GET  /api/farms/
    POST /api/farms/
    """
    queryset = Farm.objects.select_related('user').order_by('-created_at')
    serializer_class = FarmSerializer
    search_fields = ['name', 'location']

    def get_queryset(self):
        queryset = super().get_queryset()

        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')

        return queryset

    def perform_create(self, serializer):
        farm = serializer.save()
        logger.info(f"Farm {farm.name} created by {self.request.user.username}")


class FarmDetailView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PATCH/DELETE /api/farms/{id}/
    """
    queryset = Farm.objects.select_related('user')
    serializer_class = FarmSerializer

    def perform_destroy(self, instance):
        logger.info(f"Farm {instance.name} deleted by {self.request.user.username}")
        instance.delete()


class MyFarmView(APIView):
    """
    GET /api/farms/mine/

    The farm assigned to the authenticated user.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        farm = get_user_farm(request.user)
        if farm is None:
            return Response(
                {'error': 'No farm assigned to your account'},
                status=status.HTTP_404_NOT_FOUND
            )
        data = FarmSerializer(farm).data
        data['warehouses'] = WarehouseSerializer(farm.warehouses.all(), many=True).data
        data['poultry'] = PoultryStatusSerializer(farm.poultry_batches.all(), many=True).data
        return Response(data)


class FarmsWithoutWarehousesView(generics.ListAPIView):
    """
    GET /api/farms/without-warehouses/
    """
    serializer_class = FarmSerializer
    permission_classes = [IsAdminOrSubAdmin]
    pagination_class = None

    def get_queryset(self):
        return Farm.objects.filter(warehouses__isnull=True).order_by('name')


class FarmsAvailableForPoultryView(generics.ListAPIView):
    """
    GET /api/farms/available-for-poultry/
    """
    serializer_class = FarmSerializer
    permission_classes = [IsAdminOrSubAdmin]
    pagination_class = None

    def get_queryset(self):
        return Farm.objects.filter(poultry_batches__isnull=True).order_by('name')


# =============================================================================
# WAREHOUSES
# =============================================================================

class WarehouseListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    GET  /api/farms/warehouses/   (?farm=)
    POST /api/farms/warehouses/
    """
    queryset = Warehouse.objects.select_related('farm').order_by('-created_at')
    serializer_class = WarehouseSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        farm_id = uuid_param(self.request, 'farm')
        if farm_id:
            queryset = queryset.filter(farm_id=farm_id)

        return queryset

    def perform_create(self, serializer):
        warehouse = serializer.save()
        logger.info(f"Warehouse {warehouse.name} created for farm {warehouse.farm.name}")


class WarehouseDetailView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Warehouse.objects.select_related('farm')
    serializer_class = WarehouseSerializer


class MyWarehousesView(generics.ListAPIView):
    """
    GET /api/farms/warehouses/mine/
    """
    serializer_class = WarehouseSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Warehouse.objects.select_related('farm').filter(
            farm__user=self.request.user
        ).order_by('name')


# =============================================================================
# POULTRY
# =============================================================================

class PoultryListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    GET  /api/farms/poultry/   (?farm=)
    POST /api/farms/poultry/
    """
    queryset = PoultryStatus.objects.select_related('farm').order_by('-created_at')
    serializer_class = PoultryStatusSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        farm_id = uuid_param(self.request, 'farm')
        if farm_id:
            queryset = queryset.filter(farm_id=farm_id)

        return queryset


class PoultryDetailView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = PoultryStatus.objects.select_related('farm')
    serializer_class = PoultryStatusSerializer


# =============================================================================
# COMPLETE SETUP
# =============================================================================

class CompleteFarmSetupView(APIView):
    """
    POST /api/farms/setup/

    Request Body:
    {
        "user": {"email": "...", "password": "...", "full_name": "..."},
        "farm": {"name": "...", "location": "..."},
        "warehouse": {"name": "..."},
        "poultry": {"batch_name": "...", "opening_chicks": 5000},
        "materials": [{"item_id": "...", "unit_id": "...", "opening_balance": 10}],
        "medicines": [{"item_id": "...", "unit_id": "...", "opening_balance": 2}]
    }
    """
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = CompleteFarmSetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = FarmSetupService(request.user).create_complete_setup(serializer.validated_data)
        except FarmSetupError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(result, status=status.HTTP_201_CREATED)
