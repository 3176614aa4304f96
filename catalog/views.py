"""
Views for the lookup catalog.

Every authenticated user may read the catalog (farmers fill their forms
from it); only administrators may change it.

API Endpoints:
- /api/catalog/material-names/          - List/create material names
- /api/catalog/material-names/{id}/     - Retrieve/update/delete
- /api/catalog/units/                   - Measurement units
- /api/catalog/egg-weights/             - Egg weight ranges
- /api/catalog/expense-types/           - Expense types
- /api/catalog/clients/                 - Customers and providers (?type=)
- /api/catalog/medicines/               - Medicines with their day-of-age schedule
"""

from django.db.models.deletion import ProtectedError
from rest_framework import generics, status
from rest_framework.response import Response
import logging

from accounts.permissions import IsAdminOrReadOnly
from .models import (
    MaterialName,
    MeasurementUnit,
    EggWeight,
    ExpenseType,
    Client,
    Medicine,
)
from .serializers import (
    MaterialNameSerializer,
    MeasurementUnitSerializer,
    EggWeightSerializer,
    ExpenseTypeSerializer,
    ClientSerializer,
    MedicineSerializer,
)

logger = logging.getLogger(__name__)


class CatalogListCreateView(generics.ListCreateAPIView):
    """Unpaginated list plus admin create for one lookup table."""
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def perform_create(self, serializer):
        instance = serializer.save()
        logger.info(f"{instance.__class__.__name__} '{instance}' created by {self.request.user.username}")


class CatalogDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [IsAdminOrReadOnly]

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            instance.delete()
        except ProtectedError:
            return Response(
                {'error': f"'{instance}' is used by stock or invoices and cannot be deleted"},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"{instance.__class__.__name__} '{instance}' deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# MATERIAL NAMES / UNITS / EGG WEIGHTS / EXPENSE TYPES
# =============================================================================

class MaterialNameListCreateView(CatalogListCreateView):
    queryset = MaterialName.objects.all()
    serializer_class = MaterialNameSerializer


class MaterialNameDetailView(CatalogDetailView):
    queryset = MaterialName.objects.all()
    serializer_class = MaterialNameSerializer


class MeasurementUnitListCreateView(CatalogListCreateView):
    queryset = MeasurementUnit.objects.all()
    serializer_class = MeasurementUnitSerializer


class MeasurementUnitDetailView(CatalogDetailView):
    queryset = MeasurementUnit.objects.all()
    serializer_class = MeasurementUnitSerializer


class EggWeightListCreateView(CatalogListCreateView):
    queryset = EggWeight.objects.all()
    serializer_class = EggWeightSerializer


class EggWeightDetailView(CatalogDetailView):
    queryset = EggWeight.objects.all()
    serializer_class = EggWeightSerializer


class ExpenseTypeListCreateView(CatalogListCreateView):
    queryset = ExpenseType.objects.all()
    serializer_class = ExpenseTypeSerializer


class ExpenseTypeDetailView(CatalogDetailView):
    queryset = ExpenseType.objects.all()
    serializer_class = ExpenseTypeSerializer


# =============================================================================
# CLIENTS
# =============================================================================

class ClientListCreateView(CatalogListCreateView):
    queryset = Client.objects.all()
    serializer_class = ClientSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        # Filter by client type
        client_type = self.request.query_params.get('type')
        if client_type:
            queryset = queryset.filter(type=client_type)

        return queryset


class ClientDetailView(CatalogDetailView):
    queryset = Client.objects.all()
    serializer_class = ClientSerializer


# =============================================================================
# MEDICINES
# =============================================================================

class MedicineListCreateView(CatalogListCreateView):
    queryset = Medicine.objects.all()
    serializer_class = MedicineSerializer


class MedicineDetailView(CatalogDetailView):
    queryset = Medicine.objects.all()
    serializer_class = MedicineSerializer
