"""
Dashboard API Views

GET /api/dashboards/admin/    - System overview (admin, sub-admin)
GET /api/dashboards/farmer/   - The calling farmer's overview
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from accounts.permissions import IsAdminOrSubAdmin, IsFarmer
from .services import AdminDashboardService, FarmerDashboardService


class AdminDashboardView(APIView):
    """
    Counts, recent and unchecked reports, low stock and pending alerts.
    """
    permission_classes = [IsAdminOrSubAdmin]

    def get(self, request):
        return Response(AdminDashboardService().get_overview(), status=status.HTTP_200_OK)


class FarmerDashboardView(APIView):
    permission_classes = [IsFarmer]

    def get(self, request):
        data = FarmerDashboardService(request.user).get_overview()
        if data is None:
            return Response(
                {'error': 'No farm assigned to your account'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(data, status=status.HTTP_200_OK)
