"""
Farmer Dashboard Service

What a farmer sees on login: their farm and warehouse, whether today's
report has been filed, and the medication doses coming up.
"""

from django.utils import timezone

from daily_reports.models import DailyReport
from farms.models import Farm
from medications.alerts import MedicationAlertService


class FarmerDashboardService:
    """Service for farmer dashboard data"""

    def __init__(self, user):
        self.user = user
        try:
            self.farm = Farm.objects.get(user=user)
        except Farm.DoesNotExist:
            self.farm = None

    def get_overview(self):
        if not self.farm:
            return None

        warehouse = self.farm.warehouses.order_by('created_at').first()
        today = timezone.localdate()
        batch = self.farm.poultry_batches.order_by('-created_at').first()

        return {
            'farm': {
                'id': str(self.farm.id),
                'name': self.farm.name,
                'location': self.farm.location,
                'is_active': self.farm.is_active,
            },
            'warehouse': {
                'id': str(warehouse.id),
                'name': warehouse.name,
            } if warehouse else None,
            'poultry': {
                'id': str(batch.id),
                'batch_name': batch.batch_name,
                'remaining_chicks': batch.remaining_chicks,
                'chick_birth_date': batch.chick_birth_date,
            } if batch else None,
            'has_today_report': bool(warehouse) and DailyReport.objects.filter(
                warehouse=warehouse, report_date=today
            ).exists(),
            'upcoming_alerts': MedicationAlertService(self.user).get_upcoming_for_user(self.user),
        }
