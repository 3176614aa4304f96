"""
Admin Dashboard Service

Overview for administrators and sub-admins:
- record counts across the system
- latest daily reports and what still awaits review
- stock rows running low
- medication alerts around today
"""

from django.conf import settings
from django.utils import timezone
from datetime import timedelta

from accounts.models import User
from daily_reports.models import DailyReport
from farms.models import Farm, Warehouse
from inventory.models import Material
from invoices.models import Invoice
from medications.models import MedicationAlert


class AdminDashboardService:
    """Service for admin dashboard data aggregation"""

    def get_counts(self):
        return {
            'users': User.objects.count(),
            'farms': Farm.objects.count(),
            'warehouses': Warehouse.objects.count(),
            'daily_reports': DailyReport.objects.count(),
            'invoices': Invoice.objects.count(),
            'materials': Material.objects.count(),
        }

    def get_pending_reviews(self):
        return {
            'unchecked_reports': DailyReport.objects.filter(checked=False).count(),
            'unchecked_invoices': Invoice.objects.filter(checked=False).count(),
        }

    def get_recent_reports(self, limit=5):
        reports = DailyReport.objects.select_related('warehouse__farm').order_by(
            '-report_date', '-created_at'
        )[:limit]
        return [
            {
                'id': str(report.id),
                'report_date': report.report_date,
                'warehouse_name': report.warehouse.name,
                'farm_name': report.warehouse.farm.name,
                'production_eggs': report.production_eggs,
                'chicks_dead': report.chicks_dead,
                'checked': report.checked,
            }
            for report in reports
        ]

    def get_low_stock(self, limit=10, threshold=None):
        """Lowest stock rows under ``threshold`` (LOW_STOCK_THRESHOLD by default)."""
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        rows = Material.objects.select_related(
            'warehouse', 'material_name', 'medicine', 'unit'
        ).filter(current_balance__lt=threshold).order_by('current_balance')[:limit]
        return [
            {
                'id': str(row.id),
                'item_name': row.item_name,
                'warehouse_name': row.warehouse.name,
                'current_balance': row.current_balance,
                'unit_name': row.unit.unit_name if row.unit_id else '',
            }
            for row in rows
        ]

    def get_pending_alerts(self, limit=5, window_days=None):
        """Pending alerts scheduled within ``window_days`` either side of today."""
        window_days = settings.ALERT_DAYS_AHEAD if window_days is None else window_days
        today = timezone.localdate()
        alerts = MedicationAlert.objects.select_related('farm', 'medicine').filter(
            is_administered=False,
            scheduled_date__gte=today - timedelta(days=window_days),
            scheduled_date__lte=today + timedelta(days=window_days),
        ).order_by('scheduled_date')[:limit]
        return [
            {
                'id': str(alert.id),
                'farm_name': alert.farm.name,
                'medicine_name': alert.medicine.name,
                'scheduled_day': alert.scheduled_day,
                'scheduled_date': alert.scheduled_date,
                'days_until': (alert.scheduled_date - today).days,
            }
            for alert in alerts
        ]

    def get_overview(self):
        return {
            'counts': self.get_counts(),
            'pending_reviews': self.get_pending_reviews(),
            'recent_reports': self.get_recent_reports(),
            'low_stock': self.get_low_stock(),
            'pending_alerts': self.get_pending_alerts(),
        }
