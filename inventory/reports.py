"""
Inventory Report Service

Read-only views over the stock rows:
- Full report across all warehouses, lowest balances first
- Per-warehouse report
- Totals of every balance column
- Dashboard summary (low stock / out of stock counts)
"""

from django.conf import settings
from django.db.models import Sum, Count
from decimal import Decimal

from .models import Material


def serialize_stock_row(material):
    """Flatten a stock row with its warehouse, farm, item and unit names."""
    warehouse = material.warehouse
    return {
        'id': str(material.id),
        'warehouse_id': str(warehouse.id),
        'warehouse_name': warehouse.name,
        'farm_name': warehouse.farm.name if warehouse.farm_id else 'Unknown',
        'material_name_id': str(material.material_name_id) if material.material_name_id else None,
        'medicine_id': str(material.medicine_id) if material.medicine_id else None,
        'material_name': material.item_name or 'Unknown',
        'unit_id': str(material.unit_id) if material.unit_id else None,
        'unit_name': material.unit.unit_name if material.unit_id else 'Unknown',
        'opening_balance': material.opening_balance,
        'purchases': material.purchases,
        'sales': material.sales,
        'consumption': material.consumption,
        'manufacturing': material.manufacturing,
        'current_balance': material.current_balance,
        'updated_at': material.updated_at,
    }


class InventoryReportService:
    """Service for inventory report aggregation"""

    def _base_queryset(self):
        return Material.objects.select_related(
            'warehouse__farm', 'material_name', 'medicine', 'unit'
        ).order_by('current_balance')

    def get_full_report(self):
        return [serialize_stock_row(m) for m in self._base_queryset()]

    def get_warehouse_report(self, warehouse):
        return [
            serialize_stock_row(m)
            for m in self._base_queryset().filter(warehouse=warehouse)
        ]

    def get_summary(self):
        """
        Totals of each balance column across every stock row.

        Returns:
            dict: column totals plus materials_count and warehouses_count
        """
        totals = Material.objects.aggregate(
            total_opening_balance=Sum('opening_balance'),
            total_purchases=Sum('purchases'),
            total_sales=Sum('sales'),
            total_consumption=Sum('consumption'),
            total_manufacturing=Sum('manufacturing'),
            total_current_balance=Sum('current_balance'),
            materials_count=Count('id'),
            warehouses_count=Count('warehouse', distinct=True),
        )
        for key, value in totals.items():
            if value is None:
                totals[key] = Decimal('0.00')
        return totals

    def get_stock_summary(self, queryset=None):
        """Dashboard counters for the materials page."""
        queryset = queryset if queryset is not None else Material.objects.all()
        threshold = settings.LOW_STOCK_THRESHOLD
        return {
            'total_materials': queryset.count(),
            'low_stock_count': queryset.filter(
                current_balance__gt=0,
                current_balance__lt=threshold
            ).count(),
            'out_of_stock_count': queryset.filter(current_balance=0).count(),
            'warehouses_count': queryset.values('warehouse').distinct().count(),
        }

    def get_aggregated(self, queryset=None):
        """
        Stock rows grouped by (item, unit) with summed balances and the
        number of warehouses holding the item.
        """
        queryset = queryset if queryset is not None else Material.objects.all()
        rows = queryset.values(
            'material_name', 'material_name__material_name',
            'medicine', 'medicine__name',
            'unit', 'unit__unit_name',
        ).annotate(
            opening_balance=Sum('opening_balance'),
            purchases=Sum('purchases'),
            sales=Sum('sales'),
            consumption=Sum('consumption'),
            manufacturing=Sum('manufacturing'),
            current_balance=Sum('current_balance'),
            warehouse_count=Count('warehouse', distinct=True),
        ).order_by('material_name__material_name', 'medicine__name')

        return [
            {
                'material_name_id': str(row['material_name']) if row['material_name'] else None,
                'medicine_id': str(row['medicine']) if row['medicine'] else None,
                'material_name': row['material_name__material_name'] or row['medicine__name'] or 'Unknown',
                'unit_id': str(row['unit']) if row['unit'] else None,
                'unit_name': row['unit__unit_name'] or 'Unknown',
                'opening_balance': row['opening_balance'],
                'purchases': row['purchases'],
                'sales': row['sales'],
                'consumption': row['consumption'],
                'manufacturing': row['manufacturing'],
                'current_balance': row['current_balance'],
                'warehouse_count': row['warehouse_count'],
            }
            for row in rows
        ]
