from rest_framework import serializers
from decimal import Decimal

from catalog.models import Client, EggWeight, MeasurementUnit, Medicine
from core.attachments import attachment_payload
from farms.models import PoultryStatus, Warehouse
from .models import DailyReport


def quantity_field(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), **kwargs)


class DailyReportSerializer(serializers.ModelSerializer):
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    farm_name = serializers.CharField(source='warehouse.farm.name', read_only=True)
    attachments = serializers.SerializerMethodField()

    class Meta:
        model = DailyReport
        fields = [
            'id', 'warehouse', 'warehouse_name', 'farm_name', 'report_date', 'report_time',
            'production_eggs_healthy', 'production_eggs_deformed', 'production_eggs',
            'production_egg_rate', 'eggs_sold', 'eggs_gift', 'previous_eggs_balance',
            'current_eggs_balance', 'carton_consumption', 'chicks_before', 'chicks_dead',
            'chicks_after', 'feed_daily_kg', 'feed_monthly_kg', 'feed_ratio',
            'production_droppings', 'notes', 'checked', 'attachments',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_attachments(self, obj):
        return [attachment_payload(a, self.context.get('request')) for a in obj.attachments.all()]


class DailyReportUpdateSerializer(serializers.Serializer):
    """Editable report fields; derived figures are recomputed by the service."""
    report_date = serializers.DateField(required=False)
    report_time = serializers.TimeField(required=False, allow_null=True)
    production_eggs_healthy = quantity_field(required=False)
    production_eggs_deformed = quantity_field(required=False)
    eggs_sold = quantity_field(required=False)
    eggs_gift = quantity_field(required=False)
    previous_eggs_balance = quantity_field(required=False)
    carton_consumption = quantity_field(required=False)
    chicks_before = serializers.IntegerField(min_value=0, required=False)
    chicks_dead = serializers.IntegerField(min_value=0, required=False)
    feed_daily_kg = quantity_field(required=False)
    feed_monthly_kg = quantity_field(required=False)
    feed_ratio = quantity_field(required=False)
    production_droppings = quantity_field(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# INTEGRATED CREATE
# =============================================================================

class EggSaleItemSerializer(serializers.Serializer):
    egg_weight = serializers.PrimaryKeyRelatedField(
        queryset=EggWeight.objects.all(), required=False, allow_null=True
    )
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    price = quantity_field(required=False, default=Decimal('0'))


class EggSaleSerializer(serializers.Serializer):
    client = serializers.PrimaryKeyRelatedField(
        queryset=Client.objects.all(), required=False, allow_null=True
    )
    items = EggSaleItemSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("An egg sale needs at least one item")
        return value


class DroppingsSaleSerializer(serializers.Serializer):
    client = serializers.PrimaryKeyRelatedField(
        queryset=Client.objects.all(), required=False, allow_null=True
    )
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    quantity = quantity_field()
    price = quantity_field(required=False, default=Decimal('0'))


class MedicineLineSerializer(serializers.Serializer):
    medicine = serializers.PrimaryKeyRelatedField(queryset=Medicine.objects.all())
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    price = quantity_field(required=False, default=Decimal('0'))


class IntegratedDailyReportSerializer(serializers.Serializer):
    warehouse = serializers.PrimaryKeyRelatedField(queryset=Warehouse.objects.select_related('farm'))
    report_date = serializers.DateField()
    report_time = serializers.TimeField(required=False, allow_null=True)
    production_eggs_healthy = quantity_field(required=False, default=Decimal('0'))
    production_eggs_deformed = quantity_field(required=False, default=Decimal('0'))
    eggs_sold = quantity_field(required=False, default=Decimal('0'))
    eggs_gift = quantity_field(required=False, default=Decimal('0'))
    previous_eggs_balance = quantity_field(required=False, default=Decimal('0'))
    carton_consumption = quantity_field(required=False, default=Decimal('0'))
    chicks_dead = serializers.IntegerField(min_value=0, required=False, default=0)
    feed_daily_kg = quantity_field(required=False, default=Decimal('0'))
    feed_ratio = quantity_field(required=False, default=Decimal('0'))
    production_droppings = quantity_field(required=False, default=Decimal('0'))
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    poultry_status = serializers.PrimaryKeyRelatedField(
        queryset=PoultryStatus.objects.all(), required=False, allow_null=True
    )
    egg_sales = EggSaleSerializer(many=True, required=False)
    droppings_sale = DroppingsSaleSerializer(required=False, allow_null=True)
    medicines = MedicineLineSerializer(many=True, required=False)
