from rest_framework import serializers

from catalog.models import MaterialName, MeasurementUnit, Medicine
from farms.models import Warehouse
from .models import Material, StockMovement


class MaterialSerializer(serializers.ModelSerializer):
    """Stock row enriched with display names."""
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    farm_name = serializers.CharField(source='warehouse.farm.name', read_only=True)
    material_name_display = serializers.CharField(source='material_name.material_name', read_only=True, allow_null=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True, allow_null=True)
    item_name = serializers.CharField(read_only=True)
    unit_name = serializers.CharField(source='unit.unit_name', read_only=True, allow_null=True)

    class Meta:
        model = Material
        fields = [
            'id', 'warehouse', 'warehouse_name', 'farm_name',
            'material_name', 'material_name_display', 'medicine', 'medicine_name',
            'item_name', 'unit', 'unit_name',
            'opening_balance', 'purchases', 'sales', 'consumption',
            'manufacturing', 'current_balance', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class MaterialCreateSerializer(serializers.Serializer):
    """Input for creating an opening stock row."""
    warehouse = serializers.PrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    material_name = serializers.PrimaryKeyRelatedField(
        queryset=MaterialName.objects.all(), required=False, allow_null=True
    )
    medicine = serializers.PrimaryKeyRelatedField(
        queryset=Medicine.objects.all(), required=False, allow_null=True
    )
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    opening_balance = serializers.DecimalField(max_digits=12, decimal_places=2, default=0)


class MaterialUpdateSerializer(serializers.Serializer):
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    opening_balance = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class StockMovementSerializer(serializers.ModelSerializer):
    movement_type_display = serializers.CharField(source='get_movement_type_display', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.get_full_name', read_only=True, allow_null=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'material', 'movement_type', 'movement_type_display',
            'quantity', 'balance_after', 'source_type', 'source_id',
            'notes', 'recorded_by', 'recorded_by_name', 'created_at'
        ]
        read_only_fields = fields
