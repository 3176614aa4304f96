from rest_framework import serializers
from decimal import Decimal

from catalog.models import MaterialName, MeasurementUnit
from core.attachments import attachment_payload
from .models import ManufacturingInvoice, ManufacturingItem, ManufacturingExpense


class ManufacturingItemSerializer(serializers.ModelSerializer):
    material_name_display = serializers.CharField(source='material_name.material_name', read_only=True)
    unit_name = serializers.CharField(source='unit.unit_name', read_only=True, allow_null=True)

    class Meta:
        model = ManufacturingItem
        fields = [
            'id', 'manufacturing_invoice', 'material_name', 'material_name_display',
            'unit', 'unit_name', 'quantity', 'blend_count', 'weight', 'created_at'
        ]
        read_only_fields = ['id', 'manufacturing_invoice', 'created_at']


class ManufacturingItemCreateSerializer(serializers.Serializer):
    material_name = serializers.PrimaryKeyRelatedField(queryset=MaterialName.objects.all())
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    blend_count = serializers.IntegerField(min_value=1, required=False, default=1)
    weight = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class ManufacturingExpenseSerializer(serializers.ModelSerializer):
    expense_type_name = serializers.CharField(source='expense_type.name', read_only=True)

    class Meta:
        model = ManufacturingExpense
        fields = [
            'id', 'manufacturing_invoice', 'expense_type', 'expense_type_name',
            'amount', 'account_name', 'created_at'
        ]
        read_only_fields = ['id', 'manufacturing_invoice', 'created_at']

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Amount cannot be negative")
        return value


class ManufacturingInvoiceSerializer(serializers.ModelSerializer):
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    farm_name = serializers.CharField(source='warehouse.farm.name', read_only=True)
    material_name_display = serializers.CharField(source='material_name.material_name', read_only=True, allow_null=True)
    unit_name = serializers.CharField(source='unit.unit_name', read_only=True, allow_null=True)

    class Meta:
        model = ManufacturingInvoice
        fields = [
            'id', 'invoice_number', 'warehouse', 'warehouse_name', 'farm_name',
            'blend_name', 'material_name', 'material_name_display', 'unit',
            'unit_name', 'quantity', 'output_posted', 'manufacturing_date',
            'manufacturing_time', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'output_posted', 'created_at', 'updated_at']
        extra_kwargs = {'invoice_number': {'validators': []}}

    def validate_invoice_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Invoice number is required")
        existing = ManufacturingInvoice.objects.filter(invoice_number=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Invoice number already exists")
        return value

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Quantity cannot be negative")
        return value


class ManufacturingInvoiceDetailSerializer(ManufacturingInvoiceSerializer):
    items = ManufacturingItemSerializer(many=True, read_only=True)
    expenses = ManufacturingExpenseSerializer(many=True, read_only=True)
    attachments = serializers.SerializerMethodField()

    class Meta(ManufacturingInvoiceSerializer.Meta):
        fields = ManufacturingInvoiceSerializer.Meta.fields + ['items', 'expenses', 'attachments']

    def get_attachments(self, obj):
        return [attachment_payload(a, self.context.get('request')) for a in obj.attachments.all()]
