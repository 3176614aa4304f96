"""
Serializers for buy/sell invoices, their items, expenses and attachments.
"""

from rest_framework import serializers
from decimal import Decimal

from catalog.models import MaterialName, Medicine, MeasurementUnit, EggWeight
from core.attachments import attachment_payload
from .models import Invoice, InvoiceItem, InvoiceExpense


# =============================================================================
# ITEM / EXPENSE SERIALIZERS
# =============================================================================

class InvoiceItemSerializer(serializers.ModelSerializer):
    material_name_display = serializers.CharField(source='material_name.material_name', read_only=True, allow_null=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True, allow_null=True)
    unit_name = serializers.CharField(source='unit.unit_name', read_only=True, allow_null=True)
    egg_weight_range = serializers.CharField(source='egg_weight.weight_range', read_only=True, allow_null=True)

    class Meta:
        model = InvoiceItem
        fields = [
            'id', 'invoice', 'material_name', 'material_name_display',
            'medicine', 'medicine_name', 'unit', 'unit_name',
            'egg_weight', 'egg_weight_range', 'quantity', 'weight',
            'price', 'value', 'created_at'
        ]
        read_only_fields = fields


class InvoiceItemCreateSerializer(serializers.Serializer):
    material_name = serializers.PrimaryKeyRelatedField(
        queryset=MaterialName.objects.all(), required=False, allow_null=True
    )
    medicine = serializers.PrimaryKeyRelatedField(
        queryset=Medicine.objects.all(), required=False, allow_null=True
    )
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    egg_weight = serializers.PrimaryKeyRelatedField(
        queryset=EggWeight.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    weight = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class InvoiceItemUpdateSerializer(serializers.Serializer):
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    egg_weight = serializers.PrimaryKeyRelatedField(
        queryset=EggWeight.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'), required=False)
    weight = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class InvoiceExpenseSerializer(serializers.ModelSerializer):
    expense_type_name = serializers.CharField(source='expense_type.name', read_only=True)

    class Meta:
        model = InvoiceExpense
        fields = [
            'id', 'invoice', 'expense_type', 'expense_type_name',
            'amount', 'account_name', 'created_at'
        ]
        read_only_fields = ['id', 'invoice', 'created_at']

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Amount cannot be negative")
        return value


# =============================================================================
# INVOICE SERIALIZERS
# =============================================================================

class InvoiceListSerializer(serializers.ModelSerializer):
    invoice_type_display = serializers.CharField(source='get_invoice_type_display', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True, allow_null=True)
    farm_name = serializers.CharField(source='warehouse.farm.name', read_only=True, allow_null=True)
    client_name = serializers.CharField(source='client.name', read_only=True, allow_null=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_type', 'invoice_type_display', 'invoice_number',
            'invoice_date', 'invoice_time', 'warehouse', 'warehouse_name',
            'farm_name', 'client', 'client_name', 'total_items_value',
            'total_expenses_value', 'net_value', 'checked', 'notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'total_items_value', 'total_expenses_value', 'net_value',
            'created_at', 'updated_at'
        ]


class InvoiceDetailSerializer(InvoiceListSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    expenses = InvoiceExpenseSerializer(many=True, read_only=True)
    attachments = serializers.SerializerMethodField()

    class Meta(InvoiceListSerializer.Meta):
        fields = InvoiceListSerializer.Meta.fields + ['items', 'expenses', 'attachments']

    def get_attachments(self, obj):
        return [attachment_payload(a, self.context.get('request')) for a in obj.attachments.all()]


class InvoiceWriteSerializer(serializers.ModelSerializer):
    """Create and update payload for invoices."""

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_type', 'invoice_number', 'invoice_date', 'invoice_time',
            'warehouse', 'client', 'checked', 'notes'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'invoice_number': {
                'validators': [],
                'error_messages': {
                    'required': 'Invoice number is required',
                    'blank': 'Invoice number is required',
                },
            },
        }

    def validate_invoice_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Invoice number is required")
        existing = Invoice.objects.filter(invoice_number=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Invoice number already exists")
        return value
