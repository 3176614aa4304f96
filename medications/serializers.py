from django.conf import settings
from django.utils import timezone
from rest_framework import serializers
from decimal import Decimal

from catalog.models import Medicine, MeasurementUnit
from core.attachments import attachment_payload
from .alerts import classify
from .models import (
    MedicineConsumptionInvoice,
    MedicineConsumptionItem,
    MedicineConsumptionExpense,
    MedicationAlert,
)


class MedicineConsumptionItemSerializer(serializers.ModelSerializer):
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    unit_name = serializers.CharField(source='unit.unit_name', read_only=True, allow_null=True)

    class Meta:
        model = MedicineConsumptionItem
        fields = [
            'id', 'consumption_invoice', 'medicine', 'medicine_name', 'unit',
            'unit_name', 'administration_day', 'administration_date',
            'quantity', 'price', 'value', 'created_at'
        ]
        read_only_fields = ['id', 'consumption_invoice', 'value', 'created_at']


class MedicineConsumptionItemCreateSerializer(serializers.Serializer):
    medicine = serializers.PrimaryKeyRelatedField(queryset=Medicine.objects.all())
    unit = serializers.PrimaryKeyRelatedField(
        queryset=MeasurementUnit.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, default=Decimal('0')
    )
    administration_day = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    administration_date = serializers.DateField(required=False, allow_null=True)


class MedicineConsumptionExpenseSerializer(serializers.ModelSerializer):
    expense_type_name = serializers.CharField(source='expense_type.name', read_only=True)

    class Meta:
        model = MedicineConsumptionExpense
        fields = [
            'id', 'consumption_invoice', 'expense_type', 'expense_type_name',
            'amount', 'account_name', 'created_at'
        ]
        read_only_fields = ['id', 'consumption_invoice', 'created_at']

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Amount cannot be negative")
        return value


class MedicineConsumptionInvoiceSerializer(serializers.ModelSerializer):
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)
    farm_name = serializers.CharField(source='warehouse.farm.name', read_only=True)
    batch_name = serializers.CharField(source='poultry_status.batch_name', read_only=True, allow_null=True)

    class Meta:
        model = MedicineConsumptionInvoice
        fields = [
            'id', 'invoice_number', 'invoice_date', 'invoice_time', 'warehouse',
            'warehouse_name', 'farm_name', 'poultry_status', 'batch_name',
            'total_value', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'total_value', 'created_at', 'updated_at']
        extra_kwargs = {'invoice_number': {'validators': []}}

    def validate_invoice_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Invoice number is required")
        existing = MedicineConsumptionInvoice.objects.filter(invoice_number=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Invoice number already exists")
        return value


class MedicineConsumptionInvoiceDetailSerializer(MedicineConsumptionInvoiceSerializer):
    items = MedicineConsumptionItemSerializer(many=True, read_only=True)
    expenses = MedicineConsumptionExpenseSerializer(many=True, read_only=True)
    attachments = serializers.SerializerMethodField()

    class Meta(MedicineConsumptionInvoiceSerializer.Meta):
        fields = MedicineConsumptionInvoiceSerializer.Meta.fields + ['items', 'expenses', 'attachments']

    def get_attachments(self, obj):
        return [attachment_payload(a, self.context.get('request')) for a in obj.attachments.all()]


class MedicationAlertSerializer(serializers.ModelSerializer):
    farm_name = serializers.CharField(source='farm.name', read_only=True)
    medicine_name = serializers.CharField(source='medicine.name', read_only=True)
    batch_name = serializers.CharField(source='poultry_status.batch_name', read_only=True)
    days_until_scheduled = serializers.SerializerMethodField()
    priority = serializers.SerializerMethodField()

    class Meta:
        model = MedicationAlert
        fields = [
            'id', 'farm', 'farm_name', 'poultry_status', 'batch_name', 'medicine',
            'medicine_name', 'scheduled_day', 'scheduled_date', 'alert_date',
            'is_administered', 'administered_at', 'notes', 'days_until_scheduled',
            'priority', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_days_until_scheduled(self, obj):
        return (obj.scheduled_date - timezone.localdate()).days

    def get_priority(self, obj):
        return classify(self.get_days_until_scheduled(obj), settings.ALERT_DAYS_AHEAD)
