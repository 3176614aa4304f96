from django.contrib import admin

from .models import (
    MedicineConsumptionInvoice,
    MedicineConsumptionItem,
    MedicineConsumptionExpense,
    MedicationAlert,
)


class MedicineConsumptionItemInline(admin.TabularInline):
    model = MedicineConsumptionItem
    extra = 0
    readonly_fields = ['value']


class MedicineConsumptionExpenseInline(admin.TabularInline):
    model = MedicineConsumptionExpense
    extra = 0


@admin.register(MedicineConsumptionInvoice)
class MedicineConsumptionInvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'invoice_date', 'warehouse', 'poultry_status', 'total_value']
    list_filter = ['invoice_date']
    search_fields = ['invoice_number', 'notes']
    readonly_fields = ['total_value']
    inlines = [MedicineConsumptionItemInline, MedicineConsumptionExpenseInline]


@admin.register(MedicationAlert)
class MedicationAlertAdmin(admin.ModelAdmin):
    list_display = ['medicine', 'farm', 'poultry_status', 'scheduled_day', 'scheduled_date', 'is_administered']
    list_filter = ['is_administered', 'farm']
    search_fields = ['medicine__name', 'farm__name']
    date_hierarchy = 'scheduled_date'
