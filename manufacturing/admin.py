from django.contrib import admin

from .models import ManufacturingInvoice, ManufacturingItem, ManufacturingExpense


class ManufacturingItemInline(admin.TabularInline):
    model = ManufacturingItem
    extra = 0


class ManufacturingExpenseInline(admin.TabularInline):
    model = ManufacturingExpense
    extra = 0


@admin.register(ManufacturingInvoice)
class ManufacturingInvoiceAdmin(admin.ModelAdmin):
    list_display = [
        'invoice_number', 'warehouse', 'blend_name', 'material_name',
        'quantity', 'output_posted', 'manufacturing_date'
    ]
    list_filter = ['output_posted', 'manufacturing_date']
    search_fields = ['invoice_number', 'blend_name']
    inlines = [ManufacturingItemInline, ManufacturingExpenseInline]
