from django.contrib import admin

from .models import Invoice, InvoiceItem, InvoiceExpense, InvoiceAttachment


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['value']


class InvoiceExpenseInline(admin.TabularInline):
    model = InvoiceExpense
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = [
        'invoice_number', 'invoice_type', 'invoice_date', 'warehouse',
        'client', 'net_value', 'checked'
    ]
    list_filter = ['invoice_type', 'checked', 'invoice_date']
    search_fields = ['invoice_number', 'notes']
    readonly_fields = ['total_items_value', 'total_expenses_value', 'net_value']
    inlines = [InvoiceItemInline, InvoiceExpenseInline]


@admin.register(InvoiceAttachment)
class InvoiceAttachmentAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'invoice', 'file_type', 'created_at']
