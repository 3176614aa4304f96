from django.contrib import admin

from .models import Material, StockMovement


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = [
        'warehouse', 'material_name', 'medicine', 'unit',
        'opening_balance', 'purchases', 'sales', 'consumption',
        'manufacturing', 'current_balance'
    ]
    list_filter = ['warehouse']
    search_fields = ['material_name__material_name', 'medicine__name']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['material', 'movement_type', 'quantity', 'balance_after', 'source_type', 'created_at']
    list_filter = ['movement_type']
    readonly_fields = ['created_at']
