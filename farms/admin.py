from django.contrib import admin

from .models import Farm, Warehouse, PoultryStatus


@admin.register(Farm)
class FarmAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'location', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'location', 'user__username']


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ['name', 'farm', 'created_at']
    search_fields = ['name', 'farm__name']


@admin.register(PoultryStatus)
class PoultryStatusAdmin(admin.ModelAdmin):
    list_display = [
        'batch_name', 'farm', 'opening_chicks', 'dead_chicks',
        'remaining_chicks', 'chick_birth_date'
    ]
    search_fields = ['batch_name', 'farm__name']
    readonly_fields = ['remaining_chicks']
