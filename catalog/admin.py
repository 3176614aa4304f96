from django.contrib import admin

from .models import MaterialName, MeasurementUnit, EggWeight, ExpenseType, Client, Medicine


@admin.register(MaterialName)
class MaterialNameAdmin(admin.ModelAdmin):
    list_display = ['material_name', 'created_at']
    search_fields = ['material_name']


@admin.register(MeasurementUnit)
class MeasurementUnitAdmin(admin.ModelAdmin):
    list_display = ['unit_name', 'created_at']
    search_fields = ['unit_name']


@admin.register(EggWeight)
class EggWeightAdmin(admin.ModelAdmin):
    list_display = ['weight_range', 'created_at']


@admin.register(ExpenseType)
class ExpenseTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'created_at']
    list_filter = ['type']
    search_fields = ['name']


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ['name', 'day_of_age', 'created_at']
    search_fields = ['name']
