from django.contrib import admin

from .models import DailyReport


@admin.register(DailyReport)
class DailyReportAdmin(admin.ModelAdmin):
    list_display = [
        'report_date', 'warehouse', 'production_eggs', 'production_egg_rate',
        'chicks_after', 'feed_daily_kg', 'checked'
    ]
    list_filter = ['checked', 'report_date', 'warehouse']
    readonly_fields = [
        'production_eggs', 'production_egg_rate', 'current_eggs_balance',
        'chicks_after', 'feed_monthly_kg'
    ]
    date_hierarchy = 'report_date'
