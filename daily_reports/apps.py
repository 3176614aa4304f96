from django.apps import AppConfig


class DailyReportsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'daily_reports'
    verbose_name = 'Daily Production Reports'
