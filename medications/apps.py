from django.apps import AppConfig


class MedicationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'medications'
    verbose_name = 'Medicine Consumption & Alerts'

    def ready(self):
        """Import signals when app is ready"""
        import medications.signals  # noqa
