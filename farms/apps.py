from django.apps import AppConfig


class FarmsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'farms'
    verbose_name = 'Farms & Poultry'

    def ready(self):
        """Import signals when app is ready"""
        import farms.signals  # noqa
