from django.apps import AppConfig


class InvoicesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'invoices'
    verbose_name = 'Buy & Sell Invoices'

    def ready(self):
        """Import signals when app is ready"""
        import invoices.signals  # noqa
