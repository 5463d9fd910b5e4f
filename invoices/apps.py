from django.apps import AppConfig


class InvoicesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'invoices'

    def ready(self):
        # connects the setting_changed receiver that resets the cached backend
        from . import backends  # noqa: F401
