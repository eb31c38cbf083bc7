"""
Django Ledgerman app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class LedgermanConfig(AppConfig):
    """Ledgerman application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ledgerman"
    verbose_name = _("Pendências de Coleta")

    def ready(self):
        """Import signal handlers when app is ready."""
        # Import handlers to register them
        from ledgerman.signals import handlers  # noqa: F401
