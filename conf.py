"""
Ledgerman Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    LEDGERMAN = {
        "NOTIFICATION_BACKEND": "myproject.toasts.ToastBackend",
        "MAX_ATTEMPTS": 5,
    }

    # Option 2: Flat
    LEDGERMAN_NOTIFICATION_BACKEND = "myproject.toasts.ToastBackend"
    LEDGERMAN_MAX_ATTEMPTS = 5

All settings have defaults; no configuration is required.
"""

import threading

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


# ── Defaults ──

DEFAULTS = {
    "NOTIFICATION_BACKEND": "ledgerman.adapters.log.LoggingNotificationBackend",
    "AUTO_RECONCILE": True,
    "MAX_ATTEMPTS": 3,
    "ON_DUPLICATE": "ignore",
    "LOCK_OBLIGATIONS": True,
}

ON_DUPLICATE_CHOICES = ("ignore", "raise")


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a ledgerman setting.

    Looks up in order:
    1. LEDGERMAN dict (e.g. LEDGERMAN = {"MAX_ATTEMPTS": 5})
    2. Flat setting (e.g. LEDGERMAN_MAX_ATTEMPTS = 5)
    3. DEFAULTS
    """
    ledgerman_dict = getattr(settings, "LEDGERMAN", {})
    if name in ledgerman_dict:
        return ledgerman_dict[name]

    flat_value = getattr(settings, f"LEDGERMAN_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


def get_max_attempts() -> int:
    """Number of times a reconciliation is tried before a conflict propagates."""
    attempts = int(get_setting("MAX_ATTEMPTS"))
    if attempts < 1:
        raise ImproperlyConfigured("LEDGERMAN['MAX_ATTEMPTS'] must be >= 1")
    return attempts


def get_on_duplicate() -> str:
    """Policy for a second reconcile of the same collection."""
    policy = get_setting("ON_DUPLICATE")
    if policy not in ON_DUPLICATE_CHOICES:
        raise ImproperlyConfigured(
            f"LEDGERMAN['ON_DUPLICATE'] must be one of {ON_DUPLICATE_CHOICES}, got {policy!r}"
        )
    return policy


_notification_backend_lock = threading.Lock()
_notification_backend_instance = None


def get_notification_backend():
    """
    Return the configured notification backend instance.

    The notification backend receives shortfalls and update counts
    after every reconciliation, for user-facing display.
    """
    global _notification_backend_instance

    if _notification_backend_instance is None:
        with _notification_backend_lock:
            if _notification_backend_instance is None:  # double-checked
                from django.utils.module_loading import import_string

                path = get_setting("NOTIFICATION_BACKEND")
                if not path:
                    path = DEFAULTS["NOTIFICATION_BACKEND"]

                try:
                    _notification_backend_instance = import_string(path)()
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import notification backend '{path}': {e}"
                    ) from e

    return _notification_backend_instance


def reset_notification_backend() -> None:
    """Reset singleton (for tests)."""
    global _notification_backend_instance
    _notification_backend_instance = None
