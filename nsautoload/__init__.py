"""nsautoload - load modules on first import from namespace-prefix to directory mappings.

Usage:
    from nsautoload import NamespaceResolver

    resolver = NamespaceResolver()
    resolver.add_namespace("Acme.Billing", "src/billing")
    resolver.register_handler()

    import Acme.Billing.Invoice  # loads src/billing/Invoice.py
"""

from .errors import AutoloadError
from .errors import HookRegistrationError
from .errors import SettingsError
from .hooks import AutoloadFinder
from .hooks import HookHost
from .hooks import MetaPathHost
from .loading import ModuleFileLoader
from .loading import get_default_loader
from .normalize import normalize_directory
from .normalize import normalize_namespace
from .resolver import AutoloaderConfig
from .resolver import NamespaceResolver
from .settings import AutoloadSettings
from .settings import load_config

__all__ = [
    "AutoloadError",
    "AutoloadFinder",
    "AutoloadSettings",
    "AutoloaderConfig",
    "HookHost",
    "HookRegistrationError",
    "MetaPathHost",
    "ModuleFileLoader",
    "NamespaceResolver",
    "SettingsError",
    "get_default_loader",
    "load_config",
    "normalize_directory",
    "normalize_namespace",
]
