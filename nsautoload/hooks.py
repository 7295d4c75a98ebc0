"""Host runtime hook: installing resolver callbacks into the import system.

The resolver never touches ``sys.meta_path`` itself. It is given a HookHost
and asks it to register a callback; MetaPathHost is the real implementation,
tests pass fakes.

A callback takes a fully-qualified module name and returns the path of the
file it loaded, or None when it has nothing for that name.
"""

import importlib.abc
import importlib.machinery
import logging
import sys
from collections.abc import Callable
from typing import Protocol

from .errors import HookRegistrationError

logger = logging.getLogger(__name__)

ResolverCallback = Callable[[str], str | None]
PackagePredicate = Callable[[str], bool]


class HookHost(Protocol):
    """Capability to install a resolver callback with the host runtime."""

    def register(self, callback: ResolverCallback, *, packages: PackagePredicate | None = None) -> None:
        """Install callback.

        Raises:
            HookRegistrationError: The host refused the callback
        """
        ...


class AutoloadFinder(importlib.abc.MetaPathFinder):
    """Meta path finder that delegates to a resolver callback.

    Names the callback cannot resolve may still be namespace levels (for
    example ``Acme`` when only ``Acme.Billing.`` is mapped); the optional
    package predicate turns those into empty namespace packages so the import
    system can descend into them.
    """

    def __init__(self, callback: ResolverCallback, packages: PackagePredicate | None = None):
        self.callback = callback
        self.packages = packages

    def find_spec(self, fullname, path=None, target=None):
        origin = self.callback(fullname)
        if origin is not None:
            spec = getattr(sys.modules.get(fullname), "__spec__", None)
            if spec is None:
                logger.debug(f"[autoload:finder] {fullname} resolved to {origin} but no module was registered")
            return spec

        if self.packages is not None and self.packages(fullname):
            logger.debug(f"[autoload:finder] {fullname} -> namespace package")
            return importlib.machinery.ModuleSpec(fullname, None, is_package=True)

        return None

    def __repr__(self) -> str:
        return f"AutoloadFinder({self.callback!r})"


class MetaPathHost:
    """HookHost backed by the import system's ordered finder list."""

    def __init__(self, meta_path: list | None = None):
        self.meta_path = sys.meta_path if meta_path is None else meta_path

    def finder_for(self, callback: ResolverCallback) -> AutoloadFinder | None:
        """Return the installed finder wrapping callback, if any."""
        for finder in self.meta_path:
            if isinstance(finder, AutoloadFinder) and finder.callback == callback:
                return finder
        return None

    def register(self, callback: ResolverCallback, *, packages: PackagePredicate | None = None) -> None:
        if not callable(callback):
            raise HookRegistrationError(callback, "callback is not callable")
        if packages is not None and not callable(packages):
            raise HookRegistrationError(callback, "package predicate is not callable")

        if self.finder_for(callback) is not None:
            logger.debug(f"[autoload:hook] {callback!r} already registered")
            return

        self.meta_path.append(AutoloadFinder(callback, packages))
        logger.debug(f"[autoload:hook] registered {callback!r} ({len(self.meta_path)} finders)")

    def unregister(self, callback: ResolverCallback) -> bool:
        """Remove the finder wrapping callback.

        Returns:
            True if a finder was removed, False if none was installed
        """
        finder = self.finder_for(callback)
        if finder is None:
            return False
        self.meta_path.remove(finder)
        return True

    def __repr__(self) -> str:
        return "MetaPathHost(sys.meta_path)" if self.meta_path is sys.meta_path else "MetaPathHost(custom)"
