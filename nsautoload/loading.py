"""File load attempts for resolved candidates.

ModuleFileLoader records every file it executes and runs each distinct path at
most once. Each module it creates gets a RunOnceSourceLoader, a
SourceFileLoader that consults the same record, so when the import system
later runs ``create_module``/``exec_module`` for that spec it receives the
cached module and execution is skipped.

Resolvers share one ModuleFileLoader per process (see get_default_loader).
"""

import importlib.machinery
import importlib.util
import logging
import os
import sys
from types import ModuleType

logger = logging.getLogger(__name__)


class RunOnceSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that skips files its registry has already executed."""

    def __init__(self, fullname: str, path: str, registry: "ModuleFileLoader"):
        super().__init__(fullname, path)
        self.registry = registry

    def create_module(self, spec):
        return self.registry.module_for(self.path)

    def exec_module(self, module: ModuleType) -> None:
        if not self.registry.remember(self.path, module):
            return
        try:
            super().exec_module(module)
        except Exception:
            self.registry.forget(self.path)
            raise


class ModuleFileLoader:
    """Loads source files into ``sys.modules`` exactly once per path."""

    def __init__(self) -> None:
        self._modules: dict[str, ModuleType] = {}

    @staticmethod
    def is_loadable(path: str | os.PathLike[str]) -> bool:
        """Check that path is an existing, readable, non-directory entry."""
        return os.path.isfile(path) and os.access(path, os.R_OK)

    @staticmethod
    def _key(path: str | os.PathLike[str]) -> str:
        return os.path.realpath(path)

    def module_for(self, path: str | os.PathLike[str]) -> ModuleType | None:
        """Return the module previously loaded from path, if any."""
        return self._modules.get(self._key(path))

    def remember(self, path: str | os.PathLike[str], module: ModuleType) -> bool:
        """Record module as the one loaded from path.

        Returns:
            False if module is already recorded for path (nothing to execute)
        """
        key = self._key(path)
        if self._modules.get(key) is module:
            return False
        # Recorded before executing so circular imports see the partial module
        self._modules[key] = module
        return True

    def forget(self, path: str | os.PathLike[str]) -> None:
        self._modules.pop(self._key(path), None)

    def try_load(self, path: str | os.PathLike[str], name: str) -> bool:
        """Attempt to load path as module ``name``.

        Args:
            path: Candidate file path
            name: Fully-qualified module name to register it under

        Returns:
            True if the file is loaded (now or earlier), False if path is
            missing, unreadable or a directory.

        Raises:
            Exception: Whatever the file's own code raises while executing.
        """
        if not self.is_loadable(path):
            logger.debug(f"[autoload:load] {path} is not a loadable file")
            return False

        module = self.module_for(path)
        if module is not None:
            # Dropped from sys.modules since; put it back rather than re-executing
            if module.__name__ == name and name not in sys.modules:
                sys.modules[name] = module
            logger.debug(f"[autoload:load] {path} already loaded")
            return True

        path = os.fspath(path)
        spec = importlib.util.spec_from_file_location(name, path, loader=RunOnceSourceLoader(name, path, self))
        if spec is None:
            return False
        # A directory named like the file makes the module a package too. Its
        # submodules resolve through the registered prefixes, like namespace
        # levels, so the search locations stay empty.
        if os.path.isdir(os.path.splitext(path)[0]):
            spec.submodule_search_locations = []

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(name, None)
            raise

        logger.debug(f"[autoload:load] {name} <- {path}")
        return True

    def __repr__(self) -> str:
        return f"ModuleFileLoader({len(self._modules)} loaded)"


# Process-wide instance shared by resolvers that are not given a loader
_default_loader: ModuleFileLoader | None = None


def get_default_loader() -> ModuleFileLoader:
    """Return the process-wide ModuleFileLoader."""
    global _default_loader
    if _default_loader is None:
        _default_loader = ModuleFileLoader()
    return _default_loader
