"""Namespace-prefix to directory resolution.

NamespaceResolver keeps a registry of normalized namespace prefixes, each
mapped to an ordered list of base directories, and resolves a dotted module
name by walking its prefixes from most to least specific:

    Acme.Billing.Tax.Rate  ->  Acme.Billing.Tax.  (relative name Rate)
                           ->  Acme.Billing.      (relative name Tax.Rate)
                           ->  Acme.              (relative name Billing.Tax.Rate)

Within a prefix, directories are tried in stored order. The first candidate
file that loads wins; if none does the result is None, which is a normal
outcome since other finders may still handle the name.
"""

import logging
import os
import sys
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import field

from .errors import HookRegistrationError
from .hooks import HookHost
from .hooks import MetaPathHost
from .loading import ModuleFileLoader
from .loading import get_default_loader
from .normalize import NAMESPACE_SEPARATOR
from .normalize import normalize_directory
from .normalize import normalize_namespace

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".py"


@dataclass
class AutoloaderConfig:
    """Construction-time configuration for NamespaceResolver.

    Attributes:
        initial_mappings: (prefix, directory) pairs added in order
        namespace: Single prefix, used together with directory
        directory: Single directory for namespace
        fail_fast_on_registration_error: Exit the process if the host rejects
            the resolver instead of returning False
        extension: Source file extension appended to candidate paths
    """

    initial_mappings: list[tuple[str, str]] = field(default_factory=list)
    namespace: str | None = None
    directory: str | None = None
    fail_fast_on_registration_error: bool = True
    extension: str = DEFAULT_EXTENSION

    @property
    def has_single_pair(self) -> bool:
        return self.namespace is not None and self.directory is not None

    @property
    def has_mappings(self) -> bool:
        return self.has_single_pair or bool(self.initial_mappings)


class NamespaceResolver:
    """Resolves dotted module names to files through registered prefixes.

    When the configuration carries any mapping, the constructor registers the
    resolver with its host first and then adds the single pair followed by
    the initial mappings, exactly as if those calls were made by hand.
    """

    def __init__(
        self,
        config: AutoloaderConfig | None = None,
        *,
        host: HookHost | None = None,
        loader: ModuleFileLoader | None = None,
    ):
        self.config = config or AutoloaderConfig()
        self.host = host if host is not None else MetaPathHost()
        self.loader = loader if loader is not None else get_default_loader()
        self._namespaces: dict[str, list[str]] = {}
        self._lock = threading.Lock()

        if self.config.has_mappings:
            self.register_handler(self.config.fail_fast_on_registration_error)
            if self.config.has_single_pair:
                self.add_namespace(self.config.namespace, self.config.directory)
            for prefix, directory in self.config.initial_mappings:
                self.add_namespace(prefix, directory)

    @property
    def namespaces(self) -> dict[str, tuple[str, ...]]:
        """Snapshot of the registry: prefix -> directories in search order."""
        with self._lock:
            return {prefix: tuple(directories) for prefix, directories in self._namespaces.items()}

    def register_handler(self, fail_fast: bool | None = None) -> bool:
        """Install resolve_identifier with the host runtime.

        Args:
            fail_fast: Exit the process on rejection. Defaults to the
                configured fail_fast_on_registration_error.

        Returns:
            True if installed, False if rejected and fail_fast is off
        """
        if fail_fast is None:
            fail_fast = self.config.fail_fast_on_registration_error

        try:
            self.host.register(self.resolve_identifier, packages=self.is_package)
        except HookRegistrationError as e:
            if fail_fast:
                logger.error(f"[autoload:hook] {e}")
                sys.exit(1)
            logger.warning(f"[autoload:hook] {e}")
            return False

        return True

    def add_namespace(self, namespace: str, directory: str | os.PathLike[str], prepend: bool = False) -> bool:
        """Add a base directory for a namespace prefix.

        Args:
            namespace: Prefix such as "Acme.Billing" or "Acme\\Billing"
            directory: Base directory holding that prefix's modules
            prepend: Search this directory before those already registered

        Returns:
            Always True
        """
        namespace = normalize_namespace(namespace)
        directory = normalize_directory(directory)
        with self._lock:
            directories = self._namespaces.setdefault(namespace, [])
            if prepend:
                directories.insert(0, directory)
            else:
                directories.append(directory)

        logger.debug(f"[autoload:register] {namespace} -> {directory}{' (prepended)' if prepend else ''}")
        return True

    def _directories(self, namespace: str) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._namespaces.get(namespace, ()))

    def iter_candidates(self, identifier: str) -> Iterator[tuple[str, str]]:
        """Yield (prefix, path) pairs in the order resolution tries them.

        Nothing is read from disk; registry lists are snapshotted per prefix.
        """
        tail = identifier
        while (position := tail.rfind(NAMESPACE_SEPARATOR)) != -1:
            # Slice from the full identifier, not from tail
            prefix = identifier[: position + 1]
            relative = identifier[position + 1 :].replace(NAMESPACE_SEPARATOR, os.sep)
            for directory in self._directories(prefix):
                yield prefix, directory + relative + self.config.extension
            tail = prefix.rstrip(NAMESPACE_SEPARATOR)

    def resolve_identifier(self, identifier: str) -> str | None:
        """Find and load the file implementing identifier.

        Returns:
            Path of the loaded file, or None if no candidate could be loaded
        """
        for prefix, path in self.iter_candidates(identifier):
            if self.loader.try_load(path, identifier):
                logger.debug(f"[autoload:resolve] {identifier} -> {path} (via {prefix})")
                return path

        logger.debug(f"[autoload:resolve] {identifier} not found")
        return None

    def locate(self, identifier: str) -> str | None:
        """Like resolve_identifier, but only checks candidates, never loads them."""
        for _prefix, path in self.iter_candidates(identifier):
            if self.loader.is_loadable(path):
                return path
        return None

    def is_package(self, identifier: str) -> bool:
        """Check whether identifier is a namespace level imports must pass through.

        True when identifier is a registered prefix or an ancestor of one, or
        when it extends a registered prefix and names an existing directory
        under one of that prefix's directories.
        """
        key = normalize_namespace(identifier)
        namespaces = self.namespaces

        if any(prefix.startswith(key) for prefix in namespaces):
            return True

        for prefix, directories in namespaces.items():
            if not key.startswith(prefix):
                continue
            relative = key[len(prefix) :].rstrip(NAMESPACE_SEPARATOR).replace(NAMESPACE_SEPARATOR, os.sep)
            if any(os.path.isdir(directory + relative) for directory in directories):
                return True

        return False

    def __repr__(self) -> str:
        return f"NamespaceResolver({len(self._namespaces)} prefixes)"
