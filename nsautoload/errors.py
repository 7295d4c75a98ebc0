"""Exceptions raised by nsautoload.

A resolution miss is not an error and has no exception here: resolvers
return ``None`` so the import system can move on to the next finder.
"""

from pathlib import Path
from typing import Any


class AutoloadError(Exception):
    """Base class for nsautoload errors."""


class HookRegistrationError(AutoloadError):
    """Raised when the host runtime refuses to install a resolver callback."""

    def __init__(self, callback: Any, reason: str):
        self.callback = callback
        self.reason = reason
        super().__init__(f"Cannot register resolver {callback!r}: {reason}")


class SettingsError(AutoloadError):
    """Raised when a settings file cannot be read or fails validation."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        self.message = message
        location = f"{path}: " if path is not None else ""
        super().__init__(f"{location}{message}")
