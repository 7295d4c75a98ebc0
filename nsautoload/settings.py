"""Settings management for nsautoload.

Scope-aware YAML settings, merged in order of increasing specificity:
1. global (~/.nsautoload/settings.yaml) - user defaults
2. project (.nsautoload/settings.yaml) - committed, team-shared
3. local (.nsautoload/settings.local.yaml) - gitignored, machine-specific

Files passed explicitly (``nsautoload --config``) are merged after all scopes.

Format:
```yaml
autoload:
  fail_fast: true
  extension: .py
  namespaces:
    Acme.Billing: src/billing
    Acme: [src/acme, vendor/acme]
```

Scalar keys from a more specific file replace earlier ones. Namespace
directory lists are combined, with the more specific file's directories
searched first. Relative directories are taken relative to the directory
holding the settings file, or to its parent when that directory is
``.nsautoload`` (so project settings are relative to the project root and
global settings to the home directory).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .errors import SettingsError
from .normalize import normalize_namespace
from .resolver import AutoloaderConfig

logger = logging.getLogger(__name__)

class AutoloadSection(BaseModel):
    """The ``autoload`` section of a settings file."""

    fail_fast: bool | None = Field(None, description="Exit if the resolver cannot be registered")
    extension: str | None = Field(None, description="Source file extension, e.g. '.py'")
    namespaces: dict[str, list[str]] = Field(
        default_factory=dict, description="Namespace prefix -> directory or ordered list of directories"
    )

    @field_validator("extension")
    @classmethod
    def _dotted_extension(cls, value: str | None) -> str | None:
        if value and not value.startswith("."):
            return f".{value}"
        return value

    @field_validator("namespaces", mode="before")
    @classmethod
    def _directory_lists(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {prefix: [dirs] if isinstance(dirs, str) else dirs for prefix, dirs in value.items()}


class SettingsFile(BaseModel):
    """Top level of a settings file. Sections other than ``autoload`` are ignored."""

    autoload: AutoloadSection = Field(default_factory=AutoloadSection)


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for the standard nsautoload layout."""
        return cls(
            global_settings=Path.home() / ".nsautoload" / "settings.yaml",
            project_settings=Path.cwd() / ".nsautoload" / "settings.yaml",
            local_settings=Path.cwd() / ".nsautoload" / "settings.local.yaml",
        )

    def in_merge_order(self) -> list[Path]:
        return [self.global_settings, self.project_settings, self.local_settings]


def read_settings_file(path: Path) -> AutoloadSection | None:
    """Read and validate one settings file.

    Returns:
        The autoload section, or None if the file does not exist

    Raises:
        SettingsError: File is unreadable, not YAML, or fails validation
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(path, f"cannot read settings: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(path, f"expected a mapping at top level, got {type(data).__name__}")

    try:
        return SettingsFile.model_validate(data).autoload
    except ValidationError as e:
        raise SettingsError(path, f"invalid settings:\n{e}") from e


def settings_root(path: Path) -> Path:
    """Directory that relative directories in the settings file at path refer to."""
    parent = path.absolute().parent
    if parent.name == ".nsautoload":
        return parent.parent
    return parent


def anchor_directories(section: AutoloadSection, path: Path) -> AutoloadSection:
    """Return section with its relative directories made absolute against path's root."""
    root = settings_root(path)
    namespaces = {
        prefix: [str(root / Path(d).expanduser()) for d in directories]
        for prefix, directories in section.namespaces.items()
    }
    return section.model_copy(update={"namespaces": namespaces})


def merge_sections(base: AutoloadSection, overlay: AutoloadSection) -> AutoloadSection:
    """Merge two sections, overlay being the more specific one."""
    namespaces: dict[str, list[str]] = {}
    for source in (overlay.namespaces, base.namespaces):
        for prefix, directories in source.items():
            merged = namespaces.setdefault(normalize_namespace(prefix), [])
            merged.extend(d for d in directories if d not in merged)

    return AutoloadSection(
        fail_fast=overlay.fail_fast if overlay.fail_fast is not None else base.fail_fast,
        extension=overlay.extension or base.extension,
        namespaces=namespaces,
    )


class AutoloadSettings:
    """Settings reader with scope-aware merging.

    Usage:
        settings = AutoloadSettings()
        config = settings.to_config()
        resolver = NamespaceResolver(config)
    """

    def __init__(self, paths: SettingsPaths | None = None, extra_files: Iterable[Path] = ()) -> None:
        self.paths = paths or SettingsPaths.default()
        self.extra_files = [Path(p) for p in extra_files]

    def get_merged_settings(self) -> AutoloadSection:
        """Load and merge the autoload section from every scope."""
        result = AutoloadSection()
        for path in [*self.paths.in_merge_order(), *self.extra_files]:
            section = read_settings_file(path)
            if section is None:
                if path in self.extra_files:
                    raise SettingsError(path, "settings file not found")
                continue
            logger.debug(f"[autoload:settings] merging {path}")
            result = merge_sections(result, anchor_directories(section, path))
        return result

    def to_config(self, extra_mappings: Iterable[tuple[str, str]] = ()) -> AutoloaderConfig:
        """Build an AutoloaderConfig from the merged settings.

        Args:
            extra_mappings: (prefix, directory) pairs searched before any
                directory coming from settings files

        Returns:
            AutoloaderConfig with absolute directories
        """
        merged = self.get_merged_settings()
        mappings = [(prefix, _absolute(directory)) for prefix, directory in extra_mappings]
        for prefix, directories in merged.namespaces.items():
            mappings.extend((prefix, _absolute(directory)) for directory in directories)

        config = AutoloaderConfig(initial_mappings=mappings)
        if merged.fail_fast is not None:
            config.fail_fast_on_registration_error = merged.fail_fast
        if merged.extension:
            config.extension = merged.extension
        return config


def _absolute(directory: str) -> str:
    return str(Path(directory).expanduser().absolute())


def load_config(
    paths: SettingsPaths | None = None,
    *,
    config_files: Iterable[Path] = (),
    extra_mappings: Iterable[tuple[str, str]] = (),
) -> AutoloaderConfig:
    """Load an AutoloaderConfig from the default (or given) settings scopes."""
    return AutoloadSettings(paths, extra_files=config_files).to_config(extra_mappings)
