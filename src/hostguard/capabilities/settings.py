"""
Settings adapter backed by a YAML file.

With no path the store lives in memory only, which is what the tests and
one-off CLI runs use.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from hostguard.capabilities.base import SettingsCapability
from hostguard.errors import CapabilityFailure


class YamlSettingsStore(SettingsCapability):
    """Key/value settings persisted as a flat YAML mapping."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._data: dict[str, Any] = self._load()

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def get_all(self) -> dict[str, Any]:
        return dict(self._data)

    def set_all(self, values: Mapping[str, Any]) -> None:
        self._data.update(values)
        self._save()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with self.path.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise CapabilityFailure(
                capability="settings",
                operation="load",
                underlying_error=str(e),
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CapabilityFailure(
                capability="settings",
                operation="load",
                underlying_error=f"Settings file must hold a mapping: {self.path}",
            )
        return data

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w") as f:
                yaml.safe_dump(self._data, f, sort_keys=True)
        except (OSError, yaml.YAMLError) as e:
            raise CapabilityFailure(
                capability="settings",
                operation="save",
                underlying_error=str(e),
            ) from e
