"""Reads and writes config.yaml.

A broken or missing file never stops the monitor: every read problem is
logged and the built-in defaults are used instead. Preference changes made
from the settings API are validated as a whole AppConfig before they are
accepted, then written back as YAML.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from claufication.models.config import AppConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """Owns the in-memory AppConfig and its YAML file."""

    def __init__(self, config_path: str | Path = "config.yaml"):
        """
        Args:
            config_path: Location of the YAML file. It need not exist yet.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def _read_mapping(self) -> dict | None:
        """Top-level mapping from the file, or None if it is unusable."""
        if not self.config_path.exists():
            logger.info(f"No config at {self.config_path}; running with defaults")
            return None

        try:
            raw = yaml.safe_load(self.config_path.read_text())
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read {self.config_path}: {e}")
            return None

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"{self.config_path} does not hold a mapping; ignoring it")
            return None
        return raw

    def load(self) -> AppConfig:
        """Read the file and validate it, falling back to defaults."""
        raw = self._read_mapping()
        config = AppConfig()
        if raw:
            try:
                config = AppConfig(**raw)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Invalid settings in {self.config_path}, using defaults: {e}")
        self._config = config
        return config

    def get_config(self) -> AppConfig:
        """Current config; the file is read on first use."""
        return self._config if self._config is not None else self.load()

    def reload(self) -> AppConfig:
        self._config = None
        return self.load()

    def update(self, section: str, values: dict[str, Any]) -> AppConfig:
        """Merge ``values`` into one section and revalidate.

        Raises:
            KeyError: ``section`` is not a section (e.g. "port" or a typo).
            ValidationError: The merged values are rejected.
        """
        return self.update_sections({section: values})

    def update_sections(self, changes: dict[str, dict[str, Any]]) -> AppConfig:
        """Merge changes into several sections and validate them together.

        Nothing is stored unless every section is valid, so a request that
        is partly wrong leaves the config untouched.

        Raises:
            KeyError: One of the names is not a section.
            ValidationError: The merged values are rejected.
        """
        merged = self.get_config().model_dump()
        for section, values in changes.items():
            current = merged.get(section)
            if not isinstance(current, dict):
                raise KeyError(section)
            current.update(values)

        updated = AppConfig(**merged)
        self._config = updated
        logger.info(f"Config updated: {sorted(changes)}")
        return updated

    def save(self, config: AppConfig | None = None) -> bool:
        """Write ``config`` (default: the current one) back to the file.

        Returns:
            False when there is nothing to save or the write failed.
        """
        target = config if config is not None else self._config
        if target is None:
            return False

        try:
            text = yaml.safe_dump(target.model_dump(mode="json"), sort_keys=False)
            self.config_path.write_text(text)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write {self.config_path}: {e}")
            return False
        return True


_config_service: ConfigService | None = None


def get_config_service(config_path: str | Path = "config.yaml") -> ConfigService:
    """Shared ConfigService; ``config_path`` only matters on the first call."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService(config_path)
    return _config_service


def reset_config_service() -> None:
    global _config_service
    _config_service = None
