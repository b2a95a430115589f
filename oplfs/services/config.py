"""Configuration service for managing application settings."""

import json
from pathlib import Path

import structlog

from ..models import AppConfig

log = structlog.stdlib.get_logger()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "oplfs" / "config.json"
        log.debug("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.debug("Configuration file not found, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return AppConfig()

            log.info("Configuration loaded successfully")
            return config

        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return AppConfig()

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file."""
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config_to_dict(config), f, indent=2, ensure_ascii=False)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if config.log_dir is not None and not isinstance(config.log_dir, Path):
            errors.append("log_dir must be a Path object or None")

        if config.catalog_path is not None and not isinstance(config.catalog_path, Path):
            errors.append("catalog_path must be a Path object or None")

        if not config.extensions:
            errors.append("extensions cannot be empty")
        elif not all(isinstance(ext, str) and ext.startswith(".") and len(ext) > 1 for ext in config.extensions):
            errors.append("extensions must be suffixes starting with '.'")

        if not isinstance(config.entry_name, str) or not config.entry_name.strip("/"):
            errors.append("entry_name cannot be empty")

        return ValidationResult(len(errors) == 0, errors)

    def _config_to_dict(self, config: AppConfig) -> dict[str, str | list[str] | None]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "log_level": config.log_level,
            "log_dir": str(config.log_dir) if config.log_dir else None,
            "catalog_path": str(config.catalog_path) if config.catalog_path else None,
            "extensions": list(config.extensions),
            "entry_name": config.entry_name,
        }

    def _dict_to_config(self, data: dict[str, str | list[str] | None]) -> AppConfig:
        """Convert dictionary to AppConfig, falling back to defaults per field."""
        defaults = AppConfig()

        log_dir = data.get("log_dir")
        catalog_path = data.get("catalog_path")
        extensions = data.get("extensions")

        return AppConfig(
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
            log_dir=Path(log_dir) if isinstance(log_dir, str) and log_dir else None,
            catalog_path=Path(catalog_path) if isinstance(catalog_path, str) and catalog_path else None,
            extensions=tuple(extensions) if isinstance(extensions, list) else defaults.extensions,
            entry_name=str(data.get("entry_name", defaults.entry_name)),
        )
