"""
Configuration system for undecorator

Provides configuration management with support for files and environment variables.
Includes validation, default value handling, and configuration merging.

Precedence (lowest first): defaults, configuration file, environment
variables, command line overrides.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "undecorate.json",
        "undecorate.yaml",
        "undecorate.yml",
        ".undecorate.json",
        ".undecorate.yaml",
        ".undecorate.yml",
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config = {}

        # Transform settings
        transform = {}
        if os.getenv("UNDECORATE_IGNORE_IMPORTS"):
            transform["ignore_imports"] = os.getenv("UNDECORATE_IGNORE_IMPORTS").lower() == "true"

        if transform:
            config["transform"] = transform

        # Runner settings
        runner = {}
        if os.getenv("UNDECORATE_EXTENSIONS"):
            runner["extensions"] = [
                ext.strip() for ext in os.getenv("UNDECORATE_EXTENSIONS").split(",") if ext.strip()
            ]

        if os.getenv("UNDECORATE_EXCLUDED_PATTERNS"):
            runner["excluded_patterns"] = os.getenv("UNDECORATE_EXCLUDED_PATTERNS").split(",")

        if os.getenv("UNDECORATE_MAX_WORKERS"):
            try:
                runner["max_workers"] = int(os.getenv("UNDECORATE_MAX_WORKERS"))
            except ValueError:
                logger.warning("Invalid UNDECORATE_MAX_WORKERS value, using default")

        if os.getenv("UNDECORATE_DRY_RUN"):
            runner["dry_run"] = os.getenv("UNDECORATE_DRY_RUN").lower() == "true"

        if os.getenv("UNDECORATE_BACKUP_ENABLED"):
            runner["backup_enabled"] = os.getenv("UNDECORATE_BACKUP_ENABLED").lower() == "true"

        if os.getenv("UNDECORATE_ENCODING"):
            runner["encoding"] = os.getenv("UNDECORATE_ENCODING")

        if runner:
            config["runner"] = runner

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        if "transform" in config_data:
            transform = config_data["transform"]

            if "ignore_imports" in transform and not isinstance(transform["ignore_imports"], bool):
                raise ConfigurationError("ignore_imports must be a boolean")

        if "runner" in config_data:
            runner = config_data["runner"]

            if "max_workers" in runner:
                workers = runner["max_workers"]
                if not isinstance(workers, int) or isinstance(workers, bool) or workers <= 0:
                    raise ConfigurationError("max_workers must be a positive integer")

            if "extensions" in runner:
                extensions = runner["extensions"]
                if not isinstance(extensions, list) or not extensions:
                    raise ConfigurationError("extensions must be a non-empty list")
                for ext in extensions:
                    if not isinstance(ext, str) or not ext.startswith("."):
                        raise ConfigurationError(f"Invalid extension {ext!r}, expected e.g. '.ts'")

            if "excluded_patterns" in runner and not isinstance(runner["excluded_patterns"], list):
                raise ConfigurationError("excluded_patterns must be a list")

            for flag in ("dry_run", "backup_enabled"):
                if flag in runner and not isinstance(runner[flag], bool):
                    raise ConfigurationError(f"{flag} must be a boolean")

            if "encoding" in runner:
                try:
                    "".encode(runner["encoding"])
                except (LookupError, TypeError):
                    raise ConfigurationError(f"Unknown encoding: {runner['encoding']}")


@dataclass
class TransformOptions:
    """Options of the per-file rewrite."""

    # Assume decorators come from the library even without a direct import.
    ignore_imports: bool = False


@dataclass
class RunnerConfig:
    """Configuration for batch runs over a directory tree."""

    extensions: List[str] = field(
        default_factory=lambda: [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".mts", ".cts"]
    )
    excluded_patterns: List[str] = field(
        default_factory=lambda: [
            "node_modules",
            ".git",
            "dist",
            "build",
            "*.d.ts",
        ]
    )
    max_workers: int = 4
    dry_run: bool = False
    backup_enabled: bool = True
    backup_suffix: str = ".backup"
    encoding: str = "utf-8"


@dataclass
class UndecorateConfig:
    """Main configuration class for undecorator."""

    transform_settings: TransformOptions = field(default_factory=TransformOptions)
    runner_settings: RunnerConfig = field(default_factory=RunnerConfig)

    @classmethod
    def default(cls) -> "UndecorateConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "UndecorateConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)
        4. Explicit overrides (command line flags)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration
            overrides: Nested dictionary applied last
        """
        configs_to_merge = []

        file_config = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")

        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        if overrides:
            configs_to_merge.append(overrides)

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        transform_config = TransformOptions()
        for key, value in merged_config.get("transform", {}).items():
            if hasattr(transform_config, key):
                setattr(transform_config, key, value)
            else:
                logger.warning(f"Unknown transform setting ignored: {key}")

        runner_config = RunnerConfig()
        for key, value in merged_config.get("runner", {}).items():
            if hasattr(runner_config, key):
                setattr(runner_config, key, value)
            else:
                logger.warning(f"Unknown runner setting ignored: {key}")

        return cls(transform_settings=transform_config, runner_settings=runner_config)

    @classmethod
    def from_file(cls, config_path: str) -> "UndecorateConfig":
        """Load configuration from a JSON or YAML file."""
        return cls.load(config_path=config_path, use_env=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "transform": asdict(self.transform_settings),
            "runner": asdict(self.runner_settings),
        }

    def to_file(self, config_path: str, format: str = "json") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() in ("yaml", "yml"):
                    yaml.dump(config_data, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}")

    def get_config_summary(self) -> str:
        """Get a human-readable summary of the configuration."""
        runner = self.runner_settings
        return f"""undecorator configuration:
Transform:
  - Ignore imports: {self.transform_settings.ignore_imports}

Runner:
  - Extensions: {", ".join(runner.extensions)}
  - Excluded patterns: {len(runner.excluded_patterns)} patterns
  - Max workers: {runner.max_workers}
  - Dry run: {runner.dry_run}
  - Backup enabled: {runner.backup_enabled}
  - Encoding: {runner.encoding}
"""


def load_config(
    config_path: Optional[str] = None,
    use_env: bool = True,
    overrides: Optional[Dict[str, Any]] = None,
) -> UndecorateConfig:
    """
    Load configuration from file and/or environment variables.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables
        overrides: Values that take precedence over every other source

    Returns:
        UndecorateConfig: Loaded configuration
    """
    return UndecorateConfig.load(config_path=config_path, use_env=use_env, overrides=overrides)
