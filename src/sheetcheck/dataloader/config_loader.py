# src/sheetcheck/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sheetcheck.errors import ConfigError
from sheetcheck.schemas.models import Config
from sheetcheck.schemas.registry import ENTITY_DEFINITIONS


class ConfigLoader:
    """
    @brief
    Loader responsible for reading and validating runtime configuration.

    @details
    Reads YAML from disk, validates it against the Pydantic `Config`
    schema and checks that sheet aliases point at known entity types.
    Every failure mode surfaces as a structured `ConfigError`.
    """

    def load(self, path: Path) -> Config:
        """
        @brief
        Load and validate configuration from YAML file.

        @params
            path : Path
                Filesystem path to configuration file (.yaml or .yml).

        @returns
            Validated Config instance.

        @raises
            ConfigError
                Raised if file is missing, malformed, or fails schema validation.
        """
        # (1) Read and parse YAML configuration file
        data = self._read_yaml(path)

        # (2) Validate mapping against Pydantic schema
        return self._validate(data)

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read YAML file into Python mapping with strict checks.

        @details
        Validates path type, existence, extension and syntax. An empty file
        is rejected; the root must be a mapping.
        """
        # (1) Validate path type and existence
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists and the path is correct.",
            )

        # (2) Enforce correct file extension
        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        # (3) Read and parse YAML content
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # (4) Validate structural integrity of parsed data
        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Populate config.yaml or omit --config to use defaults.",
            )

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        """
        @brief
        Validate parsed configuration mapping via Pydantic schema.

        @details
        Wraps pydantic's `ValidationError` in `ConfigError`, then rejects
        aliases whose target is not a registered entity type.
        """
        # (1) Attempt schema validation via Pydantic
        try:
            cfg = Config(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and bounds in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e

        # (2) Aliases must target a known entity type
        unknown = sorted(
            target
            for target in cfg.sheet_aliases.values()
            if target.strip().lower() not in ENTITY_DEFINITIONS
        )
        if unknown:
            raise ConfigError(
                message=f"Unknown entity type(s) in sheet_aliases: {', '.join(unknown)}",
                source="ConfigLoader._validate",
                suggested_action=f"Use one of: {', '.join(ENTITY_DEFINITIONS)}.",
            )
        return cfg


__all__ = ["ConfigLoader"]
