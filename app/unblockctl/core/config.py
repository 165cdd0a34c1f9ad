"""User configuration and settings.

Stores the persisted allowlist and the default scan/unblock options in
~/.config/unblockctl/config.toml. A missing file means defaults; nothing
is written until the user changes a setting.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from unblockctl.core.allowlist import DEFAULT_EXTENSIONS, ExtensionAllowlist
from unblockctl.core.errors import ConfigError, ConfigParseError, InvalidExtensionError
from unblockctl.core.paths import ensure_config_dir, get_config_path

logger = logging.getLogger(__name__)


class UnblockConfig(BaseModel):
    """Persisted defaults for scan and unblock operations.

    Attributes:
        extensions: Allowed extensions (normalized, deduplicated, sorted).
        recursive: Include subfolders by default.
        dry_run: Simulate unblocking by default.
        executable: PowerShell executable. If None, resolved from PATH.
    """

    model_config = ConfigDict(extra="forbid")

    extensions: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_EXTENSIONS),
            description="Allowed file extensions",
        ),
    ]
    recursive: Annotated[
        bool,
        Field(description="Include subfolders"),
    ] = False
    dry_run: Annotated[
        bool,
        Field(description="Simulate unblocking (WhatIf)"),
    ] = True
    executable: Annotated[
        str | None,
        Field(description="PowerShell executable (None = search PATH)"),
    ] = None

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Normalize every extension; reject malformed entries."""
        try:
            return ExtensionAllowlist(v).entries
        except InvalidExtensionError as e:
            raise ValueError(str(e)) from None

    def allowlist(self) -> ExtensionAllowlist:
        """Build a mutable allowlist from the configured extensions."""
        return ExtensionAllowlist(self.extensions)


def load_config(path: Path | None = None) -> UnblockConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated UnblockConfig; defaults if the file doesn't exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return UnblockConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return UnblockConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: UnblockConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The UnblockConfig to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    if path is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            raise ConfigError(str(e)) from e
        config_path = get_config_path()
    else:
        config_path = path
        config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, object] = {
        "extensions": config.extensions,
        "recursive": config.recursive,
        "dry_run": config.dry_run,
    }
    if config.executable is not None:
        data["executable"] = config.executable

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    logger.debug("Saved config to %s", config_path)
    return config_path

