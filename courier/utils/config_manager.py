"""Configuration manager for persistent settings stored as JSON."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .errors import (
    ConfigurationError,
    FileSystemError,
    InvalidConfigError,
)
from .logging import get_logger, log_call
from .paths import CONFIG_PATH

logger = get_logger(__name__)

PICKER_CHOICES = ("fuzzy-preview", "fuzzy", "plain")

# Placeholders are substituted per token, so a value never splits into
# several arguments and never reaches a shell.
DEFAULT_COMMANDS: Dict[str, str] = {
    "accounts": "accounts",
    "mailboxes": "mailboxes",
    "list": "--mailbox {mailbox} list --page {page} --size {page_size}",
    "search": "--mailbox {mailbox} search --page {page} --size {page_size} {query}",
    "read": "--mailbox {mailbox} read {id}",
    "template_write": "template new",
    "template_reply": "--mailbox {mailbox} template reply {id}",
    "template_reply_all": "--mailbox {mailbox} template reply --all {id}",
    "template_forward": "--mailbox {mailbox} template forward {id}",
    "send": "template send -- {message}",
    "save": "--mailbox {mailbox} template save -- {message}",
    "copy": "--mailbox {mailbox} copy {ids} {target}",
    "move": "--mailbox {mailbox} move {ids} {target}",
    "delete": "--mailbox {mailbox} delete {ids}",
    "attachments": "--mailbox {mailbox} attachments {id}",
    "flag_add": "--mailbox {mailbox} flag add {ids} {flag}",
    "flag_remove": "--mailbox {mailbox} flag remove {ids} {flag}",
}


class BackendConfig(BaseModel):
    """Pydantic model for the external mail command."""

    executable: str = "himalaya"
    output_flag: str = "--output"
    account_flag: str = "--account"
    commands: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMANDS))

    @field_validator("commands")
    @classmethod
    def _fill_missing_commands(cls, value: Dict[str, str]) -> Dict[str, str]:
        merged = dict(DEFAULT_COMMANDS)
        merged.update(value)
        return merged


class SessionConfig(BaseModel):
    """Pydantic model for session defaults."""

    page_size: int = Field(default=50, ge=1)
    default_mailbox: str = "INBOX"
    drafts_mailbox: str = "drafts"


class UIConfig(BaseModel):
    """Pydantic model for UI settings."""

    picker: Optional[str] = None
    picker_preview: bool = True
    delimiter: str = Field(default="│", min_length=1, max_length=1)
    editor: Optional[str] = None

    @field_validator("picker")
    @classmethod
    def _known_picker(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in PICKER_CHOICES:
            raise ValueError(f"picker must be one of {', '.join(PICKER_CHOICES)}")
        return value


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "INFO"
    log_to_file: bool = True


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    version: str = "0.1.0"
    backend: BackendConfig = Field(default_factory=BackendConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Manages persistent application configuration."""

    ENV_OVERRIDES = {
        "COURIER_BACKEND": "backend.executable",
        "COURIER_PICKER": "ui.picker",
        "COURIER_LOG_LEVEL": "logging.log_level",
    }

    def __init__(self, config_path: Optional[Path] = None, use_env: bool = True):
        self.path = Path(config_path) if config_path else CONFIG_PATH
        self.use_env = use_env
        self.config = self._load_or_create_config()
        if use_env:
            load_dotenv()
            self._apply_env_overrides()
        logger.info(f"Configuration loaded from {self.path}")

    def _load_or_create_config(self) -> AppConfig:
        """Load configuration from file or create default if not present."""

        from pydantic import ValidationError

        if not self.path.exists():
            logger.info("No config file found, creating default configuration.")
            config = AppConfig()
            self._save_config(config)
            return config

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig(**data)
            logger.debug("Configuration successfully loaded and validated.")
            return config

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            raise InvalidConfigError(f"Configuration file is not valid JSON: {e}") from e
        except ValidationError as e:
            logger.error(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {e}"
            ) from e
        except OSError as e:
            raise FileSystemError(f"Failed to read configuration file: {e}") from e

    def _save_config(self, config: Optional[AppConfig] = None) -> None:
        """Save the current configuration to file."""

        config = config or self.config

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            logger.debug("Configuration successfully saved.")
        except OSError as e:
            raise FileSystemError(f"Failed to write configuration file: {e}") from e

    def _apply_env_overrides(self) -> None:
        for env_name, key_path in self.ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                logger.debug(f"Applying {env_name} override to '{key_path}'")
                self.set_config(key_path, value, persist=False)

    @log_call
    def get_config(self, key_path: str, default: Any = None) -> Any:
        """Retrieve a configuration value using a dot-separated key path."""

        obj: Any = self.config
        for key in key_path.split("."):
            if not hasattr(obj, key):
                return default
            obj = getattr(obj, key)
        return obj

    @log_call
    def set_config(self, key_path: str, value: Any, persist: bool = True) -> None:
        """Set a configuration value using a dot-separated key path."""

        from pydantic import ValidationError

        section_name, _, field_name = key_path.partition(".")
        section = getattr(self.config, section_name, None)

        if not isinstance(section, BaseModel) or field_name not in type(section).model_fields:
            raise ConfigurationError(f"Configuration path '{key_path}' is invalid")

        try:
            updated = type(section).model_validate(
                {**section.model_dump(), field_name: value}
            )
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid value for '{key_path}': {e}") from e

        setattr(self.config, section_name, updated)

        if persist:
            self._save_config()

        logger.info(f"Config key '{key_path}' updated.")

    def reload(self) -> AppConfig:
        """Re-read the configuration file."""

        self.config = self._load_or_create_config()
        if self.use_env:
            self._apply_env_overrides()
        return self.config

    @property
    def backend(self) -> BackendConfig:
        return self.config.backend

    @property
    def session(self) -> SessionConfig:
        return self.config.session

    @property
    def ui(self) -> UIConfig:
        return self.config.ui
